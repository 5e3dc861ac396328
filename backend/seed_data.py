"""Seed the store with demo accounts and one week of production lots."""
import argparse
from datetime import date

from packhouse.schemas import PurchaseRecordCreate, RecordKind, StockOutRecordCreate, UserCreate, View
from packhouse.store import get_record_store
from packhouse.use_cases.management import (
    create_operator_use_case,
    generate_sample_data_use_case,
    register_first_admin_use_case,
    update_user_permissions_use_case,
)
from packhouse.use_cases.records import create_record_use_case


def seed(reset: bool = False):
    """Seed the store with demo data."""
    store = get_record_store()
    if reset:
        store.purge()

    if store.users():
        print("Store already has users; run with --reset to start over.")
        return

    today = date.today()
    admin = register_first_admin_use_case(
        store=store,
        payload=UserCreate(name="Administrateur", username="admin", password="admin123"),
    )
    operator = create_operator_use_case(
        store=store,
        payload=UserCreate(name="Opérateur Station", username="operateur", password="operateur123"),
        current_user=admin,
    )
    update_user_permissions_use_case(
        store=store,
        user_id=operator.id,
        allowed_tabs=[View.PRODUCTION, View.STOCK],
        current_user=admin,
    )

    created = generate_sample_data_use_case(store=store, today=today, current_user=admin)
    latest_lot = store.list_records(RecordKind.PRODUCTION)[0]

    create_record_use_case(
        store=store,
        kind=RecordKind.PURCHASE,
        payload=PurchaseRecordCreate(
            date=today,
            supplier="AgriPlus",
            category="Emballages",
            item_name="Caisse 10kg",
            quantity=200,
            unit="pcs",
            unit_price=1.5,
            lot_number=latest_lot.lot_number,
            client_name=latest_lot.client_name,
        ),
        current_user=admin,
    )
    create_record_use_case(
        store=store,
        kind=RecordKind.STOCK_OUT,
        payload=StockOutRecordCreate(
            date=today,
            item_name="Caisse 10kg",
            quantity=40,
            unit="pcs",
            destination=latest_lot.client_name,
            lot_number=latest_lot.lot_number,
            reason="Expédition",
        ),
        current_user=admin,
    )

    print("✅ Store seeded successfully!")
    print(f"  {created} production lots")
    print("\nDemo users:")
    print("  admin/admin123 (Administrator)")
    print("  operateur/operateur123 (Operator: production, stock)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop every collection before seeding")
    seed(reset=parser.parse_args().reset)
