"""Demo production data for trying the dashboard without manual entry."""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta, timezone

from ..schemas import MasterData, ProductionRecord, User
from ..store import new_id

SAMPLE_DAYS = 7


def _day_start_ms(day: date) -> int:
    return int(datetime.combine(day, time(), tzinfo=timezone.utc).timestamp() * 1000)


def generate_sample_production(
    master_data: MasterData,
    *,
    today: date,
    rng: random.Random | None = None,
    author: User | None = None,
) -> list[ProductionRecord]:
    """One week of lots ending ``today``, 1 to 3 per day.

    Weight follows headcount (50-80 kg per person) so the dashboard shows a
    plausible productivity curve; waste is 2-7 % of the weight.
    """
    rng = rng or random.Random()
    products = master_data.products or ["Produit"]
    clients = master_data.clients or ["Client"]
    packagings = master_data.packagings or [""]

    records: list[ProductionRecord] = []
    for offset in range(SAMPLE_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        for seq in range(rng.randint(1, 3)):
            employees = rng.randint(5, 14)
            total_weight = float(int(employees * (50 + rng.random() * 30)))
            records.append(
                ProductionRecord(
                    id=new_id(),
                    date=day,
                    lot_number=f"LOT-{day.month}{day.day}-{seq + 1}",
                    client_name=rng.choice(clients),
                    product_name=rng.choice(products),
                    packaging=rng.choice(packagings),
                    employee_count=employees,
                    total_weight_kg=total_weight,
                    waste_kg=float(int(total_weight * (0.02 + rng.random() * 0.05))),
                    infestation_rate=float(rng.randint(0, 4)),
                    timestamp=_day_start_ms(day) + seq,
                    user_id=author.id if author else None,
                    user_name=author.name if author else None,
                )
            )
    # Newest first, matching the store's ordering.
    records.reverse()
    return records
