from __future__ import annotations

import random
import re
from datetime import date

from packhouse.schemas import DEFAULT_MASTER_DATA, MasterData
from packhouse.services.sample_data import generate_sample_production


def test_sample_lots_stay_within_plausible_ranges() -> None:
    records = generate_sample_production(DEFAULT_MASTER_DATA, today=date(2024, 12, 5), rng=random.Random(42))

    for record in records:
        assert 5 <= record.employee_count <= 14
        assert 50 * record.employee_count - 1 <= record.total_weight_kg <= 80 * record.employee_count
        assert record.waste_kg <= record.total_weight_kg * 0.07
        assert 0 <= record.infestation_rate <= 4
        assert record.product_name in DEFAULT_MASTER_DATA.products
        assert record.client_name in DEFAULT_MASTER_DATA.clients
        assert re.fullmatch(rf"LOT-{record.date.month}{record.date.day}-[123]", record.lot_number)


def test_sample_lots_are_newest_first_with_one_to_three_per_day() -> None:
    records = generate_sample_production(DEFAULT_MASTER_DATA, today=date(2024, 12, 5), rng=random.Random(1))

    keys = [(r.date, r.timestamp) for r in records]
    assert keys == sorted(keys, reverse=True)
    per_day: dict[date, int] = {}
    for record in records:
        per_day[record.date] = per_day.get(record.date, 0) + 1
    assert len(per_day) == 7
    assert all(1 <= count <= 3 for count in per_day.values())


def test_sample_data_survives_empty_master_data() -> None:
    records = generate_sample_production(MasterData(), today=date(2024, 12, 5), rng=random.Random(3))

    assert records
    assert all(r.product_name == "Produit" for r in records)
