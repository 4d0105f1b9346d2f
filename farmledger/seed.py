# farmledger/seed.py
"""Illustrative farm data for a signed-in user.

Every row goes through the crud create functions, so seeding is subject to the
same validation and ownership checks as manual entry.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from farmledger import crud, schemas
from farmledger.ownership import require_user

logger = logging.getLogger(__name__)

SEASON = "2024 Long Rains"

SAMPLE_FIELDS = [
    {"name": "North Field", "area_ha": 5.2, "location": "North side of farm"},
    {"name": "South Field", "area_ha": 3.8, "location": "South side of farm"},
    {"name": "East Garden", "area_ha": 1.5, "location": "East side of farm"},
]

# (field index, crop data)
SAMPLE_CROPS = [
    (0, {"name": "Maize", "variety": "Hybrid 511", "planting_date": "2024-03-15", "expected_harvest_date": "2024-07-15"}),
    (0, {"name": "Beans", "variety": "Rose Coco", "planting_date": "2024-03-20", "expected_harvest_date": "2024-06-20"}),
    (1, {"name": "Tomatoes", "variety": "Roma VF", "planting_date": "2024-02-10", "expected_harvest_date": "2024-05-10"}),
    (2, {"name": "Kale", "variety": "Collard Greens", "planting_date": "2024-01-15", "expected_harvest_date": "2024-04-15"}),
]

# (crop index, harvest data)
SAMPLE_HARVESTS = [
    (0, {"harvested_on": "2024-07-10", "quantity": 2500, "unit": "kg", "quality_grade": "Grade A"}),
    (1, {"harvested_on": "2024-06-15", "quantity": 800, "unit": "kg", "quality_grade": "Grade B"}),
    (2, {"harvested_on": "2024-05-05", "quantity": 1200, "unit": "kg", "quality_grade": "Grade A"}),
    (3, {"harvested_on": "2024-04-10", "quantity": 300, "unit": "kg", "quality_grade": "Grade A"}),
]

# ("field" | "crop", index, expense data)
SAMPLE_EXPENSES = [
    ("field", 0, {"category": "Seeds", "item": "Maize Seeds", "total_cost": 15000, "purchased_on": "2024-03-10"}),
    ("field", 0, {"category": "Fertilizer", "item": "NPK Fertilizer", "total_cost": 25000, "purchased_on": "2024-03-12"}),
    ("field", 1, {"category": "Seeds", "item": "Tomato Seeds", "total_cost": 8000, "purchased_on": "2024-02-05"}),
    ("field", 2, {"category": "Equipment", "item": "Garden Tools", "total_cost": 12000, "purchased_on": "2024-01-10"}),
    ("crop", 0, {"category": "Labor", "item": "Maize Planting Labor", "total_cost": 18000, "purchased_on": "2024-03-16"}),
    ("crop", 1, {"category": "Pesticides", "item": "Bean Insecticide", "total_cost": 9500, "purchased_on": "2024-04-01"}),
    ("crop", 2, {"category": "Labor", "item": "Tomato Harvesting", "total_cost": 22000, "purchased_on": "2024-05-06"}),
    ("crop", 3, {"category": "Transport", "item": "Kale Transport", "total_cost": 6500, "purchased_on": "2024-04-11"}),
]

# (harvest index, sale data)
SAMPLE_SALES = [
    (0, {"sold_on": "2024-07-12", "buyer": "Local Market", "quantity": 2000, "unit": "kg", "price_per_unit": 25, "total_amount": 50000}),
    (1, {"sold_on": "2024-06-18", "buyer": "Cooperative", "quantity": 600, "unit": "kg", "price_per_unit": 35, "total_amount": 21000}),
    (2, {"sold_on": "2024-05-08", "buyer": "Restaurant Chain", "quantity": 1000, "unit": "kg", "price_per_unit": 40, "total_amount": 40000}),
    (3, {"sold_on": "2024-04-12", "buyer": "Farmers Market", "quantity": 250, "unit": "kg", "price_per_unit": 30, "total_amount": 7500}),
]


def _clear(db: Session, identity: schemas.Identity) -> None:
    for field in crud.list_fields(db, identity):
        crud.delete_field(db, identity, field.id)
    for expense in crud.list_expenses(db, identity):
        crud.delete_expense(db, identity, expense.id)


def seed_demo_data(
    db: Session,
    identity: Optional[schemas.Identity],
    *,
    reset: bool = False,
) -> schemas.SeedResult:
    """Insert the sample farm. Additive unless reset=True, which first removes the user's data."""
    user_id = require_user(identity)
    logger.info("Seeding sample data for user=%s reset=%s", user_id, reset)
    if reset:
        _clear(db, identity)

    fields = [crud.create_field(db, identity, {**f, "season": SEASON}) for f in SAMPLE_FIELDS]
    crops = [
        crud.create_crop(db, identity, {**c, "field_id": fields[i].id, "season": SEASON})
        for i, c in SAMPLE_CROPS
    ]
    harvests = [
        crud.create_harvest(db, identity, {**h, "crop_id": crops[i].id, "season": SEASON})
        for i, h in SAMPLE_HARVESTS
    ]

    expenses = []
    for link, i, e in SAMPLE_EXPENSES:
        ref = {"field_id": fields[i].id} if link == "field" else {"crop_id": crops[i].id}
        expenses.append(crud.create_expense(db, identity, {**e, **ref, "season": SEASON}))

    sales = [
        crud.create_sale(db, identity, {**s, "harvest_id": harvests[i].id, "season": SEASON})
        for i, s in SAMPLE_SALES
    ]

    result = schemas.SeedResult(
        field_count=len(fields),
        crop_count=len(crops),
        harvest_count=len(harvests),
        expense_count=len(expenses),
        sale_count=len(sales),
    )
    logger.info("Seeded sample data for user=%s: %s", user_id, result.model_dump())
    return result
