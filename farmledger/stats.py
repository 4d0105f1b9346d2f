# farmledger/stats.py
"""Per-user dashboard figures.

All six numbers are read by one SELECT built from scalar subqueries, so they
come from the same snapshot and either all arrive or the call fails.
"""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from farmledger import models, schemas
from farmledger.ownership import owned_by, reachable_expenses, require_user

logger = logging.getLogger(__name__)


def _count(model, user_id: str):
    return (
        select(func.count(model.id))
        .where(owned_by(model, user_id))
        .correlate(None)
        .scalar_subquery()
    )


def _total(column, criterion):
    return (
        select(func.coalesce(func.sum(column), 0.0))
        .where(criterion)
        .correlate(None)
        .scalar_subquery()
    )


def stats_query(user_id: str):
    return select(
        _count(models.Field, user_id).label("field_count"),
        _count(models.Crop, user_id).label("crop_count"),
        _count(models.Harvest, user_id).label("harvest_count"),
        _total(models.Expense.total_cost, reachable_expenses(user_id)).label("total_expenses"),
        _total(models.Sale.total_amount, owned_by(models.Sale, user_id)).label("total_revenue"),
    )


def compute_stats(db: Session, identity: Optional[schemas.Identity]) -> schemas.Stats:
    user_id = require_user(identity)
    row = db.execute(stats_query(user_id)).one()

    total_expenses = float(row.total_expenses or 0)
    total_revenue = float(row.total_revenue or 0)
    stats = schemas.Stats(
        field_count=row.field_count or 0,
        crop_count=row.crop_count or 0,
        harvest_count=row.harvest_count or 0,
        total_expenses=total_expenses,
        total_revenue=total_revenue,
        profit=total_revenue - total_expenses,
    )
    logger.debug("Dashboard stats for user=%s: %s", user_id, stats.model_dump())
    return stats
