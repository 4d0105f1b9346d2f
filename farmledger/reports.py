import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from farmledger import models, schemas
from farmledger.config import RECENT_LIMIT
from farmledger.ownership import owned_by, reachable_expenses, require_user
from farmledger.stats import compute_stats
from farmledger.utils import format_currency

logger = logging.getLogger(__name__)


def expenses_by_category(db: Session, user_id: str) -> list[schemas.CategoryTotal]:
    """Totals per category present, largest first; equal totals ordered by name."""
    total = func.sum(models.Expense.total_cost)
    rows = (
        db.query(
            models.Expense.category,
            total.label("total"),
            func.count(models.Expense.id).label("count"),
        )
        .filter(reachable_expenses(user_id))
        .group_by(models.Expense.category)
        .order_by(total.desc(), models.Expense.category.asc())
        .all()
    )
    return [
        schemas.CategoryTotal(category=r.category, total=float(r.total), count=r.count)
        for r in rows
    ]


def recent_expenses(db: Session, user_id: str, limit: int = RECENT_LIMIT) -> list[schemas.RecentExpense]:
    rows = (
        db.query(models.Expense)
        .filter(reachable_expenses(user_id))
        .order_by(models.Expense.purchased_on.desc(), models.Expense.id.desc())
        .limit(limit)
        .all()
    )
    return [schemas.RecentExpense.model_validate(r) for r in rows]


def recent_sales(db: Session, user_id: str, limit: int = RECENT_LIMIT) -> list[schemas.RecentSale]:
    rows = (
        db.query(models.Sale)
        .filter(owned_by(models.Sale, user_id))
        .order_by(models.Sale.sold_on.desc(), models.Sale.id.desc())
        .limit(limit)
        .all()
    )
    return [schemas.RecentSale.model_validate(r) for r in rows]


def compute_report(
    db: Session,
    identity: Optional[schemas.Identity],
    *,
    recent_limit: int = RECENT_LIMIT,
) -> schemas.Report:
    user_id = require_user(identity)
    stats = compute_stats(db, identity)

    report = schemas.Report(
        total_expenses=stats.total_expenses,
        total_revenue=stats.total_revenue,
        profit=stats.profit,
        expenses_by_category=expenses_by_category(db, user_id),
        recent_expenses=recent_expenses(db, user_id, recent_limit),
        recent_sales=recent_sales(db, user_id, recent_limit),
    )
    logger.debug(
        "Report for user=%s: %d categories, %d recent expenses, %d recent sales",
        user_id,
        len(report.expenses_by_category),
        len(report.recent_expenses),
        len(report.recent_sales),
    )
    return report


def display_totals(report: schemas.Report, locale: Optional[str]) -> dict:
    return {
        "totalExpenses": format_currency(report.total_expenses, locale),
        "totalRevenue": format_currency(report.total_revenue, locale),
        "profit": format_currency(report.profit, locale),
    }
