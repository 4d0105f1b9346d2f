# farmledger/ownership.py
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from farmledger import models, schemas
from farmledger.errors import NotFoundOrUnauthorized, Unauthorized


def require_user(identity: Optional[schemas.Identity]) -> str:
    """Return the caller's user id, or raise Unauthorized when there is no session."""
    if identity is None or not identity.user_id:
        raise Unauthorized()
    return identity.user_id


def owned_by(model, user_id: str):
    return model.user_id == user_id


def reachable_expenses(user_id: str):
    """Expenses that count toward a user's totals.

    Each row carries its owner's id, so a row linked to both a crop and a field
    is still a single row. Rows whose links were both cleared by a cascade are
    kept for the record but no longer counted.
    """
    return and_(
        models.Expense.user_id == user_id,
        or_(models.Expense.crop_id.isnot(None), models.Expense.field_id.isnot(None)),
    )


def get_owned(db: Session, model, obj_id: int, user_id: str):
    obj = db.query(model).filter(model.id == obj_id, owned_by(model, user_id)).first()
    if obj is None:
        raise NotFoundOrUnauthorized(f"{model.__name__} not found or unauthorized")
    return obj
