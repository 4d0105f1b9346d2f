import json
import logging
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, joinedload

from farmledger import models, schemas
from farmledger.errors import ValidationError
from farmledger.ownership import get_owned, owned_by, require_user

logger = logging.getLogger(__name__)

Identity = Optional[schemas.Identity]
S = TypeVar("S", bound=BaseModel)

# ---------- tiny, single-purpose helpers ----------

def _validate(schema_cls: Type[S], data: Union[S, Mapping[str, Any]]) -> S:
    if isinstance(data, schema_cls):
        return data
    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {schema_cls.__name__} input",
            errors=json.loads(e.json(include_url=False)),
        ) from e


def _insert(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def _remove(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()

# ---------- fields ----------

def list_fields(db: Session, identity: Identity) -> list[models.Field]:
    user_id = require_user(identity)
    return (
        db.query(models.Field)
        .filter(owned_by(models.Field, user_id))
        .order_by(models.Field.created_at.desc(), models.Field.id.desc())
        .all()
    )


def create_field(db: Session, identity: Identity, data) -> models.Field:
    user_id = require_user(identity)
    payload = _validate(schemas.FieldCreate, data)

    obj = _insert(db, models.Field(user_id=user_id, **payload.model_dump()))
    logger.info("Field created: id=%s user=%s name=%s", obj.id, user_id, obj.name)
    return obj


def delete_field(db: Session, identity: Identity, field_id: int) -> None:
    """Delete a field with its crops (and their activities, harvests, sales); expenses only lose the link."""
    user_id = require_user(identity)
    obj = get_owned(db, models.Field, field_id, user_id)
    _remove(db, obj)
    logger.info("Field deleted: id=%s user=%s", field_id, user_id)

# ---------- crops ----------

def list_crops(db: Session, identity: Identity) -> list[models.Crop]:
    user_id = require_user(identity)
    return (
        db.query(models.Crop)
        .options(joinedload(models.Crop.field))
        .filter(owned_by(models.Crop, user_id))
        .order_by(models.Crop.created_at.desc(), models.Crop.id.desc())
        .all()
    )


def create_crop(db: Session, identity: Identity, data) -> models.Crop:
    user_id = require_user(identity)
    payload = _validate(schemas.CropCreate, data)
    get_owned(db, models.Field, payload.field_id, user_id)

    obj = _insert(db, models.Crop(user_id=user_id, **payload.model_dump()))
    logger.info("Crop created: id=%s user=%s name=%s", obj.id, user_id, obj.name)
    return obj


def delete_crop(db: Session, identity: Identity, crop_id: int) -> None:
    user_id = require_user(identity)
    obj = get_owned(db, models.Crop, crop_id, user_id)
    _remove(db, obj)
    logger.info("Crop deleted: id=%s user=%s", crop_id, user_id)

# ---------- activities ----------

def list_activities(db: Session, identity: Identity) -> list[models.Activity]:
    user_id = require_user(identity)
    return (
        db.query(models.Activity)
        .options(joinedload(models.Activity.crop))
        .filter(owned_by(models.Activity, user_id))
        .order_by(models.Activity.performed_on.desc(), models.Activity.id.desc())
        .all()
    )


def create_activity(db: Session, identity: Identity, data) -> models.Activity:
    user_id = require_user(identity)
    payload = _validate(schemas.ActivityCreate, data)
    get_owned(db, models.Crop, payload.crop_id, user_id)

    obj = _insert(db, models.Activity(user_id=user_id, **payload.model_dump()))
    logger.info("Activity logged: id=%s user=%s type=%s", obj.id, user_id, obj.type)
    return obj


def delete_activity(db: Session, identity: Identity, activity_id: int) -> None:
    user_id = require_user(identity)
    obj = get_owned(db, models.Activity, activity_id, user_id)
    _remove(db, obj)
    logger.info("Activity deleted: id=%s user=%s", activity_id, user_id)

# ---------- expenses ----------

def list_expenses(db: Session, identity: Identity) -> list[models.Expense]:
    user_id = require_user(identity)
    return (
        db.query(models.Expense)
        .options(joinedload(models.Expense.crop), joinedload(models.Expense.field))
        .filter(owned_by(models.Expense, user_id))
        .order_by(models.Expense.purchased_on.desc(), models.Expense.id.desc())
        .all()
    )


def create_expense(db: Session, identity: Identity, data) -> models.Expense:
    user_id = require_user(identity)
    payload = _validate(schemas.ExpenseCreate, data)
    if payload.crop_id is not None:
        get_owned(db, models.Crop, payload.crop_id, user_id)
    if payload.field_id is not None:
        get_owned(db, models.Field, payload.field_id, user_id)

    obj = _insert(db, models.Expense(user_id=user_id, **payload.model_dump()))
    logger.info(
        "Expense logged: id=%s user=%s amount=%.2f category=%s",
        obj.id, user_id, obj.total_cost, obj.category,
    )
    return obj


def delete_expense(db: Session, identity: Identity, expense_id: int) -> None:
    user_id = require_user(identity)
    obj = get_owned(db, models.Expense, expense_id, user_id)
    _remove(db, obj)
    logger.info("Expense deleted: id=%s user=%s", expense_id, user_id)

# ---------- harvests ----------

def list_harvests(db: Session, identity: Identity) -> list[models.Harvest]:
    user_id = require_user(identity)
    return (
        db.query(models.Harvest)
        .options(joinedload(models.Harvest.crop).joinedload(models.Crop.field))
        .filter(owned_by(models.Harvest, user_id))
        .order_by(models.Harvest.harvested_on.desc(), models.Harvest.id.desc())
        .all()
    )


def create_harvest(db: Session, identity: Identity, data) -> models.Harvest:
    user_id = require_user(identity)
    payload = _validate(schemas.HarvestCreate, data)
    get_owned(db, models.Crop, payload.crop_id, user_id)

    obj = _insert(db, models.Harvest(user_id=user_id, **payload.model_dump()))
    logger.info("Harvest recorded: id=%s user=%s quantity=%s %s", obj.id, user_id, obj.quantity, obj.unit)
    return obj


def delete_harvest(db: Session, identity: Identity, harvest_id: int) -> None:
    user_id = require_user(identity)
    obj = get_owned(db, models.Harvest, harvest_id, user_id)
    _remove(db, obj)
    logger.info("Harvest deleted: id=%s user=%s", harvest_id, user_id)

# ---------- sales ----------

def list_sales(db: Session, identity: Identity) -> list[models.Sale]:
    user_id = require_user(identity)
    return (
        db.query(models.Sale)
        .options(
            joinedload(models.Sale.harvest)
            .joinedload(models.Harvest.crop)
            .joinedload(models.Crop.field)
        )
        .filter(owned_by(models.Sale, user_id))
        .order_by(models.Sale.sold_on.desc(), models.Sale.id.desc())
        .all()
    )


def create_sale(db: Session, identity: Identity, data) -> models.Sale:
    user_id = require_user(identity)
    payload = _validate(schemas.SaleCreate, data)
    get_owned(db, models.Harvest, payload.harvest_id, user_id)

    obj = _insert(db, models.Sale(user_id=user_id, **payload.model_dump()))
    logger.info("Sale recorded: id=%s user=%s amount=%.2f", obj.id, user_id, obj.total_amount)
    return obj


def delete_sale(db: Session, identity: Identity, sale_id: int) -> None:
    user_id = require_user(identity)
    obj = get_owned(db, models.Sale, sale_id, user_id)
    _remove(db, obj)
    logger.info("Sale deleted: id=%s user=%s", sale_id, user_id)
