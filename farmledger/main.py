from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from farmledger import auth, crud, reports, schemas, seed, stats
from farmledger.config import SESSION_COOKIE, TOKEN_TTL_MINUTES, configure_logging
from farmledger.db import Base, engine, get_db
from farmledger.deps import require_identity
from farmledger.errors import FarmLedgerError, ValidationError

Identity = Optional[schemas.Identity]

app = FastAPI(title="FarmLedger API (SQLite)")

# Create tables at startup
@app.on_event("startup")
def _init_db():
    configure_logging()
    Base.metadata.create_all(bind=engine)


@app.exception_handler(FarmLedgerError)
async def _farmledger_error(request: Request, exc: FarmLedgerError):
    body = {"detail": exc.detail}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


def _token_response(response: Response, user) -> schemas.Token:
    token = auth.issue_token(user)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=TOKEN_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return schemas.Token(access_token=token, user=auth.identity_for(user))

# ---------- auth ----------

@app.post("/auth/sign-up", response_model=schemas.Token, status_code=201)
def sign_up(payload: schemas.SignUp, response: Response, db: Session = Depends(get_db)):
    user = auth.register_user(db, payload.name, payload.email, payload.password)
    return _token_response(response, user)


@app.post("/auth/sign-in", response_model=schemas.Token)
def sign_in(payload: schemas.SignIn, response: Response, db: Session = Depends(get_db)):
    user = auth.authenticate(db, payload.email, payload.password)
    return _token_response(response, user)


@app.post("/auth/sign-out")
def sign_out(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@app.get("/auth/me", response_model=schemas.Identity)
def me(identity: Identity = Depends(require_identity)):
    return identity

# ---------- fields ----------

@app.get("/fields", response_model=List[schemas.FieldOut])
def list_fields(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_fields(db, identity)


@app.post("/fields", response_model=schemas.FieldOut, status_code=201)
def create_field(
    payload: schemas.FieldCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_field(db, identity, payload)


@app.delete("/fields/{field_id}")
def delete_field(field_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_field(db, identity, field_id)
    return {"success": True}

# ---------- crops ----------

@app.get("/crops", response_model=List[schemas.CropOut])
def list_crops(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_crops(db, identity)


@app.post("/crops", response_model=schemas.CropOut, status_code=201)
def create_crop(
    payload: schemas.CropCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_crop(db, identity, payload)


@app.delete("/crops/{crop_id}")
def delete_crop(crop_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_crop(db, identity, crop_id)
    return {"success": True}

# ---------- activities ----------

@app.get("/activities", response_model=List[schemas.ActivityOut])
def list_activities(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_activities(db, identity)


@app.post("/activities", response_model=schemas.ActivityOut, status_code=201)
def create_activity(
    payload: schemas.ActivityCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_activity(db, identity, payload)


@app.delete("/activities/{activity_id}")
def delete_activity(activity_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_activity(db, identity, activity_id)
    return {"success": True}

# ---------- expenses ----------

@app.get("/expenses", response_model=List[schemas.ExpenseOut])
def list_expenses(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_expenses(db, identity)


@app.post("/expenses", response_model=schemas.ExpenseOut, status_code=201)
def create_expense(
    payload: schemas.ExpenseCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_expense(db, identity, payload)


@app.delete("/expenses/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_expense(db, identity, expense_id)
    return {"success": True}

# ---------- harvests ----------

@app.get("/harvests", response_model=List[schemas.HarvestOut])
def list_harvests(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_harvests(db, identity)


@app.post("/harvests", response_model=schemas.HarvestOut, status_code=201)
def create_harvest(
    payload: schemas.HarvestCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_harvest(db, identity, payload)


@app.delete("/harvests/{harvest_id}")
def delete_harvest(harvest_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_harvest(db, identity, harvest_id)
    return {"success": True}

# ---------- sales ----------

@app.get("/sales", response_model=List[schemas.SaleOut])
def list_sales(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return crud.list_sales(db, identity)


@app.post("/sales", response_model=schemas.SaleOut, status_code=201)
def create_sale(
    payload: schemas.SaleCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return crud.create_sale(db, identity, payload)


@app.delete("/sales/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    crud.delete_sale(db, identity, sale_id)
    return {"success": True}

# ---------- dashboard ----------

@app.get("/stats", response_model=schemas.Stats)
def get_stats(db: Session = Depends(get_db), identity: Identity = Depends(require_identity)):
    return stats.compute_stats(db, identity)


@app.get("/reports", response_model=schemas.ReportOut)
def get_report(
    locale: Optional[str] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    report = reports.compute_report(db, identity)
    display = reports.display_totals(report, locale) if locale else None
    return schemas.ReportOut(**report.model_dump(), display=display)


@app.post("/seed", response_model=schemas.SeedResult)
def seed_data(
    reset: bool = False,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    return seed.seed_demo_data(db, identity, reset=reset)


@app.get("/meta/categories", response_model=schemas.Catalog)
def categories():
    return schemas.Catalog(
        expense_categories=list(schemas.EXPENSE_CATEGORIES),
        harvest_units=list(schemas.HARVEST_UNITS),
        quality_grades=list(schemas.QUALITY_GRADES),
    )
