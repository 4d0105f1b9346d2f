# farmledger/schemas.py
from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from farmledger.utils import coerce_date

EXPENSE_CATEGORIES = (
    "Seeds",
    "Fertilizer",
    "Pesticides",
    "Labor",
    "Equipment",
    "Fuel",
    "Transport",
    "Storage",
    "Other",
)

# suggestions for the UI; harvest units are free text
HARVEST_UNITS = ("kg", "tons", "bags", "crates", "bundles", "pieces")

QUALITY_GRADES = ("Grade A", "Grade B", "Grade C", "Mixed")

DateIn = Annotated[date, BeforeValidator(coerce_date)]
OptionalDateIn = Annotated[Optional[date], BeforeValidator(coerce_date)]
Amount = Annotated[float, Field(ge=0, allow_inf_nan=False)]
Label = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


class Identity(CamelModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None


# ---------- inputs ----------

class FieldCreate(CamelModel):
    name: Label
    season: Label
    area_ha: Optional[Amount] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class CropCreate(CamelModel):
    field_id: int
    name: Label
    season: Label
    variety: Optional[str] = None
    planting_date: OptionalDateIn = None
    expected_harvest_date: OptionalDateIn = None
    notes: Optional[str] = None


class ActivityCreate(CamelModel):
    crop_id: int
    type: Label
    performed_on: DateIn
    season: Label
    labor_hours: Optional[Amount] = None
    notes: Optional[str] = None


class ExpenseCreate(CamelModel):
    category: str
    item: Label
    total_cost: Amount
    purchased_on: DateIn
    season: Label
    crop_id: Optional[int] = None
    field_id: Optional[int] = None
    quantity: Optional[Amount] = None
    unit: Optional[str] = None
    cost_per_unit: Optional[Amount] = None
    notes: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _known_category(cls, v: str) -> str:
        if v not in EXPENSE_CATEGORIES:
            raise ValueError(f"category must be one of {', '.join(EXPENSE_CATEGORIES)}")
        return v

    @model_validator(mode="after")
    def _linked(self):
        if self.crop_id is None and self.field_id is None:
            raise ValueError("expense must reference a crop or a field")
        return self


class HarvestCreate(CamelModel):
    crop_id: int
    harvested_on: DateIn
    quantity: Amount
    unit: Label
    season: Label
    quality_grade: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("quality_grade")
    @classmethod
    def _known_grade(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in QUALITY_GRADES:
            raise ValueError(f"quality_grade must be one of {', '.join(QUALITY_GRADES)}")
        return v


class SaleCreate(CamelModel):
    harvest_id: int
    sold_on: DateIn
    quantity: Amount
    unit: Label
    price_per_unit: Amount
    total_amount: Amount
    season: Label
    buyer: Optional[str] = None
    notes: Optional[str] = None


class SignUp(CamelModel):
    name: Label
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8)


class SignIn(CamelModel):
    email: str
    password: str


# ---------- outputs ----------

class FieldOut(CamelModel):
    id: int
    name: str
    area_ha: Optional[float] = None
    location: Optional[str] = None
    season: str
    notes: Optional[str] = None
    created_at: datetime


class CropOut(CamelModel):
    id: int
    field_id: int
    field_name: Optional[str] = None
    name: str
    variety: Optional[str] = None
    season: str
    planting_date: Optional[date] = None
    expected_harvest_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime


class ActivityOut(CamelModel):
    id: int
    crop_id: int
    crop_name: Optional[str] = None
    type: str
    performed_on: date
    labor_hours: Optional[float] = None
    season: str
    notes: Optional[str] = None
    created_at: datetime


class ExpenseOut(CamelModel):
    id: int
    category: str
    item: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    cost_per_unit: Optional[float] = None
    total_cost: float
    purchased_on: date
    season: str
    notes: Optional[str] = None
    crop_id: Optional[int] = None
    crop_name: Optional[str] = None
    field_id: Optional[int] = None
    field_name: Optional[str] = None
    created_at: datetime


class HarvestOut(CamelModel):
    id: int
    crop_id: int
    crop_name: Optional[str] = None
    field_name: Optional[str] = None
    harvested_on: date
    quantity: float
    unit: str
    quality_grade: Optional[str] = None
    season: str
    notes: Optional[str] = None
    created_at: datetime


class SaleOut(CamelModel):
    id: int
    harvest_id: int
    crop_name: Optional[str] = None
    field_name: Optional[str] = None
    sold_on: date
    buyer: Optional[str] = None
    quantity: float
    unit: str
    price_per_unit: float
    total_amount: float
    season: str
    notes: Optional[str] = None
    created_at: datetime


class Stats(CamelModel):
    field_count: int = 0
    crop_count: int = 0
    harvest_count: int = 0
    total_expenses: float = 0.0
    total_revenue: float = 0.0
    profit: float = 0.0


class CategoryTotal(CamelModel):
    category: str
    total: float
    count: int


class RecentExpense(CamelModel):
    id: int
    category: str
    item: str
    total_cost: float
    purchased_on: date


class RecentSale(CamelModel):
    id: int
    total_amount: float
    sold_on: date
    buyer: Optional[str] = None


class Report(CamelModel):
    total_expenses: float = 0.0
    total_revenue: float = 0.0
    profit: float = 0.0
    expenses_by_category: List[CategoryTotal] = []
    recent_expenses: List[RecentExpense] = []
    recent_sales: List[RecentSale] = []


class ReportOut(Report):
    display: Optional[dict] = None


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: Identity


class SeedResult(CamelModel):
    field_count: int
    crop_count: int
    harvest_count: int
    expense_count: int
    sale_count: int


class Catalog(CamelModel):
    expense_categories: List[str]
    harvest_units: List[str]
    quality_grades: List[str]
