# farmledger/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)


class Field(TimestampMixin, Base):
    __tablename__ = "fields"
    __table_args__ = (Index("fields_user_season_idx", "user_id", "season"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False)
    area_ha = Column(Float, nullable=True)
    location = Column(String, nullable=True)
    season = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    crops = relationship("Crop", back_populates="field", cascade="all, delete-orphan")
    # no delete cascade: removing a field only clears expenses.field_id
    expenses = relationship("Expense", back_populates="field")


class Crop(TimestampMixin, Base):
    __tablename__ = "crops"
    __table_args__ = (Index("crops_field_season_idx", "field_id", "season"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    field_id = Column(Integer, ForeignKey("fields.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    variety = Column(String, nullable=True)
    season = Column(String, nullable=False)
    planting_date = Column(Date, nullable=True)
    expected_harvest_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    field = relationship("Field", back_populates="crops")
    activities = relationship("Activity", back_populates="crop", cascade="all, delete-orphan")
    harvests = relationship("Harvest", back_populates="crop", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="crop")

    @property
    def field_name(self):
        return self.field.name if self.field else None


class Activity(TimestampMixin, Base):
    __tablename__ = "activities"
    __table_args__ = (Index("activities_crop_date_idx", "crop_id", "performed_on"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    crop_id = Column(Integer, ForeignKey("crops.id", ondelete="CASCADE"), nullable=False)
    type = Column(String, nullable=False)
    performed_on = Column(Date, nullable=False)
    labor_hours = Column(Float, nullable=True)
    season = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    crop = relationship("Crop", back_populates="activities")

    @property
    def crop_name(self):
        return self.crop.name if self.crop else None


class Expense(TimestampMixin, Base):
    __tablename__ = "expenses"
    __table_args__ = (Index("expenses_crop_field_date_idx", "crop_id", "field_id", "purchased_on"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    crop_id = Column(Integer, ForeignKey("crops.id", ondelete="SET NULL"), nullable=True)
    field_id = Column(Integer, ForeignKey("fields.id", ondelete="SET NULL"), nullable=True)
    category = Column(String, nullable=False)
    item = Column(String, nullable=False)

    # informational breakdown; total_cost is authoritative
    quantity = Column(Float, nullable=True)
    unit = Column(String, nullable=True)
    cost_per_unit = Column(Float, nullable=True)
    total_cost = Column(Float, nullable=False)

    purchased_on = Column(Date, nullable=False)
    season = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    crop = relationship("Crop", back_populates="expenses")
    field = relationship("Field", back_populates="expenses")

    @property
    def crop_name(self):
        return self.crop.name if self.crop else None

    @property
    def field_name(self):
        return self.field.name if self.field else None


class Harvest(TimestampMixin, Base):
    __tablename__ = "harvests"
    __table_args__ = (Index("harvests_crop_date_idx", "crop_id", "harvested_on"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    crop_id = Column(Integer, ForeignKey("crops.id", ondelete="CASCADE"), nullable=False)
    harvested_on = Column(Date, nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    quality_grade = Column(String, nullable=True)
    season = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    crop = relationship("Crop", back_populates="harvests")
    sales = relationship("Sale", back_populates="harvest", cascade="all, delete-orphan")

    @property
    def crop_name(self):
        return self.crop.name if self.crop else None

    @property
    def field_name(self):
        return self.crop.field_name if self.crop else None


class Sale(TimestampMixin, Base):
    __tablename__ = "sales"
    __table_args__ = (Index("sales_harvest_date_idx", "harvest_id", "sold_on"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    harvest_id = Column(Integer, ForeignKey("harvests.id", ondelete="CASCADE"), nullable=False)
    sold_on = Column(Date, nullable=False)
    buyer = Column(String, nullable=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)
    price_per_unit = Column(Float, nullable=False)
    # stored as entered, not quantity * price_per_unit
    total_amount = Column(Float, nullable=False)
    season = Column(String, nullable=False)
    notes = Column(Text, nullable=True)

    harvest = relationship("Harvest", back_populates="sales")

    @property
    def crop_name(self):
        return self.harvest.crop_name if self.harvest else None

    @property
    def field_name(self):
        return self.harvest.field_name if self.harvest else None
