import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from farmledger import crud, models, schemas
from farmledger.db import Base
from farmledger.errors import Unauthorized
from farmledger.reports import compute_report
from farmledger.seed import seed_demo_data
from farmledger.stats import compute_stats


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory SQLite session per test."""
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def who(db_session):
    user = models.User(name="wanjiru", email="wanjiru@example.com", password_hash="x")
    db_session.add(user)
    db_session.commit()
    return schemas.Identity(user_id=user.id)


def test_seed_requires_identity(db_session):
    with pytest.raises(Unauthorized):
        seed_demo_data(db_session, None)


def test_seed_creates_sample_farm(db_session, who):
    result = seed_demo_data(db_session, who)

    assert result.model_dump() == {
        "field_count": 3,
        "crop_count": 4,
        "harvest_count": 4,
        "expense_count": 8,
        "sale_count": 4,
    }
    assert compute_stats(db_session, who).model_dump() == {
        "field_count": 3,
        "crop_count": 4,
        "harvest_count": 4,
        "total_expenses": 116000,
        "total_revenue": 118500,
        "profit": 2500,
    }


def test_seeded_report_breakdown(db_session, who):
    seed_demo_data(db_session, who)

    report = compute_report(db_session, who)

    assert [(c.category, c.total, c.count) for c in report.expenses_by_category] == [
        ("Labor", 40000, 2),
        ("Fertilizer", 25000, 1),
        ("Seeds", 23000, 2),
        ("Equipment", 12000, 1),
        ("Pesticides", 9500, 1),
        ("Transport", 6500, 1),
    ]
    assert [e.item for e in report.recent_expenses] == [
        "Tomato Harvesting",
        "Kale Transport",
        "Bean Insecticide",
        "Maize Planting Labor",
        "NPK Fertilizer",
    ]
    assert [s.buyer for s in report.recent_sales] == [
        "Local Market",
        "Cooperative",
        "Restaurant Chain",
        "Farmers Market",
    ]


def test_seed_is_additive_by_default(db_session, who):
    seed_demo_data(db_session, who)
    seed_demo_data(db_session, who)

    stats = compute_stats(db_session, who)

    assert stats.field_count == 6
    assert stats.total_revenue == 2 * 118500


def test_seed_reset_replaces_existing_data(db_session, who):
    crud.create_field(db_session, who, {"name": "Old Plot", "season": "2023 Short Rains"})
    seed_demo_data(db_session, who)

    seed_demo_data(db_session, who, reset=True)

    names = sorted(f.name for f in crud.list_fields(db_session, who))
    assert names == ["East Garden", "North Field", "South Field"]
    assert len(crud.list_expenses(db_session, who)) == 8
    assert compute_stats(db_session, who).total_expenses == 116000
