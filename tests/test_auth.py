import warnings
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from farmledger import auth
from farmledger.config import SESSION_COOKIE, TOKEN_TTL_MINUTES
from farmledger.db import Base
from farmledger.errors import Unauthorized, ValidationError


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
def user(db_session):
    return auth.register_user(db_session, "Wanjiru", "Wanjiru@Example.com", "long-rains-2024")


def test_register_normalises_email_and_hashes_password(user):
    assert user.email == "wanjiru@example.com"
    assert user.password_hash != "long-rains-2024"
    assert auth.verify_password("long-rains-2024", user.password_hash)


def test_register_rejects_duplicate_email(db_session, user):
    with pytest.raises(ValidationError):
        auth.register_user(db_session, "Other", "wanjiru@example.com", "another-password")


def test_authenticate(db_session, user):
    assert auth.authenticate(db_session, "wanjiru@example.com", "long-rains-2024").id == user.id

    with pytest.raises(Unauthorized):
        auth.authenticate(db_session, "wanjiru@example.com", "wrong-password")
    with pytest.raises(Unauthorized):
        auth.authenticate(db_session, "nobody@example.com", "long-rains-2024")


def test_bearer_token_resolves_identity(db_session, user):
    token = auth.issue_token(user)

    identity = auth.resolve_identity(db_session, {"authorization": f"Bearer {token}"})

    assert identity.user_id == user.id
    assert identity.email == "wanjiru@example.com"


def test_session_cookie_resolves_identity(db_session, user):
    token = auth.issue_token(user)

    identity = auth.resolve_identity(db_session, {"cookie": f"theme=dark; {SESSION_COOKIE}={token}"})

    assert identity.user_id == user.id


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"authorization": "Bearer"},
        {"authorization": "Basic d2FuamlydTpwdw=="},
        {"authorization": "Bearer not-a-jwt"},
    ],
)
def test_missing_or_bad_token_is_no_session(db_session, user, headers):
    assert auth.resolve_identity(db_session, headers) is None


def test_expired_token_is_no_session(db_session, user):
    issued = datetime.now(timezone.utc) - timedelta(minutes=TOKEN_TTL_MINUTES + 5)
    token = auth.issue_token(user, now=issued)

    assert auth.resolve_identity(db_session, {"authorization": f"Bearer {token}"}) is None


def test_token_for_deleted_user_is_no_session(db_session, user):
    token = auth.issue_token(user)
    db_session.delete(user)
    db_session.commit()

    assert auth.resolve_identity(db_session, {"authorization": f"Bearer {token}"}) is None


def test_quoted_session_cookie_resolves_identity(db_session, user):
    token = auth.issue_token(user)

    identity = auth.resolve_identity(db_session, {"Cookie": f'theme=dark; {SESSION_COOKIE}="{token}"'})

    assert identity.user_id == user.id


def test_lowercase_bearer_scheme_resolves_identity(db_session, user):
    token = auth.issue_token(user)

    assert auth.resolve_identity(db_session, {"Authorization": f"bearer {token}"}).user_id == user.id


def test_register_race_on_unique_email_is_validation_error(db_session, user, monkeypatch):
    # the pre-check misses a row committed by a concurrent sign-up
    monkeypatch.setattr(auth, "_email_taken", lambda db, email: False)

    with pytest.raises(ValidationError, match="Email already registered"):
        auth.register_user(db_session, "Other", "wanjiru@example.com", "another-password")

    # the session was rolled back and stays usable
    assert auth.authenticate(db_session, "wanjiru@example.com", "long-rains-2024").id == user.id


def test_default_signing_key_is_long_enough(user):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        token = auth.issue_token(user)
        auth._decode(token)

    assert not [w for w in caught if type(w.message).__name__ == "InsecureKeyLengthWarning"]
