# farmledger/auth.py
# Email/password accounts with HS256 bearer tokens.
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

import bcrypt
import jwt
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import cookie_parser

from farmledger import models, schemas
from farmledger.config import SECRET_KEY, SESSION_COOKIE, TOKEN_TTL_MINUTES
from farmledger.errors import Unauthorized, ValidationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def identity_for(user: models.User) -> schemas.Identity:
    return schemas.Identity(user_id=user.id, name=user.name, email=user.email)


def _email_taken(db: Session, email: str) -> bool:
    return db.query(models.User.id).filter(models.User.email == email).first() is not None


def register_user(db: Session, name: str, email: str, password: str) -> models.User:
    email = email.strip().lower()
    if _email_taken(db, email):
        raise ValidationError("Email already registered")

    user = models.User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # a concurrent sign-up won the unique email index
        db.rollback()
        raise ValidationError("Email already registered") from e
    db.refresh(user)
    logger.info("User registered: id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    user = db.query(models.User).filter(models.User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed sign-in for email=%s", email)
        raise Unauthorized("Invalid email or password")
    return user


def issue_token(user: models.User, *, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=TOKEN_TTL_MINUTES),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def _decode(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid token")
    return None


def token_from_parts(authorization: Optional[str], cookie: Optional[str]) -> Optional[str]:
    """Pick the bearer credential, falling back to the session cookie."""
    scheme, credentials = get_authorization_scheme_param(authorization)
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return cookie_parser(cookie or "").get(SESSION_COOKIE) or None


def resolve_token(db: Session, token: Optional[str]) -> Optional[schemas.Identity]:
    """Return the user a token belongs to, or None for a missing, expired or unknown token."""
    if not token:
        return None

    payload = _decode(token)
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        return None

    user = db.get(models.User, payload["sub"])
    if user is None:
        return None
    return identity_for(user)


def resolve_identity(db: Session, headers: Mapping[str, str]) -> Optional[schemas.Identity]:
    """Return the signed-in user for these request headers, or None when there is no valid session."""
    lowered = {k.lower(): v for k, v in headers.items()}
    return resolve_token(db, token_from_parts(lowered.get("authorization"), lowered.get("cookie")))
