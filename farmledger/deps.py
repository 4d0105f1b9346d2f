# farmledger/deps.py
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from farmledger import auth, schemas
from farmledger.config import SESSION_COOKIE
from farmledger.db import get_db
from farmledger.ownership import require_user

bearer = HTTPBearer(auto_error=False)


def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer),
    db: Session = Depends(get_db),
) -> Optional[schemas.Identity]:
    # None is passed through; core operations raise Unauthorized themselves
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    return auth.resolve_token(db, token)


def require_identity(identity: Optional[schemas.Identity] = Depends(get_identity)) -> schemas.Identity:
    """Reject the request before its body is validated when nobody is signed in."""
    require_user(identity)
    return identity
