from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bloodbank.core.security import verify_token
from bloodbank.database.database import get_db
from bloodbank.services.data_store import BloodBankStore, SQLAlchemyBloodBankStore

# auto_error=False: anonymous callers reach the evaluators, which answer "must be logged in"
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> BloodBankStore:
    return SQLAlchemyBloodBankStore(db)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Caller identity from the bearer token, or None when no token is sent."""
    if credentials is None:
        return None
    payload = verify_token(credentials.credentials)
    return str(payload["sub"])
