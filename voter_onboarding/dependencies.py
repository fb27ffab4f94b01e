"""Shared dependencies: DB session, current admin."""
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from voter_onboarding.database import get_db
from voter_onboarding.models.admin import Admin
from voter_onboarding.services.auth import ADMIN_ROLE, decode_token_with_error

security = HTTPBearer(auto_error=False)


def require_admin(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Admin:
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload, _ = decode_token_with_error((credentials.credentials or "").strip())
    if not payload or payload.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if not admin:
        raise HTTPException(status_code=401, detail="Admin not found")
    return admin
