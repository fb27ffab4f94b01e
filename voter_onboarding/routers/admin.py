"""Admin login."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from voter_onboarding.database import get_db
from voter_onboarding.exceptions import InvalidCredentials
from voter_onboarding.models.admin import Admin
from voter_onboarding.schemas.admin import AdminLogin, AdminToken
from voter_onboarding.services.accounts import normalize_email
from voter_onboarding.services.auth import create_admin_token, verify_password

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=AdminToken)
def login(data: AdminLogin, db: Session = Depends(get_db)):
    admin = db.query(Admin).filter(Admin.email == normalize_email(data.email)).first()
    if not admin or not verify_password(data.password, admin.hashed_password):
        raise InvalidCredentials()
    return AdminToken(access_token=create_admin_token(admin.id, admin.email))
