"""Seed the initial administrator from ADMIN_EMAIL / ADMIN_PASSWORD."""
from sqlalchemy.orm import Session
from voter_onboarding.config import get_settings
from voter_onboarding.models.admin import Admin
from voter_onboarding.services.accounts import normalize_email
from voter_onboarding.services.auth import get_password_hash


def seed_admin(db: Session) -> Admin | None:
    settings = get_settings()
    email = normalize_email(settings.admin_email)
    if not email or not settings.admin_password:
        return None
    admin = db.query(Admin).filter(Admin.email == email).first()
    if admin:
        return admin
    admin = Admin(
        email=email,
        hashed_password=get_password_hash(settings.admin_password),
        name=settings.admin_name,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin
