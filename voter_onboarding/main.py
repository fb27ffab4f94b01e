"""Decentralized Voting onboarding – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from voter_onboarding.config import get_settings
from voter_onboarding.database import Base, SessionLocal, engine
from voter_onboarding.exceptions import OnboardingError
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from voter_onboarding.models import Admin, PendingApproval, User  # noqa: F401
from voter_onboarding.routers import admin, approval
from voter_onboarding.seed import seed_admin

log = logging.getLogger("uvicorn.error")

settings = get_settings()
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url or "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(approval.router)
app.include_router(admin.router)


@app.exception_handler(OnboardingError)
def onboarding_error_handler(request: Request, exc: OnboardingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.kind})


@app.on_event("startup")
def startup():
    if settings.otp_bypass_enabled and settings.app_env == "production":
        log.warning("[OTP] Bypass code is enabled in production. Set OTP_BYPASS_ENABLED=false.")
    if not (settings.mailgun_api_key and settings.mailgun_domain) and not settings.sendgrid_api_key:
        log.warning("[Email] Not configured - OTP and notification emails will fail; set MAILGUN_API_KEY and MAILGUN_DOMAIN in .env")
    try:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            seed_admin(db)
        finally:
            db.close()
    except SQLAlchemyError as e:
        log.warning("Database startup failed (tables/seed skipped). Check DATABASE_URL and network. Error: %s", e)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
