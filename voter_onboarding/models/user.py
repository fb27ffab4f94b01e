"""Approved voters and their encrypted key material."""
import uuid

from sqlalchemy import Column, String, Text, DateTime, Boolean
from sqlalchemy.sql import func
from voter_onboarding.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    voter_id = Column(String(32), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    pincode = Column(String(20), nullable=False)

    # AES-GCM ciphertexts (hex) with their IVs and auth tags
    public_key = Column(Text, nullable=False)
    public_key_iv = Column(String(64), nullable=False)
    public_key_auth_tag = Column(String(64), nullable=False)
    private_key = Column(Text, nullable=False)
    private_key_iv = Column(String(64), nullable=False)
    private_key_auth_tag = Column(String(64), nullable=False)
    private_key_derivation_salt = Column(String(64), nullable=False)
    token = Column(Text, nullable=False)
    token_iv = Column(String(64), nullable=False)
    token_auth_tag = Column(String(64), nullable=False)

    is_verified = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
