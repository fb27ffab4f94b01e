"""Crypto provisioning: per-voter keypair, session token and derivation salt.

Every secret is encrypted with AES-256-GCM under a key derived from the voter's
stored password hash and a fresh random salt (PBKDF2-HMAC-SHA256). Each field
gets its own IV; the GCM tag is stored separately from the ciphertext.
"""
import os
import secrets
import string
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy.orm import Session

from voter_onboarding.config import get_settings
from voter_onboarding.exceptions import CryptoProvisioningError
from voter_onboarding.models.user import User

SALT_BYTES = 16
IV_BYTES = 12
TAG_BYTES = 16
TOKEN_BYTES = 32
VOTER_ID_ALPHABET = string.ascii_uppercase + string.digits
VOTER_ID_LENGTH = 10


@dataclass(frozen=True)
class EncryptedField:
    ciphertext: str
    iv: str
    auth_tag: str


@dataclass(frozen=True)
class CryptoFields:
    public_key: EncryptedField
    private_key: EncryptedField
    token: EncryptedField
    salt: str

    def as_user_columns(self) -> dict[str, str]:
        """Column values for a User row."""
        return {
            "public_key": self.public_key.ciphertext,
            "public_key_iv": self.public_key.iv,
            "public_key_auth_tag": self.public_key.auth_tag,
            "private_key": self.private_key.ciphertext,
            "private_key_iv": self.private_key.iv,
            "private_key_auth_tag": self.private_key.auth_tag,
            "private_key_derivation_salt": self.salt,
            "token": self.token.ciphertext,
            "token_iv": self.token.iv,
            "token_auth_tag": self.token.auth_tag,
        }


def derive_key(hashed_password: str, salt: bytes) -> bytes:
    """Turn the stored password hash + salt into a 32-byte AES key."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=get_settings().kdf_iterations,
    )
    return kdf.derive(hashed_password.encode("utf-8"))


def generate_keypair() -> tuple[bytes, bytes]:
    """Fresh secp256k1 keypair as (private PEM, public PEM)."""
    private_key = ec.generate_private_key(ec.SECP256K1())
    pem_private = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    pem_public = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem_private, pem_public


def _encrypt(key: bytes, plaintext: bytes) -> EncryptedField:
    iv = os.urandom(IV_BYTES)
    sealed = AESGCM(key).encrypt(iv, plaintext, None)
    return EncryptedField(
        ciphertext=sealed[:-TAG_BYTES].hex(),
        iv=iv.hex(),
        auth_tag=sealed[-TAG_BYTES:].hex(),
    )


def generate_crypto_fields(hashed_password: str) -> CryptoFields:
    """Provision encrypted keypair, token and salt for a voter. Touches no database state."""
    if not hashed_password:
        raise CryptoProvisioningError("Cannot provision cryptographic fields without a password hash")
    try:
        salt = os.urandom(SALT_BYTES)
        key = derive_key(hashed_password, salt)
        pem_private, pem_public = generate_keypair()
        token = secrets.token_bytes(TOKEN_BYTES)
        return CryptoFields(
            public_key=_encrypt(key, pem_public),
            private_key=_encrypt(key, pem_private),
            token=_encrypt(key, token.hex().encode("ascii")),
            salt=salt.hex(),
        )
    except (ValueError, TypeError, OverflowError, UnsupportedAlgorithm) as e:
        raise CryptoProvisioningError(f"Crypto provisioning failed: {e}") from e


def decrypt_field(hashed_password: str, salt: str, field: EncryptedField) -> bytes:
    """Inverse of provisioning for one field. Raises CryptoProvisioningError when the tag does not verify."""
    key = derive_key(hashed_password, bytes.fromhex(salt))
    try:
        return AESGCM(key).decrypt(
            bytes.fromhex(field.iv),
            bytes.fromhex(field.ciphertext) + bytes.fromhex(field.auth_tag),
            None,
        )
    except InvalidTag as e:
        raise CryptoProvisioningError("Encrypted field failed authentication") from e


def _voter_id_candidate(prefix: str) -> str:
    return prefix + "".join(secrets.choice(VOTER_ID_ALPHABET) for _ in range(VOTER_ID_LENGTH))


def generate_voter_id(db: Session) -> str:
    """Voter ID not held by any existing user. Call inside the approval transaction;
    the unique constraint on users.voter_id backs this up under concurrent approvals."""
    settings = get_settings()
    for _ in range(settings.voter_id_max_attempts):
        candidate = _voter_id_candidate(settings.voter_id_prefix)
        if db.query(User.id).filter(User.voter_id == candidate).first() is None:
            return candidate
    raise CryptoProvisioningError("Could not allocate a unique voter ID")
