"""Tests for crypto provisioning and voter ID allocation."""
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import serialization

from voter_onboarding.exceptions import CryptoProvisioningError
from voter_onboarding.models.user import User
from voter_onboarding.services import crypto
from voter_onboarding.services.crypto import (
    EncryptedField,
    decrypt_field,
    generate_crypto_fields,
    generate_voter_id,
)

HASHED = "$2b$12$abcdefghijklmnopqrstuuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0"


class TestGenerateCryptoFields:

    def test_all_payloads_present(self):
        fields = generate_crypto_fields(HASHED)
        columns = fields.as_user_columns()
        assert len(columns) == 10
        assert all(columns.values())

    def test_iv_and_tag_sizes(self):
        fields = generate_crypto_fields(HASHED)
        for field in (fields.public_key, fields.private_key, fields.token):
            assert len(bytes.fromhex(field.iv)) == crypto.IV_BYTES
            assert len(bytes.fromhex(field.auth_tag)) == crypto.TAG_BYTES
        assert len(bytes.fromhex(fields.salt)) == crypto.SALT_BYTES

    def test_fresh_material_each_call(self):
        first = generate_crypto_fields(HASHED)
        second = generate_crypto_fields(HASHED)
        assert first.salt != second.salt
        assert first.private_key.ciphertext != second.private_key.ciphertext
        assert first.token.iv != second.token.iv

    def test_private_key_decrypts_to_matching_keypair(self):
        fields = generate_crypto_fields(HASHED)
        private_pem = decrypt_field(HASHED, fields.salt, fields.private_key)
        public_pem = decrypt_field(HASHED, fields.salt, fields.public_key)

        private_key = serialization.load_pem_private_key(private_pem, password=None)
        derived_public = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        assert derived_public == public_pem

    def test_token_is_64_hex_chars(self):
        fields = generate_crypto_fields(HASHED)
        token = decrypt_field(HASHED, fields.salt, fields.token).decode("ascii")
        assert len(token) == 64
        int(token, 16)

    def test_wrong_password_fails_authentication(self):
        fields = generate_crypto_fields(HASHED)
        with pytest.raises(CryptoProvisioningError):
            decrypt_field(HASHED + "x", fields.salt, fields.token)

    def test_tampered_tag_fails_authentication(self):
        fields = generate_crypto_fields(HASHED)
        tag = bytearray(bytes.fromhex(fields.token.auth_tag))
        tag[0] ^= 0xFF
        tampered = EncryptedField(fields.token.ciphertext, fields.token.iv, tag.hex())
        with pytest.raises(CryptoProvisioningError):
            decrypt_field(HASHED, fields.salt, tampered)

    def test_empty_password_rejected(self):
        with pytest.raises(CryptoProvisioningError):
            generate_crypto_fields("")

    def test_key_generation_failure_wrapped(self):
        with patch.object(crypto, "generate_keypair", side_effect=ValueError("no entropy")):
            with pytest.raises(CryptoProvisioningError, match="no entropy"):
                generate_crypto_fields(HASHED)


def _store_user(db, voter_id, email):
    user = User(
        voter_id=voter_id,
        name="Existing",
        email=email,
        hashed_password=HASHED,
        pincode="00000",
        **generate_crypto_fields(HASHED).as_user_columns(),
    )
    db.add(user)
    db.commit()
    return user


class TestGenerateVoterId:

    def test_format(self, db):
        voter_id = generate_voter_id(db)
        assert voter_id.startswith("VTR")
        assert len(voter_id) == 3 + crypto.VOTER_ID_LENGTH
        assert set(voter_id[3:]) <= set(crypto.VOTER_ID_ALPHABET)

    def test_skips_taken_id(self, db):
        _store_user(db, "VTRAAAAAAAAAA", "taken@example.com")
        with patch.object(crypto, "_voter_id_candidate", side_effect=["VTRAAAAAAAAAA", "VTRBBBBBBBBBB"]):
            assert generate_voter_id(db) == "VTRBBBBBBBBBB"

    def test_gives_up_after_max_attempts(self, db):
        _store_user(db, "VTRAAAAAAAAAA", "taken@example.com")
        with patch.object(crypto, "_voter_id_candidate", return_value="VTRAAAAAAAAAA"):
            with pytest.raises(CryptoProvisioningError, match="unique voter ID"):
                generate_voter_id(db)
