import json
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app

from errors import VerificationError
from extensions import db
from models import EmailVerification


def create_verification(email: str, booking_data: dict, minutes_valid: Optional[int] = None) -> EmailVerification:
    if not email or not booking_data:
        raise ValueError("email and booking_data are required")
    if minutes_valid is None:
        minutes_valid = current_app.config["VERIFICATION_TTL_MINUTES"]

    verification = EmailVerification(
        id=uuid.uuid4().hex,
        # token is stored raw; it is single-use and short-lived
        verification_id=secrets.token_urlsafe(32),
        email=email.strip().lower(),
        booking_data=json.dumps(booking_data),
        expires_at=datetime.utcnow() + timedelta(minutes=minutes_valid),
    )
    db.session.add(verification)
    db.session.commit()
    return verification


def get_verification(verification_id: str) -> Optional[EmailVerification]:
    return EmailVerification.query.filter_by(verification_id=verification_id).first()


def is_used(verification_id: str) -> bool:
    verification = get_verification(verification_id)
    return verification is not None and verification.verified_at is not None


def verify(verification_id: str, email: str, now: Optional[datetime] = None) -> EmailVerification:
    """Mark a verification as used.

    Raises :class:`VerificationError` when it is missing, already used, for
    another address, or expired.
    """
    now = now or datetime.utcnow()
    verification = get_verification(verification_id)
    if verification is None:
        raise VerificationError("not_found", "Verification not found")
    if verification.verified_at is not None:
        raise VerificationError("already_used", "Verification already used")
    if verification.email != (email or "").strip().lower():
        raise VerificationError("email_mismatch", "Email mismatch")
    if verification.is_expired(now):
        raise VerificationError("expired", "Verification expired")

    verification.verified_at = now
    db.session.commit()
    return verification


def delete_expired(now: Optional[datetime] = None) -> int:
    deleted = EmailVerification.query.filter(EmailVerification.expires_at < (now or datetime.utcnow())).delete(
        synchronize_session=False
    )
    db.session.commit()
    return deleted
