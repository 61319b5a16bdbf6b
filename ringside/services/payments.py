import secrets
import time
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import DuplicateReferenceError, InvalidPaymentTransition
from extensions import db
from models import Booking, BookingStatus, Payment, PaymentStatus


EXPIRE_FORMAT = "%Y-%m-%d %H:%M:%S"


def generate_reference_no() -> str:
    """12 digits: the tail of the millisecond clock plus three random digits."""
    millis = str(int(time.time() * 1000))
    return (millis + f"{secrets.randbelow(1000):03d}")[-12:]


# Rows written by older clients
LEGACY_STATUSES = {"completed": PaymentStatus.PAID}


def parse_status(value) -> PaymentStatus:
    value = str(value).lower()
    if value in LEGACY_STATUSES:
        return LEGACY_STATUSES[value]
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValueError(f"Unknown payment status: {value!r}") from None


def create_payment(
    amount: float,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
    booking: Optional[Booking] = None,
    reference_no: Optional[str] = None,
    **fields,
) -> Payment:
    """Insert a pending payment.

    Customer fields default to the booking's when one is given, and the
    booking is linked both ways. A clashing ``reference_no`` raises
    :class:`DuplicateReferenceError`; the caller should retry with a new one.
    """
    if booking is not None:
        customer_name = customer_name or booking.name
        customer_email = customer_email or booking.email
        customer_phone = customer_phone or booking.phone

    missing = [
        name
        for name, value in (
            ("customer_name", customer_name),
            ("customer_email", customer_email),
            ("customer_phone", customer_phone),
        )
        if not value
    ]
    if missing:
        raise ValueError(f"Missing fields: {', '.join(missing)}")

    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise ValueError("amount must be a number") from None
    if amount <= 0:
        raise ValueError("amount must be positive")

    now = datetime.utcnow()
    fields.setdefault("merchant_id", current_app.config.get("PAYMENT_MERCHANT_ID") or None)
    fields.setdefault(
        "expire_date",
        (now + timedelta(minutes=current_app.config["PAYMENT_EXPIRY_MINUTES"])).strftime(EXPIRE_FORMAT),
    )
    fields.setdefault("order_datetime", now.strftime(EXPIRE_FORMAT))

    reference_no = reference_no or generate_reference_no()
    payment = Payment(
        reference_no=reference_no,
        amount=amount,
        status=PaymentStatus.PENDING.value,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
        booking_id=booking.id if booking is not None else None,
        **fields,
    )
    db.session.add(payment)
    try:
        db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateReferenceError(reference_no) from exc

    if booking is not None:
        booking.payment_id = payment.id
    db.session.commit()
    current_app.logger.info("Created payment %s for %.2f", payment.reference_no, payment.amount)
    return payment


def get_payment(reference_no: str) -> Optional[Payment]:
    return Payment.query.filter_by(reference_no=reference_no).first()


def link_booking(payment: Payment, booking: Booking) -> Payment:
    payment.booking_id = booking.id
    booking.payment_id = payment.id
    db.session.commit()
    return payment


def update_status(reference_no: str, status) -> Optional[Payment]:
    """Move a pending payment to a terminal state; ``None`` if it does not exist."""
    new_status = parse_status(status)
    payment = get_payment(reference_no)
    if payment is None:
        return None

    try:
        current = parse_status(payment.status or PaymentStatus.PENDING.value)
    except ValueError:
        raise InvalidPaymentTransition(reference_no, payment.status, new_status.value) from None
    if current is new_status:
        return payment
    if current.is_terminal or new_status is PaymentStatus.PENDING:
        raise InvalidPaymentTransition(reference_no, current.value, new_status.value)

    payment.status = new_status.value
    # explicit so the row changes even when only the status differs
    payment.updated_at = datetime.utcnow()

    if new_status is PaymentStatus.PAID and payment.booking_id:
        booking = db.session.get(Booking, payment.booking_id)
        if booking is not None:
            booking.status = BookingStatus.CONFIRMED.value
            booking.payment_time = payment.updated_at.isoformat()

    db.session.commit()
    current_app.logger.info("Payment %s moved %s -> %s", reference_no, current.value, new_status.value)
    return payment


def expire_overdue(now: Optional[datetime] = None) -> int:
    """Mark pending payments past ``expire_date`` as expired; returns the count."""
    cutoff = (now or datetime.utcnow()).strftime(EXPIRE_FORMAT)
    overdue = (
        Payment.query.filter(Payment.status == PaymentStatus.PENDING.value)
        .filter(Payment.expire_date.isnot(None))
        .filter(Payment.expire_date < cutoff)
        .all()
    )
    for payment in overdue:
        payment.status = PaymentStatus.EXPIRED.value
        payment.updated_at = datetime.utcnow()
    db.session.commit()
    if overdue:
        current_app.logger.info("Expired %d overdue payment(s)", len(overdue))
    return len(overdue)
