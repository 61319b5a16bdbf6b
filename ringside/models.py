"""ORM mappings over the tables the migrations create.

The schema is owned by ``migrations/versions``; nothing here calls
``create_all``. Column types follow what is stored in SQLite.
"""
import enum
import json
from datetime import datetime

from sqlalchemy import func

from extensions import db


def _utcnow():
    return datetime.utcnow()


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


def _json_list(raw):
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.String, primary_key=True)
    stadium = db.Column(db.String, nullable=False)
    date = db.Column(db.String, nullable=False)
    zone = db.Column(db.String)
    ticket_id = db.Column(db.String)
    ticket_type = db.Column(db.String)
    name = db.Column(db.String, nullable=False)
    email = db.Column(db.String, nullable=False)
    phone = db.Column(db.String, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Float, nullable=False)
    payment_start_time = db.Column(db.String)
    payment_time = db.Column(db.String)
    payment_slip = db.Column(db.String)
    payment_date_time = db.Column(db.String)
    time_diff = db.Column(db.String)
    created_at = db.Column(db.String, nullable=False, default=lambda: _utcnow().isoformat())
    status = db.Column(db.String, default=BookingStatus.PENDING.value, server_default=BookingStatus.PENDING.value)
    # Weak reference to payments.id, set once a payment exists
    payment_id = db.Column(db.Integer)

    def to_dict(self):
        return {
            "id": self.id,
            "stadium": self.stadium,
            "date": self.date,
            "zone": self.zone,
            "ticket_id": self.ticket_id,
            "ticket_type": self.ticket_type,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "quantity": self.quantity,
            "total_price": self.total_price,
            "payment_start_time": self.payment_start_time,
            "payment_time": self.payment_time,
            "payment_slip": self.payment_slip,
            "payment_date_time": self.payment_date_time,
            "time_diff": self.time_diff,
            "created_at": self.created_at,
            "status": self.status,
            "payment_id": self.payment_id,
        }


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    # INTEGER affinity in SQLite; holds the text id of the linked booking
    booking_id = db.Column(db.String)
    order_no = db.Column(db.String)
    reference_no = db.Column(db.String, unique=True, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String, default=PaymentStatus.PENDING.value, server_default=PaymentStatus.PENDING.value)
    qr_code_image = db.Column(db.String)
    expire_date = db.Column(db.String)
    order_datetime = db.Column(db.String)
    # Copied from the booking so a payment row reads on its own
    customer_name = db.Column(db.String, nullable=False)
    customer_email = db.Column(db.String, nullable=False)
    customer_phone = db.Column(db.String, nullable=False)
    product_detail = db.Column(db.String)
    merchant_id = db.Column(db.String)
    created_at = db.Column(db.DateTime, default=_utcnow, server_default=func.now())
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "order_no": self.order_no,
            "reference_no": self.reference_no,
            "amount": self.amount,
            "status": self.status,
            "qr_code_image": self.qr_code_image,
            "expire_date": self.expire_date,
            "order_datetime": self.order_datetime,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "product_detail": self.product_detail,
            "merchant_id": self.merchant_id,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class StadiumPaymentImage(db.Model):
    __tablename__ = "stadium_payment_images"

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    image = db.Column(db.String, nullable=False)
    # JSON array of weekdays, 0 = Sunday
    days = db.Column(db.String, nullable=False)
    created_at = db.Column(db.String, server_default=func.current_timestamp())
    updated_at = db.Column(db.String, server_default=func.current_timestamp())

    @property
    def day_list(self):
        return _json_list(self.days)

    def to_dict(self):
        return {
            "id": self.id,
            "stadium_id": self.stadium_id,
            "image": self.image,
            "days": self.day_list,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class EmailVerification(db.Model):
    __tablename__ = "email_verifications"

    id = db.Column(db.String, primary_key=True)
    verification_id = db.Column(db.String, unique=True, nullable=False, index=True)
    email = db.Column(db.String, nullable=False, index=True)
    booking_data = db.Column(db.Text, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    verified_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=_utcnow, server_default=func.now())

    def is_expired(self, now=None) -> bool:
        return (now or _utcnow()) > self.expires_at

    def to_dict(self):
        try:
            booking_data = json.loads(self.booking_data)
        except (TypeError, ValueError):
            booking_data = None
        return {
            "verification_id": self.verification_id,
            "email": self.email,
            "booking_data": booking_data,
            "expires_at": _iso(self.expires_at),
            "verified_at": _iso(self.verified_at),
            "created_at": _iso(self.created_at),
        }


class HeroImage(db.Model):
    __tablename__ = "hero_image"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False, default=1)
    image = db.Column(db.String, nullable=False)
    updated_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {"image": self.image, "updated_at": self.updated_at}


class Highlight(db.Model):
    __tablename__ = "highlights"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, nullable=False)
    date = db.Column(db.String, nullable=False)
    image = db.Column(db.String, nullable=False)
    created_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {"id": self.id, "title": self.title, "date": self.date, "image": self.image}


class RegularTicket(db.Model):
    __tablename__ = "regular_tickets"

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    name = db.Column(db.String, nullable=False)
    price = db.Column(db.Float, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    match_id = db.Column(db.String)
    match_name = db.Column(db.String)
    days = db.Column(db.String)
    created_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {
            "id": self.id,
            "stadium_id": self.stadium_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "match_id": self.match_id,
            "match_name": self.match_name,
            "days": _json_list(self.days),
        }


class SpecialTicket(db.Model):
    __tablename__ = "special_tickets"

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    name = db.Column(db.String, nullable=False)
    price = db.Column(db.Float, nullable=False)
    date = db.Column(db.String, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    image = db.Column(db.String)
    created_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {
            "id": self.id,
            "stadium_id": self.stadium_id,
            "name": self.name,
            "price": self.price,
            "date": self.date,
            "quantity": self.quantity,
            "image": self.image,
        }


class TicketQuantityByDate(db.Model):
    """Stock and overrides for one ticket on one date.

    Without a row the ticket's own quantity, name and price apply.
    """

    __tablename__ = "ticket_quantities_by_date"
    __table_args__ = (
        db.UniqueConstraint("stadium_id", "ticket_id", "ticket_type", "date", name="uq_ticket_quantity_per_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    ticket_id = db.Column(db.String, nullable=False)
    ticket_type = db.Column(db.String, nullable=False)
    date = db.Column(db.String, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    initial_quantity = db.Column(db.Integer, nullable=False, default=0)
    enabled = db.Column(db.Integer, default=1, server_default="1")
    name_override = db.Column(db.String)
    price_override = db.Column(db.Float)
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=_utcnow)

    @property
    def is_enabled(self) -> bool:
        return self.enabled != 0

    def to_dict(self):
        return {
            "stadium_id": self.stadium_id,
            "ticket_id": self.ticket_id,
            "ticket_type": self.ticket_type,
            "date": self.date,
            "quantity": self.quantity,
            "initial_quantity": self.initial_quantity,
            "enabled": self.is_enabled,
            "name_override": self.name_override,
            "price_override": self.price_override,
        }


class StadiumExtended(db.Model):
    __tablename__ = "stadiums_extended"

    id = db.Column(db.String, primary_key=True)
    schedule_days = db.Column(db.String)
    updated_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {"id": self.id, "schedule_days": _json_list(self.schedule_days)}


class StadiumImageSchedule(db.Model):
    __tablename__ = "stadium_image_schedules"

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    image = db.Column(db.String, nullable=False)
    days = db.Column(db.String)
    name = db.Column(db.String)
    created_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {
            "id": self.id,
            "stadium_id": self.stadium_id,
            "image": self.image,
            "days": _json_list(self.days),
            "name": self.name,
        }


class SpecialMatch(db.Model):
    __tablename__ = "special_matches"

    id = db.Column(db.Integer, primary_key=True)
    stadium_id = db.Column(db.String, nullable=False)
    date = db.Column(db.String, nullable=False)
    name = db.Column(db.String, nullable=False)
    image = db.Column(db.String)
    created_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {
            "id": self.id,
            "stadium_id": self.stadium_id,
            "date": self.date,
            "name": self.name,
            "image": self.image,
        }


class UpcomingFightsBackground(db.Model):
    __tablename__ = "upcoming_fights_background"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False, default=1)
    image = db.Column(db.String, nullable=False)
    fallback = db.Column(db.String)
    updated_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {"image": self.image, "fallback": self.fallback, "updated_at": self.updated_at}


class PromptPayQR(db.Model):
    __tablename__ = "promptpay_qr"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False, default=1)
    qr_image = db.Column(db.String, nullable=False)
    updated_at = db.Column(db.String, server_default=func.current_timestamp())

    def to_dict(self):
        return {"qr_image": self.qr_image, "updated_at": self.updated_at}
