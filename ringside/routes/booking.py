import uuid

from flask import Blueprint, current_app, jsonify, request

from extensions import db
from models import Booking, Payment
from services import tickets


booking_bp = Blueprint("booking", __name__)


def new_booking_id() -> str:
    return "BK" + uuid.uuid4().hex[:12].upper()


@booking_bp.route("/bookings", methods=["POST"])
def create_booking():
    data = request.get_json() or {}

    required = ["stadium", "date", "name", "email", "phone", "quantity", "ticket_id", "ticket_type"]
    missing = [field for field in required if data.get(field) in (None, "")]
    if missing:
        return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400

    # total_price from the client is ignored; the stored ticket decides
    try:
        quote = tickets.calculate_price(
            data["stadium"], data["ticket_id"], data["ticket_type"], data["quantity"], data["date"]
        )
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    booking_id = data.get("id") or new_booking_id()
    if db.session.get(Booking, booking_id) is not None:
        return jsonify({"error": f"Booking {booking_id} already exists"}), 409

    booking = Booking(
        id=booking_id,
        stadium=data.get("stadium"),
        date=data.get("date"),
        zone=data.get("zone"),
        ticket_id=quote.ticket_id,
        ticket_type=quote.ticket_type,
        name=data.get("name"),
        email=data.get("email"),
        phone=data.get("phone"),
        quantity=quote.quantity,
        total_price=quote.total_price,
        payment_start_time=data.get("payment_start_time"),
        payment_slip=data.get("payment_slip"),
    )
    try:
        tickets.reserve(booking.stadium, quote.ticket_id, quote.ticket_type, booking.date, quote.quantity)
    except ValueError as exc:
        db.session.rollback()
        return jsonify({"error": str(exc)}), 400
    db.session.add(booking)
    db.session.commit()
    cache = current_app.extensions["content_cache"]
    cache.clear("bookings")
    cache.clear("tickets")

    return jsonify({"booking": booking.to_dict()}), 201


@booking_bp.route("/bookings/<booking_id>", methods=["GET"])
def get_booking(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        return jsonify({"error": "Booking not found"}), 404

    payment = None
    if booking.payment_id is not None:
        payment = db.session.get(Payment, booking.payment_id)
    if payment is None:
        payment = Payment.query.filter_by(booking_id=booking.id).order_by(Payment.id.desc()).first()

    data = booking.to_dict()
    data["payment"] = payment.to_dict() if payment else None
    return jsonify({"booking": data})
