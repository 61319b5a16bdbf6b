from flask import Blueprint, jsonify, request

from errors import DuplicateReferenceError, InvalidPaymentTransition
from extensions import db
from models import Booking
from services import payments


payments_bp = Blueprint("payments", __name__)

PAYMENT_FIELDS = ("order_no", "qr_code_image", "expire_date", "order_datetime", "product_detail", "merchant_id")


@payments_bp.route("/payments", methods=["POST"])
def create_payment():
    data = request.get_json() or {}
    if data.get("amount") in (None, ""):
        return jsonify({"error": "Missing fields: amount"}), 400

    booking = None
    if data.get("booking_id"):
        booking = db.session.get(Booking, data["booking_id"])
        if booking is None:
            return jsonify({"error": "Booking not found"}), 404

    try:
        payment = payments.create_payment(
            amount=data["amount"],
            customer_name=data.get("customer_name"),
            customer_email=data.get("customer_email"),
            customer_phone=data.get("customer_phone"),
            booking=booking,
            reference_no=data.get("reference_no"),
            **{field: data[field] for field in PAYMENT_FIELDS if data.get(field)},
        )
    except DuplicateReferenceError:
        raise
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"payment": payment.to_dict()}), 201


@payments_bp.route("/payments/<reference_no>", methods=["GET"])
def get_payment(reference_no):
    payment = payments.get_payment(reference_no)
    if payment is None:
        return jsonify({"error": "Payment not found"}), 404
    return jsonify({"payment": payment.to_dict()})


@payments_bp.route("/payments/<reference_no>/status", methods=["PATCH"])
def update_payment_status(reference_no):
    data = request.get_json() or {}
    if not data.get("status"):
        return jsonify({"error": "status required"}), 400

    try:
        payment = payments.update_status(reference_no, data["status"])
    except InvalidPaymentTransition:
        raise
    except ValueError:
        return jsonify({"error": "Invalid status value"}), 400

    if payment is None:
        return jsonify({"error": "Payment not found"}), 404
    return jsonify({"payment": payment.to_dict()})
