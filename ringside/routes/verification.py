from flask import Blueprint, jsonify, request

from services import verifications


verification_bp = Blueprint("verification", __name__)


@verification_bp.route("/email-verifications", methods=["POST"])
def request_verification():
    data = request.get_json() or {}
    email = (data.get("email") or "").strip()
    booking_data = data.get("booking_data")
    if not email or not isinstance(booking_data, dict) or not booking_data:
        return jsonify({"error": "email and booking_data are required"}), 400

    verification = verifications.create_verification(email, booking_data)
    return jsonify(
        {
            "verification_id": verification.verification_id,
            "expires_at": verification.expires_at.isoformat(),
        }
    ), 201


@verification_bp.route("/email-verifications/<verification_id>", methods=["GET"])
def get_verification(verification_id):
    verification = verifications.get_verification(verification_id)
    if verification is None:
        return jsonify({"error": "Verification not found"}), 404
    return jsonify({"verification": verification.to_dict()})


@verification_bp.route("/email-verifications/<verification_id>/verify", methods=["POST"])
def confirm_verification(verification_id):
    data = request.get_json() or {}
    verification = verifications.verify(verification_id, data.get("email"))
    return jsonify({"verification": verification.to_dict()})
