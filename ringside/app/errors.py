from flask import jsonify
from werkzeug.exceptions import HTTPException

from errors import DuplicateReferenceError, InvalidPaymentTransition, VerificationError


VERIFICATION_STATUS = {
    "not_found": 404,
    "already_used": 409,
    "email_mismatch": 400,
    "expired": 410,
}


def register_error_handlers(app):
    @app.errorhandler(DuplicateReferenceError)
    def duplicate_reference(e):
        return jsonify(error=str(e), reference_no=e.reference_no), 409

    @app.errorhandler(InvalidPaymentTransition)
    def invalid_transition(e):
        return jsonify(error=str(e), status=e.current), 409

    @app.errorhandler(VerificationError)
    def verification_failed(e):
        return jsonify(error=str(e), reason=e.reason), VERIFICATION_STATUS.get(e.reason, 400)

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(error=e.name.lower().replace(" ", "_")), e.code

    @app.errorhandler(500)
    def server_error(e):
        return jsonify(error="server_error"), 500
