class MigrationError(RuntimeError):
    """A migration step failed; the run stopped at ``version``."""

    def __init__(self, version, message):
        super().__init__(message)
        self.version = version


class IrreversibleMigrationError(MigrationError):
    pass


class DuplicateReferenceError(ValueError):
    """A payment with this reference number already exists."""

    def __init__(self, reference_no):
        super().__init__(f"Duplicate payment reference_no: {reference_no}")
        self.reference_no = reference_no


class InvalidPaymentTransition(ValueError):
    def __init__(self, reference_no, current, requested):
        super().__init__(f"Payment {reference_no} cannot move from {current} to {requested}")
        self.reference_no = reference_no
        self.current = current
        self.requested = requested


class VerificationError(ValueError):
    # reason: not_found, already_used, email_mismatch, expired
    def __init__(self, reason, message=None):
        super().__init__(message or reason.replace("_", " "))
        self.reason = reason
