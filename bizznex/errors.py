"""
Error taxonomy shared by every domain.

Services raise these; ``main`` turns them into ``{"success": false, "message": ...}``
responses with the matching HTTP status.
"""


class BizznexError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BizznexError):
    """Missing required field, bad enum value or rejected input"""

    status_code = 400


class InvalidPriceId(ValidationError):
    pass


class MissingEmail(ValidationError):
    pass


class InvalidPaymentAmount(ValidationError):
    pass


class AuthError(BizznexError):
    status_code = 401


class NotFoundError(BizznexError):
    status_code = 404


class ProfileNotFound(NotFoundError):
    pass


class ProviderError(BizznexError):
    """Payments, email or identity provider call failed"""

    status_code = 502


class PersistenceError(BizznexError):
    status_code = 500
