"""Error kinds raised by the gates and rendered by ``utils.error_handler``."""


class RevisifyError(Exception):
    code = "ERROR"
    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthenticated(RevisifyError):
    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Authentication required."


class InvalidInput(RevisifyError):
    code = "INVALID_INPUT"
    status_code = 400
    default_message = "Invalid input."


class QuotaExceeded(RevisifyError):
    code = "QUOTA_EXCEEDED"
    status_code = 403
    default_message = "Free plan limit reached. Upgrade to Pro for unlimited projects."


class ScopeExceeded(RevisifyError):
    code = "SCOPE_EXCEEDED"
    status_code = 409
    default_message = "Revision limit exceeded. Cannot add more revisions."


class NotFound(RevisifyError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found."


class StoreUnavailable(RevisifyError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
    default_message = "Database temporarily unavailable. Please try again in a moment."


class IdentityUnavailable(RevisifyError):
    code = "IDENTITY_UNAVAILABLE"
    status_code = 503
    default_message = "Authentication service temporarily unavailable. Please try again in a moment."


class InvalidSignature(RevisifyError):
    code = "INVALID_SIGNATURE"
    status_code = 401
    default_message = "Invalid signature"
