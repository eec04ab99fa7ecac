"""
Errors raised by the store settings and admission layer.

Routes translate these into HTTP responses; nothing below the routes
imports FastAPI.
"""


class StoreSettingsError(Exception):
    status_code = 500

    def __init__(self, message: str, **data):
        super().__init__(message)
        self.message = message
        self.data = data

    def as_dict(self) -> dict:
        return {"message": self.message, **self.data}


class SettingsValidationError(StoreSettingsError):
    """Malformed input. Reported immediately, never retried."""

    status_code = 400


class SettingsNotFound(StoreSettingsError):
    status_code = 404


class SettingsStoreUnavailable(StoreSettingsError):
    """The settings store failed or timed out."""

    status_code = 503


class PolicyRejection(StoreSettingsError):
    """An order the seller's store will not accept."""

    status_code = 403

    def __init__(self, decision, status_code: int = 403):
        super().__init__(decision.message)
        self.decision = decision
        self.status_code = status_code

    def as_dict(self) -> dict:
        return {
            "reason_code": self.decision.reason_code.value,
            "message": self.decision.message,
            "limits": self.decision.details,
        }
