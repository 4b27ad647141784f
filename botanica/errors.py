# botanica/errors.py
from __future__ import annotations


class BotanicaError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationFailed(BotanicaError):
    status_code = 400
    message = "Invalid request"


class InvalidTransition(BotanicaError):
    status_code = 400
    message = "Invalid status transition"


class AccessDenied(BotanicaError):
    status_code = 403
    message = "Access denied"


class NotFound(BotanicaError):
    status_code = 404
    message = "Not found"


class Conflict(BotanicaError):
    status_code = 409
    message = "Conflict"
