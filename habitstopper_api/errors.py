from __future__ import annotations


class HabitStopperError(Exception):
    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class Unauthorized(HabitStopperError):
    status_code = 401
    public_message = "Login required"


class InvalidArgument(HabitStopperError):
    status_code = 400
    public_message = "Invalid argument"


class StoreUnavailable(HabitStopperError):
    """The backing store could not complete the operation. Not retried here."""

    status_code = 503
    public_message = "Store unavailable"
