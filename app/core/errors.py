from __future__ import annotations

from typing import Iterable


class RaffleError(Exception):
    """Base class for errors rendered to clients by the API exception handler."""

    code = "raffle_error"

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def payload(self) -> dict:
        return {"error": self.message, "type": self.code}


class ValidationError(RaffleError):
    code = "validation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InvalidCredentials(RaffleError):
    code = "invalid_credentials"

    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message, 401)


class UnknownTicket(RaffleError):
    code = "unknown_ticket"

    def __init__(self, numbers: Iterable[int]) -> None:
        self.numbers = sorted(numbers)
        super().__init__(f"Numbers do not exist in this raffle: {self.numbers}", 400)

    def payload(self) -> dict:
        return {**super().payload(), "unknownNumbers": self.numbers}


class AlreadySold(RaffleError):
    code = "already_sold"

    def __init__(self, numbers: Iterable[int]) -> None:
        self.numbers = sorted(numbers)
        super().__init__("Some numbers have already been sold", 400)

    def payload(self) -> dict:
        return {**super().payload(), "soldNumbers": self.numbers}


class StoreUnavailable(RaffleError):
    """The ticket store could not complete an operation.

    For a purchase the outcome is unknown: the client has to re-fetch the
    catalog before retrying.
    """

    code = "store_unavailable"

    def __init__(self, message: str = "Ticket store is unavailable") -> None:
        super().__init__(message, 503)
