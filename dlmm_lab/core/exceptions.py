# core/exceptions.py
"""
Error kinds raised by the distribution, order and simulation engines.

Every error carries a stable ``code`` so callers (UI, bots, API layers) can map
it to a message without parsing text.
"""
from typing import Optional


class DLMMError(Exception):
    """Base class for all engine errors."""

    code = "UNKNOWN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.original_error = original_error

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class PairNotFoundError(DLMMError):
    """The trading pair is unknown to the market data provider."""
    code = "PAIR_NOT_FOUND"


class PriceOutOfRangeError(DLMMError):
    """No bin of the pair maps to the requested price, or a price is not positive."""
    code = "PRICE_OUT_OF_RANGE"


class OrderNotFoundError(DLMMError):
    """No order with the given id exists in the store."""
    code = "ORDER_NOT_FOUND"


class InvalidStateError(DLMMError):
    """A lifecycle transition was attempted from the wrong state."""
    code = "INVALID_STATE"


class InsufficientDataError(DLMMError):
    """The data window is too short for the requested computation."""
    code = "INSUFFICIENT_DATA"


class UndefinedStatisticError(DLMMError, ZeroDivisionError):
    """A statistic is undefined because its denominator (variance, total weight) is zero."""
    code = "DIVIDE_BY_ZERO"


def handle_dlmm_error(error: BaseException) -> DLMMError:
    """Pass engine errors through, wrap anything else as UNKNOWN_ERROR."""
    if isinstance(error, DLMMError):
        return error
    return DLMMError(f"DLMM operation failed: {error}", "UNKNOWN_ERROR", error)
