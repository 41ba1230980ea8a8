"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the handlers registered in
``resto_pos.main`` render them as ``{"error": message}``.
"""
from typing import Optional


class POSError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(POSError):
    status_code = 400


class NotFoundError(POSError):
    status_code = 404


class PriceNotFoundError(NotFoundError):
    pass


class OptionNotFoundError(NotFoundError):
    pass


class ForbiddenError(POSError):
    status_code = 403


class ConflictError(POSError):
    status_code = 409


class StateError(POSError):
    status_code = 400


class InsufficientPaymentError(POSError):
    status_code = 400


class InsufficientStockError(POSError):
    status_code = 400
