"""Domain error taxonomy.

Services raise these; the API layer renders them as JSON with ``status_code``.
The widget endpoints never let them reach a visitor beyond 400/404.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional


class ExchangeError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ExchangeError):
    status_code = 400


class NotFoundError(ExchangeError):
    status_code = 404


class ForbiddenError(ExchangeError):
    """Suspended/banned account or insufficient role. ``until`` is set for temporary suspensions."""
    status_code = 403

    def __init__(self, message: str, *, until: Optional[datetime] = None):
        super().__init__(message)
        self.until = until


class ConflictError(ExchangeError):
    status_code = 409


class TransientStoreError(ExchangeError):
    """Store contention persisted after retries; callers may retry."""
    status_code = 503


__all__ = [
    "ExchangeError",
    "InvalidInputError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "TransientStoreError",
]
