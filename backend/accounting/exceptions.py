# accounting/exceptions.py
"""
Ledger error types.

Every failure the ledger reports to a caller is a LedgerError subclass
carrying a machine-readable ``code`` and the HTTP status it maps to.
Commands hand these back through CommandResult.fail(); anything raised
inside an atomic block rolls the whole unit back and is rendered by
``ledger_exception_handler``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for ledger errors."""

    code = "ledger_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Ledger operation failed."

    def __init__(self, message: str = None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


# =============================================================================
# Validation errors (detected before any mutation)
# =============================================================================

class ValidationError(LedgerError):
    code = "validation_error"
    default_message = "Invalid input."


class MissingParameterError(ValidationError):
    code = "missing_parameter"
    default_message = "A required parameter is missing."


class TooFewEntriesError(ValidationError):
    code = "too_few_entries"
    default_message = "A transaction needs at least two entries."


class UnbalancedEntriesError(ValidationError):
    code = "unbalanced_entries"
    default_message = "Total debits must equal total credits."


class NegativeAmountError(ValidationError):
    code = "negative_amount"
    default_message = "Debit and credit amounts cannot be negative."


class UnknownAccountError(ValidationError):
    code = "unknown_account"
    default_message = "Entry references an unknown or inactive account."


class CyclicParentError(ValidationError):
    code = "cyclic_parent"
    default_message = "An account cannot be its own ancestor."


# =============================================================================
# Not-found and conflict errors
# =============================================================================

class NotFoundError(LedgerError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class ConflictError(LedgerError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The request conflicts with the current state."


class DuplicateCodeError(ConflictError):
    code = "duplicate_code"
    default_message = "Code already exists."


class HasEntriesError(ConflictError):
    code = "has_entries"
    default_message = "Account has entries and cannot be deactivated."


class InsufficientStockError(ConflictError):
    code = "insufficient_stock"
    default_message = "Insufficient stock."


class InvalidStateError(ConflictError):
    code = "invalid_state"
    default_message = "The record is not in a state that allows this action."


# =============================================================================
# DRF integration
# =============================================================================

def ledger_exception_handler(exc, context):
    """
    REST framework exception handler.

    Renders LedgerError as ``{"detail", "code"}`` with its own status and
    defers everything else to DRF's default handler.
    """
    if isinstance(exc, LedgerError):
        view = context.get("view")
        logger.warning(
            "Ledger request rejected",
            extra={
                "code": exc.code,
                "view": view.__class__.__name__ if view else None,
                "error": exc.message,
            },
        )
        return Response(exc.to_dict(), status=exc.status_code)
    return exception_handler(exc, context)
