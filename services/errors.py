# services/errors.py
"""
Domain errors raised by the ledger services.

Routers map each class to an HTTP status; services never raise HTTPException.
"""
from __future__ import annotations


class LedgerError(Exception):
    """Base class for every error raised by the ledger services."""

    status_code: int = 400


class TradeValidationError(LedgerError, ValueError):
    """Missing or invalid field on trade creation."""

    status_code = 422


class ItemNotFound(LedgerError, ValueError):
    status_code = 404

    def __init__(self, name_id: int):
        self.name_id = name_id
        super().__init__(f"Item not found: name_id={name_id}")


class TradeNotFound(LedgerError, ValueError):
    status_code = 404

    def __init__(self, trade_id: int):
        self.trade_id = trade_id
        super().__init__(f"Trade not found: id={trade_id}")


class DuplicateItem(LedgerError, ValueError):
    status_code = 409


class ImportFormatError(LedgerError, ValueError):
    status_code = 400


class InsufficientInventory(LedgerError, ValueError):
    status_code = 409

    def __init__(self, name_id: int, current: int, requested: int):
        self.name_id = name_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Insufficient inventory for name_id={name_id}: "
            f"currently holding {current}, requested {requested}"
        )


class InvalidTradeType(LedgerError, ValueError):
    """The accounting operation does not match the trade's type."""

    status_code = 400


class ReversalUnavailable(LedgerError):
    """A trade cannot be reversed automatically and needs manual correction."""

    status_code = 409


class InconsistentState(LedgerError):
    """
    The position update failed after the trade row was written.

    Signals a data-integrity problem that needs manual remediation; callers
    must not retry automatically.
    """

    status_code = 500
