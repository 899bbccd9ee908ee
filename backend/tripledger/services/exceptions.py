"""
Domain-specific exceptions for the expense and settlement services.

These represent business rule violations and are converted to HTTP
responses by the API routes.
"""


class TripLedgerError(Exception):
    """Base exception for all service errors."""
    pass


class TripNotFoundError(TripLedgerError):
    """Raised when a trip does not exist."""

    def __init__(self, trip_id: str):
        self.trip_id = trip_id
        super().__init__(f"Trip {trip_id} not found")


class ExpenseValidationError(TripLedgerError):
    """Raised when an expense cannot be created as requested (bad payer, bad split)."""
    pass
