# finance_tracker/errors.py
"""Error kinds raised by the client core.

ValidationError is raised before any network call and is never logged.
ApiError covers transport failures and non-success responses;
AffectedRowsError is a success response that changed the wrong number of rows.
"""


class FinanceTrackerError(Exception):
    """Base class for all client-side errors"""


class ValidationError(FinanceTrackerError):
    """Input rejected before any request was made"""


class ActionInProgressError(ValidationError):
    """The same action is already running for this record kind"""

    def __init__(self, key):
        self.key = key
        kind, action = key
        super().__init__(f"Please wait, {kind} {action} is already in progress")


class ApiError(FinanceTrackerError):
    """Transport failure or non-success response from the data API"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class AffectedRowsError(ApiError):
    """Mutation reported an affected row count other than exactly one"""

    def __init__(self, affected_rows=None, payload=None):
        super().__init__("No rows affected or unexpected response", payload=payload)
        self.affected_rows = affected_rows
