"""
Custom exceptions for the season tracker with user-friendly error messages.
"""

class TrackerException(Exception):
    """Base exception for season tracker errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class ParseError(TrackerException):
    """Raised when an uploaded spreadsheet cannot be read. Fatal to the whole ingestion."""
    def __init__(self, reason: str):
        super().__init__(
            f"Spreadsheet parse failed: {reason}",
            f"❌ {reason}"
        )

class NotFoundError(TrackerException):
    """Raised when a referenced tier or backup does not exist."""
    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            f"{entity} '{identifier}' not found",
            f"❌ {entity.capitalize()} `{identifier}` not found!"
        )

class ValidationError(TrackerException):
    """Raised when operator input is rejected before persistence."""
    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(
            f"Invalid {field}: {reason}",
            f"❌ {reason}"
        )

class OperationError(TrackerException):
    """Raised when a storage operation fails."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )
