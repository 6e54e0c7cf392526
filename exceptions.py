"""
Exceptions for the Grocery Inventory Manager
"""


class ValidationError(ValueError):
    """Raised when a product, supplier or stock update carries invalid data.

    Always raised before any state is changed, so callers can report the
    message and carry on with the store exactly as it was.
    """

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self):
        return self.message
