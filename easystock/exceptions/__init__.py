"""Custom exceptions for the EasyStock data layer."""

class StoreError(Exception):
    """Base exception for all data layer errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

class BusinessLogicError(StoreError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(StoreError):
    """Exception raised when a resource required by a write is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ConflictError(BusinessLogicError):
    """Raised when a record is added under a key that already exists."""
    def __init__(self, kind, key):
        message = f"{kind} '{key}' already exists"
        super().__init__(message, status_code=409, payload={'kind': kind, 'key': str(key)})
        self.kind = kind
        self.key = key

class TransactionError(StoreError):
    """Raised when an atomic unit fails; none of its writes were committed."""
    def __init__(self, operation, cause=None):
        message = f"Transaction '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, 500, {'operation': operation})
        self.operation = operation
