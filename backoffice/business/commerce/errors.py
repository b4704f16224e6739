"""
Domain exceptions for the order/inventory workflow

These exceptions represent expected, caller-recoverable conditions.
The HTTP boundary maps them to 404 / 400 / 409 responses; anything else
raised out of the workflow is an unexpected store failure and surfaces as 500.
"""


class CommerceDomainError(Exception):
    """Base exception for all commerce domain errors"""
    pass


class NotFoundError(CommerceDomainError):
    """Raised when a referenced entity id does not resolve"""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class InvalidArgumentError(CommerceDomainError):
    """Raised for malformed or out-of-range input (non-positive quantity, empty item list...)"""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class StatusTransitionError(InvalidArgumentError):
    """Raised when the configured status policy rejects a transition"""

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid order status transition: {from_status} → {to_status}", field="status")


class ConflictError(CommerceDomainError):
    """Raised when a unique key already exists (order number, client email, username)"""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)
