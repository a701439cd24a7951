"""Domain-specific exceptions"""

from typing import Any


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class EntityValidationError(DomainException):
    """Entity construction or update violated an invariant"""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")
