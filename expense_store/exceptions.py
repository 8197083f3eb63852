"""Domain-specific exceptions for the expense tracker store."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class DuplicateCategoryError(ValidationError):
    """Raised when a category name is already taken."""


class CategoryInUseError(ValidationError):
    """Raised when deleting a category still referenced by transactions."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class CorruptStateError(PersistenceError):
    """Raised when persisted data cannot be parsed or fails the shape check."""
