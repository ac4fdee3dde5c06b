"""Service layer exception classes for the Bar Costing engine.

Pure calculators do not raise for malformed numbers (they coerce to 0);
these exceptions cover ledger validation and persistence failures.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── DatabaseError
    ├── ProductionBatchNotFound
    ├── LossEntryNotFound
    ├── LossDraftNotFound
    └── SubRecipeDepletionNotFound
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails.

    Writes are never retried automatically; callers decide what to do.
    """

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class ProductionBatchNotFound(ServiceError):
    """Raised when a production batch cannot be found by ID.

    Example:
        >>> raise ProductionBatchNotFound(12)
        ProductionBatchNotFound: Production batch with ID 12 not found
    """

    def __init__(self, batch_id: int):
        self.batch_id = batch_id
        super().__init__(f"Production batch with ID {batch_id} not found")


class LossEntryNotFound(ServiceError):
    """Raised when a persisted loss entry cannot be found by ID."""

    def __init__(self, loss_entry_id: int):
        self.loss_entry_id = loss_entry_id
        super().__init__(f"Loss entry with ID {loss_entry_id} not found")


class LossDraftNotFound(ServiceError):
    """Raised when a draft loss entry is not in the ledger."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Loss draft '{draft_id}' not found")


class SubRecipeDepletionNotFound(ServiceError):
    """Raised when a depletion record cannot be found by ID."""

    def __init__(self, depletion_id: int):
        self.depletion_id = depletion_id
        super().__init__(f"Sub-recipe depletion with ID {depletion_id} not found")
