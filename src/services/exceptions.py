"""Service layer exception classes for the Cocktail Order Engine.

The order engine itself (src.services.ordering) is total and never raises
these; they are raised by the booking services around it.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── EventNotFound
    ├── RecipeNotFound
    ├── EventLocked
    └── DatabaseError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when booking input fails validation.

    Args:
        errors: List of human-readable error messages

    Example:
        >>> raise ValidationError(["Number of guests must be a whole number."])
        ValidationError: Validation failed: Number of guests must be a whole number.
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class EventNotFound(ServiceError):
    """Raised when an event cannot be found by ID.

    Args:
        event_id: The event ID that was not found
    """

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Event with ID {event_id} not found")


class RecipeNotFound(ServiceError):
    """Raised when a selection references a recipe that does not exist.

    Args:
        recipe_id: The recipe ID that was not found
    """

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class EventLocked(ServiceError):
    """Raised when amending an event that staff have confirmed.

    Args:
        event_id: The confirmed event

    Example:
        >>> raise EventLocked(7)
        EventLocked: Event 7 is confirmed and can no longer be edited
    """

    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"Event {event_id} is confirmed and can no longer be edited")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
