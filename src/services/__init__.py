"""Services package - Business logic layer for the Cocktail Order Engine.

This package contains the order engine and the service modules that feed
it from the database.

Architecture:
- ordering: Pure order computation (aggregation, procurement, reconciliation)
- Services: Stateless functions organized by domain (catalog, event, order)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy

Service Modules:
- catalog_service: Ingredient/recipe catalog and snapshot conversion
- event_service: Booking create, amend, submit, confirm
- order_service: Order lists and drink counts for events

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Structured operation logging
"""

from . import (
    database,
    catalog_service,
    event_service,
    order_service,
)

from .exceptions import (
    ServiceError,
    ValidationError,
    EventNotFound,
    RecipeNotFound,
    EventLocked,
    DatabaseError,
)

__all__ = [
    "database",
    "catalog_service",
    "event_service",
    "order_service",
    "ServiceError",
    "ValidationError",
    "EventNotFound",
    "RecipeNotFound",
    "EventLocked",
    "DatabaseError",
]
