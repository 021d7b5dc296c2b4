"""
domain.exceptions - Custom exception hierarchy for the recipe/meal-plan data layer.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ContentSourceError(DomainError):
    """Raised when the CMS is unreachable or returns an error response."""


class RecipeNotFoundError(ContentSourceError):
    """Raised when the CMS has no recipe with the requested id."""


class RepositoryError(DomainError):
    """Raised when a Relation Store or local store operation fails."""


class SessionInvalidError(DomainError):
    """Raised when a mutation is attempted without a valid, matching session.

    Kept distinct from fetch failures: the UI answers it with a sign-in
    prompt instead of a retry button.
    """


class MealPlanError(DomainError):
    """Raised for an unknown day label or a malformed slot id."""
