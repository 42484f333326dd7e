"""Errors raised by meal vault services."""


class MealVaultError(Exception):
    """Base class for meal vault errors."""


class DayNotFoundError(MealVaultError):
    """Raised when a day document is required but absent."""

    def __init__(self, date: str) -> None:
        super().__init__(f"No meal plan stored for {date}")
        self.date = date


class DayConflictError(MealVaultError):
    """Raised when a day changed since the caller last read it."""

    def __init__(self, date: str, expected: str | None, actual: str | None) -> None:
        super().__init__(
            f"Meal plan for {date} was updated at {actual}, expected {expected}"
        )
        self.date = date
        self.expected = expected
        self.actual = actual


class LibraryItemNotFoundError(MealVaultError):
    """Raised when a product or recipe slug does not resolve."""

    def __init__(self, kind: str, slug: str) -> None:
        super().__init__(f"Unknown {kind}: {slug}")
        self.kind = kind
        self.slug = slug
