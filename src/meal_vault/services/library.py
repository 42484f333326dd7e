"""Services for resolving products and recipes from the vault library."""

from dataclasses import dataclass
from typing import Protocol

from meal_vault.domain.errors import LibraryItemNotFoundError
from meal_vault.domain.library import ProductSummary, RecipeSummary


class LibraryRepository(Protocol):
    """Lookup interface for library records."""

    def get_product(self, slug: str) -> ProductSummary | None:
        """Return a product by slug, if present."""

    def get_recipe(self, slug: str) -> RecipeSummary | None:
        """Return a recipe by slug, if present."""


@dataclass
class LibraryService:
    """Application service for library lookups."""

    repository: LibraryRepository

    def find_product(self, slug: str | None) -> ProductSummary | None:
        """Return a product, or None when the slug is empty or unknown."""
        if not slug:
            return None
        return self.repository.get_product(slug)

    def find_recipe(self, slug: str | None) -> RecipeSummary | None:
        """Return a recipe, or None when the slug is empty or unknown."""
        if not slug:
            return None
        return self.repository.get_recipe(slug)

    def require_product(self, slug: str) -> ProductSummary:
        """Return a product or raise ``LibraryItemNotFoundError``."""
        product = self.find_product(slug)
        if product is None:
            raise LibraryItemNotFoundError("product", slug)
        return product

    def require_recipe(self, slug: str) -> RecipeSummary:
        """Return a recipe or raise ``LibraryItemNotFoundError``."""
        recipe = self.find_recipe(slug)
        if recipe is None:
            raise LibraryItemNotFoundError("recipe", slug)
        return recipe
