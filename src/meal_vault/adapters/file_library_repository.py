"""Filesystem repository for products and recipes stored in the vault."""

import logging
from dataclasses import dataclass
from pathlib import Path

from meal_vault.domain.library import ProductSummary, RecipeSummary
from meal_vault.domain.nutrition import scale_totals
from meal_vault.formats.front_matter import decode
from meal_vault.formats.scalars import StructuredValue
from meal_vault.services.day_documents import (
    to_optional_number,
    totals_from_mapping,
)
from meal_vault.services.library import LibraryRepository

_logger = logging.getLogger(__name__)


@dataclass
class FileLibraryRepository(LibraryRepository):
    """Reads product and recipe front matter from Markdown files."""

    root: Path
    products_directory: str = "products"
    recipes_directory: str = "recipes"

    def get_product(self, slug: str) -> ProductSummary | None:
        """Return a product parsed from ``products/{slug}.md``."""
        header = self._read_header(self.products_directory, slug)
        if header is None:
            return None
        nutrition = header.get("nutrition_per_portion")
        portion = to_optional_number(header.get("portion_grams"))
        meal_time = header.get("meal_time")
        return ProductSummary(
            slug=slug,
            title=_to_title(header.get("title"), slug),
            nutrition_per_portion=totals_from_mapping(
                nutrition if isinstance(nutrition, dict) else {}
            ),
            portion_grams=portion if portion is not None and portion > 0 else None,
            meal_time=meal_time if isinstance(meal_time, str) and meal_time else None,
            file_name=f"{slug}.md",
        )

    def get_recipe(self, slug: str) -> RecipeSummary | None:
        """Return a recipe parsed from ``recipes/{slug}.md``."""
        header = self._read_header(self.recipes_directory, slug)
        if header is None:
            return None
        servings = to_optional_number(header.get("servings"))
        if servings is None or servings <= 0:
            servings = 1
        per_serving = header.get("nutrition_per_serving")
        if isinstance(per_serving, dict):
            nutrition = totals_from_mapping(per_serving)
        else:
            total = header.get("nutrition_total")
            nutrition = scale_totals(
                totals_from_mapping(total if isinstance(total, dict) else {}),
                1 / servings,
            )
        return RecipeSummary(
            slug=slug,
            title=_to_title(header.get("title"), slug),
            nutrition_per_serving=nutrition,
            servings=servings,
            file_name=f"{slug}.md",
        )

    def _read_header(
        self, directory: str, slug: str
    ) -> dict[str, StructuredValue] | None:
        if not _is_safe_slug(slug):
            _logger.warning("Rejected library slug %r", slug)
            return None
        path = self.root / directory / f"{slug}.md"
        try:
            source = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return decode(source).header


def _is_safe_slug(slug: str) -> bool:
    return bool(slug) and slug not in {".", ".."} and Path(slug).name == slug


def _to_title(value: object, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback
