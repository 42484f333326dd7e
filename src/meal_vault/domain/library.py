"""Domain models for products and recipes in the vault library."""

from dataclasses import dataclass

from meal_vault.domain.nutrition import NutritionTotals


@dataclass(frozen=True)
class ProductSummary:
    """Product record with nutrition for one declared portion."""

    slug: str
    title: str
    nutrition_per_portion: NutritionTotals
    portion_grams: float | None = None
    meal_time: str | None = None
    file_name: str | None = None


@dataclass(frozen=True)
class RecipeSummary:
    """Recipe record with nutrition for a single serving."""

    slug: str
    title: str
    nutrition_per_serving: NutritionTotals
    servings: float = 1
    file_name: str | None = None
