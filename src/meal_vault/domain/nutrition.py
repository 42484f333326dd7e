"""Nutrition domain models and arithmetic."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")
_GRAM_UNITS = {"", "g", "gr", "gram", "grams", "г", "гр"}
_PORTION_UNITS = {"portion", "portions", "serving", "servings"}
DEFAULT_PORTION_GRAMS = 100.0


@dataclass(frozen=True)
class NutritionTotals:
    """Additive nutrition values for an item, section or day."""

    calories_kcal: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0
    sugar_g: float | None = None
    fiber_g: float | None = None


@dataclass(frozen=True)
class NutritionTargets:
    """Partial nutrition targets captured with a day."""

    calories_kcal: float | None = None
    protein_g: float | None = None
    fat_g: float | None = None
    carbs_g: float | None = None
    sugar_g: float | None = None
    fiber_g: float | None = None


EMPTY_TOTALS = NutritionTotals()


def round2(value: float) -> float:
    """Round to two decimals, half away from zero."""
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def add_totals(left: NutritionTotals, right: NutritionTotals) -> NutritionTotals:
    """Sum two totals field by field, rounding each sum."""
    return NutritionTotals(
        calories_kcal=round2(left.calories_kcal + right.calories_kcal),
        protein_g=round2(left.protein_g + right.protein_g),
        fat_g=round2(left.fat_g + right.fat_g),
        carbs_g=round2(left.carbs_g + right.carbs_g),
        sugar_g=_add_optional(left.sugar_g, right.sugar_g),
        fiber_g=_add_optional(left.fiber_g, right.fiber_g),
    )


def scale_totals(totals: NutritionTotals, factor: float) -> NutritionTotals:
    """Multiply every field by ``factor``, rounding each product."""
    return NutritionTotals(
        calories_kcal=round2(totals.calories_kcal * factor),
        protein_g=round2(totals.protein_g * factor),
        fat_g=round2(totals.fat_g * factor),
        carbs_g=round2(totals.carbs_g * factor),
        sugar_g=None if totals.sugar_g is None else round2(totals.sugar_g * factor),
        fiber_g=None if totals.fiber_g is None else round2(totals.fiber_g * factor),
    )


def sum_totals(values: list[NutritionTotals]) -> NutritionTotals:
    """Fold a list of totals with ``add_totals``."""
    total = EMPTY_TOTALS
    for value in values:
        total = add_totals(total, value)
    return total


def scale_factor(requested: float, reference: float | None) -> float:
    """Return the multiplier turning reference-sized values into requested ones."""
    if reference is not None and reference > 0:
        return requested / reference
    if requested > 0:
        return requested
    return 1.0


def normalize_quantity(
    quantity: float | None, unit: str | None, portion_grams: float | None
) -> tuple[float, str]:
    """Express a requested amount in grams.

    Portion-like units are multiplied by the portion size; unknown units are
    taken as grams. A missing or non-positive quantity means one portion.
    """
    grams_per_portion = (
        portion_grams
        if portion_grams is not None and portion_grams > 0
        else DEFAULT_PORTION_GRAMS
    )
    if quantity is None or quantity <= 0:
        return grams_per_portion, "g"
    normalized_unit = (unit or "").strip().lower()
    if normalized_unit in _GRAM_UNITS:
        return quantity, "g"
    if normalized_unit in _PORTION_UNITS or normalized_unit.startswith("порц"):
        return round2(quantity * grams_per_portion), "g"
    return quantity, "g"


def _add_optional(left: float | None, right: float | None) -> float | None:
    if left is None and right is None:
        return None
    return round2((left or 0.0) + (right or 0.0))
