"""Domain models for daily meal plans."""

from dataclasses import dataclass, field
from typing import Literal

from meal_vault.domain.nutrition import (
    EMPTY_TOTALS,
    NutritionTargets,
    NutritionTotals,
    sum_totals,
)

ItemKind = Literal["product", "recipe"]

DEFAULT_SECTION_IDS = ("breakfast", "lunch", "snack", "dinner")


@dataclass(frozen=True)
class ItemSource:
    """Library record an item was created from."""

    kind: ItemKind
    slug: str | None = None
    file_name: str | None = None


@dataclass
class MealPlanItem:
    """One product portion or recipe serving placed into a section."""

    kind: ItemKind
    ref: str
    title: str
    nutrition: NutritionTotals
    quantity: float | None = None
    quantity_unit: str | None = None
    servings: float | None = None
    portion_grams: float | None = None
    source: ItemSource | None = None


@dataclass
class MealPlanSection:
    """Ordered bucket of items within a day."""

    id: str
    name: str | None = None
    items: list[MealPlanItem] = field(default_factory=list)
    totals: NutritionTotals = EMPTY_TOTALS


@dataclass
class Wellness:
    """Free-form wellbeing notes attached to a day."""

    mood: str | None = None
    sleep_hours: float | None = None
    steps: int | None = None
    notes: str | None = None


@dataclass
class MealPlanDay:
    """A calendar day with its sections and aggregated totals."""

    date: str
    sections: list[MealPlanSection] = field(default_factory=list)
    totals: NutritionTotals = EMPTY_TOTALS
    targets_snapshot: NutritionTargets | None = None
    wellness: Wellness | None = None
    updated_at: str | None = None
    meta: dict[str, object] = field(default_factory=dict)


def build_empty_day(date: str, updated_at: str | None = None) -> MealPlanDay:
    """Create a day with the default sections and zero totals."""
    return MealPlanDay(
        date=date,
        sections=[MealPlanSection(id=section_id) for section_id in DEFAULT_SECTION_IDS],
        updated_at=updated_at,
    )


def recalculate_section(section: MealPlanSection) -> None:
    """Recompute section totals from its items."""
    section.totals = sum_totals([item.nutrition for item in section.items])


def recalculate_day(day: MealPlanDay) -> None:
    """Recompute every section, then the day totals from the sections."""
    for section in day.sections:
        recalculate_section(section)
    day.totals = sum_totals([section.totals for section in day.sections])


def find_section(day: MealPlanDay, section_id: str) -> MealPlanSection | None:
    """Return the section with ``section_id``, if present."""
    for section in day.sections:
        if section.id == section_id:
            return section
    return None


def ensure_section(
    day: MealPlanDay, section_id: str, name: str | None = None
) -> MealPlanSection:
    """Return the section with ``section_id``, appending it when missing."""
    section = find_section(day, section_id)
    if section is not None:
        if name and not section.name:
            section.name = name
        return section
    section = MealPlanSection(id=section_id, name=name)
    day.sections.append(section)
    return section


def get_item(
    day: MealPlanDay, section_id: str, index: int
) -> tuple[MealPlanSection, MealPlanItem] | None:
    """Return the section and item addressed by id and index, if both exist."""
    section = find_section(day, section_id)
    if section is None or index < 0 or index >= len(section.items):
        return None
    return section, section.items[index]
