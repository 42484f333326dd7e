"""Mapping between meal plan days and their Markdown documents."""

import math

from meal_vault.domain.meal_plans import (
    ItemKind,
    ItemSource,
    MealPlanDay,
    MealPlanItem,
    MealPlanSection,
    Wellness,
    build_empty_day,
    recalculate_day,
)
from meal_vault.domain.nutrition import NutritionTargets, NutritionTotals
from meal_vault.formats.auto_block import upsert_auto_block
from meal_vault.formats.front_matter import decode, encode
from meal_vault.formats.scalars import StructuredValue, format_number

SUMMARY_MARKER = "SUMMARY"

_ITEM_ICONS: dict[str, str] = {"product": "🥣", "recipe": "🍲"}

_TOTALS_KEYS = {
    "calories_kcal": ("kcal", "caloriesKcal", "calories_kcal", "calories"),
    "protein_g": ("protein_g", "proteinG", "protein"),
    "fat_g": ("fat_g", "fatG", "fat"),
    "carbs_g": ("carbs_g", "carbsG", "carbs"),
    "sugar_g": ("sugar_g", "sugarG", "sugar"),
    "fiber_g": ("fiber_g", "fiberG", "fiber"),
}


def day_from_document(source: str, date: str) -> tuple[MealPlanDay, str]:
    """Decode a day document, returning the rebuilt day and its body."""
    document = decode(source)
    day = day_from_header(document.header, date)
    return day, document.body


def day_to_document(day: MealPlanDay, body: str) -> str:
    """Encode a day, refreshing the summary block inside ``body``."""
    if not body.strip():
        body = f"# Plan for {day.date}\n"
    merged = upsert_auto_block(body, SUMMARY_MARKER, render_summary(day))
    return encode(day_to_header(day), merged)


def day_from_header(header: dict[str, StructuredValue], date: str) -> MealPlanDay:
    """Build a day from decoded front matter, tolerating hand edits."""
    day = build_empty_day(date, updated_at=_to_text(header.get("updated_at")))
    raw_sections = header.get("sections")
    if isinstance(raw_sections, list):
        day.sections = [
            _section_from_header(raw)
            for raw in raw_sections
            if isinstance(raw, dict) and _to_text(raw.get("id"))
        ]
    raw_targets = header.get("targets_snapshot")
    if isinstance(raw_targets, dict):
        day.targets_snapshot = targets_from_mapping(raw_targets)
    raw_wellness = header.get("wellness")
    if isinstance(raw_wellness, dict):
        day.wellness = Wellness(
            mood=_to_text(raw_wellness.get("mood")),
            sleep_hours=to_optional_number(raw_wellness.get("sleep_hours")),
            steps=_to_optional_int(raw_wellness.get("steps")),
            notes=_to_text(raw_wellness.get("notes")),
        )
    raw_meta = header.get("meta")
    if isinstance(raw_meta, dict):
        day.meta = dict(raw_meta)
    recalculate_day(day)
    return day


def day_to_header(day: MealPlanDay) -> dict[str, StructuredValue]:
    """Return the snake_case front matter for a day."""
    header: dict[str, StructuredValue] = {
        "date": day.date,
        "sections": [_section_to_header(section) for section in day.sections],
        "totals": totals_to_mapping(day.totals),
        "targets_snapshot": (
            _targets_to_mapping(day.targets_snapshot)
            if day.targets_snapshot is not None
            else None
        ),
        "wellness": (
            {
                "mood": day.wellness.mood,
                "sleep_hours": day.wellness.sleep_hours,
                "steps": day.wellness.steps,
                "notes": day.wellness.notes,
            }
            if day.wellness is not None
            else None
        ),
        "updated_at": day.updated_at,
        "meta": _to_structured(day.meta),
    }
    return header


def totals_from_mapping(raw: dict[str, StructuredValue]) -> NutritionTotals:
    """Read totals from a mapping using on-disk or in-memory key names."""
    return NutritionTotals(
        calories_kcal=_lookup_number(raw, "calories_kcal") or 0.0,
        protein_g=_lookup_number(raw, "protein_g") or 0.0,
        fat_g=_lookup_number(raw, "fat_g") or 0.0,
        carbs_g=_lookup_number(raw, "carbs_g") or 0.0,
        sugar_g=_lookup_number(raw, "sugar_g"),
        fiber_g=_lookup_number(raw, "fiber_g"),
    )


def totals_to_mapping(totals: NutritionTotals) -> dict[str, StructuredValue]:
    """Return totals keyed by their on-disk names."""
    return {
        "kcal": totals.calories_kcal,
        "protein_g": totals.protein_g,
        "fat_g": totals.fat_g,
        "carbs_g": totals.carbs_g,
        "sugar_g": totals.sugar_g,
        "fiber_g": totals.fiber_g,
    }


def targets_from_mapping(raw: dict[str, StructuredValue]) -> NutritionTargets:
    """Read partial targets from a mapping."""
    return NutritionTargets(
        calories_kcal=_lookup_number(raw, "calories_kcal"),
        protein_g=_lookup_number(raw, "protein_g"),
        fat_g=_lookup_number(raw, "fat_g"),
        carbs_g=_lookup_number(raw, "carbs_g"),
        sugar_g=_lookup_number(raw, "sugar_g"),
        fiber_g=_lookup_number(raw, "fiber_g"),
    )


def render_summary(day: MealPlanDay) -> str:
    """Render the generated Markdown summary of a day."""
    lines: list[str] = []
    for section in day.sections:
        if not section.items:
            continue
        lines.append(f"## {section.name or section.id}")
        lines.extend(_render_item(item) for item in section.items)
        lines.append("")
    if not lines:
        lines.extend(["_No items planned._", ""])
    totals = day.totals
    lines.append("## Day total")
    lines.append(f"**Kcal:** {format_number(totals.calories_kcal)}")
    lines.append(f"**Protein:** {format_number(totals.protein_g)} g")
    lines.append(f"**Fat:** {format_number(totals.fat_g)} g")
    lines.append(f"**Carbs:** {format_number(totals.carbs_g)} g")
    if totals.sugar_g is not None:
        lines.append(f"**Sugar:** {format_number(totals.sugar_g)} g")
    if totals.fiber_g is not None:
        lines.append(f"**Fiber:** {format_number(totals.fiber_g)} g")
    return "\n".join(lines)


def _render_item(item: MealPlanItem) -> str:
    icon = _ITEM_ICONS.get(item.kind, "•")
    if item.kind == "recipe":
        servings = item.servings or 1
        label = "serving" if servings == 1 else "servings"
        return f"- {icon} {item.title} — {format_number(float(servings))} {label}"
    if item.quantity is None:
        return f"- {icon} {item.title}"
    unit = item.quantity_unit or "g"
    return f"- {icon} {item.title} — {format_number(float(item.quantity))} {unit}"


def _section_from_header(raw: dict[str, StructuredValue]) -> MealPlanSection:
    raw_items = raw.get("items")
    items = (
        [_item_from_header(entry) for entry in raw_items if isinstance(entry, dict)]
        if isinstance(raw_items, list)
        else []
    )
    return MealPlanSection(
        id=str(raw.get("id")),
        name=_to_text(raw.get("title") if "title" in raw else raw.get("name")),
        items=items,
    )


def _section_to_header(section: MealPlanSection) -> dict[str, StructuredValue]:
    return {
        "id": section.id,
        "title": section.name,
        "totals": totals_to_mapping(section.totals),
        "items": [_item_to_header(item) for item in section.items],
    }


def _item_from_header(raw: dict[str, StructuredValue]) -> MealPlanItem:
    kind: ItemKind = "recipe" if raw.get("type") == "recipe" else "product"
    raw_nutrition = raw.get("nutrition")
    raw_source = raw.get("source")
    source = None
    if isinstance(raw_source, dict):
        source_kind: ItemKind = (
            "recipe" if raw_source.get("kind") == "recipe" else "product"
        )
        source = ItemSource(
            kind=source_kind,
            slug=_to_text(raw_source.get("slug")),
            file_name=_to_text(raw_source.get("file_name")),
        )
    return MealPlanItem(
        kind=kind,
        ref=_to_text(raw.get("ref")) or "",
        title=_to_text(raw.get("title")) or "Item",
        nutrition=(
            totals_from_mapping(raw_nutrition)
            if isinstance(raw_nutrition, dict)
            else NutritionTotals()
        ),
        quantity=to_optional_number(raw.get("quantity")),
        quantity_unit=_to_text(raw.get("quantity_unit")),
        servings=to_optional_number(raw.get("servings")),
        portion_grams=to_optional_number(raw.get("portion_grams")),
        source=source,
    )


def _item_to_header(item: MealPlanItem) -> dict[str, StructuredValue]:
    return {
        "type": item.kind,
        "ref": item.ref,
        "title": item.title,
        "portion_grams": item.portion_grams,
        "quantity": item.quantity,
        "quantity_unit": item.quantity_unit,
        "servings": item.servings,
        "nutrition": totals_to_mapping(item.nutrition),
        "source": (
            {
                "kind": item.source.kind,
                "slug": item.source.slug,
                "file_name": item.source.file_name,
            }
            if item.source is not None
            else None
        ),
    }


def _targets_to_mapping(targets: NutritionTargets) -> dict[str, StructuredValue]:
    return {
        "kcal": targets.calories_kcal,
        "protein_g": targets.protein_g,
        "fat_g": targets.fat_g,
        "carbs_g": targets.carbs_g,
        "sugar_g": targets.sugar_g,
        "fiber_g": targets.fiber_g,
    }


def _lookup_number(raw: dict[str, StructuredValue], field_name: str) -> float | None:
    for key in _TOTALS_KEYS[field_name]:
        if key in raw:
            return to_optional_number(raw[key])
    return None


def to_optional_number(value: object) -> float | None:
    """Coerce a hand-edited value to a finite float, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _to_optional_int(value: object) -> int | None:
    number = to_optional_number(value)
    return None if number is None else int(number)


def _to_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return format_number(value)
    return None


def _to_structured(value: object) -> StructuredValue:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, dict):
        return {str(key): _to_structured(entry) for key, entry in value.items()}
    if isinstance(value, list | tuple):
        return [_to_structured(entry) for entry in value]
    return str(value)
