"""Tests for day document mapping."""

from meal_vault.domain.meal_plans import (
    ItemSource,
    MealPlanItem,
    Wellness,
    build_empty_day,
    ensure_section,
    recalculate_day,
)
from meal_vault.domain.nutrition import NutritionTargets, NutritionTotals
from meal_vault.formats.front_matter import decode
from meal_vault.services.day_documents import (
    day_from_document,
    day_from_header,
    day_to_document,
    render_summary,
    totals_from_mapping,
)


def _sample_day():
    day = build_empty_day("2024-03-01", updated_at="2024-03-01T08:00:00.000Z")
    ensure_section(day, "breakfast").items.append(
        MealPlanItem(
            kind="product",
            ref="product:oatmeal",
            title="Oatmeal",
            nutrition=NutritionTotals(150, 5, 3, 27, 2, 4),
            quantity=150,
            quantity_unit="g",
            portion_grams=100,
            source=ItemSource(kind="product", slug="oatmeal", file_name="oatmeal.md"),
        )
    )
    ensure_section(day, "dinner").items.append(
        MealPlanItem(
            kind="recipe",
            ref="recipe:soup",
            title="Soup",
            nutrition=NutritionTotals(640, 56, 24, 48),
            servings=2,
            source=ItemSource(kind="recipe", slug="soup"),
        )
    )
    day.targets_snapshot = NutritionTargets(calories_kcal=2000, protein_g=125)
    day.wellness = Wellness(mood="good", sleep_hours=7.5, steps=9000, notes="Walked")
    day.meta = {"weight_kg": 71.4}
    recalculate_day(day)
    return day


def test_day_document_round_trip() -> None:
    day = _sample_day()

    restored, body = day_from_document(day_to_document(day, ""), day.date)

    assert restored == day
    assert body.startswith("# Plan for 2024-03-01")


def test_header_uses_snake_case_keys() -> None:
    document = decode(day_to_document(_sample_day(), ""))
    header = document.header

    assert list(header) == [
        "date",
        "sections",
        "totals",
        "targets_snapshot",
        "wellness",
        "updated_at",
        "meta",
    ]
    breakfast = header["sections"][0]
    assert breakfast["id"] == "breakfast"
    assert breakfast["title"] is None
    item = breakfast["items"][0]
    assert item["type"] == "product"
    assert item["ref"] == "product:oatmeal"
    assert item["nutrition"]["kcal"] == 150
    assert item["source"] == {
        "kind": "product",
        "slug": "oatmeal",
        "file_name": "oatmeal.md",
    }
    assert header["totals"]["kcal"] == 790
    assert header["wellness"]["sleep_hours"] == 7.5


def test_summary_block_lists_items_and_totals() -> None:
    summary = render_summary(_sample_day())

    assert "## breakfast" in summary
    assert "- 🥣 Oatmeal — 150 g" in summary
    assert "- 🍲 Soup — 2 servings" in summary
    assert "## lunch" not in summary
    assert "## Day total\n**Kcal:** 790" in summary


def test_summary_for_empty_day() -> None:
    summary = render_summary(build_empty_day("2024-03-01"))

    assert summary.startswith("_No items planned._")
    assert "**Kcal:** 0" in summary


def test_manual_notes_survive_regeneration() -> None:
    day = _sample_day()
    original = day_to_document(day, "")
    _, body = day_from_document(original, day.date)
    edited_body = f"{body}\n\nFelt hungry after lunch."

    regenerated = day_to_document(day, edited_body)

    _, new_body = day_from_document(regenerated, day.date)
    assert new_body.startswith("# Plan for 2024-03-01")
    assert new_body.endswith("Felt hungry after lunch.")
    assert new_body.count("<!--AUTO:SUMMARY START-->") == 1


def test_hand_edited_totals_are_recomputed() -> None:
    header = {
        "date": "2024-03-01",
        "sections": [
            {
                "id": "lunch",
                "title": "Lunch",
                "totals": {"kcal": 9999},
                "items": [
                    {"type": "product", "title": "Rice", "nutrition": {"kcal": "130,5"}},
                    {"type": "recipe", "title": "Curry", "nutrition": {"kcal": 400}},
                    "not a mapping",
                ],
            },
            {"title": "no id"},
        ],
        "totals": {"kcal": 1},
    }

    day = day_from_header(header, "2024-03-01")

    assert [section.id for section in day.sections] == ["lunch"]
    assert day.sections[0].name == "Lunch"
    assert [item.kind for item in day.sections[0].items] == ["product", "recipe"]
    assert day.sections[0].totals.calories_kcal == 530.5
    assert day.totals.calories_kcal == 530.5


def test_header_without_sections_gets_default_sections() -> None:
    day = day_from_header({"updated_at": "2024-03-01T08:00:00.000Z"}, "2024-03-01")

    assert [section.id for section in day.sections] == [
        "breakfast",
        "lunch",
        "snack",
        "dinner",
    ]
    assert day.updated_at == "2024-03-01T08:00:00.000Z"


def test_totals_accept_alternate_key_names() -> None:
    totals = totals_from_mapping({"caloriesKcal": 10, "proteinG": "2.5", "fat": 1})

    assert totals == NutritionTotals(10, 2.5, 1, 0)


def test_totals_ignore_numbers_outside_float_range() -> None:
    totals = totals_from_mapping({"kcal": 10**400, "protein_g": "1e400", "fat_g": 3})

    assert totals == NutritionTotals(0, 0, 3, 0)
