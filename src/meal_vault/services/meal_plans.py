"""Meal plan day repository service."""

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol

from meal_vault.domain.errors import DayConflictError, DayNotFoundError
from meal_vault.domain.library import ProductSummary, RecipeSummary
from meal_vault.domain.meal_plans import (
    ItemSource,
    MealPlanDay,
    MealPlanItem,
    Wellness,
    build_empty_day,
    ensure_section,
    get_item,
    recalculate_day,
)
from meal_vault.domain.nutrition import (
    DEFAULT_PORTION_GRAMS,
    NutritionTargets,
    normalize_quantity,
    scale_factor,
    scale_totals,
)
from meal_vault.formats.auto_block import strip_auto_block
from meal_vault.formats.front_matter import decode
from meal_vault.services.day_documents import (
    SUMMARY_MARKER,
    day_from_document,
    day_to_document,
)
from meal_vault.services.library import LibraryService

DEFAULT_PRODUCT_SECTION = "snack"
DEFAULT_RECIPE_SECTION = "snack"

_FALLBACK_DATE_FORMATS = ("%d.%m.%Y", "%Y/%m/%d", "%m/%d/%Y")

_logger = logging.getLogger(__name__)

DayOperation = Callable[[MealPlanDay], bool]


class DayStore(Protocol):
    """Persistence interface for day documents."""

    def read_day(self, date: str) -> str:
        """Return the document text, raising FileNotFoundError when absent."""

    def write_day(self, date: str, content: str) -> None:
        """Replace the document for a date."""

    def list_dates(self) -> list[str]:
        """Return the dates that have a stored document."""


@dataclass
class MealPlanService:
    """Loads, mutates and persists meal plan days."""

    store: DayStore
    library_service: LibraryService
    _locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, init=False
    )

    async def load_day(self, value: str | date | None) -> MealPlanDay:
        """Return the day for a date, creating an empty one when missing."""
        iso_date = normalize_date(value)
        async with self._lock(iso_date):
            try:
                source = await asyncio.to_thread(self.store.read_day, iso_date)
            except FileNotFoundError:
                day = build_empty_day(iso_date, updated_at=_now_iso())
                await self._write(day, "")
                _logger.info("Created meal plan for %s", iso_date)
                return day
        day, _, _ = _parse_day(source, iso_date)
        return day

    async def require_day(self, value: str | date | None) -> MealPlanDay:
        """Return the stored day or raise ``DayNotFoundError``."""
        iso_date = normalize_date(value)
        try:
            source = await asyncio.to_thread(self.store.read_day, iso_date)
        except FileNotFoundError as exc:
            raise DayNotFoundError(iso_date) from exc
        day, _, _ = _parse_day(source, iso_date)
        return day

    async def load_notes(self, value: str | date | None) -> str:
        """Return the hand-written body of a day without the summary block."""
        iso_date = normalize_date(value)
        try:
            source = await asyncio.to_thread(self.store.read_day, iso_date)
        except FileNotFoundError:
            return ""
        return strip_auto_block(decode(source).body, SUMMARY_MARKER)

    async def load_history(self, limit: int = 7) -> list[MealPlanDay]:
        """Return the most recent stored days, newest first."""
        if limit <= 0:
            return []
        dates = await asyncio.to_thread(self.store.list_dates)
        return [
            await self.load_day(iso_date)
            for iso_date in sorted(dates, reverse=True)[:limit]
        ]

    async def mutate(
        self,
        value: str | date | None,
        operation: DayOperation,
        *,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Run a load, modify, recompute and write cycle for one day.

        ``operation`` returns False when it could not apply (for example a
        stale section or item index); the day is then returned unchanged.
        """
        iso_date = normalize_date(value)
        async with self._lock(iso_date):
            day, body, is_new = await self._read_or_rebuild(iso_date)
            if expected_updated_at is not None and (
                expected_updated_at != day.updated_at
            ):
                raise DayConflictError(iso_date, expected_updated_at, day.updated_at)
            changed = operation(day)
            if not changed:
                _logger.info("Meal plan %s left unchanged", iso_date)
                if is_new:
                    await self._write(day, body)
                return day
            recalculate_day(day)
            day.updated_at = _now_iso()
            await self._write(day, body)
            return day

    async def add_product(  # noqa: PLR0913
        self,
        value: str | date | None,
        product: ProductSummary,
        *,
        section_id: str | None = None,
        section_name: str | None = None,
        quantity: float | None = None,
        unit: str | None = None,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Add a product portion to a section."""
        item = build_product_item(product, quantity, unit)
        target = section_id or product.meal_time or DEFAULT_PRODUCT_SECTION

        def operation(day: MealPlanDay) -> bool:
            ensure_section(day, target, section_name).items.append(item)
            return True

        return await self.mutate(
            value, operation, expected_updated_at=expected_updated_at
        )

    async def add_recipe(  # noqa: PLR0913
        self,
        value: str | date | None,
        recipe: RecipeSummary,
        *,
        section_id: str | None = None,
        section_name: str | None = None,
        servings: float | None = None,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Add recipe servings to a section."""
        item = build_recipe_item(recipe, servings)
        target = section_id or DEFAULT_RECIPE_SECTION

        def operation(day: MealPlanDay) -> bool:
            ensure_section(day, target, section_name).items.append(item)
            return True

        return await self.mutate(
            value, operation, expected_updated_at=expected_updated_at
        )

    async def add_product_by_slug(  # noqa: PLR0913
        self,
        value: str | date | None,
        slug: str,
        *,
        section_id: str | None = None,
        section_name: str | None = None,
        quantity: float | None = None,
        unit: str | None = None,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Resolve a product from the library and add it."""
        product = self.library_service.require_product(slug)
        return await self.add_product(
            value,
            product,
            section_id=section_id,
            section_name=section_name,
            quantity=quantity,
            unit=unit,
            expected_updated_at=expected_updated_at,
        )

    async def add_recipe_by_slug(  # noqa: PLR0913
        self,
        value: str | date | None,
        slug: str,
        *,
        section_id: str | None = None,
        section_name: str | None = None,
        servings: float | None = None,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Resolve a recipe from the library and add it."""
        recipe = self.library_service.require_recipe(slug)
        return await self.add_recipe(
            value,
            recipe,
            section_id=section_id,
            section_name=section_name,
            servings=servings,
            expected_updated_at=expected_updated_at,
        )

    async def remove_item(
        self,
        value: str | date | None,
        section_id: str,
        index: int,
        *,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Remove an item by section and position."""

        def operation(day: MealPlanDay) -> bool:
            found = get_item(day, section_id, index)
            if found is None:
                return False
            section, _ = found
            del section.items[index]
            return True

        return await self.mutate(
            value, operation, expected_updated_at=expected_updated_at
        )

    async def update_item(  # noqa: PLR0913
        self,
        value: str | date | None,
        section_id: str,
        index: int,
        *,
        quantity: float | None = None,
        unit: str | None = None,
        servings: float | None = None,
        expected_updated_at: str | None = None,
    ) -> MealPlanDay:
        """Rescale an item to a new quantity or servings count."""

        def operation(day: MealPlanDay) -> bool:
            found = get_item(day, section_id, index)
            if found is None:
                return False
            section, item = found
            if item.kind == "recipe":
                section.items[index] = self._rescale_recipe(item, servings)
            else:
                section.items[index] = self._rescale_product(item, quantity, unit)
            return True

        return await self.mutate(
            value, operation, expected_updated_at=expected_updated_at
        )

    async def update_meta(
        self, value: str | date | None, *, weight_kg: float | None
    ) -> MealPlanDay:
        """Record or clear the body weight for a day."""

        def operation(day: MealPlanDay) -> bool:
            if weight_kg is None or weight_kg <= 0:
                day.meta.pop("weight_kg", None)
            else:
                day.meta["weight_kg"] = round(weight_kg, 1)
            return True

        return await self.mutate(value, operation)

    async def update_wellness(
        self, value: str | date | None, wellness: Wellness | None
    ) -> MealPlanDay:
        """Replace the wellness notes of a day."""

        def operation(day: MealPlanDay) -> bool:
            day.wellness = wellness
            return True

        return await self.mutate(value, operation)

    async def set_targets_snapshot(
        self, value: str | date | None, targets: NutritionTargets | None
    ) -> MealPlanDay:
        """Store the nutrition targets that applied on a day."""

        def operation(day: MealPlanDay) -> bool:
            day.targets_snapshot = targets
            return True

        return await self.mutate(value, operation)

    def _rescale_product(
        self, item: MealPlanItem, quantity: float | None, unit: str | None
    ) -> MealPlanItem:
        requested = quantity if quantity is not None else item.quantity
        requested_unit = unit or item.quantity_unit
        product = self.library_service.find_product(
            item.source.slug if item.source else None
        )
        if product is not None:
            return build_product_item(product, requested, requested_unit)
        grams, normalized_unit = normalize_quantity(
            requested, requested_unit, item.portion_grams
        )
        reference = (
            item.quantity
            if item.quantity is not None and item.quantity > 0
            else item.portion_grams
        )
        return replace(
            item,
            quantity=grams,
            quantity_unit=normalized_unit,
            nutrition=scale_totals(item.nutrition, scale_factor(grams, reference)),
        )

    def _rescale_recipe(
        self, item: MealPlanItem, servings: float | None
    ) -> MealPlanItem:
        requested = servings if servings is not None else item.servings
        recipe = self.library_service.find_recipe(
            item.source.slug if item.source else None
        )
        if recipe is not None:
            return build_recipe_item(recipe, requested)
        count = requested if requested is not None and requested > 0 else 1
        return replace(
            item,
            servings=count,
            nutrition=scale_totals(item.nutrition, scale_factor(count, item.servings)),
        )

    async def _read_or_rebuild(self, iso_date: str) -> tuple[MealPlanDay, str, bool]:
        try:
            source = await asyncio.to_thread(self.store.read_day, iso_date)
        except FileNotFoundError:
            return build_empty_day(iso_date), "", True
        except (OSError, ValueError) as exc:
            _logger.warning(
                "Rebuilding meal plan %s after read failure: %s", iso_date, exc
            )
            return build_empty_day(iso_date), "", True
        return _parse_day(source, iso_date)

    async def _write(self, day: MealPlanDay, body: str) -> None:
        content = day_to_document(day, body)
        await asyncio.to_thread(self.store.write_day, day.date, content)

    def _lock(self, iso_date: str) -> asyncio.Lock:
        # Entries vanish once no coroutine holds or awaits the lock.
        lock = self._locks.get(iso_date)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[iso_date] = lock
        return lock


def build_product_item(
    product: ProductSummary, quantity: float | None, unit: str | None
) -> MealPlanItem:
    """Create an item for a product portion scaled to the requested amount."""
    grams, normalized_unit = normalize_quantity(quantity, unit, product.portion_grams)
    reference = (
        product.portion_grams
        if product.portion_grams is not None and product.portion_grams > 0
        else DEFAULT_PORTION_GRAMS
    )
    return MealPlanItem(
        kind="product",
        ref=f"product:{product.slug}",
        title=product.title,
        nutrition=scale_totals(
            product.nutrition_per_portion, scale_factor(grams, reference)
        ),
        quantity=grams,
        quantity_unit=normalized_unit,
        portion_grams=reference,
        source=ItemSource(
            kind="product", slug=product.slug, file_name=product.file_name
        ),
    )


def build_recipe_item(recipe: RecipeSummary, servings: float | None) -> MealPlanItem:
    """Create an item for a number of recipe servings."""
    count = servings if servings is not None and servings > 0 else 1
    return MealPlanItem(
        kind="recipe",
        ref=f"recipe:{recipe.slug}",
        title=recipe.title,
        nutrition=scale_totals(recipe.nutrition_per_serving, scale_factor(count, 1)),
        servings=count,
        source=ItemSource(kind="recipe", slug=recipe.slug, file_name=recipe.file_name),
    )


def _parse_day(source: str, iso_date: str) -> tuple[MealPlanDay, str, bool]:
    """Decode a stored day; the flag is True when the header had to be dropped."""
    try:
        day, body = day_from_document(source, iso_date)
    except (TypeError, ValueError, ArithmeticError) as exc:
        _logger.warning("Rebuilding corrupt meal plan %s: %s", iso_date, exc)
        return build_empty_day(iso_date), decode(source).body, True
    return day, body, False


def normalize_date(value: str | date | None) -> str:
    """Return ``YYYY-MM-DD`` for a date-like value, defaulting to today."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = (value or "").strip()
    if text:
        try:
            return datetime.fromisoformat(text).date().isoformat()
        except ValueError:
            pass
        for date_format in _FALLBACK_DATE_FORMATS:
            try:
                return datetime.strptime(text, date_format).date().isoformat()
            except ValueError:
                continue
        _logger.warning("Unparseable date %r, using today", text)
    return datetime.now(tz=UTC).date().isoformat()


def _now_iso() -> str:
    return (
        datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )
