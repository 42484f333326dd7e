"""Shared test fixtures."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from meal_vault.config import Settings
from meal_vault.containers import AppContainer
from meal_vault.domain.library import ProductSummary, RecipeSummary
from meal_vault.domain.nutrition import NutritionTotals
from meal_vault.services.library import LibraryRepository, LibraryService
from meal_vault.services.meal_plans import DayStore, MealPlanService


@dataclass
class InMemoryDayStore(DayStore):
    """In-memory day store for tests."""

    files: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def read_day(self, date: str) -> str:
        if self.fail_reads:
            raise PermissionError(f"cannot read {date}")
        if date not in self.files:
            raise FileNotFoundError(date)
        return self.files[date]

    def write_day(self, date: str, content: str) -> None:
        if self.fail_writes:
            raise OSError(f"cannot write {date}")
        self.files[date] = content
        self.writes.append(date)

    def list_dates(self) -> list[str]:
        return sorted(self.files)


@dataclass
class InMemoryLibraryRepository(LibraryRepository):
    """In-memory library repository for tests."""

    products: dict[str, ProductSummary] = field(default_factory=dict)
    recipes: dict[str, RecipeSummary] = field(default_factory=dict)

    def get_product(self, slug: str) -> ProductSummary | None:
        return self.products.get(slug)

    def get_recipe(self, slug: str) -> RecipeSummary | None:
        return self.recipes.get(slug)


OATMEAL = ProductSummary(
    slug="oatmeal",
    title="Oatmeal",
    nutrition_per_portion=NutritionTotals(
        calories_kcal=200,
        protein_g=7,
        fat_g=4,
        carbs_g=34,
        sugar_g=2,
        fiber_g=5,
    ),
    portion_grams=100,
    meal_time="breakfast",
    file_name="oatmeal.md",
)

CHICKEN_SOUP = RecipeSummary(
    slug="chicken-soup",
    title="Chicken soup",
    nutrition_per_serving=NutritionTotals(
        calories_kcal=320,
        protein_g=28,
        fat_g=12,
        carbs_g=24,
    ),
    servings=4,
    file_name="chicken-soup.md",
)


@pytest.fixture
def day_store() -> InMemoryDayStore:
    return InMemoryDayStore()


@pytest.fixture
def library_repository() -> InMemoryLibraryRepository:
    return InMemoryLibraryRepository(
        products={OATMEAL.slug: OATMEAL},
        recipes={CHICKEN_SOUP.slug: CHICKEN_SOUP},
    )


@pytest.fixture
def library_service(library_repository: InMemoryLibraryRepository) -> LibraryService:
    return LibraryService(library_repository)


@pytest.fixture
def meal_plan_service(
    day_store: InMemoryDayStore, library_service: LibraryService
) -> MealPlanService:
    return MealPlanService(store=day_store, library_service=library_service)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(vault_path=tmp_path / "vault")


@pytest.fixture
def container(
    settings: Settings,
    library_service: LibraryService,
    meal_plan_service: MealPlanService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        library_service=library_service,
        meal_plan_service=meal_plan_service,
    )
