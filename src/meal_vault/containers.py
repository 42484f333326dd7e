"""Dependency container wiring for the application."""

from dataclasses import dataclass

from meal_vault.adapters.file_day_store import FileDayStore
from meal_vault.adapters.file_library_repository import FileLibraryRepository
from meal_vault.config import Settings
from meal_vault.services.library import LibraryService
from meal_vault.services.meal_plans import MealPlanService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    library_service: LibraryService
    meal_plan_service: MealPlanService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    vault_path = resolved_settings.vault_path
    library_service = LibraryService(
        FileLibraryRepository(
            root=vault_path,
            products_directory=resolved_settings.products_directory,
            recipes_directory=resolved_settings.recipes_directory,
        )
    )
    meal_plan_service = MealPlanService(
        store=FileDayStore(
            root=vault_path, directory_name=resolved_settings.days_directory
        ),
        library_service=library_service,
    )

    return AppContainer(
        settings=resolved_settings,
        library_service=library_service,
        meal_plan_service=meal_plan_service,
    )
