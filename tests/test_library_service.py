"""Tests for library lookups."""

import pytest

from meal_vault.domain.errors import LibraryItemNotFoundError
from meal_vault.services.library import LibraryService
from tests.conftest import CHICKEN_SOUP, OATMEAL


def test_find_returns_known_items(library_service: LibraryService) -> None:
    assert library_service.find_product("oatmeal") == OATMEAL
    assert library_service.find_recipe("chicken-soup") == CHICKEN_SOUP


def test_find_ignores_empty_or_unknown_slugs(library_service: LibraryService) -> None:
    assert library_service.find_product(None) is None
    assert library_service.find_product("") is None
    assert library_service.find_recipe("unknown") is None


def test_require_raises_for_unknown_slug(library_service: LibraryService) -> None:
    with pytest.raises(LibraryItemNotFoundError) as exc_info:
        library_service.require_recipe("unknown")

    assert exc_info.value.kind == "recipe"
    assert exc_info.value.slug == "unknown"
