"""ASGI entrypoint for the meal vault API."""

from meal_vault.api.app import create_app
from meal_vault.containers import build_container

app = create_app(build_container())
