"""Pydantic models for meal plan API payloads."""

from pydantic import BaseModel, Field, model_validator


class AddEntryRequest(BaseModel):
    """Request to place a product or recipe into a day."""

    date: str | None = None
    section_id: str | None = None
    section_name: str | None = None
    product_slug: str | None = None
    recipe_slug: str | None = None
    quantity: float | None = None
    unit: str | None = None
    servings: float | None = None
    expected_updated_at: str | None = None

    @model_validator(mode="after")
    def _check_single_reference(self) -> "AddEntryRequest":
        if bool(self.product_slug) == bool(self.recipe_slug):
            raise ValueError("Provide exactly one of product_slug or recipe_slug")
        return self


class UpdateItemRequest(BaseModel):
    """Request to rescale an existing item."""

    quantity: float | None = None
    unit: str | None = None
    servings: float | None = None
    expected_updated_at: str | None = None


class UpdateMetaRequest(BaseModel):
    """Request to record the body weight of a day."""

    date: str | None = None
    weight_kg: float | None = Field(default=None, ge=0)


class WellnessRequest(BaseModel):
    """Wellness notes for a day."""

    date: str | None = None
    mood: str | None = None
    sleep_hours: float | None = Field(default=None, ge=0)
    steps: int | None = Field(default=None, ge=0)
    notes: str | None = None


class TargetsRequest(BaseModel):
    """Nutrition targets captured for a day."""

    date: str | None = None
    calories_kcal: float | None = None
    protein_g: float | None = None
    fat_g: float | None = None
    carbs_g: float | None = None
    sugar_g: float | None = None
    fiber_g: float | None = None
