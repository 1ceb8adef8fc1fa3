"""Catalog of FatSecret REST endpoints exposed as tools.

Parameters are passed through opaquely. The only rewrites are the ones the
API insists on: ISO dates become days since the Unix epoch, and a few
recipe filters use dotted names upstream.

Each endpoint lists the parameters callers most need in its input schema.
Upstream accepts more than that (paging, localisation, etc.), so the schemas
leave additional properties open.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from fatsecret_client.api.base import AuthMode
from fatsecret_client.exceptions import FatSecretValidationError

DATE_PARAMS = frozenset({"date", "from_date", "to_date"})
MEALS = ("breakfast", "lunch", "dinner", "other")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_EPOCH = date(1970, 1, 1)


def date_to_days(value: str) -> int:
    """Convert YYYY-MM-DD to days since 1970-01-01."""
    if not _ISO_DATE.match(value):
        raise FatSecretValidationError(f"Expected a YYYY-MM-DD date, got {value!r}", field="date")
    try:
        return (date.fromisoformat(value) - _EPOCH).days
    except ValueError as e:
        raise FatSecretValidationError(f"Invalid date: {value!r}", field="date") from e


@dataclass(frozen=True, slots=True)
class Param:
    """One documented tool argument."""

    name: str
    type: str
    description: str
    required: bool = True
    enum: tuple[str, ...] = ()

    def schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema


def input_schema_for(params: tuple[Param, ...] = ()) -> dict[str, Any]:
    """JSON Schema object for a tool's arguments."""
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {param.name: param.schema() for param in params},
        "additionalProperties": True,
    }
    required = [param.name for param in params if param.required]
    if required:
        schema["required"] = required
    return schema


@dataclass(frozen=True, slots=True)
class Endpoint:
    """One remote operation exposed as a tool."""

    name: str
    method: str
    path: str
    auth: AuthMode
    description: str
    read_only: bool = True
    renames: dict[str, str] = field(default_factory=dict)
    params: tuple[Param, ...] = ()

    @property
    def input_schema(self) -> dict[str, Any]:
        return input_schema_for(self.params)

    def build_params(self, arguments: dict[str, Any]) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for key, value in arguments.items():
            if value is None:
                continue
            if key in DATE_PARAMS and isinstance(value, str):
                value = date_to_days(value)
            params[self.renames.get(key, key)] = value
        return params


def _id(name: str, description: str, *, required: bool = True) -> Param:
    return Param(name, "integer", description, required)


def _text(name: str, description: str, *, required: bool = True) -> Param:
    return Param(name, "string", description, required)


def _number(name: str, description: str, *, required: bool = True) -> Param:
    return Param(name, "number", description, required)


def _date(
    name: str = "date",
    description: str = "Date in YYYY-MM-DD format (default today)",
    *,
    required: bool = False,
) -> Param:
    return Param(name, "string", description, required)


def _meal(description: str = "Meal type", *, required: bool = True) -> Param:
    return Param("meal", "string", description, required, MEALS)


_MONTH = _date(description="Any date within the target month (YYYY-MM-DD)")

_RANGE_FILTERS = (
    "calories",
    "carb_percentage",
    "protein_percentage",
    "fat_percentage",
    "prep_time",
)

_PUBLIC = AuthMode.PUBLIC
_PROFILE = AuthMode.PROFILE

ENDPOINTS: tuple[Endpoint, ...] = (
    # Foods
    Endpoint(
        "search_foods", "GET", "/foods/search/v5", _PUBLIC,
        "Search the FatSecret food database. Returns food names, descriptions, "
        "and basic nutrition info.",
        params=(_text("search_expression", "Search query for foods"),),
    ),
    Endpoint(
        "get_food", "GET", "/food/v5", _PUBLIC,
        "Get detailed nutritional information for a specific food by ID.",
        params=(_id("food_id", "Food ID"),),
    ),
    Endpoint(
        "find_food_by_barcode", "GET", "/food/barcode/find-by-id/v2", _PUBLIC,
        "Find food by barcode (GTIN-13). Premier exclusive.",
        params=(_text("barcode", "GTIN-13 barcode number"),),
    ),
    Endpoint(
        "autocomplete_foods", "GET", "/food/autocomplete/v2", _PUBLIC,
        "Get autocomplete suggestions for a partial food search expression. Premier exclusive.",
        params=(_text("expression", "Partial search expression"),),
    ),
    # Recipes
    Endpoint(
        "search_recipes", "GET", "/recipes/search/v3", _PUBLIC,
        "Search recipes with optional filters for calories, macros, prep time, "
        "and recipe types.",
        renames={
            f"{name}_{bound}": f"{name}.{bound}"
            for name in _RANGE_FILTERS
            for bound in ("from", "to")
        },
        params=(
            _text("search_expression", "Search query for recipes", required=False),
            _number("calories_from", "Minimum calories", required=False),
            _number("calories_to", "Maximum calories", required=False),
            _number("prep_time_from", "Minimum preparation time (minutes)", required=False),
            _number("prep_time_to", "Maximum preparation time (minutes)", required=False),
        ),
    ),
    Endpoint(
        "get_recipe", "GET", "/recipe/v2", _PUBLIC,
        "Get detailed recipe information by ID including ingredients, directions, "
        "and nutrition.",
        params=(_id("recipe_id", "Recipe ID"),),
    ),
    # Reference data
    Endpoint(
        "get_food_categories", "GET", "/food-categories/v2", _PUBLIC,
        "Get the full list of food categories. Premier exclusive.",
    ),
    Endpoint(
        "get_food_sub_categories", "GET", "/food-sub-categories/v2", _PUBLIC,
        "Get food sub categories for a given food category. Premier exclusive.",
        params=(_id("food_category_id", "Food category ID"),),
    ),
    Endpoint(
        "get_brands", "GET", "/brands/v2", _PUBLIC,
        "Get the list of food brands, optionally filtered by starting letter and type.",
        params=(_text("starts_with", "First letter of the brand name", required=False),),
    ),
    Endpoint(
        "get_recipe_types", "GET", "/recipe-types/v2", _PUBLIC,
        "Get the full list of supported recipe type names.",
    ),
    # Food diary
    Endpoint(
        "get_food_entries", "GET", "/food-entries/v2", _PROFILE,
        "Get food diary entries for a date or a specific entry by ID.",
        params=(
            _date(description="Date in YYYY-MM-DD (required if food_entry_id not specified)"),
            _id("food_entry_id", "Food entry ID", required=False),
        ),
    ),
    Endpoint(
        "get_food_entries_month", "GET", "/food-entries/month/v2", _PROFILE,
        "Get daily nutrition summary for a month.",
        params=(_MONTH,),
    ),
    Endpoint(
        "create_food_entry", "POST", "/food-entries/v1", _PROFILE,
        "Add a food diary entry. Requires food_id, serving_id, and meal type.",
        read_only=False,
        params=(
            _id("food_id", "Food ID"),
            _text("food_entry_name", "Name for the food entry"),
            _id("serving_id", "Serving size ID"),
            _number("number_of_units", "Number of serving units"),
            _meal(),
            _date(),
        ),
    ),
    Endpoint(
        "edit_food_entry", "PUT", "/food-entries/v1", _PROFILE,
        "Edit an existing food diary entry. Cannot change the date.",
        read_only=False,
        params=(_id("food_entry_id", "Food entry ID to edit"), _meal(required=False)),
    ),
    Endpoint(
        "delete_food_entry", "DELETE", "/food-entries/v1", _PROFILE,
        "Delete a food diary entry by ID.",
        read_only=False,
        params=(_id("food_entry_id", "Food entry ID to delete"),),
    ),
    Endpoint(
        "copy_food_entries", "POST", "/food-entries/copy/v1", _PROFILE,
        "Copy food entries from one date to another, optionally filtered by meal.",
        read_only=False,
        params=(
            _date("from_date", "Source date YYYY-MM-DD", required=True),
            _date("to_date", "Target date YYYY-MM-DD", required=True),
            _meal(required=False),
        ),
    ),
    Endpoint(
        "copy_saved_meal_entries", "POST", "/food-entries/copy/saved-meal/v1", _PROFILE,
        "Copy entries from a saved meal to a meal on a specific date.",
        read_only=False,
        params=(_id("saved_meal_id", "Saved meal ID to copy"), _meal(), _date()),
    ),
    # Favorites
    Endpoint(
        "get_favorite_foods", "GET", "/food/favorites/v2", _PROFILE,
        "Get the user's favorite foods.",
    ),
    Endpoint(
        "delete_favorite_food", "POST", "/food/favorite/v1", _PROFILE,
        "Remove a food from the user's favorites.",
        read_only=False,
        params=(_id("food_id", "Food ID to remove from favorites"),),
    ),
    Endpoint(
        "get_most_eaten_foods", "GET", "/food/most-eaten/v2", _PROFILE,
        "Get the user's most eaten foods, optionally filtered by meal.",
        params=(_meal(required=False),),
    ),
    Endpoint(
        "get_recently_eaten_foods", "GET", "/food/recently-eaten/v2", _PROFILE,
        "Get the user's recently eaten foods, optionally filtered by meal.",
        params=(_meal(required=False),),
    ),
    Endpoint(
        "get_favorite_recipes", "GET", "/recipe/favorites/v2", _PROFILE,
        "Get the user's favorite recipes.",
    ),
    Endpoint(
        "add_favorite_recipe", "POST", "/recipe/favorites/v1", _PROFILE,
        "Add a recipe to the user's favorites.",
        read_only=False,
        params=(_id("recipe_id", "Recipe ID to add to favorites"),),
    ),
    Endpoint(
        "delete_favorite_recipe", "DELETE", "/recipe/favorites/v1", _PROFILE,
        "Remove a recipe from the user's favorites.",
        read_only=False,
        params=(_id("recipe_id", "Recipe ID to remove from favorites"),),
    ),
    # Saved meals
    Endpoint(
        "get_saved_meals", "GET", "/saved-meals/v2", _PROFILE,
        "Get the user's saved meals, optionally filtered by meal type.",
        params=(_meal("Filter by meal type", required=False),),
    ),
    Endpoint(
        "create_saved_meal", "POST", "/saved-meals/v1", _PROFILE,
        "Create a new saved meal.",
        read_only=False,
        params=(_text("saved_meal_name", "Meal name"),),
    ),
    Endpoint(
        "edit_saved_meal", "PUT", "/saved-meals/v1", _PROFILE,
        "Edit a saved meal name, description, or associated meals.",
        read_only=False,
        params=(_id("saved_meal_id", "Saved meal ID"),),
    ),
    Endpoint(
        "delete_saved_meal", "DELETE", "/saved-meals/v1", _PROFILE,
        "Delete a saved meal.",
        read_only=False,
        params=(_id("saved_meal_id", "Saved meal ID to delete"),),
    ),
    Endpoint(
        "get_saved_meal_items", "GET", "/saved-meals/item/v2", _PROFILE,
        "Get all food items in a saved meal.",
        params=(_id("saved_meal_id", "Saved meal ID"),),
    ),
    Endpoint(
        "add_saved_meal_item", "POST", "/saved-meals/item/v1", _PROFILE,
        "Add a food item to a saved meal.",
        read_only=False,
        params=(
            _id("saved_meal_id", "Saved meal ID"),
            _id("food_id", "Food ID to add"),
            _text("saved_meal_item_name", "Item name"),
            _id("serving_id", "Serving ID"),
            _number("number_of_units", "Number of serving units"),
        ),
    ),
    Endpoint(
        "edit_saved_meal_item", "PUT", "/saved-meals/item/v1", _PROFILE,
        "Edit a food item in a saved meal (name or units).",
        read_only=False,
        params=(_id("saved_meal_item_id", "Saved meal item ID"),),
    ),
    Endpoint(
        "delete_saved_meal_item", "DELETE", "/saved-meals/item/v1", _PROFILE,
        "Remove a food item from a saved meal.",
        read_only=False,
        params=(_id("saved_meal_item_id", "Saved meal item ID to delete"),),
    ),
    # Weight
    Endpoint(
        "update_weight", "POST", "/weight/v1", _PROFILE,
        "Record the user's weight for a date.",
        read_only=False,
        params=(_number("current_weight_kg", "Current weight in kg"), _date()),
    ),
    Endpoint(
        "get_weight_month", "GET", "/weight/month/v2", _PROFILE,
        "Get the user's weight entries for a month.",
        params=(_MONTH,),
    ),
    # Exercise
    Endpoint(
        "get_exercises", "GET", "/exercises/v2", _PROFILE,
        "Get the full list of supported exercise types and their IDs.",
    ),
    Endpoint(
        "edit_exercise_entries", "PUT", "/exercise-entries/v1", _PROFILE,
        "Shift exercise time between activities for a date.",
        read_only=False,
        params=(
            _id("shift_to_id", "Exercise ID to shift time TO"),
            _id("shift_from_id", "Exercise ID to shift time FROM"),
            _id("minutes", "Minutes to shift"),
            _date(),
        ),
    ),
    Endpoint(
        "get_exercise_entries_month", "GET", "/exercise-entries/month/v2", _PROFILE,
        "Get daily calories expended from exercise for a month.",
        params=(_MONTH,),
    ),
    Endpoint(
        "save_exercise_template", "POST", "/exercise-entries/day/v1", _PROFILE,
        "Save the current day's exercise entries as a template for days of the week.",
        read_only=False,
        params=(
            _id("days", "Days of week as bit flags (Sun=bit 1, Sat=bit 7), as an integer"),
            _date(),
        ),
    ),
    # Profile
    Endpoint(
        "get_profile", "GET", "/profile/v1", _PROFILE,
        "Get profile status information for the authenticated user.",
    ),
    Endpoint(
        "create_food", "POST", "/food/v2", _PROFILE,
        "Create a custom food with nutrition info. Premier exclusive.",
        read_only=False,
        params=(
            _text("brand_name", "Brand name"),
            _text("food_name", "Food name"),
            _text("serving_size", 'Serving size description (e.g. "1 slice")'),
            _number("calories", "Calories (kcal)"),
            _number("fat", "Total fat (g)"),
            _number("carbohydrate", "Total carbohydrate (g)"),
            _number("protein", "Protein (g)"),
        ),
    ),
)

ENDPOINTS_BY_NAME: dict[str, Endpoint] = {endpoint.name: endpoint for endpoint in ENDPOINTS}
