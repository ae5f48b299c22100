"""Exercise catalog loader and offline validator."""

from .loader import CatalogLoader, load_catalog, load_test_cases
from .models import Catalog, Exercise, ExerciseOutcome, ValidateOptions
from .validator import select_exercises, validate_catalog, validate_exercise

__all__ = [
    "Catalog",
    "CatalogLoader",
    "Exercise",
    "ExerciseOutcome",
    "ValidateOptions",
    "load_catalog",
    "load_test_cases",
    "select_exercises",
    "validate_catalog",
    "validate_exercise",
]
