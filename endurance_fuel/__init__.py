"""Calorie and macro-nutrient calculator for endurance athletes."""

__version__ = "0.1.0"

from .models import InputSnapshot
from .analysis import NutritionPipeline

__all__ = ["InputSnapshot", "NutritionPipeline", "__version__"]
