"""Analysis module for energy, macro and fuelling calculations."""

from .energy import EnergyModel
from .targets import DailyTargetAggregator
from .macros import MacroAllocator
from .schedule import WeeklyScheduleProjector, WeeklyProjection
from .fueling import FuelTimingPlanner, HydrationPlanner, RaceWeekPlanner
from .pipeline import NutritionPipeline, Evaluation

__all__ = [
    "EnergyModel",
    "DailyTargetAggregator",
    "MacroAllocator",
    "WeeklyScheduleProjector",
    "WeeklyProjection",
    "FuelTimingPlanner",
    "HydrationPlanner",
    "RaceWeekPlanner",
    "NutritionPipeline",
    "Evaluation",
]
