"""Weekly schedule projection with under/optimal/over fuelling scenarios."""

import logging
import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple

from ..config import config
from ..models import (
    AthleteProfile,
    DaySchedule,
    DerivedMacros,
    Weekday,
    WeeklySchedule,
)
from ..numeric import round_half_up
from .energy import EnergyModel
from .macros import MacroAllocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FuelingScenario:
    """Calories and macros for one fuelling scenario."""
    name: str
    calories: int
    carb_g: int
    protein_g: int
    fat_g: int

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class ChartSegment:
    """One stacked block of a daily bar."""
    label: str  # "resting" or a session type value
    kcal: int


@dataclass(frozen=True)
class DayProjection:
    """Projected energy, macros and scenarios for one weekday."""
    weekday: Weekday
    description: str
    training_kcal: int
    total_kcal: int
    macros: DerivedMacros
    scenarios: Tuple[FuelingScenario, FuelingScenario, FuelingScenario]
    chart_segments: Tuple[ChartSegment, ...]

    def scenario(self, name: str) -> FuelingScenario:
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(name)


@dataclass(frozen=True)
class WeeklySummary:
    """Weekly totals for the three fuelling scenarios."""
    weekly_total: int
    daily_average: int
    underfuel_weekly: int
    underfuel_daily: int
    shortfall_weekly: int
    shortfall_daily: int
    overfuel_weekly: int
    overfuel_daily: int
    surplus_weekly: int
    surplus_daily: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class WeeklyProjection:
    """Seven projected days in Monday..Sunday order plus the weekly summary."""
    non_training: int
    days: Tuple[DayProjection, ...]
    summary: WeeklySummary
    chart_max_kcal: int

    @property
    def weekly_total(self) -> int:
        return self.summary.weekly_total

    @property
    def daily_totals(self) -> List[int]:
        return [day.total_kcal for day in self.days]

    def to_dataframe(self) -> pd.DataFrame:
        """Flatten the week, one row per weekday, for export."""
        data = []
        for day in self.days:
            row = {
                'day': day.weekday.value,
                'sessions': day.description,
                'training_kcal': day.training_kcal,
                'total_kcal': day.total_kcal,
                'carbs_per_kg': day.macros.carbs_per_kg,
                'protein_per_kg': day.macros.protein_per_kg,
                'fat_percent': day.macros.fat_percent,
            }
            for scenario in day.scenarios:
                row[f'{scenario.name}_kcal'] = scenario.calories
                row[f'{scenario.name}_carb_g'] = scenario.carb_g
                row[f'{scenario.name}_protein_g'] = scenario.protein_g
                row[f'{scenario.name}_fat_g'] = scenario.fat_g
            data.append(row)
        return pd.DataFrame(data)


class WeeklyScheduleProjector:
    """Apply the energy model and macro allocator across a 7-day schedule."""

    def __init__(self, energy_model: EnergyModel = None, allocator: MacroAllocator = None):
        self.energy_model = energy_model or EnergyModel()
        self.allocator = allocator or MacroAllocator()
        self.underfuel_factor = config.UNDERFUEL_FACTOR
        self.overfuel_factor = config.OVERFUEL_FACTOR
        self.underfuel_carb_factor = config.UNDERFUEL_CARB_FACTOR
        self.overfuel_carb_factor = config.OVERFUEL_CARB_FACTOR

    def day_training_kcal(self, weight_kg: float, day: DaySchedule) -> int:
        """First session plus the second one on double-session days."""
        first = self.energy_model.compute_session_calories(
            weight_kg, day.session.duration_min, day.session.session_type, day.session.intensity
        )
        second = 0
        if day.double_session:
            second = self.energy_model.compute_session_calories(
                weight_kg,
                day.second_session.duration_min,
                day.second_session.session_type,
                day.second_session.intensity,
            )
        return first + second

    def _scenario(self, name: str, weight_kg: float, calories: int, carb_g: int, protein_g: int) -> FuelingScenario:
        fat_g = self.allocator.fat_for_budget(weight_kg, calories, carb_g, protein_g)
        return FuelingScenario(name, calories, carb_g, protein_g, fat_g)

    def scenarios_for_day(
        self, weight_kg: float, total_kcal: int, optimal: DerivedMacros
    ) -> Tuple[FuelingScenario, FuelingScenario, FuelingScenario]:
        """Under (85%), optimal (100%) and over (110%) fuelling for one day.

        Scenario carbohydrate is the optimal amount times 0.8 / 1.2,
        protein is unchanged and fat is refitted to the scenario calories.
        """
        under = self._scenario(
            "underfueling",
            weight_kg,
            round_half_up(total_kcal * self.underfuel_factor),
            round_half_up(optimal.carb_g * self.underfuel_carb_factor),
            optimal.protein_g,
        )
        best = FuelingScenario("optimal", total_kcal, optimal.carb_g, optimal.protein_g, optimal.fat_g)
        over = self._scenario(
            "overfueling",
            weight_kg,
            round_half_up(total_kcal * self.overfuel_factor),
            round_half_up(optimal.carb_g * self.overfuel_carb_factor),
            optimal.protein_g,
        )
        return under, best, over

    def _chart_segments(self, weight_kg: float, non_training: int, day: DaySchedule) -> Tuple[ChartSegment, ...]:
        segments = [ChartSegment("resting", non_training)]
        for session in day.counted_sessions:
            kcal = self.energy_model.compute_session_calories(
                weight_kg, session.duration_min, session.session_type, session.intensity
            )
            segments.append(ChartSegment(session.session_type.value, kcal))
        return tuple(segments)

    def project_day(self, weekday: Weekday, weight_kg: float, non_training: int, day: DaySchedule) -> DayProjection:
        training_kcal = self.day_training_kcal(weight_kg, day)
        total_kcal = non_training + training_kcal
        macros = self.allocator.allocate_day(weight_kg, total_kcal, day.counted_sessions)
        return DayProjection(
            weekday=weekday,
            description=day.describe(),
            training_kcal=training_kcal,
            total_kcal=total_kcal,
            macros=macros,
            scenarios=self.scenarios_for_day(weight_kg, total_kcal, macros),
            chart_segments=self._chart_segments(weight_kg, non_training, day),
        )

    def weekly_summary(self, weekly_total: int) -> WeeklySummary:
        under_share = round(1 - self.underfuel_factor, 4)
        over_share = round(self.overfuel_factor - 1, 4)
        return WeeklySummary(
            weekly_total=weekly_total,
            daily_average=round_half_up(weekly_total / 7),
            underfuel_weekly=round_half_up(weekly_total * self.underfuel_factor),
            underfuel_daily=round_half_up(weekly_total * self.underfuel_factor / 7),
            shortfall_weekly=round_half_up(weekly_total * under_share),
            shortfall_daily=round_half_up(weekly_total * under_share / 7),
            overfuel_weekly=round_half_up(weekly_total * self.overfuel_factor),
            overfuel_daily=round_half_up(weekly_total * self.overfuel_factor / 7),
            surplus_weekly=round_half_up(weekly_total * over_share),
            surplus_daily=round_half_up(weekly_total * over_share / 7),
        )

    def project(self, profile: AthleteProfile, non_training: int, schedule: WeeklySchedule) -> WeeklyProjection:
        """Project every weekday; non-training energy is the same on all days."""
        weight_kg = profile.weight_kg
        days = tuple(
            self.project_day(weekday, weight_kg, non_training, day)
            for weekday, day in schedule.items()
        )

        daily_totals = np.array([day.total_kcal for day in days])
        weekly_total = int(daily_totals.sum())
        chart_max = int(max(daily_totals.max(), 100))

        logger.debug(f"Projected week: {weekly_total} kcal, daily totals {daily_totals.tolist()}")
        return WeeklyProjection(
            non_training=non_training,
            days=days,
            summary=self.weekly_summary(weekly_total),
            chart_max_kcal=chart_max,
        )
