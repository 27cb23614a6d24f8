"""Daily calorie target from energy estimates, day type and goal."""

import logging

from ..config import config
from ..models import (
    AthleteProfile,
    DayContext,
    DayType,
    DerivedEnergy,
    Goal,
    TrainingLoad,
)
from ..numeric import clamp, round_half_up
from .energy import EnergyModel

logger = logging.getLogger(__name__)


class DailyTargetAggregator:
    """Combine energy estimates with day and goal adjustments."""

    DAY_ADJUSTMENTS = {
        DayType.KEY: 250,
        DayType.NORMAL: 0,
        DayType.RECOVERY: -200,
    }

    GOAL_ADJUSTMENTS = {
        Goal.PERFORMANCE: 100,
        Goal.MAINTAIN_WEIGHT: 0,
        Goal.SLIGHT_LOSS: -200,
    }

    def __init__(self, energy_model: EnergyModel = None):
        self.energy_model = energy_model or EnergyModel()
        self.min_kcal = config.TARGET_KCAL_MIN
        self.max_kcal = config.TARGET_KCAL_MAX

    def day_adjustment(self, day_type: DayType) -> int:
        return self.DAY_ADJUSTMENTS[DayType.parse(day_type)]

    def goal_adjustment(self, goal: Goal) -> int:
        return self.GOAL_ADJUSTMENTS[Goal.parse(goal)]

    def double_session_adjustment(self, double_session_days: float) -> int:
        return round_half_up(double_session_days * config.DOUBLE_SESSION_KCAL)

    def target_calories(
        self,
        non_training: int,
        total_training: int,
        day_adjustment: int,
        goal_adjustment: int,
        double_session_adjustment: int,
    ) -> int:
        """Sum of all components, rounded and clamped to the safe range.

        Extreme inputs saturate at the clamp bounds.
        """
        raw = non_training + total_training + day_adjustment + goal_adjustment + double_session_adjustment
        target = clamp(round_half_up(raw), self.min_kcal, self.max_kcal)
        if target != round_half_up(raw):
            logger.info(f"Daily target {raw:.0f} kcal clamped to {target} kcal")
        return target

    def compute(self, profile: AthleteProfile, load: TrainingLoad, day: DayContext) -> DerivedEnergy:
        """Run the energy model and aggregate into the daily target."""
        bmr = round_half_up(self.energy_model.compute_bmr(profile))
        non_training = self.energy_model.compute_non_training(bmr, day.activity_factor)
        training = self.energy_model.compute_training_energy(profile, load)

        day_adj = self.day_adjustment(day.day_type)
        goal_adj = self.goal_adjustment(day.goal)
        double_adj = self.double_session_adjustment(load.double_session_days)

        energy = DerivedEnergy(
            bmr=bmr,
            non_training=non_training,
            running_kcal=training["running"],
            biking_kcal=training["biking"],
            swimming_kcal=training["swimming"],
            strength_kcal=training["strength"],
            total_training=training["total"],
            day_adjustment=day_adj,
            goal_adjustment=goal_adj,
            double_session_adjustment=double_adj,
            target_calories=self.target_calories(
                non_training, training["total"], day_adj, goal_adj, double_adj
            ),
        )
        logger.debug(f"Derived energy: {energy}")
        return energy
