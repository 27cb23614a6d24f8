"""Evaluate an input snapshot end to end.

Stages run in a fixed order: energy model, daily target, macro allocation,
then the auxiliary plans. Each section is computed on its own so that bad
input for one of them (say, the hydration planner) never hides the others,
and a malformed raw field only drops the sections that depend on it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from ..models import (
    STATE_COMPONENTS,
    STATE_FIELDS,
    AthleteProfile,
    DayContext,
    DerivedEnergy,
    DerivedMacros,
    HydrationInputs,
    InputSnapshot,
    MacroRatios,
    TrainingLoad,
    WeeklySchedule,
    merge_state,
    parse_state_field,
)
from ..numeric import round_half_up
from ..validation import NutritionInputError
from .energy import EnergyModel
from .fueling import (
    FuelTiming,
    FuelTimingPlanner,
    HydrationPlan,
    HydrationPlanner,
    RaceWeekPlan,
    RaceWeekPlanner,
)
from .macros import MacroAllocator
from .schedule import WeeklyProjection, WeeklyScheduleProjector
from .targets import DailyTargetAggregator

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Everything derived from one snapshot; failed sections are None."""
    snapshot: Optional[InputSnapshot] = None
    energy: Optional[DerivedEnergy] = None
    macros: Optional[DerivedMacros] = None
    fuel_timing: Optional[FuelTiming] = None
    hydration: Optional[HydrationPlan] = None
    race_week: Optional[RaceWeekPlan] = None
    week: Optional[WeeklyProjection] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class NutritionPipeline:
    """Run the calculators over an InputSnapshot."""

    def __init__(self):
        self.energy_model = EnergyModel()
        self.aggregator = DailyTargetAggregator(self.energy_model)
        self.allocator = MacroAllocator()
        self.fuel_planner = FuelTimingPlanner()
        self.hydration_planner = HydrationPlanner()
        self.race_week_planner = RaceWeekPlanner()
        self.projector = WeeklyScheduleProjector(self.energy_model, self.allocator)

    @staticmethod
    def _run_section(evaluation: Evaluation, section: str, func: Callable[[], Any]) -> Any:
        try:
            result = func()
        except NutritionInputError as e:
            logger.warning(f"Section '{section}' failed: {e}")
            evaluation.errors[section] = str(e)
            return None
        logger.debug(f"Section '{section}': {result}")
        return result

    def _daily(self, profile: AthleteProfile, load: TrainingLoad, day: DayContext, ratios: MacroRatios, basic: bool):
        energy = self.aggregator.compute(profile, load, day)
        macros = self.allocator.allocate(profile, load, ratios, energy.target_calories, basic=basic)
        return energy, macros

    def _week(self, profile: AthleteProfile, day: DayContext, schedule: WeeklySchedule) -> WeeklyProjection:
        bmr = round_half_up(self.energy_model.compute_bmr(profile))
        non_training = self.energy_model.compute_non_training(bmr, day.activity_factor)
        return self.projector.project(profile, non_training, schedule)

    def _run_sections(
        self,
        evaluation: Evaluation,
        profile: Optional[AthleteProfile],
        load: Optional[TrainingLoad],
        day: Optional[DayContext],
        ratios: Optional[MacroRatios],
        hydration: Optional[HydrationInputs],
        schedule: Optional[WeeklySchedule],
        basic: bool,
    ) -> Evaluation:
        """Run every output section whose inputs are available."""
        if None not in (profile, load, day, ratios):
            daily = self._run_section(
                evaluation, "daily", lambda: self._daily(profile, load, day, ratios, basic)
            )
            if daily is not None:
                evaluation.energy, evaluation.macros = daily

        if profile is not None and day is not None:
            evaluation.fuel_timing = self._run_section(
                evaluation, "fuel_timing", lambda: self.fuel_planner.plan(day.day_type, profile.weight_kg)
            )
        if hydration is not None:
            evaluation.hydration = self._run_section(
                evaluation, "hydration", lambda: self.hydration_planner.plan(hydration)
            )
        if profile is not None:
            evaluation.race_week = self._run_section(
                evaluation, "race_week", lambda: self.race_week_planner.plan(profile.weight_kg)
            )
        if schedule is not None and profile is not None and day is not None:
            evaluation.week = self._run_section(
                evaluation, "week", lambda: self._week(profile, day, schedule)
            )
        return evaluation

    def evaluate(self, snapshot: InputSnapshot, basic: bool = False) -> Evaluation:
        """Derive every output from a complete snapshot.

        The weekly projection is only produced when the snapshot carries
        a schedule.
        """
        return self._run_sections(
            Evaluation(snapshot=snapshot),
            snapshot.profile,
            snapshot.load,
            snapshot.day,
            snapshot.ratios,
            snapshot.hydration,
            snapshot.schedule,
            basic,
        )

    def evaluate_raw(
        self,
        state: Mapping[str, Any],
        hydration: Optional[Mapping[str, Any]] = None,
        schedule: Optional[WeeklySchedule] = None,
        basic: bool = False,
    ) -> Evaluation:
        """Evaluate raw shareable fields, isolating malformed ones.

        Every malformed field gets its own entry in ``errors`` (keyed by
        its share name) and only the inputs it belongs to are dropped.
        A section still runs when the inputs it needs were all built: the
        race-week plan only needs the athlete profile, the hydration plan
        none of the shareable fields.
        """
        evaluation = Evaluation()
        hydration_inputs = self._run_section(
            evaluation, "hydration", lambda: HydrationInputs(**(hydration or {}))
        )

        merged = merge_state(state)
        parts: Dict[str, Dict[str, Any]] = {component: {} for component in STATE_COMPONENTS}
        failed = set()
        dark = False
        for name, component, attribute in STATE_FIELDS:
            value = self._run_section(evaluation, name, lambda: parse_state_field(attribute, merged[name]))
            if name in evaluation.errors:
                failed.add(component)
            elif component == "snapshot":
                dark = value
            else:
                parts[component][attribute] = value

        components = {
            component: STATE_COMPONENTS[component](**kwargs)
            for component, kwargs in parts.items()
            if component not in failed
        }
        if len(components) == len(STATE_COMPONENTS):
            evaluation.snapshot = InputSnapshot(
                **components,
                dark=dark,
                schedule=schedule,
                hydration=hydration_inputs or HydrationInputs(),
            )

        return self._run_sections(
            evaluation,
            components.get("profile"),
            components.get("load"),
            components.get("day"),
            components.get("ratios"),
            hydration_inputs,
            schedule,
            basic,
        )
