"""Macro-nutrient allocation.

Three allocation paths share the same 4/4/9 kcal-per-gram conversion:

- basic: per-kg ratios scaled into 100% of the daily target, protein fixed
- extended: ratios adjusted by a training-load multiplier, scaled into 95%
  of the daily target, protein fixed during scaling
- per-day: carbohydrate and protein looked up from the day's sessions, fat
  fills the remaining 95% budget with a 15% / 1 g/kg floor
"""

import logging
from typing import Sequence

from ..config import config
from ..models import (
    AthleteProfile,
    DerivedMacros,
    Intensity,
    MacroRatios,
    Session,
    SessionType,
    TrainingLoad,
)
from ..numeric import round_half_up
from ..validation import InputValidator

logger = logging.getLogger(__name__)

KCAL_PER_G_CARB = 4
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_FAT = 9

REST_DAY_CARBS_PER_KG = 3.0
REST_DAY_PROTEIN_PER_KG = 1.2


class MacroAllocator:
    """Convert per-kg macro targets into grams that fit a calorie target."""

    # Carbohydrate g/kg for strength and HIIT sessions, by intensity
    CARB_TABLE = {
        SessionType.STRENGTH: {Intensity.EASY: 4.5, Intensity.HARD: 5.5, Intensity.SEVERE: 6.5},
        SessionType.HITT: {Intensity.EASY: 5.5, Intensity.HARD: 7.0, Intensity.SEVERE: 8.5},
    }

    # Endurance carbohydrate g/kg by duration bucket (hours, lower bound inclusive)
    ENDURANCE_CARB_BUCKETS = (
        # (min_hours, max_hours, include_max, {intensity: g/kg})
        (0.75, 1.5, False, {Intensity.EASY: 5.5, Intensity.HARD: 6.5, Intensity.SEVERE: 7.0}),
        (1.5, 3.0, True, {Intensity.EASY: 7.0, Intensity.HARD: 8.5, Intensity.SEVERE: 9.5}),
    )
    LONG_ENDURANCE_CARBS = {Intensity.EASY: 9.0, Intensity.HARD: 10.5, Intensity.SEVERE: 11.5}
    SHORT_EASY_CARBS_PER_KG = 4.0
    FALLBACK_CARBS_PER_KG = 6.0

    # Protein g/kg by session type and intensity
    PROTEIN_TABLE = {
        SessionType.STRENGTH: {Intensity.EASY: 1.6, Intensity.HARD: 1.8, Intensity.SEVERE: 2.0},
        SessionType.HITT: {Intensity.EASY: 1.4, Intensity.HARD: 1.6, Intensity.SEVERE: 1.8},
        "endurance": {Intensity.EASY: 1.2, Intensity.HARD: 1.4, Intensity.SEVERE: 1.6},
    }

    def __init__(self):
        self.macro_budget = config.MACRO_BUDGET_FRACTION
        self.basic_budget = config.BASIC_MACRO_BUDGET_FRACTION
        self.min_fat_fraction = config.MIN_FAT_FRACTION
        self.min_fat_per_kg = config.MIN_FAT_G_PER_KG

    # ------------------------------------------------------------------
    # Basic and extended daily allocation
    # ------------------------------------------------------------------

    @staticmethod
    def _scale_factor(macro_kcal: float, budget_kcal: float) -> float:
        if macro_kcal > budget_kcal:
            return budget_kcal / macro_kcal
        return 1.0

    def allocate_basic(self, profile: AthleteProfile, ratios: MacroRatios, target_calories: int) -> DerivedMacros:
        """Midpoint carbohydrate plus fixed protein and fat, scaled into the target.

        Only carbohydrate and fat are scaled; protein stays at its per-kg
        amount even if the total then exceeds the target.
        """
        weight = profile.weight_kg
        carb_mid_g = round_half_up(weight * (ratios.carb_low_per_kg + ratios.carb_high_per_kg) / 2)
        protein_g = round_half_up(weight * ratios.protein_per_kg)
        fat_g = round_half_up(weight * ratios.fat_per_kg)

        macro_kcal = (
            carb_mid_g * KCAL_PER_G_CARB
            + protein_g * KCAL_PER_G_PROTEIN
            + fat_g * KCAL_PER_G_FAT
        )
        scale = self._scale_factor(macro_kcal, target_calories * self.basic_budget)

        return DerivedMacros(
            carb_g=round_half_up(carb_mid_g * scale),
            protein_g=protein_g,
            fat_g=round_half_up(fat_g * scale),
            mode="basic",
            scale=scale,
        )

    def training_load_multiplier(self, load: TrainingLoad) -> float:
        """1.0 for no training, rising 2% per estimated weekly hour, capped at 1.3."""
        double_session_bonus = load.double_session_days * 0.1
        return min(
            config.MAX_TRAINING_LOAD_MULTIPLIER,
            1.0 + (load.estimated_weekly_hours + double_session_bonus) * 0.02,
        )

    @staticmethod
    def training_load_label(multiplier: float) -> str:
        if multiplier < 1.1:
            return "Light"
        elif multiplier < 1.2:
            return "Moderate"
        return "Heavy"

    def allocate_extended(
        self,
        profile: AthleteProfile,
        load: TrainingLoad,
        ratios: MacroRatios,
        target_calories: int,
    ) -> DerivedMacros:
        """Training-load aware allocation into 95% of the daily target.

        The multiplier raises the carbohydrate range, lifts protein by 20%
        of its excess over 1.0 and trims fat (never below 80% of base).
        The budget scale then applies to carbohydrate and fat only.
        """
        weight = profile.weight_kg
        multiplier = self.training_load_multiplier(load)

        base_carb_range = (
            round_half_up(ratios.carb_low_per_kg * weight),
            round_half_up(ratios.carb_high_per_kg * weight),
        )
        base_protein_g = round_half_up(ratios.protein_per_kg * weight)
        base_fat_g = round_half_up(ratios.fat_per_kg * weight)

        carb_range = (
            round_half_up(base_carb_range[0] * multiplier),
            round_half_up(base_carb_range[1] * multiplier),
        )
        protein_g = round_half_up(base_protein_g * (1 + (multiplier - 1) * 0.2))
        fat_g = round_half_up(base_fat_g * max(0.8, 1.1 - (multiplier - 1) * 0.3))

        carb_mid_g = (carb_range[0] + carb_range[1]) / 2
        macro_kcal = (
            round_half_up(carb_mid_g * KCAL_PER_G_CARB)
            + protein_g * KCAL_PER_G_PROTEIN
            + fat_g * KCAL_PER_G_FAT
        )
        target_macro_kcal = round_half_up(target_calories * self.macro_budget)
        scale = self._scale_factor(macro_kcal, target_macro_kcal)
        if scale < 1:
            logger.debug(f"Macros {macro_kcal} kcal exceed budget {target_macro_kcal} kcal, scale {scale:.3f}")

        return DerivedMacros(
            carb_g=round_half_up(carb_mid_g * scale),
            protein_g=protein_g,
            fat_g=round_half_up(fat_g * scale),
            mode="extended",
            scale=scale,
            training_load_multiplier=multiplier,
            training_load_label=self.training_load_label(multiplier),
            carb_range_g=carb_range,
        )

    def allocate(
        self,
        profile: AthleteProfile,
        load: TrainingLoad,
        ratios: MacroRatios,
        target_calories: int,
        basic: bool = False,
    ) -> DerivedMacros:
        """Extended allocation by default, basic mode on request."""
        if basic:
            return self.allocate_basic(profile, ratios, target_calories)
        return self.allocate_extended(profile, load, ratios, target_calories)

    # ------------------------------------------------------------------
    # Session driven per-day allocation
    # ------------------------------------------------------------------

    def carbs_per_kg(self, duration_min: float, session_type, intensity) -> float:
        """Carbohydrate g/kg for one session.

        Raises:
            InvalidEnumError: if session_type or intensity is not recognized
        """
        session_type = SessionType.parse(session_type)
        intensity = Intensity.parse(intensity)
        if session_type in self.CARB_TABLE:
            return self.CARB_TABLE[session_type][intensity]

        duration_hours = InputValidator.clamp("duration_min", duration_min) / 60
        if duration_hours < 0.75 and intensity == Intensity.EASY:
            return self.SHORT_EASY_CARBS_PER_KG

        for low, high, include_high, by_intensity in self.ENDURANCE_CARB_BUCKETS:
            below_high = duration_hours <= high if include_high else duration_hours < high
            if duration_hours >= low and below_high:
                return by_intensity[intensity]

        if duration_hours > 3:
            return self.LONG_ENDURANCE_CARBS[intensity]

        # Short sessions above easy intensity
        return self.FALLBACK_CARBS_PER_KG

    def protein_per_kg(self, session_type, intensity) -> float:
        """Protein g/kg for one session type and intensity."""
        session_type = SessionType.parse(session_type)
        intensity = Intensity.parse(intensity)
        key = session_type if session_type in self.PROTEIN_TABLE else "endurance"
        return self.PROTEIN_TABLE[key][intensity]

    def daily_carbs_per_kg(self, sessions: Sequence[Session]) -> float:
        """Highest carbohydrate need across the day's sessions (3.0 on rest days)."""
        if not sessions:
            return REST_DAY_CARBS_PER_KG
        return max(self.carbs_per_kg(s.duration_min, s.session_type, s.intensity) for s in sessions)

    def daily_protein_per_kg(self, sessions: Sequence[Session]) -> float:
        """Protein need with priority strength > HIIT > endurance.

        For strength and HIIT the first matching session's intensity is
        used; for endurance-only days the most intense session wins.
        """
        if not sessions:
            return REST_DAY_PROTEIN_PER_KG

        for priority_type in (SessionType.STRENGTH, SessionType.HITT):
            first = next((s for s in sessions if s.session_type == priority_type), None)
            if first is not None:
                return self.protein_per_kg(priority_type, first.intensity)

        hardest = Intensity.EASY
        for session in sessions:
            if session.intensity.rank > hardest.rank:
                hardest = session.intensity
        return self.protein_per_kg(sessions[0].session_type, hardest)

    def fat_for_budget(self, weight_kg: float, calories: int, carb_g: int, protein_g: int) -> int:
        """Fat grams filling the 95% macro budget left after carbs and protein.

        Floored at 15% of calories and again at 1 g per kg body weight.
        """
        target_macro_kcal = round_half_up(calories * self.macro_budget)
        remaining_kcal = target_macro_kcal - carb_g * KCAL_PER_G_CARB - protein_g * KCAL_PER_G_PROTEIN
        min_fat_kcal = round_half_up(calories * self.min_fat_fraction)
        fat_g = round_half_up(max(remaining_kcal, min_fat_kcal) / KCAL_PER_G_FAT)
        return max(fat_g, round_half_up(weight_kg * self.min_fat_per_kg))

    def allocate_day(self, weight_kg: float, total_day_calories: int, sessions: Sequence[Session]) -> DerivedMacros:
        """Macros for one planned day from its sessions and total calories."""
        weight_kg = InputValidator.clamp("weight_kg", weight_kg)
        carbs_per_kg = self.daily_carbs_per_kg(sessions)
        protein_per_kg = self.daily_protein_per_kg(sessions)

        carb_g = round_half_up(weight_kg * carbs_per_kg)
        protein_g = round_half_up(weight_kg * protein_per_kg)
        fat_g = self.fat_for_budget(weight_kg, total_day_calories, carb_g, protein_g)

        fat_percent = 0
        if total_day_calories > 0:
            fat_percent = round_half_up(fat_g * KCAL_PER_G_FAT / total_day_calories * 100)

        return DerivedMacros(
            carb_g=carb_g,
            protein_g=protein_g,
            fat_g=fat_g,
            mode="per_day",
            carbs_per_kg=carbs_per_kg,
            protein_per_kg=protein_per_kg,
            fat_percent=fat_percent,
        )

