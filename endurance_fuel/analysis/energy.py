"""Energy expenditure models: basal rate, lifestyle energy and training cost."""

from typing import Dict

from ..models import AthleteProfile, Intensity, SessionType, Sex, TrainingLoad
from ..numeric import round_half_up
from ..validation import InputValidator


class EnergyModel:
    """Estimate daily energy needs from anthropometrics and training volume."""

    # kcal per kg body mass per km (per hour for strength)
    DISCIPLINE_COEFFICIENTS = {
        "running": 1.0,
        "biking": 0.4,    # more efficient than running
        "swimming": 1.2,  # less efficient than running
        "strength": 6.0,
    }

    # Metabolic equivalents per session type and intensity
    MET_VALUES = {
        SessionType.RUN: {Intensity.EASY: 6.0, Intensity.HARD: 10.0, Intensity.SEVERE: 12.0},
        SessionType.BIKE: {Intensity.EASY: 6.0, Intensity.HARD: 10.0, Intensity.SEVERE: 12.0},
        SessionType.SWIM: {Intensity.EASY: 5.8, Intensity.HARD: 9.8, Intensity.SEVERE: 11.0},
        SessionType.HITT: {Intensity.EASY: 6.0, Intensity.HARD: 10.0, Intensity.SEVERE: 12.0},
        SessionType.STRENGTH: {Intensity.EASY: 3.0, Intensity.HARD: 5.0, Intensity.SEVERE: 6.0},
    }

    def compute_bmr(self, profile: AthleteProfile) -> float:
        """Basal metabolic rate (kcal/day) using Mifflin-St Jeor.

        BMR = 10 * weight + 6.25 * height - 5 * age + s, with s = +5 for
        men and -161 for women. Not rounded or clamped.
        """
        sex_constant = -161 if profile.sex == Sex.FEMALE else 5
        return (
            10 * profile.weight_kg
            + 6.25 * profile.height_cm
            - 5 * profile.age
            + sex_constant
        )

    def compute_non_training(self, bmr: float, activity_factor: float) -> int:
        """Lifestyle (non-training) energy: BMR scaled by the activity factor."""
        activity_factor = InputValidator.clamp("activity_factor", activity_factor)
        return round_half_up(bmr * activity_factor)

    def _discipline_kcal_per_day(self, weight_kg: float, weekly_volume: float, discipline: str) -> float:
        coefficient = self.DISCIPLINE_COEFFICIENTS[discipline]
        return (weight_kg * weekly_volume * coefficient) / 7

    def running_kcal_per_day(self, weight_kg: float, weekly_km: float) -> float:
        return self._discipline_kcal_per_day(weight_kg, weekly_km, "running")

    def biking_kcal_per_day(self, weight_kg: float, weekly_km: float) -> float:
        return self._discipline_kcal_per_day(weight_kg, weekly_km, "biking")

    def swimming_kcal_per_day(self, weight_kg: float, weekly_km: float) -> float:
        return self._discipline_kcal_per_day(weight_kg, weekly_km, "swimming")

    def strength_kcal_per_day(self, weight_kg: float, weekly_hours: float) -> float:
        return self._discipline_kcal_per_day(weight_kg, weekly_hours, "strength")

    def compute_training_energy(self, profile: AthleteProfile, load: TrainingLoad) -> Dict[str, int]:
        """Daily average training energy per discipline plus their total.

        Each discipline is rounded on its own and the total is the sum of
        the rounded values.
        """
        weight = profile.weight_kg
        training = {
            "running": round_half_up(self.running_kcal_per_day(weight, load.weekly_run_km)),
            "biking": round_half_up(self.biking_kcal_per_day(weight, load.weekly_bike_km)),
            "swimming": round_half_up(self.swimming_kcal_per_day(weight, load.weekly_swim_km)),
            "strength": round_half_up(self.strength_kcal_per_day(weight, load.weekly_strength_hours)),
        }
        training["total"] = sum(training.values())
        return training

    def compute_session_calories(
        self,
        weight_kg: float,
        duration_min: float,
        session_type,
        intensity,
    ) -> int:
        """Energy cost of one session from MET values.

        kcal = (MET * weight * 3.5 / 200) * minutes

        Args:
            weight_kg: Body mass in kg
            duration_min: Session duration, clamped to [0, 300] minutes
            session_type: SessionType or its string value
            intensity: Intensity or its string value

        Returns:
            Rounded kcal; 0 for a zero-length session without consulting the table

        Raises:
            InvalidEnumError: if session_type or intensity is not recognized
        """
        duration_min = InputValidator.clamp("duration_min", duration_min)
        if duration_min == 0:
            return 0

        weight_kg = InputValidator.clamp("weight_kg", weight_kg)
        met = self.MET_VALUES[SessionType.parse(session_type)][Intensity.parse(intensity)]
        kcal_per_minute = (met * weight_kg * 3.5) / 200
        return round_half_up(kcal_per_minute * duration_min)
