"""Session fuelling guidance: fuel timing, hydration and race week."""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

from ..models import DayType, HydrationInputs
from ..numeric import clamp, round_half_up
from ..validation import InputValidator


@dataclass(frozen=True)
class FuelTiming:
    """Carbohydrate before, during and after the day's main session."""
    day_type: DayType
    pre_carbs_per_kg: float
    pre_carbs_g: int
    during: str
    post_carbs_per_kg: float
    post_carbs_g: int
    protein_g_range: Tuple[int, int] = (20, 30)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["day_type"] = self.day_type.value
        return data


class FuelTimingPlanner:
    """Peri-workout carbohydrate by day type."""

    PRE_CARBS_PER_KG = {
        DayType.KEY: 2.0,
        DayType.NORMAL: 1.0,
        DayType.RECOVERY: 0.5,
    }

    DURING_GUIDANCE = {
        DayType.KEY: "30–60 g/h if >75 min or back-to-back",
        DayType.NORMAL: "Optional small sip",
        DayType.RECOVERY: "Not required",
    }

    def post_carbs_per_kg(self, day_type: DayType) -> float:
        return 1.0 if day_type == DayType.KEY else 0.8

    def plan(self, day_type, weight_kg: float) -> FuelTiming:
        day_type = DayType.parse(day_type)
        weight_kg = InputValidator.clamp("weight_kg", weight_kg)
        pre = self.PRE_CARBS_PER_KG[day_type]
        post = self.post_carbs_per_kg(day_type)
        return FuelTiming(
            day_type=day_type,
            pre_carbs_per_kg=pre,
            pre_carbs_g=round_half_up(pre * weight_kg),
            during=self.DURING_GUIDANCE[day_type],
            post_carbs_per_kg=post,
            post_carbs_g=round_half_up(post * weight_kg),
        )


@dataclass(frozen=True)
class HydrationPlan:
    """Fluid and sodium targets for one session."""
    session_min: float
    fluid_l_per_h: float
    fluid_needed_l: float
    sodium_mg_per_l: float
    sodium_needed_mg: int

    def to_dict(self) -> Dict:
        return asdict(self)


class HydrationPlanner:
    """Estimate fluid and sodium needs from sweat rate and temperature."""

    MIN_FLUID_L_PER_H = 0.4
    MAX_FLUID_L_PER_H = 1.2
    BASE_SODIUM_MG_PER_L = 500
    SODIUM_MG_PER_DEGREE = 20  # above 15 °C

    def fluid_per_hour(self, sweat_rate_l_per_h: float) -> float:
        """Replace sweat losses within a tolerable gut intake range."""
        return clamp(sweat_rate_l_per_h, self.MIN_FLUID_L_PER_H, self.MAX_FLUID_L_PER_H)

    def sodium_mg_per_l(self, ambient_c: float) -> float:
        return self.BASE_SODIUM_MG_PER_L + max(0, ambient_c - 15) * self.SODIUM_MG_PER_DEGREE

    def plan(self, inputs: HydrationInputs) -> HydrationPlan:
        fluid_l_per_h = self.fluid_per_hour(inputs.sweat_rate_l_per_h)
        fluid_needed = (inputs.session_min / 60) * fluid_l_per_h
        sodium_per_l = self.sodium_mg_per_l(inputs.ambient_c)
        return HydrationPlan(
            session_min=inputs.session_min,
            fluid_l_per_h=fluid_l_per_h,
            fluid_needed_l=fluid_needed,
            sodium_mg_per_l=sodium_per_l,
            sodium_needed_mg=round_half_up(fluid_needed * sodium_per_l),
        )


@dataclass(frozen=True)
class RaceWeekStep:
    """One phase of the race-week checklist."""
    phase: str
    guidance: str
    carbs_per_kg: Optional[Tuple[float, float]] = None
    carbs_g: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class RaceWeekPlan:
    steps: Tuple[RaceWeekStep, ...]
    pre_race_meals: Tuple[str, ...]
    pre_race_note: str


class RaceWeekPlanner:
    """Taper fuelling checklist scaled to the athlete's body mass."""

    CHECKLIST: List[Tuple[str, str, Optional[Tuple[float, float]]]] = [
        ("Mon–Wed",
         "Maintain calories; carbs ~6–7 g/kg; normal protein/fat. Hydrate to pale yellow urine.",
         (6.0, 7.0)),
        ("Thu–Fri",
         "Carbs ~7–9 g/kg; reduce fibre; spread across 4–6 meals; sip electrolytes.",
         (7.0, 9.0)),
        ("Race-eve dinner",
         "Simple carbs + lean protein; avoid heavy fats/fibre; 500–750 ml fluids.",
         None),
        ("Race morning",
         "2–3 h pre: 1–3 g/kg carbs + 20–25 g protein; 15–20 min pre: small sip (100–200 ml).",
         (1.0, 3.0)),
        ("Post-race",
         "1.0–1.2 g/kg carbs in 1–2 h; 25–30 g protein; 1000–1500 mg sodium over the afternoon.",
         (1.0, 1.2)),
    ]

    PRE_RACE_MEALS = ("Bagel + honey", "Rice bowl + eggs", "Oats + banana + whey")
    PRE_RACE_NOTE = "Aim 1–3 g/kg carbs 2–3 h pre-race; keep fat/fibre low."

    def plan(self, weight_kg: float) -> RaceWeekPlan:
        weight_kg = InputValidator.clamp("weight_kg", weight_kg)
        steps = []
        for phase, guidance, per_kg in self.CHECKLIST:
            grams = None
            if per_kg:
                grams = (round_half_up(per_kg[0] * weight_kg), round_half_up(per_kg[1] * weight_kg))
            steps.append(RaceWeekStep(phase, guidance, per_kg, grams))
        return RaceWeekPlan(tuple(steps), self.PRE_RACE_MEALS, self.PRE_RACE_NOTE)
