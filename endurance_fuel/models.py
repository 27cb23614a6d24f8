"""Data model for the fuelling calculator.

Inputs are frozen value objects: an update builds a new object and every
derived value is recomputed from scratch. Categorical fields are closed
enumerations and parsing an unknown tag raises ``InvalidEnumError``.
"""

import logging
import re
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .config import config
from .numeric import round_half_up
from .validation import InputValidator, InvalidEnumError

logger = logging.getLogger(__name__)


class ParseableEnum(Enum):
    """Enum that parses its string value and rejects unknown tags."""

    @classmethod
    def kind(cls) -> str:
        """Human readable name, e.g. SessionType -> "session type"."""
        return re.sub(r"(?<!^)(?=[A-Z])", " ", cls.__name__).lower()

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidEnumError(cls.kind(), value, [m.value for m in cls]) from None


class Sex(ParseableEnum):
    """Sex used by the Mifflin-St Jeor constant."""

    MALE = "male"
    FEMALE = "female"


class DayType(ParseableEnum):
    """Training day category driving the daily energy adjustment."""

    KEY = "key"
    NORMAL = "normal"
    RECOVERY = "recovery"


class Goal(ParseableEnum):
    """Body composition goal."""

    PERFORMANCE = "performance"
    MAINTAIN_WEIGHT = "maintain_weight"
    SLIGHT_LOSS = "slight_loss"


class SessionType(ParseableEnum):
    """Session categories of the weekly planner."""

    RUN = "run"
    BIKE = "bike"
    SWIM = "swim"
    HITT = "hitt"  # HIIT / team sports
    STRENGTH = "strength"

    @property
    def is_endurance(self) -> bool:
        return self in (SessionType.RUN, SessionType.BIKE, SessionType.SWIM)


class Intensity(ParseableEnum):
    """Session intensity; easy is aerobic, hard is threshold, severe is VO2max."""

    EASY = "easy"
    HARD = "hard"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return {"easy": 1, "hard": 2, "severe": 3}[self.value]

    @property
    def label(self) -> str:
        return {"easy": "aerobic", "hard": "threshold", "severe": "VO2max"}[self.value]


class Weekday(ParseableEnum):
    """Days of the planning week, Monday first."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def short_name(self) -> str:
        return self.value[:3].title()


# Enum members are declared in calendar order
WEEKDAYS: Tuple[Weekday, ...] = tuple(Weekday)


def _clamp_fields(obj, *names: str) -> None:
    for name in names:
        object.__setattr__(obj, name, InputValidator.clamp(name, getattr(obj, name)))


@dataclass(frozen=True)
class AthleteProfile:
    """Anthropometrics for a single calculation."""
    sex: Sex = Sex.MALE
    age: float = 27
    weight_kg: float = 87
    height_cm: float = 183

    def __post_init__(self):
        object.__setattr__(self, "sex", Sex.parse(self.sex))
        _clamp_fields(self, "age", "weight_kg", "height_cm")


@dataclass(frozen=True)
class TrainingLoad:
    """Weekly training volume per discipline."""
    weekly_run_km: float = 60
    weekly_bike_km: float = 0
    weekly_swim_km: float = 0
    weekly_strength_hours: float = 0
    double_session_days: int = 0

    def __post_init__(self):
        _clamp_fields(
            self,
            "weekly_run_km",
            "weekly_bike_km",
            "weekly_swim_km",
            "weekly_strength_hours",
            "double_session_days",
        )
        # Whole days only
        object.__setattr__(self, "double_session_days", round_half_up(self.double_session_days))

    @property
    def estimated_weekly_hours(self) -> float:
        """Rough duration proxy: 20 km of endurance volume counts as one hour."""
        endurance_km = self.weekly_run_km + self.weekly_bike_km + self.weekly_swim_km
        return endurance_km / 20 + self.weekly_strength_hours


@dataclass(frozen=True)
class DayContext:
    """Day type, goal and lifestyle activity factor."""
    day_type: DayType = DayType.KEY
    goal: Goal = Goal.PERFORMANCE
    activity_factor: float = 1.45

    def __post_init__(self):
        object.__setattr__(self, "day_type", DayType.parse(self.day_type))
        object.__setattr__(self, "goal", Goal.parse(self.goal))
        _clamp_fields(self, "activity_factor")


@dataclass(frozen=True)
class MacroRatios:
    """Macro targets in grams per kilogram of body mass."""
    carb_low_per_kg: float = 5
    carb_high_per_kg: float = 8
    protein_per_kg: float = 1.8
    fat_per_kg: float = 1.1

    def __post_init__(self):
        _clamp_fields(
            self, "carb_low_per_kg", "carb_high_per_kg", "protein_per_kg", "fat_per_kg"
        )
        if self.carb_high_per_kg < self.carb_low_per_kg:
            # Inverted range still has a well-defined midpoint
            logger.warning(
                f"carb_high_per_kg {self.carb_high_per_kg} is below carb_low_per_kg "
                f"{self.carb_low_per_kg}; using the inverted range as given"
            )


@dataclass(frozen=True)
class Session:
    """One training session of the weekly planner."""
    duration_min: float = 0
    session_type: SessionType = SessionType.RUN
    intensity: Intensity = Intensity.EASY

    def __post_init__(self):
        object.__setattr__(self, "session_type", SessionType.parse(self.session_type))
        object.__setattr__(self, "intensity", Intensity.parse(self.intensity))
        _clamp_fields(self, "duration_min")

    def describe(self) -> str:
        """Short text such as '60min threshold run' (no intensity for strength)."""
        duration = f"{self.duration_min:g}min"
        if self.session_type == SessionType.STRENGTH:
            return f"{duration} {self.session_type.value}"
        return f"{duration} {self.intensity.label} {self.session_type.value}"


@dataclass(frozen=True)
class DaySchedule:
    """A weekday's planned training: a main session and an optional second one."""
    session: Session = field(default_factory=Session)
    double_session: bool = False
    second_session: Session = field(default_factory=Session)

    @property
    def counted_sessions(self) -> List[Session]:
        """Sessions that shape the day's macros (non-zero duration only)."""
        sessions = []
        if self.session.duration_min > 0:
            sessions.append(self.session)
        if self.double_session and self.second_session.duration_min > 0:
            sessions.append(self.second_session)
        return sessions

    def describe(self) -> str:
        sessions = self.counted_sessions
        if not sessions:
            return "Rest day"
        return " + ".join(s.describe() for s in sessions)


@dataclass(frozen=True)
class WeeklySchedule:
    """Seven day schedule, always iterated Monday..Sunday."""
    days: Tuple[DaySchedule, ...] = field(
        default_factory=lambda: tuple(DaySchedule() for _ in WEEKDAYS)
    )

    def __post_init__(self):
        if len(self.days) != len(WEEKDAYS):
            raise ValueError(f"A weekly schedule needs {len(WEEKDAYS)} days, got {len(self.days)}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, DaySchedule]) -> "WeeklySchedule":
        """Build from a weekday -> DaySchedule mapping; missing days are rest days."""
        by_day = {Weekday.parse(day): schedule for day, schedule in mapping.items()}
        return cls(tuple(by_day.get(day, DaySchedule()) for day in WEEKDAYS))

    def get(self, weekday) -> DaySchedule:
        return self.days[WEEKDAYS.index(Weekday.parse(weekday))]

    def with_day(self, weekday, day_schedule: DaySchedule) -> "WeeklySchedule":
        """Return a new schedule with one weekday replaced."""
        index = WEEKDAYS.index(Weekday.parse(weekday))
        days = list(self.days)
        days[index] = day_schedule
        return WeeklySchedule(tuple(days))

    def items(self) -> Iterator[Tuple[Weekday, DaySchedule]]:
        return iter(zip(WEEKDAYS, self.days))


@dataclass(frozen=True)
class HydrationInputs:
    """Inputs for the session hydration planner."""
    session_min: float = config.HYDRATION_SESSION_MIN
    ambient_c: float = config.HYDRATION_AMBIENT_C
    sweat_rate_l_per_h: float = config.HYDRATION_SWEAT_RATE

    def __post_init__(self):
        _clamp_fields(self, "session_min", "ambient_c", "sweat_rate_l_per_h")


# Shareable field name -> (component, attribute)
STATE_FIELDS: Tuple[Tuple[str, str, str], ...] = (
    ("sex", "profile", "sex"),
    ("age", "profile", "age"),
    ("weightKg", "profile", "weight_kg"),
    ("heightCm", "profile", "height_cm"),
    ("weeklyKm", "load", "weekly_run_km"),
    ("weeklyBike", "load", "weekly_bike_km"),
    ("weeklySwim", "load", "weekly_swim_km"),
    ("weeklyStrength", "load", "weekly_strength_hours"),
    ("doubleSessionDays", "load", "double_session_days"),
    ("activityFactor", "day", "activity_factor"),
    ("dayType", "day", "day_type"),
    ("goal", "day", "goal"),
    ("carbLow", "ratios", "carb_low_per_kg"),
    ("carbHigh", "ratios", "carb_high_per_kg"),
    ("protein", "ratios", "protein_per_kg"),
    ("fat", "ratios", "fat_per_kg"),
    ("dark", "snapshot", "dark"),
)

STATE_FIELD_NAMES: Tuple[str, ...] = tuple(name for name, _, _ in STATE_FIELDS)

STATE_COMPONENTS = {
    "profile": AthleteProfile,
    "load": TrainingLoad,
    "day": DayContext,
    "ratios": MacroRatios,
}

ENUM_ATTRIBUTES = {"sex": Sex, "day_type": DayType, "goal": Goal}


def parse_flag(value: Any) -> bool:
    """True only for True itself or the text 'true'."""
    return value is True or value == "true"


def parse_state_field(attribute: str, value: Any) -> Any:
    """Parse one raw shareable value into what its component stores.

    Raises:
        InvalidEnumError: for an unknown sex, day type or goal
        InvalidNumberError: for a numeric field that is not a finite number
    """
    if attribute == "dark":
        return parse_flag(value)
    if attribute in ENUM_ATTRIBUTES:
        return ENUM_ATTRIBUTES[attribute].parse(value)
    return InputValidator.clamp(attribute, value)


def merge_state(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Defaults overlaid with the known shareable fields of state."""
    merged = config.get_default_state()
    merged.update({k: v for k, v in state.items() if k in STATE_FIELD_NAMES})
    return merged


@dataclass(frozen=True)
class InputSnapshot:
    """Everything one evaluation needs, passed by value."""
    profile: AthleteProfile = field(default_factory=AthleteProfile)
    load: TrainingLoad = field(default_factory=TrainingLoad)
    day: DayContext = field(default_factory=DayContext)
    ratios: MacroRatios = field(default_factory=MacroRatios)
    dark: bool = False
    schedule: Optional[WeeklySchedule] = None
    hydration: HydrationInputs = field(default_factory=HydrationInputs)

    @classmethod
    def defaults(cls) -> "InputSnapshot":
        """The reset state."""
        return cls.from_state(config.get_default_state())

    @classmethod
    def from_state(cls, state: Mapping[str, Any], **extra) -> "InputSnapshot":
        """Build from the flat shareable field set; absent fields take defaults."""
        merged = merge_state(state)
        parts: Dict[str, Dict[str, Any]] = {"profile": {}, "load": {}, "day": {}, "ratios": {}}
        for name, component, attribute in STATE_FIELDS:
            if component == "snapshot":
                continue
            parts[component][attribute] = merged[name]

        return cls(
            **{component: STATE_COMPONENTS[component](**kwargs) for component, kwargs in parts.items()},
            dark=parse_flag(merged["dark"]),
            **extra,
        )

    def to_state(self) -> Dict[str, Any]:
        """Flatten into the 17 shareable fields."""
        state = {}
        for name, component, attribute in STATE_FIELDS:
            source = self if component == "snapshot" else getattr(self, component)
            value = getattr(source, attribute)
            state[name] = value.value if isinstance(value, Enum) else value
        return state

    def updated(self, **fields) -> "InputSnapshot":
        """Return a new snapshot with some shareable fields changed."""
        state = self.to_state()
        unknown = set(fields) - set(STATE_FIELD_NAMES)
        if unknown:
            raise KeyError(f"Unknown state fields: {', '.join(sorted(unknown))}")
        state.update(fields)
        return InputSnapshot.from_state(state, schedule=self.schedule, hydration=self.hydration)


@dataclass(frozen=True)
class DerivedEnergy:
    """Energy model and daily target outputs (kcal)."""
    bmr: int
    non_training: int
    running_kcal: int
    biking_kcal: int
    swimming_kcal: int
    strength_kcal: int
    total_training: int
    day_adjustment: int
    goal_adjustment: int
    double_session_adjustment: int
    target_calories: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class DerivedMacros:
    """Macro targets in grams and kilocalories."""
    carb_g: int
    protein_g: int
    fat_g: int
    mode: str = "extended"
    carbs_per_kg: Optional[float] = None
    protein_per_kg: Optional[float] = None
    fat_percent: Optional[int] = None
    scale: float = 1.0
    training_load_multiplier: Optional[float] = None
    training_load_label: Optional[str] = None
    carb_range_g: Optional[Tuple[int, int]] = None

    @property
    def carb_kcal(self) -> int:
        return self.carb_g * 4

    @property
    def protein_kcal(self) -> int:
        return self.protein_g * 4

    @property
    def fat_kcal(self) -> int:
        return self.fat_g * 9

    @property
    def total_kcal(self) -> int:
        return self.carb_kcal + self.protein_kcal + self.fat_kcal

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update({
            "carb_kcal": self.carb_kcal,
            "protein_kcal": self.protein_kcal,
            "fat_kcal": self.fat_kcal,
            "total_kcal": self.total_kcal,
        })
        return data
