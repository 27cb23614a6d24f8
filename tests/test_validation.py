"""Tests for input validation and the input value objects."""

import pytest
from endurance_fuel.config import config
from endurance_fuel.models import (
    AthleteProfile,
    DayContext,
    InputSnapshot,
    Session,
    TrainingLoad,
    WeeklySchedule,
)
from endurance_fuel.validation import InputValidator, InvalidEnumError, InvalidNumberError


class TestInputValidator:
    """Test the clamp policy."""

    def test_clamp_below_minimum(self):
        """Test negative values clamp to zero."""
        assert InputValidator.clamp("weight_kg", -5) == 0
        assert InputValidator.clamp("weekly_run_km", -1.5) == 0

    def test_clamp_above_maximum(self):
        """Test bounded fields clamp to their maximum."""
        assert InputValidator.clamp("double_session_days", 9) == 7
        assert InputValidator.clamp("duration_min", 500) == 300

    def test_valid_values_pass_through(self):
        """Test in-range values are unchanged."""
        assert InputValidator.clamp("weight_kg", 72.5) == 72.5
        assert InputValidator.clamp("ambient_c", -10) == -10
        assert InputValidator.clamp("weight_kg", "70") == 70.0

    def test_invalid_numbers(self):
        """Test non-numeric and non-finite values raise."""
        for bad in ("abc", float("nan"), float("inf"), None, True):
            with pytest.raises(InvalidNumberError):
                InputValidator.clamp("weight_kg", bad)

    def test_validate_reports_suggestion(self):
        """Test validate returns the clamp target."""
        result = InputValidator.validate("double_session_days", 12)
        assert not result.is_valid
        assert result.suggested_value == 7


class TestInputModels:
    """Test value objects and the snapshot."""

    def test_profile_clamped(self):
        """Test anthropometrics floor at zero."""
        profile = AthleteProfile(weight_kg=-10, age=-1)
        assert profile.weight_kg == 0
        assert profile.age == 0

    def test_invalid_enums(self):
        """Test unknown categorical values are rejected."""
        with pytest.raises(InvalidEnumError):
            AthleteProfile(sex="other")
        with pytest.raises(InvalidEnumError):
            DayContext(day_type="sprint")
        with pytest.raises(InvalidEnumError):
            Session(60, "rowing", "easy")

    def test_estimated_weekly_hours(self):
        """Test 20 km counts as one hour."""
        load = TrainingLoad(weekly_run_km=40, weekly_bike_km=100, weekly_swim_km=0, weekly_strength_hours=2)
        assert load.estimated_weekly_hours == pytest.approx(9.0)

    def test_session_describe(self):
        """Test session descriptions."""
        assert Session(60, "run", "hard").describe() == "60min threshold run"
        assert Session(47.5, "swim", "severe").describe() == "47.5min VO2max swim"
        assert Session(30, "strength", "severe").describe() == "30min strength"

    def test_schedule_requires_seven_days(self):
        """Test a schedule must hold a full week."""
        with pytest.raises(ValueError):
            WeeklySchedule(days=())

    def test_defaults_round_trip(self):
        """Test the reset snapshot flattens back to the default state."""
        assert InputSnapshot.defaults().to_state() == config.get_default_state()

    def test_updated(self):
        """Test updating builds a new snapshot."""
        snapshot = InputSnapshot.defaults()
        lighter = snapshot.updated(weightKg=70, goal="slight_loss")
        assert lighter.profile.weight_kg == 70
        assert lighter.day.goal.value == "slight_loss"
        assert snapshot.profile.weight_kg == 87

    def test_dark_flag_parsed(self):
        """Test only True or the text 'true' turn the dark flag on."""
        assert InputSnapshot.from_state({"dark": "false"}).dark is False
        assert InputSnapshot.from_state({"dark": "yes"}).dark is False
        assert InputSnapshot.from_state({"dark": "true"}).dark is True
        assert InputSnapshot.from_state({"dark": True}).dark is True

    def test_double_session_days_whole(self):
        """Test double-session days are rounded to a whole count."""
        assert TrainingLoad(double_session_days=2.5).double_session_days == 3
        assert TrainingLoad(double_session_days=2.4).double_session_days == 2
        assert InputSnapshot.from_state({"doubleSessionDays": "1.6"}).load.double_session_days == 2

    def test_updated_unknown_field(self):
        """Test unknown fields are rejected."""
        with pytest.raises(KeyError):
            InputSnapshot.defaults().updated(shoeSize=44)
