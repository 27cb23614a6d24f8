"""Tests for fuel timing, hydration and race-week planning."""

import pytest
from endurance_fuel.analysis.fueling import FuelTimingPlanner, HydrationPlanner, RaceWeekPlanner
from endurance_fuel.models import DayType, HydrationInputs
from endurance_fuel.validation import InvalidEnumError, InvalidNumberError


class TestFuelTimingPlanner:
    """Test peri-workout carbohydrate guidance."""

    def setup_method(self):
        """Set up test fixtures."""
        self.planner = FuelTimingPlanner()

    def test_key_day(self):
        """Test key day guidance for 87 kg."""
        timing = self.planner.plan("key", 87)
        assert timing.day_type == DayType.KEY
        assert timing.pre_carbs_per_kg == 2.0
        assert timing.pre_carbs_g == 174
        assert timing.post_carbs_per_kg == 1.0
        assert timing.post_carbs_g == 87
        assert timing.during == "30–60 g/h if >75 min or back-to-back"
        assert timing.protein_g_range == (20, 30)

    def test_normal_and_recovery_days(self):
        """Test lighter days at 70 kg."""
        normal = self.planner.plan(DayType.NORMAL, 70)
        assert (normal.pre_carbs_g, normal.post_carbs_g) == (70, 56)
        assert normal.during == "Optional small sip"

        recovery = self.planner.plan("recovery", 70)
        assert (recovery.pre_carbs_g, recovery.post_carbs_g) == (35, 56)
        assert recovery.during == "Not required"

    def test_invalid_day_type(self):
        """Test unknown day types are rejected."""
        with pytest.raises(InvalidEnumError):
            self.planner.plan("rest", 70)


class TestHydrationPlanner:
    """Test fluid and sodium estimates."""

    def setup_method(self):
        """Set up test fixtures."""
        self.planner = HydrationPlanner()

    def test_defaults(self):
        """Test 75 min at 18 °C with 0.8 L/h sweat rate."""
        plan = self.planner.plan(HydrationInputs())
        assert plan.fluid_l_per_h == pytest.approx(0.8)
        assert plan.fluid_needed_l == pytest.approx(1.0)
        assert plan.sodium_mg_per_l == 560
        assert plan.sodium_needed_mg == 560

    def test_hot_and_heavy_sweater(self):
        """Test the fluid rate is capped at 1.2 L/h."""
        plan = self.planner.plan(HydrationInputs(session_min=120, ambient_c=30, sweat_rate_l_per_h=2.0))
        assert plan.fluid_l_per_h == 1.2
        assert plan.fluid_needed_l == pytest.approx(2.4)
        assert plan.sodium_mg_per_l == 800
        assert plan.sodium_needed_mg == 1920

    def test_cold_and_light_sweater(self):
        """Test the 0.4 L/h floor and the base sodium concentration."""
        plan = self.planner.plan(HydrationInputs(session_min=60, ambient_c=5, sweat_rate_l_per_h=0.2))
        assert plan.fluid_l_per_h == 0.4
        assert plan.sodium_mg_per_l == 500
        assert plan.sodium_needed_mg == 200

    def test_invalid_input(self):
        """Test non-numeric hydration input is rejected."""
        with pytest.raises(InvalidNumberError):
            HydrationInputs(sweat_rate_l_per_h="lots")


class TestRaceWeekPlanner:
    """Test the race-week checklist."""

    def setup_method(self):
        """Set up test fixtures."""
        self.plan = RaceWeekPlanner().plan(70)

    def test_phases_in_order(self):
        """Test the five phases keep their order."""
        assert [step.phase for step in self.plan.steps] == [
            "Mon–Wed", "Thu–Fri", "Race-eve dinner", "Race morning", "Post-race",
        ]

    def test_gram_ranges(self):
        """Test g/kg ranges converted for 70 kg."""
        grams = [step.carbs_g for step in self.plan.steps]
        assert grams == [(420, 490), (490, 630), None, (70, 210), (70, 84)]

    def test_meal_ideas(self):
        """Test pre-race meal ideas."""
        assert "Bagel + honey" in self.plan.pre_race_meals
        assert len(self.plan.pre_race_meals) == 3
