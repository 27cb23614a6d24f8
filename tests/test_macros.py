"""Tests for macro allocation."""

import pytest
from endurance_fuel.analysis.macros import MacroAllocator
from endurance_fuel.models import AthleteProfile, MacroRatios, Session, TrainingLoad
from endurance_fuel.numeric import round_half_up


class TestBasicAllocation:
    """Test the basic 100%-budget allocation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.allocator = MacroAllocator()
        self.profile = AthleteProfile()
        self.ratios = MacroRatios()

    def test_no_scaling_needed(self):
        """Test macros below the target are left as computed."""
        macros = self.allocator.allocate_basic(self.profile, self.ratios, 3828)
        assert macros.mode == "basic"
        assert macros.carb_g == 566
        assert macros.protein_g == 157
        assert macros.fat_g == 96
        assert macros.scale == 1.0
        assert macros.total_kcal == 566 * 4 + 157 * 4 + 96 * 9

    def test_scaled_down(self):
        """Test carbs and fat shrink, protein does not."""
        macros = self.allocator.allocate_basic(self.profile, self.ratios, 2000)
        assert macros.scale == pytest.approx(2000 / 3756)
        assert macros.carb_g == 301
        assert macros.fat_g == 51
        assert macros.protein_g == 157

    def test_inverted_carb_range(self):
        """Test carbHigh below carbLow uses the same midpoint."""
        inverted = MacroRatios(carb_low_per_kg=8, carb_high_per_kg=5)
        macros = self.allocator.allocate_basic(self.profile, inverted, 3828)
        assert macros.carb_g == 566

    def test_idempotent(self):
        """Test identical inputs give identical outputs."""
        first = self.allocator.allocate_basic(self.profile, self.ratios, 3000)
        second = self.allocator.allocate_basic(self.profile, self.ratios, 3000)
        assert first == second


class TestExtendedAllocation:
    """Test the training-load aware allocation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.allocator = MacroAllocator()
        self.profile = AthleteProfile()
        self.ratios = MacroRatios()

    def test_training_load_multiplier(self):
        """Test 2% per estimated weekly hour, capped at 1.3."""
        assert self.allocator.training_load_multiplier(TrainingLoad()) == pytest.approx(1.06)
        assert self.allocator.training_load_multiplier(TrainingLoad(weekly_run_km=0)) == 1.0
        heavy = TrainingLoad(weekly_run_km=1000)
        assert self.allocator.training_load_multiplier(heavy) == 1.3
        doubles = TrainingLoad(weekly_run_km=0, double_session_days=7)
        assert self.allocator.training_load_multiplier(doubles) == pytest.approx(1.014)

    def test_training_load_label(self):
        """Test the load label thresholds."""
        assert MacroAllocator.training_load_label(1.0) == "Light"
        assert MacroAllocator.training_load_label(1.1) == "Moderate"
        assert MacroAllocator.training_load_label(1.19) == "Moderate"
        assert MacroAllocator.training_load_label(1.2) == "Heavy"

    def test_default_allocation(self):
        """Test the reference athlete against a 3828 kcal target."""
        macros = self.allocator.allocate_extended(self.profile, TrainingLoad(), self.ratios, 3828)
        assert macros.mode == "extended"
        assert macros.carb_range_g == (461, 738)
        assert macros.protein_g == 159
        assert macros.scale == pytest.approx(3637 / 3970)
        assert macros.carb_g == 549
        assert macros.fat_g == 95
        assert macros.training_load_label == "Light"

    def test_within_budget_unscaled(self):
        """Test macros under 95% of a high target keep their adjusted grams."""
        macros = self.allocator.allocate_extended(self.profile, TrainingLoad(), self.ratios, 6000)
        low, high = macros.carb_range_g
        assert macros.scale == 1.0
        assert macros.carb_g == round_half_up((low + high) / 2) == 600
        assert macros.protein_g == 159
        # round(96 g base fat x 1.082)
        assert macros.fat_g == 104

    def test_allocate_dispatch(self):
        """Test the basic flag selects the basic allocation."""
        load = TrainingLoad()
        assert self.allocator.allocate(self.profile, load, self.ratios, 3828).mode == "extended"
        assert self.allocator.allocate(self.profile, load, self.ratios, 3828, basic=True).mode == "basic"

    def test_idempotent(self):
        """Test identical inputs give identical outputs."""
        load = TrainingLoad(weekly_bike_km=150)
        first = self.allocator.allocate_extended(self.profile, load, self.ratios, 4200)
        second = self.allocator.allocate_extended(self.profile, load, self.ratios, 4200)
        assert first == second


class TestPerDayAllocation:
    """Test session driven per-day macros."""

    def setup_method(self):
        """Set up test fixtures."""
        self.allocator = MacroAllocator()

    def test_carbs_per_kg_strength_and_hitt(self):
        """Test the strength and HIIT rows ignore duration."""
        assert self.allocator.carbs_per_kg(20, "strength", "hard") == 5.5
        assert self.allocator.carbs_per_kg(200, "hitt", "severe") == 8.5

    def test_carbs_per_kg_endurance_buckets(self):
        """Test endurance duration buckets and their boundaries."""
        assert self.allocator.carbs_per_kg(30, "run", "easy") == 4.0
        assert self.allocator.carbs_per_kg(30, "run", "hard") == 6.0
        assert self.allocator.carbs_per_kg(45, "run", "easy") == 5.5
        assert self.allocator.carbs_per_kg(60, "swim", "severe") == 7.0
        assert self.allocator.carbs_per_kg(90, "bike", "hard") == 8.5
        assert self.allocator.carbs_per_kg(180, "bike", "severe") == 9.5
        assert self.allocator.carbs_per_kg(200, "run", "easy") == 9.0

    def test_protein_per_kg(self):
        """Test the protein lookup."""
        assert self.allocator.protein_per_kg("strength", "severe") == 2.0
        assert self.allocator.protein_per_kg("hitt", "easy") == 1.4
        assert self.allocator.protein_per_kg("run", "hard") == 1.4

    def test_rest_day_defaults(self):
        """Test an empty session list."""
        assert self.allocator.daily_carbs_per_kg([]) == 3.0
        assert self.allocator.daily_protein_per_kg([]) == 1.2

    def test_daily_carbs_takes_maximum(self):
        """Test the most demanding session sets the day's carbs."""
        sessions = [Session(30, "run", "easy"), Session(120, "bike", "hard")]
        assert self.allocator.daily_carbs_per_kg(sessions) == 8.5

    def test_protein_priority(self):
        """Test strength over HIIT over endurance."""
        assert self.allocator.daily_protein_per_kg(
            [Session(60, "run", "hard"), Session(30, "hitt", "easy")]
        ) == 1.4
        assert self.allocator.daily_protein_per_kg(
            [Session(30, "hitt", "severe"), Session(45, "strength", "easy")]
        ) == 1.6

    def test_protein_first_strength_session_wins(self):
        """Test the first strength session's intensity is used, not the hardest."""
        sessions = [Session(30, "strength", "easy"), Session(30, "strength", "severe")]
        assert self.allocator.daily_protein_per_kg(sessions) == 1.6

    def test_protein_hardest_endurance(self):
        """Test endurance-only days use the most intense session."""
        sessions = [Session(60, "run", "easy"), Session(60, "bike", "severe")]
        assert self.allocator.daily_protein_per_kg(sessions) == 1.6

    def test_fat_for_budget(self):
        """Test fat fills the 95% budget with its two floors."""
        assert self.allocator.fat_for_budget(50, 3000, 300, 100) == 139
        # 15% of calories floor
        assert self.allocator.fat_for_budget(50, 3000, 600, 100) == 50
        # 1 g/kg floor
        assert self.allocator.fat_for_budget(70, 3000, 500, 100) == 70

    def test_allocate_day_rest(self):
        """Test a rest day at 70 kg."""
        macros = self.allocator.allocate_day(70, 2500, [])
        assert macros.mode == "per_day"
        assert macros.carbs_per_kg == 3.0
        assert macros.protein_per_kg == 1.2
        assert macros.carb_g == 210
        assert macros.protein_g == 84
        assert macros.fat_g == 133
        assert macros.fat_percent == 48

    def test_allocate_day_zero_calories(self):
        """Test fat percent is zero without calories."""
        assert self.allocator.allocate_day(70, 0, []).fat_percent == 0
