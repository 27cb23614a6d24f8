"""Tests for the energy model."""

import pytest
from endurance_fuel.analysis.energy import EnergyModel
from endurance_fuel.models import AthleteProfile, TrainingLoad
from endurance_fuel.validation import InvalidEnumError


class TestEnergyModel:
    """Test BMR, lifestyle and training energy estimates."""

    def setup_method(self):
        """Set up test fixtures."""
        self.model = EnergyModel()
        self.profile = AthleteProfile()

    def test_compute_bmr_male(self):
        """Test Mifflin-St Jeor for the default male profile."""
        assert self.model.compute_bmr(self.profile) == pytest.approx(1883.75)

    def test_compute_bmr_female(self):
        """Test the female constant is 166 kcal below the male one."""
        female = AthleteProfile(sex="female")
        assert self.model.compute_bmr(female) == pytest.approx(1717.75)

    def test_compute_non_training(self):
        """Test lifestyle energy is the rounded BMR times the activity factor."""
        assert self.model.compute_non_training(1884, 1.45) == 2732
        assert self.model.compute_non_training(1884, 1.0) == 1884

    def test_running_kcal(self):
        """Test 60 km/week at 87 kg."""
        assert self.model.running_kcal_per_day(87, 60) == pytest.approx(745.714, abs=1e-3)
        training = self.model.compute_training_energy(self.profile, TrainingLoad())
        assert training["running"] == 746
        assert training["total"] == 746

    def test_training_energy_all_disciplines(self):
        """Test each discipline is rounded before summing."""
        load = TrainingLoad(
            weekly_run_km=60,
            weekly_bike_km=100,
            weekly_swim_km=10,
            weekly_strength_hours=3,
        )
        training = self.model.compute_training_energy(self.profile, load)
        assert training["running"] == 746
        assert training["biking"] == 497
        assert training["swimming"] == 149
        assert training["strength"] == 224
        assert training["total"] == 1616

    def test_no_training(self):
        """Test zero volume gives zero training energy."""
        load = TrainingLoad(weekly_run_km=0)
        assert self.model.compute_training_energy(self.profile, load)["total"] == 0

    def test_session_calories(self):
        """Test MET based session cost."""
        assert self.model.compute_session_calories(70, 60, "run", "easy") == 441
        assert self.model.compute_session_calories(80, 45, "strength", "hard") == 315
        assert self.model.compute_session_calories(70, 30, "swim", "severe") == 404

    def test_session_zero_duration(self):
        """Test a zero-length session costs nothing, whatever its tags."""
        assert self.model.compute_session_calories(70, 0, "run", "easy") == 0
        assert self.model.compute_session_calories(70, 0, "yoga", "chill") == 0
        assert self.model.compute_session_calories(70, -20, "run", "easy") == 0

    def test_session_duration_clamped(self):
        """Test durations above 300 minutes count as 300."""
        assert self.model.compute_session_calories(70, 400, "run", "easy") == 2205

    def test_session_invalid_type(self):
        """Test unknown session types are rejected."""
        with pytest.raises(InvalidEnumError):
            self.model.compute_session_calories(70, 60, "yoga", "easy")
        with pytest.raises(InvalidEnumError):
            self.model.compute_session_calories(70, 60, "run", "moderate")
