"""Configuration management for the endurance fuelling calculator."""

import os
from typing import Any, Dict
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING")

    # Daily target clamp (kcal)
    TARGET_KCAL_MIN: int = int(os.getenv("TARGET_KCAL_MIN", "1800"))
    TARGET_KCAL_MAX: int = int(os.getenv("TARGET_KCAL_MAX", "6000"))

    # Macro budgets
    MACRO_BUDGET_FRACTION: float = float(os.getenv("MACRO_BUDGET_FRACTION", "0.95"))  # rest left for fibre/micronutrients
    BASIC_MACRO_BUDGET_FRACTION: float = 1.0
    MIN_FAT_FRACTION: float = float(os.getenv("MIN_FAT_FRACTION", "0.15"))
    MIN_FAT_G_PER_KG: float = float(os.getenv("MIN_FAT_G_PER_KG", "1.0"))

    # Training load multiplier ceiling
    MAX_TRAINING_LOAD_MULTIPLIER: float = float(os.getenv("MAX_TRAINING_LOAD_MULTIPLIER", "1.3"))

    # Fuelling scenario factors (-15% / +10%)
    UNDERFUEL_FACTOR: float = float(os.getenv("UNDERFUEL_FACTOR", "0.85"))
    OVERFUEL_FACTOR: float = float(os.getenv("OVERFUEL_FACTOR", "1.10"))
    UNDERFUEL_CARB_FACTOR: float = float(os.getenv("UNDERFUEL_CARB_FACTOR", "0.8"))
    OVERFUEL_CARB_FACTOR: float = float(os.getenv("OVERFUEL_CARB_FACTOR", "1.2"))

    # Extra energy per double-session day (kcal)
    DOUBLE_SESSION_KCAL: int = int(os.getenv("DOUBLE_SESSION_KCAL", "150"))

    # Hydration defaults
    HYDRATION_SESSION_MIN: float = float(os.getenv("HYDRATION_SESSION_MIN", "75"))
    HYDRATION_AMBIENT_C: float = float(os.getenv("HYDRATION_AMBIENT_C", "18"))
    HYDRATION_SWEAT_RATE: float = float(os.getenv("HYDRATION_SWEAT_RATE", "0.8"))  # L/h

    # Shareable state defaults, keyed by query-string field name
    DEFAULT_STATE: Dict[str, Any] = {
        "sex": "male",
        "age": 27,
        "weightKg": 87,
        "heightCm": 183,
        "weeklyKm": 60,
        "weeklyBike": 0,
        "weeklySwim": 0,
        "weeklyStrength": 0,
        "doubleSessionDays": 0,
        "activityFactor": 1.45,
        "dayType": "key",
        "goal": "performance",
        "carbLow": 5,
        "carbHigh": 8,
        "protein": 1.8,
        "fat": 1.1,
        "dark": False,
    }

    @classmethod
    def get_default_state(cls) -> Dict[str, Any]:
        """Return a fresh copy of the shareable default state."""
        return dict(cls.DEFAULT_STATE)

    @classmethod
    def get_log_level(cls) -> str:
        """Get the configured log level name."""
        return cls.LOG_LEVEL.upper()


config = Config()
