"""One-row CSV export of the daily targets."""

import logging
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from ..analysis.pipeline import Evaluation
from .share_link import format_value

logger = logging.getLogger(__name__)

HEADER = (
    "Sex", "Age", "Weight_kg", "Height_cm",
    "Running_km", "Cycling_km", "Swimming_km", "Strength_hrs",
    "Double_sessions", "Activity_factor", "Day_type", "Goal",
    "Target_kcal", "Carb_g", "Protein_g", "Fat_g",
    "Pre_CHO_gkg", "Post_CHO_gkg",
)


def export_row(evaluation: Evaluation) -> Dict[str, str]:
    """Header -> text value for one evaluated snapshot.

    Raises:
        ValueError: if the daily section or the fuel timing failed
    """
    if evaluation.energy is None or evaluation.macros is None or evaluation.fuel_timing is None:
        failed = ", ".join(sorted(evaluation.errors)) or "daily"
        raise ValueError(f"Cannot export targets, failed sections: {failed}")

    snapshot = evaluation.snapshot
    profile, load, day = snapshot.profile, snapshot.load, snapshot.day
    values = (
        profile.sex, profile.age, profile.weight_kg, profile.height_cm,
        load.weekly_run_km, load.weekly_bike_km, load.weekly_swim_km, load.weekly_strength_hours,
        load.double_session_days, day.activity_factor, day.day_type, day.goal,
        evaluation.energy.target_calories,
        evaluation.macros.carb_g, evaluation.macros.protein_g, evaluation.macros.fat_g,
        evaluation.fuel_timing.pre_carbs_per_kg, evaluation.fuel_timing.post_carbs_per_kg,
    )
    return dict(zip(HEADER, (format_value(v) for v in values)))


def to_dataframe(evaluation: Evaluation) -> pd.DataFrame:
    return pd.DataFrame([export_row(evaluation)], columns=list(HEADER))


def to_csv_text(evaluation: Evaluation) -> str:
    """Header row plus one data row, newline separated."""
    return to_dataframe(evaluation).to_csv(index=False, lineterminator="\n")


def default_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"nutrition_targets_{today.isoformat()}.csv"


def write_csv(evaluation: Evaluation, path: Union[str, Path, None] = None) -> Path:
    """Write the export and return the file path."""
    path = Path(path) if path else Path(default_filename())
    path.write_text(to_csv_text(evaluation))
    logger.info(f"Wrote targets export to {path}")
    return path
