"""Command-line interface for the endurance fuelling calculator."""

import logging
from pathlib import Path
from typing import Dict, Tuple

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import config
from .models import (
    DaySchedule,
    DayType,
    Goal,
    InputSnapshot,
    Intensity,
    Session,
    Sex,
    Weekday,
    WeeklySchedule,
)
from .analysis import NutritionPipeline
from .analysis.pipeline import Evaluation
from .analysis.schedule import WeeklyProjection
from .exports import decode_state, encode_state, write_csv
from .validation import NutritionInputError

console = Console()

# CLI option name -> share field name
OVERRIDE_FIELDS = {
    "sex": "sex",
    "age": "age",
    "weight": "weightKg",
    "height": "heightCm",
    "run_km": "weeklyKm",
    "bike_km": "weeklyBike",
    "swim_km": "weeklySwim",
    "strength_hours": "weeklyStrength",
    "double_days": "doubleSessionDays",
    "activity_factor": "activityFactor",
    "day_type": "dayType",
    "goal": "goal",
    "carb_low": "carbLow",
    "carb_high": "carbHigh",
    "protein": "protein",
    "fat": "fat",
    "dark": "dark",
}

CHART_WIDTH = 40


def _choices(enum_cls):
    return click.Choice([member.value for member in enum_cls])


def state_options(func):
    """Add --state plus one override option per shareable field."""
    options = [
        click.option("--state", "state_query", default="", help="Share query string or URL to start from"),
        click.option("--sex", type=_choices(Sex), help="Sex"),
        click.option("--age", type=float, help="Age in years"),
        click.option("--weight", type=float, help="Body mass in kg"),
        click.option("--height", type=float, help="Height in cm"),
        click.option("--run-km", type=float, help="Weekly running km"),
        click.option("--bike-km", type=float, help="Weekly cycling km"),
        click.option("--swim-km", type=float, help="Weekly swimming km"),
        click.option("--strength-hours", type=float, help="Weekly strength hours"),
        click.option("--double-days", type=int, help="Double-session days per week (0-7)"),
        click.option("--activity-factor", type=float, help="Lifestyle activity factor"),
        click.option("--day-type", type=_choices(DayType), help="Training day type"),
        click.option("--goal", type=_choices(Goal), help="Body composition goal"),
        click.option("--carb-low", type=float, help="Carbohydrate low bound, g/kg"),
        click.option("--carb-high", type=float, help="Carbohydrate high bound, g/kg"),
        click.option("--protein", type=float, help="Protein, g/kg"),
        click.option("--fat", type=float, help="Fat, g/kg"),
        click.option("--dark/--light", default=None, help="Theme flag carried in share links"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_state(state_query: str, overrides: Dict) -> Dict:
    """Decode --state, report malformed fields and apply overrides."""
    decoded = decode_state(state_query)
    for issue in decoded.issues:
        console.print(
            f"[orange3]⚠️  Ignored {issue.field}={issue.raw_value!r} ({issue.reason}), using default[/orange3]"
        )
    state = decoded.state
    for option, value in overrides.items():
        if value is not None and option in OVERRIDE_FIELDS:
            state[OVERRIDE_FIELDS[option]] = value
    return state


def parse_session(text: str) -> Session:
    """'60:run:hard' -> Session; the intensity defaults to easy."""
    parts = text.split(":")
    if len(parts) not in (2, 3):
        raise click.BadParameter(f"Expected MIN:TYPE[:INTENSITY], got {text!r}")
    try:
        minutes = float(parts[0])
    except ValueError:
        raise click.BadParameter(f"Invalid duration {parts[0]!r}") from None
    intensity = parts[2] if len(parts) == 3 else Intensity.EASY
    try:
        return Session(minutes, parts[1], intensity)
    except NutritionInputError as e:
        raise click.BadParameter(str(e)) from None


def parse_day(text: str) -> Tuple[Weekday, DaySchedule]:
    """'monday=60:run:hard+30:strength' -> (Weekday, DaySchedule)."""
    if "=" not in text:
        raise click.BadParameter(f"Expected DAY=SESSION[+SESSION], got {text!r}")
    day_text, sessions_text = text.split("=", 1)
    try:
        weekday = Weekday.parse(day_text)
    except NutritionInputError as e:
        raise click.BadParameter(str(e)) from None

    sessions = [parse_session(s) for s in sessions_text.split("+") if s.strip()]
    if not sessions:
        return weekday, DaySchedule()
    if len(sessions) > 2:
        raise click.BadParameter(f"At most two sessions per day, got {len(sessions)} for {weekday.value}")
    if len(sessions) == 1:
        return weekday, DaySchedule(sessions[0])
    return weekday, DaySchedule(sessions[0], double_session=True, second_session=sessions[1])


def print_errors(evaluation: Evaluation) -> None:
    for section, message in evaluation.errors.items():
        console.print(f"[red]❌ {section}: {message}[/red]")


def render_energy(evaluation: Evaluation) -> None:
    energy = evaluation.energy
    table = Table(title="Daily Energy", box=box.ROUNDED)
    table.add_column("Component", style="cyan")
    table.add_column("kcal", justify="right", style="magenta")

    table.add_row("BMR", f"{energy.bmr}")
    table.add_row("Non-training", f"{energy.non_training}")
    table.add_row("Running", f"{energy.running_kcal}")
    table.add_row("Cycling", f"{energy.biking_kcal}")
    table.add_row("Swimming", f"{energy.swimming_kcal}")
    table.add_row("Strength", f"{energy.strength_kcal}")
    table.add_row("Training total", f"{energy.total_training}")
    table.add_row("Day type", f"{energy.day_adjustment:+d}")
    table.add_row("Goal", f"{energy.goal_adjustment:+d}")
    table.add_row("Double sessions", f"{energy.double_session_adjustment:+d}")
    table.add_section()
    table.add_row("[bold]Target[/bold]", f"[bold green]{energy.target_calories}[/bold green]")
    console.print(table)


def render_macros(evaluation: Evaluation) -> None:
    macros = evaluation.macros
    table = Table(title=f"Macros ({macros.mode})", box=box.ROUNDED)
    table.add_column("Macro", style="cyan")
    table.add_column("Grams", justify="right")
    table.add_column("kcal", justify="right", style="magenta")

    table.add_row("Carbohydrate", f"{macros.carb_g}", f"{macros.carb_kcal}")
    table.add_row("Protein", f"{macros.protein_g}", f"{macros.protein_kcal}")
    table.add_row("Fat", f"{macros.fat_g}", f"{macros.fat_kcal}")
    table.add_section()
    table.add_row("[bold]Total[/bold]", "", f"[bold]{macros.total_kcal}[/bold]")
    console.print(table)

    if macros.training_load_multiplier is not None:
        low, high = macros.carb_range_g
        console.print(
            f"  Training load: [bold]{macros.training_load_label}[/bold] "
            f"(x{macros.training_load_multiplier:.2f}), carb range {low}-{high} g"
        )
    if macros.scale < 1:
        console.print(f"  Carbs and fat scaled by {macros.scale:.2f} to fit the calorie target")


def render_fuel_timing(evaluation: Evaluation) -> None:
    timing = evaluation.fuel_timing
    low, high = timing.protein_g_range
    console.print(Panel(
        f"Pre-session:  {timing.pre_carbs_per_kg:g} g/kg carbs ({timing.pre_carbs_g} g)\n"
        f"During:       {timing.during}\n"
        f"Post-session: {timing.post_carbs_per_kg:g} g/kg carbs ({timing.post_carbs_g} g) "
        f"+ {low}-{high} g protein",
        title=f"⏱️  Fuel Timing ({timing.day_type.value} day)",
        style="blue",
    ))


def render_week(projection: WeeklyProjection) -> None:
    table = Table(title="Weekly Plan", box=box.ROUNDED)
    table.add_column("Day", style="cyan", width=4)
    table.add_column("Sessions", width=36)
    table.add_column("Training", justify="right", style="magenta")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("C/P g/kg", justify="right")
    table.add_column("Fat %", justify="right")
    table.add_column("Under", justify="right", style="red")
    table.add_column("Optimal", justify="right", style="green")
    table.add_column("Over", justify="right", style="yellow")

    for day in projection.days:
        macros = day.macros
        under, best, over = day.scenarios
        table.add_row(
            day.weekday.short_name,
            day.description,
            f"{day.training_kcal}",
            f"{day.total_kcal}",
            f"{macros.carbs_per_kg:g}/{macros.protein_per_kg:g}",
            f"{macros.fat_percent}",
            f"{under.calories} ({under.carb_g}C/{under.protein_g}P/{under.fat_g}F)",
            f"{best.calories} ({best.carb_g}C/{best.protein_g}P/{best.fat_g}F)",
            f"{over.calories} ({over.carb_g}C/{over.protein_g}P/{over.fat_g}F)",
        )
    console.print(table)

    summary = projection.summary
    console.print(Panel(
        f"Optimal:      {summary.weekly_total} kcal/week, {summary.daily_average} kcal/day\n"
        f"Underfueling: {summary.underfuel_weekly} kcal/week ({summary.underfuel_daily}/day), "
        f"short {summary.shortfall_weekly} ({summary.shortfall_daily}/day)\n"
        f"Overfueling:  {summary.overfuel_weekly} kcal/week ({summary.overfuel_daily}/day), "
        f"surplus {summary.surplus_weekly} ({summary.surplus_daily}/day)",
        title="📊 Weekly Summary",
        style="blue",
    ))

    console.print("\n[bold]Daily energy[/bold] ([dim]░ resting, █ training[/dim])")
    for day in projection.days:
        bar = ""
        for segment in day.chart_segments:
            width = round(segment.kcal / projection.chart_max_kcal * CHART_WIDTH)
            bar += ("░" if segment.label == "resting" else "█") * width
        console.print(f"  {day.weekday.short_name} {bar} {day.total_kcal}")


@click.group()
def cli():
    """Endurance athlete calorie and macro calculator."""
    logging.basicConfig(level=config.get_log_level())


@cli.command()
@state_options
@click.option("--basic", is_flag=True, help="Use the basic 100%-budget macro allocation")
def daily(state_query, basic, **overrides):
    """Daily energy target, macros and fuel timing."""
    state = resolve_state(state_query, overrides)
    evaluation = NutritionPipeline().evaluate_raw(state, basic=basic)

    console.print(Panel.fit("🍝 Daily Fuelling Targets", style="bold blue"))
    if evaluation.energy is not None:
        render_energy(evaluation)
        render_macros(evaluation)
    if evaluation.fuel_timing is not None:
        render_fuel_timing(evaluation)
    print_errors(evaluation)


@cli.command()
@state_options
@click.option("--day", "days", multiple=True, help="DAY=MIN:TYPE[:INTENSITY][+MIN:TYPE[:INTENSITY]]")
@click.option("--export", help="Export the week to .csv or .json")
def week(state_query, days, export, **overrides):
    """Weekly schedule with under/optimal/over fuelling scenarios."""
    state = resolve_state(state_query, overrides)
    schedule = WeeklySchedule.from_mapping(dict(parse_day(d) for d in days))
    evaluation = NutritionPipeline().evaluate_raw(state, schedule=schedule)

    console.print(Panel.fit("📅 Weekly Fuelling Plan", style="bold blue"))
    if evaluation.week is None:
        print_errors(evaluation)
        return

    render_week(evaluation.week)

    if export:
        plan_df = evaluation.week.to_dataframe()
        if export.endswith('.csv'):
            plan_df.to_csv(export, index=False)
        elif export.endswith('.json'):
            plan_df.to_json(export, orient='records')
        else:
            export = export + '.csv'
            plan_df.to_csv(export, index=False)
        console.print(f"\n[green]✅ Plan exported to {export}[/green]")
    print_errors(evaluation)


@cli.command()
@state_options
@click.option("--minutes", default=config.HYDRATION_SESSION_MIN, type=float, help="Session duration in minutes")
@click.option("--ambient", default=config.HYDRATION_AMBIENT_C, type=float, help="Ambient temperature in °C")
@click.option("--sweat-rate", default=config.HYDRATION_SWEAT_RATE, type=float, help="Sweat rate in L/h")
def hydration(state_query, minutes, ambient, sweat_rate, **overrides):
    """Fluid and sodium needs for one session."""
    state = resolve_state(state_query, overrides)
    evaluation = NutritionPipeline().evaluate_raw(
        state, hydration={"session_min": minutes, "ambient_c": ambient, "sweat_rate_l_per_h": sweat_rate}
    )
    plan = evaluation.hydration
    if plan is None:
        print_errors(evaluation)
        return

    table = Table(title="💧 Session Hydration", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Duration", f"{plan.session_min:g} min")
    table.add_row("Fluid per hour", f"{plan.fluid_l_per_h:.2f} L/h")
    table.add_row("Fluid needed", f"{plan.fluid_needed_l:.2f} L")
    table.add_row("Sodium concentration", f"{plan.sodium_mg_per_l:g} mg/L")
    table.add_row("Sodium needed", f"{plan.sodium_needed_mg} mg")
    console.print(table)


@cli.command("race-week")
@state_options
def race_week(state_query, **overrides):
    """Race-week carbohydrate plan scaled to body mass."""
    state = resolve_state(state_query, overrides)
    evaluation = NutritionPipeline().evaluate_raw(state)
    plan = evaluation.race_week
    if plan is None:
        print_errors(evaluation)
        return

    table = Table(title="🏁 Race Week", box=box.ROUNDED)
    table.add_column("Phase", style="cyan", no_wrap=True)
    table.add_column("Carbs", justify="right", style="magenta", no_wrap=True)
    table.add_column("Guidance")
    for step in plan.steps:
        carbs = "—"
        if step.carbs_g:
            carbs = f"{step.carbs_g[0]}-{step.carbs_g[1]} g"
        table.add_row(step.phase, carbs, step.guidance)
    console.print(table)

    console.print(f"\n[bold]Pre-race meals:[/bold] {', '.join(plan.pre_race_meals)}")
    console.print(f"[dim]{plan.pre_race_note}[/dim]")


@cli.command()
@state_options
def share(state_query, **overrides):
    """Print the share query string for the current inputs."""
    state = resolve_state(state_query, overrides)
    try:
        snapshot = InputSnapshot.from_state(state)
    except NutritionInputError as e:
        console.print(f"[red]❌ {e}[/red]")
        return
    click.echo(f"?{encode_state(snapshot)}")


@cli.command("export-csv")
@state_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default nutrition_targets_<date>.csv)")
def export_csv(state_query, output, **overrides):
    """Write the daily targets as a one-row CSV file."""
    state = resolve_state(state_query, overrides)
    evaluation = NutritionPipeline().evaluate_raw(state)
    try:
        path = write_csv(evaluation, Path(output) if output else None)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        return
    console.print(f"[green]✅ Targets exported to {path}[/green]")


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[orange3]Operation cancelled by user.[/orange3]")


if __name__ == "__main__":
    main()
