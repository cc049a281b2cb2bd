"""
Command-Line Interface for FusionWealth.

Purpose
-------
Runs the decision engine on scenario files without writing Python code.

Commands
--------
- evaluate: Full evaluation of a scenario (Merton plan, goals, fitness)
- simulate: Monte Carlo wealth percentiles only
- config: Validate, display and create scenario files
- info: Package and dependency versions

Example Usage
-------------
    # Create a starter scenario and evaluate it
    $ fusionwealth config create household.json --template basic
    $ fusionwealth evaluate household.json --seed 42 --output evaluation.json

    # Percentile table for a contribution plan
    $ fusionwealth simulate --initial 1000000 --years 30 --contribution 20000 -o paths.csv

    # Validate a scenario
    $ fusionwealth config validate household.json
"""

from __future__ import annotations

import json
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings, SimulationConfig
from .exceptions import FusionWealthError
from .utils import configure_logging, format_currency

logger = logging.getLogger(__name__)

__version__ = "0.1.0"


@click.group()
@click.version_option(version=__version__, prog_name="fusionwealth")
@click.option("--quiet", "-q", is_flag=True, help="Plain output, no tables")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool) -> None:
    """
    FusionWealth - Household wealth-planning decision engine.

    Merton allocation, Monte Carlo projections, goal funding gaps and a
    composite financial-fitness score from a single scenario file.

    Use 'fusionwealth COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.effective_log_level)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = Console()
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------

@main.command()
@click.argument("scenario_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--seed", "-s",
    type=int,
    default=None,
    help="Monte Carlo seed (default: the scenario's simulation seed)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the full evaluation to a JSON file"
)
@click.pass_context
def evaluate(
    ctx: click.Context,
    scenario_file: Path,
    seed: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Evaluate a scenario file.

    Example:
        fusionwealth evaluate household.json --seed 7
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .orchestrator import Orchestrator
    from .serialization import load_scenario, save_evaluation

    try:
        scenario = load_scenario(scenario_file)
    except FusionWealthError as e:
        click.echo(f"Error loading scenario: {e}", err=True)
        sys.exit(1)
    logger.debug("Loaded scenario %r from %s", scenario.name, scenario_file)

    engine = scenario.engine
    if settings.n_workers > 1:
        engine = engine.model_copy(update={
            "simulation": engine.simulation.model_copy(update={"n_workers": settings.n_workers})
        })

    result = Orchestrator(engine).evaluate(*scenario.inputs(), seed=seed)
    merton = result.merton

    if quiet:
        click.echo(f"Fitness score: {result.fitness_score}")
        click.echo(f"Persona: {merton.persona}")
        click.echo(f"Merton fraction: {merton.merton_fraction:.4f}")
        for p in result.prescriptions:
            click.echo(
                f"Goal {p.goal_id}: success {p.success_rate:.1f}%, "
                f"increase {p.increase_monthly_contribution:.0f}/month"
            )
    else:
        summary = Table(title=f"Merton Plan {scenario.name}".strip(), show_header=True)
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", justify="right", style="green")
        summary.add_row("Persona", merton.persona)
        summary.add_row("Risk aversion (γ)", f"{merton.gamma:.2f}")
        summary.add_row("Merton fraction (φ)", f"{merton.merton_fraction:.1%}")
        summary.add_row("Net monthly income", format_currency(merton.net_monthly_income, unit=""))
        summary.add_row("Tax leakage", format_currency(merton.tax_leakage, unit=""))
        summary.add_row("Safe consumption", format_currency(merton.safe_monthly_consumption, unit=""))
        summary.add_row("Savings requirement", format_currency(merton.savings_requirement, unit=""))
        summary.add_row("Human capital", format_currency(merton.human_capital, unit="Cr", decimals=2))
        summary.add_row("Adjusted μ", f"{result.adjusted_mu:.2%}")
        summary.add_row("Quality score", f"{result.quality_score:.1f}")
        console.print(summary)

        if result.prescriptions:
            goals = Table(title="Goal Prescriptions", show_header=True)
            goals.add_column("Goal", style="cyan")
            goals.add_column("Future target", justify="right")
            goals.add_column("Success", justify="right")
            goals.add_column("Extra / month", justify="right")
            goals.add_column("Delay (months)", justify="right")
            for p in result.prescriptions:
                delay = "-" if p.adjust_timeline_months is None else str(p.adjust_timeline_months)
                extra = format_currency(p.increase_monthly_contribution, decimals=0, unit="")
                if not p.converged:
                    extra += " *"
                goals.add_row(
                    scenario.state.goal(p.goal_id).label or p.goal_id,
                    format_currency(p.future_target, unit="Cr", decimals=2),
                    f"{p.success_rate:.1f}%",
                    extra,
                    delay,
                )
            console.print(goals)

        console.print(Panel(
            f"[bold]Fitness score: {result.fitness_score}[/bold]",
            border_style="green" if result.fitness_score >= 70 else "yellow",
        ))

    if output:
        save_evaluation(result, output)
        if not quiet:
            console.print(f"[green]✓ Evaluation saved to {output}[/green]")


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------

@main.command()
@click.option("--initial", type=float, default=0.0, help="Initial wealth")
@click.option("--years", "-T", type=float, default=30.0, help="Horizon in years (default: 30)")
@click.option("--mu", type=float, default=0.10, help="Annual expected return (default: 0.10)")
@click.option("--sigma", type=float, default=0.18, help="Annual volatility (default: 0.18)")
@click.option("--contribution", type=float, default=0.0, help="Monthly contribution")
@click.option(
    "--simulations", "-n",
    type=int,
    default=500,
    help="Number of Monte Carlo paths (default: 500)"
)
@click.option("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the monthly percentile table to a CSV file"
)
@click.pass_context
def simulate(
    ctx: click.Context,
    initial: float,
    years: float,
    mu: float,
    sigma: float,
    contribution: float,
    simulations: int,
    seed: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Run a Monte Carlo wealth simulation.

    μ and σ are clamped to the engine's market bounds before simulating.

    Example:
        fusionwealth simulate --initial 1e6 -T 30 --contribution 20000 --seed 42
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .market import MarketParameters
    from .simulation import GBMSimulator

    try:
        config = SimulationConfig(n_paths=simulations, n_workers=settings.n_workers, seed=seed)
    except ValueError as e:
        click.echo(f"Invalid simulation settings: {e}", err=True)
        sys.exit(1)

    market = MarketParameters(mu, sigma).clamped()
    result = GBMSimulator(config).run(
        initial, years, market.mu, market.sigma, contribution, seed=seed
    )
    frame = result.to_frame()

    if quiet:
        click.echo(f"Median terminal wealth: {result.median[-1]:.2f}")
    else:
        table = Table(title="Simulation Results", show_header=True)
        table.add_column("Year", justify="right", style="cyan")
        for column in frame.columns:
            table.add_column(column.upper(), justify="right")
        step = 12 * max(1, int(round(years / 10)))
        for month in range(0, result.months + 1, step):
            table.add_row(
                str(month // 12),
                *(format_currency(v, unit="Cr", decimals=2) for v in frame.loc[month]),
            )
        console.print(table)
        console.print(
            f"[dim]{result.n_paths:,} paths, μ={market.mu:.2%}, σ={market.sigma:.2%}, seed={seed}[/dim]"
        )

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output)
        if not quiet:
            console.print(f"[green]✓ Percentiles saved to {output}[/green]")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

@main.group()
def config() -> None:
    """
    Scenario file management commands.

    Validate, display, and create scenario files.
    """
    pass


@config.command("validate")
@click.argument("scenario_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, scenario_file: Path) -> None:
    """
    Validate a scenario file.

    Example:
        fusionwealth config validate household.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    from .serialization import load_scenario

    try:
        scenario = load_scenario(scenario_file)
    except FusionWealthError as e:
        click.echo(f"Scenario validation failed: {e}", err=True)
        sys.exit(1)

    state = scenario.state
    if quiet:
        click.echo("Scenario is valid")
        click.echo(f"Goals: {len(state.goals)}")
        return

    info = (
        f"[bold]Scenario Valid[/bold]\n\n"
        f"[cyan]Household:[/cyan] age {state.age} → {state.target_age}, "
        f"salary {format_currency(state.monthly_salary, unit='')}/month\n"
        f"[cyan]Market:[/cyan] μ={scenario.market.mu:.2%}, σ={scenario.market.sigma:.2%}\n"
        f"[cyan]News items:[/cyan] {len(scenario.news)}\n"
        f"[cyan]Holdings:[/cyan] "
        f"{'not synced' if scenario.assets is None else len(scenario.assets)}\n"
        f"[cyan]Goals ({len(state.goals)}):[/cyan]\n"
    )
    for goal in state.goals:
        info += (
            f"  - {goal.label or goal.id}: {format_currency(goal.target_amount, unit='Cr', decimals=2)} "
            f"in {goal.years_away}y at {goal.inflation_rate:.1%} inflation\n"
        )
    console.print(Panel(info, title="Scenario Summary", border_style="green"))


@config.command("show")
@click.argument("scenario_file", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def config_show(ctx: click.Context, scenario_file: Path, format: str) -> None:
    """
    Display a scenario file.

    Example:
        fusionwealth config show household.json --format json
    """
    console = ctx.obj["console"]

    from .serialization import load_scenario, scenario_to_dict

    try:
        scenario = load_scenario(scenario_file)
    except FusionWealthError as e:
        click.echo(f"Error loading scenario: {e}", err=True)
        sys.exit(1)

    if format == "json":
        click.echo(json.dumps(scenario_to_dict(scenario), indent=2))
        return

    state = scenario.state
    household = Table(title="Household")
    household.add_column("Field", style="cyan")
    household.add_column("Value", justify="right")
    household.add_row("Age", str(state.age))
    household.add_row("Target age", str(state.target_age))
    household.add_row("Monthly salary", format_currency(state.monthly_salary, unit=""))
    household.add_row("Monthly expenses", format_currency(state.monthly_expenses, unit=""))
    household.add_row("Savings", format_currency(state.savings, unit=""))
    household.add_row("Monthly contribution", format_currency(state.monthly_contribution, unit=""))
    for question, answer in state.risk_answers.as_dict().items():
        household.add_row(question.replace("_", " ").title(), answer or "-")
    console.print(household)

    if state.goals:
        goals = Table(title="Goals")
        goals.add_column("ID", style="cyan")
        goals.add_column("Label")
        goals.add_column("Category")
        goals.add_column("Target", justify="right")
        goals.add_column("Years", justify="right")
        goals.add_column("Inflation", justify="right")
        for g in state.goals:
            goals.add_row(
                g.id, g.label, g.category,
                format_currency(g.target_amount, unit="Cr", decimals=2),
                str(g.years_away), f"{g.inflation_rate:.1%}",
            )
        console.print(goals)


@config.command("create")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--template", "-t", type=click.Choice(["basic", "advanced"]), default="basic")
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, template: str) -> None:
    """
    Create a new scenario file from a template.

    Example:
        fusionwealth config create household.json --template advanced
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    from .serialization import SCHEMA_VERSION

    data = {
        "schema_version": SCHEMA_VERSION,
        "name": "Starter household",
        "household": {
            "age": 30,
            "target_age": 60,
            "monthly_salary": 200_000,
            "monthly_expenses": 80_000,
            "savings": 1_000_000,
            "risk_answers": {},
            "behavioral": {"monthly_contribution": 20_000},
            "goals": [
                {"id": "1", "label": "Dream Home", "category": "Housing",
                 "target_amount": 25_000_000, "years_away": 12, "inflation_rate": 0.06},
                {"id": "2", "label": "Kid's Education", "category": "Education",
                 "target_amount": 12_000_000, "years_away": 15, "inflation_rate": 0.10},
            ],
        },
        "market": {"mu": 0.10, "sigma": 0.18},
    }

    if template == "advanced":
        data["household"]["risk_answers"] = {
            "midnight_test": "B",
            "choice_of_paths": "B",
            "safety_net": "C",
            "goal_horizon": "C",
        }
        data["household"]["behavioral"].update({"consistency": 0.8, "streak": 6})
        data["news"] = [
            {"headline": "Market Resilience in Fiscal Q4", "source": "HedgePulse",
             "category": "Market Update", "sentiment": "neutral", "impact": "High"},
        ]
        data["assets"] = [
            {"name": "Nifty 50 Index Fund", "value": 600_000, "category": "Equity"},
            {"name": "PPF", "value": 300_000, "category": "Debt"},
            {"name": "Savings Account", "value": 100_000, "category": "Cash"},
        ]
        data["engine"] = {
            "simulation": {"n_paths": 1000, "seed": 42},
            "goals": {"confidence": 0.9, "allocation_policy": "priority"},
        }

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w") as f:
        json.dump(data, f, indent=2)

    if quiet:
        click.echo(f"Created scenario file: {output_file}")
    else:
        console.print(f"[green]Created scenario file: {output_file}[/green]")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display package and dependency versions.
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    info_lines = [
        f"FusionWealth Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for dist in ("numpy", "pandas", "scipy", "pydantic", "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{dist}: {metadata.version(dist)}")
        except metadata.PackageNotFoundError:
            info_lines.append(f"{dist}: not installed")

    if quiet:
        for line in info_lines:
            click.echo(line)
    else:
        console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
