import typer  # type: ignore
import logging
from pathlib import Path
from typing import Optional
from typing_extensions import Annotated

from pydantic import ValidationError
from rich.console import Console  # type: ignore # For pretty printing
from rich.table import Table  # type: ignore
from rich.panel import Panel  # type: ignore

from csii.api.registry import create_controller, list_controllers
from csii.core.controller import ARXController
from csii.core.parameters import PARAMETER_SCHEMA_VERSION
from csii.core.policy import DosingPolicy
from csii.simulation.runner import load_readings_csv, run_controller, summarize_run
from csii.validation import format_validation_error, load_announcement_file, load_parameter_file


app = typer.Typer(help="CSII controller CLI - ARX-predictive basal control with premeal bolus.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _parse_policy(policy: str, console: Console) -> DosingPolicy:
    try:
        return DosingPolicy.from_name(policy)
    except ValueError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)


@app.command()
def info(
    policy: Annotated[str, typer.Option(help="Dosing policy: 'iob' or 'threshold'")] = "iob",
):
    """
    Show model identity, channels and the parameter schema of a controller.
    """
    console = Console()
    controller = ARXController(policy=_parse_policy(policy, console))
    profile = controller.get_model_info()

    console.print(Panel(
        f"[bold]{profile.name}[/bold]\n"
        f"Type: {profile.type}   ID: {profile.id}   Version: {profile.version}\n"
        f"Inputs: {', '.join(controller.get_input_list())}   "
        f"Outputs: {', '.join(controller.get_output_list())}\n"
        f"Parameter schema: {PARAMETER_SCHEMA_VERSION}\n\n"
        f"{controller}",
        title="Controller",
    ))

    table = Table(title="Parameters", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Unit")
    table.add_column("Default", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Step", justify="right")
    for name, desc in controller.get_parameter_description().items():
        table.add_row(
            name,
            desc.unit,
            f"{desc.default:g}",
            "" if desc.min is None else f"{desc.min:g}",
            "" if desc.step is None else f"{desc.step:g}",
        )
    console.print(table)


@app.command()
def controllers():
    """List built-in and plugin controllers."""
    console = Console()
    table = Table(title="Controllers", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Source")
    table.add_column("Module")
    table.add_column("Status")
    for listing in list_controllers():
        module = ""
        if listing.profile is not None:
            module = f"{listing.profile.id} {listing.profile.version}"
        status = listing.status if listing.error is None else f"{listing.status}: {listing.error}"
        table.add_row(listing.name, listing.source, module, status)
    console.print(table)


@app.command()
def run(
    readings: Annotated[Path, typer.Option(help="CSV with 'time' and 'cgm'/'smbg' columns")],
    policy: Annotated[str, typer.Option(help="Dosing policy: 'iob' or 'threshold'")] = "iob",
    announcements: Annotated[Optional[Path], typer.Option(help="YAML/JSON file with meal announcements")] = None,
    parameters: Annotated[Optional[Path], typer.Option(help="YAML/JSON file with parameter values or schedule")] = None,
    output: Annotated[Optional[Path], typer.Option(help="Write the per-tick results to this CSV")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every tick")] = False,
):
    """
    Run the controller over a readings file and print a summary.
    """
    console = Console()
    _configure_logging(verbose)
    dosing_policy = _parse_policy(policy, console)

    if not readings.is_file():
        console.print(f"[bold red]Error: Readings file '{readings}' not found.[/bold red]")
        raise typer.Exit(code=1)

    try:
        readings_df = load_readings_csv(readings)
        meal_announcements = load_announcement_file(announcements) if announcements else {}
        parameter_source = load_parameter_file(parameters) if parameters else None
    except ValidationError as e:
        console.print("[bold red]Invalid input file:[/bold red]")
        for line in format_validation_error(e):
            console.print(f"  - {line}")
        raise typer.Exit(code=1)
    except (ValueError, KeyError, OSError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)

    controller = create_controller(f"csii-{dosing_policy.value}", parameters=parameter_source)
    results = run_controller(controller, readings_df, meal_announcements)
    summary = summarize_run(results)

    table = Table(title=f"Closed-loop run ({dosing_policy.value})", show_lines=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Ticks", str(summary["ticks"]))
    table.add_row("Ready ticks", str(summary["ready_ticks"]))
    table.add_row("Basal updates", str(summary["basal_updates"]))
    table.add_row("Mean basal (U/h)", f"{summary['mean_iir']:.2f}")
    table.add_row("Total bolus (U)", f"{summary['total_bolus']:.2f}")
    console.print(table)

    if output is not None:
        results.to_csv(output, index=False)
        console.print(f"[green]Results written to {output}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
