"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.snapshot import Snapshot, SnapshotLoader
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SchedulingError
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="clinicslots",
    help="Find free gaps, check conflicts and plan treatment appointments",
    add_completion=False
)

console = Console()

SnapshotArg = Annotated[Path, typer.Argument(help="Snapshot file (.yaml or .json) with schedules and appointments")]
ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
ProfessionalOption = Annotated[Optional[str], typer.Option("--professional", "-p", help="Professional id (defaults to the snapshot's)")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log scheduling decisions.")] = False,
):
    """Clinic availability and scheduling engine."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(config_file: Optional[Path], snapshot_file: Path) -> tuple[AppConfig, Snapshot]:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path) if config_path.exists() or config_file else AppConfig()
    snapshot = SnapshotLoader(
        timezone=config.timezone,
        default_duration_minutes=config.engine.default_duration_minutes,
    ).load(snapshot_file)
    return config, snapshot


def _professional(option: Optional[str], snapshot: Snapshot) -> str:
    professional_id = option or snapshot.professional_id
    if not professional_id:
        console.print("[red]Error: no professional given and the snapshot names none.[/red]")
        raise typer.Exit(1)
    return professional_id


def _parse_date(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Error parsing date {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _parse_instant(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD HH:mm", tz=tz)
    except ValueError as e:
        console.print(f"[red]Error parsing date and time {value!r}: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def gaps(
    snapshot_file: SnapshotArg,
    start: Annotated[str, typer.Option("--start", help="First date (YYYY-MM-DD)")],
    end: Annotated[Optional[str], typer.Option("--end", help="Last date (YYYY-MM-DD), defaults to --start")] = None,
    professional: ProfessionalOption = None,
    config_file: ConfigOption = None,
):
    """
    List free gaps in a professional's agenda.

    Examples:

        clinicslots gaps snapshot.yaml --start 2024-11-25

        clinicslots gaps snapshot.yaml -p dr-ana --start 2024-11-25 --end 2024-11-29
    """
    try:
        config, snapshot = _load(config_file, snapshot_file)
        professional_id = _professional(professional, snapshot)
        start_date = _parse_date(start, config.timezone)
        end_date = _parse_date(end, config.timezone) if end else start_date

        service = AvailabilityService(config)
        found = service.compute_gaps_between(
            professional_id,
            start_date,
            end_date,
            snapshot.working_periods,
            snapshot.appointments,
        )

        console.print()
        if not found:
            console.print(
                "[yellow]⚠ No free gaps found.[/yellow]\n"
                "The professional may not work on these days or is fully booked."
            )
        else:
            console.print(f"[bold green]✓ {len(found)} free gap(s):[/bold green]\n")
            for gap in found:
                console.print(f"  {gap.format_display()}")
        console.print()

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def validate(
    snapshot_file: SnapshotArg,
    start: Annotated[str, typer.Option("--start", help="Start (YYYY-MM-DD HH:mm)")],
    end: Annotated[str, typer.Option("--end", help="End (YYYY-MM-DD HH:mm)")],
    professional: ProfessionalOption = None,
    patient: Annotated[Optional[str], typer.Option("--patient", help="Patient id to check for double-booking")] = None,
    rules: Annotated[bool, typer.Option("--rules/--no-rules", help="Also apply the clinic booking rules")] = True,
    config_file: ConfigOption = None,
):
    """
    Check whether a proposed appointment is free.

    Exits with status 2 when the slot is unavailable.
    """
    try:
        config, snapshot = _load(config_file, snapshot_file)
        professional_id = _professional(professional, snapshot)
        patient_id = patient or snapshot.patient_id
        start_at = _parse_instant(start, config.timezone)
        end_at = _parse_instant(end, config.timezone)

        service = AvailabilityService(config)
        outcome = service.validate_appointment(
            start_at, end_at, professional_id, snapshot.appointments, patient_id=patient_id
        )

        if not outcome.ok:
            console.print(f"[bold red]✗ {outcome.conflict_kind.value}:[/bold red] {outcome.message}")
            raise typer.Exit(2)

        console.print("[bold green]✓ Slot available[/bold green]")

        if rules:
            report = service.check_rules(
                start_at,
                end_at,
                professional_id,
                snapshot.working_periods,
                snapshot.appointments,
                patient_id=patient_id,
            )
            for error in report.errors:
                console.print(f"  [red]✗ {error}[/red]")
            for warning in report.warnings:
                console.print(f"  [yellow]⚠ {warning}[/yellow]")
            if not report.is_valid:
                raise typer.Exit(2)

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def schedule(
    snapshot_file: SnapshotArg,
    today: Annotated[Optional[str], typer.Option("--today", help="Planning date (YYYY-MM-DD), defaults to the current date")] = None,
    professional: ProfessionalOption = None,
    patient: Annotated[Optional[str], typer.Option("--patient", help="Patient of the treatment plan")] = None,
    config_file: ConfigOption = None,
):
    """
    Suggest slots for the snapshot's pending procedures.
    """
    try:
        config, snapshot = _load(config_file, snapshot_file)
        professional_id = _professional(professional, snapshot)
        tz = config.timezone
        planning_date = _parse_date(today, tz) if today else pendulum.today(tz).date()

        service = AvailabilityService(config)
        items = service.resolve_durations(snapshot.items, snapshot.treatment_durations)
        result = service.schedule_batch(
            items,
            professional_id,
            snapshot.working_periods,
            snapshot.appointments,
            planning_date,
            patient_id=patient or snapshot.patient_id,
        )

        if result.placed:
            descriptions = {item.id: item.description for item in items}
            table = Table(
                title="Suggested appointments",
                show_header=True,
                header_style="bold cyan"
            )
            table.add_column("Item", style="bold yellow")
            table.add_column("Procedure")
            table.add_column("Date")
            table.add_column("Time")
            table.add_column("Reason", style="dim")

            for slot in result.placed:
                table.add_row(
                    slot.item_id,
                    descriptions.get(slot.item_id, ""),
                    slot.start.format("ddd DD/MM/YYYY"),
                    f"{slot.start.format('HH:mm')} - {slot.end.format('HH:mm')}",
                    slot.reason,
                )

            console.print()
            console.print(table)

        if result.unplaced:
            console.print(
                f"\n[yellow]⚠ Could not place {len(result.unplaced)} item(s) within "
                f"{config.engine.horizon_days} days:[/yellow] {', '.join(result.unplaced)}"
            )
        elif not result.placed:
            console.print("[yellow]Nothing to schedule.[/yellow]")
        console.print()

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
