"""unical CLI - inspect calendar windows and move events."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.http_backend import HttpCalendarBackend
from .config import Config, load_config
from .controller import ViewController
from .core.events import LayoutedEvent, ModuleFilter, to_local
from .core.reschedule import DropGesture
from .core.timegrid import TimeGridMapper
from .core.window import ViewMode, ViewWindow, compute_window, go_to_today, window_title
from .errors import BackendError, ConfigError
from .reschedule import RescheduleCoordinator

VIEW_CHOICES = click.Choice([m.value for m in ViewMode])
FILTER_CHOICES = click.Choice([f.value for f in ModuleFilter])
ISO_DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """unical - unified calendar engine."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _parse_date(value: datetime | None, config: Config) -> date:
    if value:
        return value.date()
    return go_to_today(config.tz())


def build_controller(config: Config, view: ViewMode, reference: date) -> ViewController:
    """Wire the HTTP backend, coordinator and controller together."""
    backend = HttpCalendarBackend(config)
    coordinator = RescheduleCoordinator(
        primary=backend,
        secondary=backend,
        permissions=backend,
        mapper=TimeGridMapper(config.grid()),
        tz=config.tz(),
        secondary_module=config.secondary_module,
        secondary_id_key=config.secondary_id_key,
    )
    return ViewController(
        source=backend,
        coordinator=coordinator,
        tz=config.tz(),
        view_mode=view,
        reference_date=reference,
    )


def _window_json(window: ViewWindow) -> dict:
    return {
        "mode": window.mode.value,
        "start": window.start,
        "end": window.end,
        "anchor": window.anchor.isoformat(),
    }


@main.command()
@click.option("--view", "view", type=VIEW_CHOICES, default=None, help="View mode")
@click.option("--date", "-d", "target_date", type=ISO_DATE, default=None, help="Reference date (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def window(view: str | None, target_date: datetime | None, as_json: bool):
    """Show the query window for a view."""
    config = load_config()
    mode = ViewMode(view) if view else config.view_mode()
    try:
        tz = config.tz()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    w = compute_window(_parse_date(target_date, config), mode, tz)

    if as_json:
        click.echo(json.dumps(_window_json(w), indent=2))
        return

    click.echo(window_title(w))
    click.echo(f"  from   {to_local(w.start, tz).isoformat()}")
    click.echo(f"  to     {to_local(w.end, tz).isoformat()}")
    click.echo(f"  monday {w.anchor.isoformat()}")


def _format_layout(laid: LayoutedEvent, config: Config) -> str:
    tz = config.tz()
    ev = laid.event
    start = to_local(ev.start, tz).strftime("%H:%M")
    end = to_local(ev.effective_end(), tz).strftime("%H:%M")
    column = f"[{laid.column + 1}/{laid.total_columns}]"
    owner = f" ({ev.module_ref.module_id})" if ev.module_ref else ""
    done = " ✓" if ev.is_completed else ""
    return f"  {start}-{end} {column:7} {ev.title}{owner}{done}"


@main.command()
@click.option("--view", "view", type=VIEW_CHOICES, default=None, help="View mode")
@click.option("--date", "-d", "target_date", type=ISO_DATE, default=None, help="Reference date (YYYY-MM-DD)")
@click.option("--filter", "module_filter", type=FILTER_CHOICES, default="all", help="Module filter")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(view: str | None, target_date: datetime | None, module_filter: str, as_json: bool):
    """Fetch events and print their calendar layout."""
    config = load_config()
    mode = ViewMode(view) if view else config.view_mode()
    try:
        controller = build_controller(config, mode, _parse_date(target_date, config))
        controller.module_filter = ModuleFilter(module_filter)
        controller.refresh()
    except (ConfigError, BackendError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if mode is ViewMode.MONTH:
        _show_month(controller, as_json)
    else:
        _show_days(controller, config, as_json)


def _show_days(controller: ViewController, config: Config, as_json: bool) -> None:
    layouts = controller.day_layouts()
    if as_json:
        click.echo(
            json.dumps(
                {
                    "window": _window_json(controller.window),
                    "days": {
                        d.isoformat(): [
                            {
                                "id": laid.event.id,
                                "title": laid.event.title,
                                "start": laid.event.start,
                                "end": laid.event.end,
                                "column": laid.column,
                                "totalColumns": laid.total_columns,
                            }
                            for laid in day_layouts
                        ]
                        for d, day_layouts in layouts.items()
                    },
                },
                indent=2,
            )
        )
        return

    click.echo(window_title(controller.window))
    for day, day_layouts in layouts.items():
        click.echo()
        click.echo(f"### {day.strftime('%A, %B %d')}")
        if not day_layouts:
            click.echo("  No events.")
        for laid in day_layouts:
            click.echo(_format_layout(laid, config))


def _show_month(controller: ViewController, as_json: bool) -> None:
    grid = controller.month_grid()
    if as_json:
        click.echo(
            json.dumps(
                [
                    [
                        {
                            "date": cell.date.isoformat(),
                            "inMonth": cell.in_month,
                            "events": [e.id for e in cell.events],
                        }
                        for cell in week
                    ]
                    for week in grid.weeks
                ],
                indent=2,
            )
        )
        return

    click.echo(window_title(controller.window))
    click.echo(" ".join(f"{name:>4}" for name in ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]))
    for week in grid.weeks:
        row = []
        for cell in week:
            label = f"{cell.date.day:2d}" if cell.in_month else "  "
            count = f"{len(cell.events)}" if cell.events else " "
            row.append(f"{label}:{count}")
        click.echo(" ".join(f"{c:>4}" for c in row))


@main.command()
@click.argument("event_id")
@click.option("--to", "target_date", type=ISO_DATE, required=True, help="Day to drop onto (YYYY-MM-DD)")
@click.option("--y", "pixel_y", type=float, required=True, help="Drop offset from the top of the column")
@click.option("--scroll", "scroll_offset", type=float, default=0, help="Column scroll offset")
@click.option("--from", "source_date", type=ISO_DATE, default=None, help="Day the event is on now, defaults to --to")
def move(
    event_id: str,
    target_date: datetime,
    pixel_y: float,
    scroll_offset: float,
    source_date: datetime | None,
):
    """Move an event as if it had been dragged on the time grid."""
    config = load_config()
    target = target_date.date()
    reference = source_date.date() if source_date else target
    try:
        controller = build_controller(config, ViewMode.WEEK, reference)
        controller.refresh()
    except (ConfigError, BackendError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = controller.drop(
        DropGesture(
            event_id=event_id,
            pixel_y=pixel_y,
            target_date=target,
            scroll_offset=scroll_offset,
        )
    )
    if not result.ok:
        click.echo(f"Error ({result.status.value}): {result.message}", err=True)
        sys.exit(1)

    tz = config.tz()
    start = to_local(result.intent.new_start, tz)
    click.echo(f"Moved {event_id} to {start.strftime('%A %Y-%m-%d %H:%M')}")
