"""Interactive CLI application."""
import logging
from datetime import date, datetime, timedelta, timezone
from time import sleep
from typing import Optional
from zoneinfo import ZoneInfo

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from sabr_os.dashboard import (
    get_memorization_stats, get_prayer_stats, get_score_color, get_score_label,
)
from sabr_os.db import DEFAULT_DB_PATH, init_db
from sabr_os.errors import MissingLocation, SabrError
from sabr_os.importer import import_file
from sabr_os.memorization import (
    add_memorization, get_all_ranges, get_due_ranges, record_revision, set_solid,
)
from sabr_os.methods import METHODS
from sabr_os.models import (
    PRAYER_ORDER, HighLatitudeRule, Madhab, NaflPrayer, NextPrayerProjection,
    PrayerEntry, PrayerStatus, PrayerTimeSet,
)
from sabr_os.prayer_log import get_day, record_prayer
from sabr_os.prayer_times import compute, humanize_remaining, next_prayer, resolve_timezone
from sabr_os.revision import days_overdue
from sabr_os.settings import (
    PrayerSettings, load_prayer_settings, resolve_location, set_city, set_coordinates,
    set_high_latitude_rule, set_madhab, set_method, set_override,
)
from sabr_os.surahs import format_range, get_surah
from sabr_os.tracker import SUNNAH_RAKAHS, entry_points, parse_prayer

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
RATING_CHOICES = ["1", "2", "3", "4", "5"]


class SessionExitRequested(Exception):
    """User typed q/menu inside a session to return to the main menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def times_for(settings: PrayerSettings, day: date) -> PrayerTimeSet:
    return compute(
        day,
        resolve_location(settings),
        method=settings.method,
        madhab=settings.madhab,
        overrides=settings.overrides,
        high_latitude_rule=settings.high_latitude_rule,
    )


def local_today(settings: PrayerSettings, now: datetime) -> date:
    zone = ZoneInfo(resolve_timezone(resolve_location(settings)))
    return now.astimezone(zone).date() if now.tzinfo else now.date()


def current_date(db_path: str, now: Optional[datetime] = None) -> date:
    """Today in the configured location's zone; the machine's date if no location is set."""
    now = now or datetime.now(timezone.utc)
    try:
        return local_today(load_prayer_settings(db_path), now)
    except MissingLocation as e:
        logger.warning("%s; using the system date", e)
        return now.astimezone().date()


def upcoming_prayer(settings: PrayerSettings, now: datetime) -> Optional[NextPrayerProjection]:
    """Next prayer from ``now``, rolling over to tomorrow's first prayer after Isha."""
    today = local_today(settings, now)
    projection = next_prayer(times_for(settings, today), now)
    if projection is None:
        projection = next_prayer(times_for(settings, today + timedelta(days=1)), now)
    return projection


def show_welcome():
    console.print(Panel(
        "[bold]SABR OS[/bold]\n[dim]Prayer times & hifz revision[/dim]",
        title="As-salamu alaykum", border_style="green",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("times", "Today's prayer times"),
        ("countdown", "Live countdown to the next prayer"),
        ("log", "Log a prayer"),
        ("memorize", "Record a newly memorized range"),
        ("revise", "Revise ranges due today"),
        ("due", "List ranges due for revision"),
        ("solid", "Mark a range as firmly memorized"),
        ("dashboard", "Prayer score + hifz progress"),
        ("settings", "Location, method, madhab, overrides"),
        ("import", "Import memorized ranges from a file"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_times_table(times: PrayerTimeSet, projection: Optional[NextPrayerProjection] = None) -> Table:
    table = Table(title=f"Prayer Times — {times.date.isoformat()} ({times.timezone})")
    table.add_column("Prayer", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("")
    for prayer, at in times.items():
        if at is None:
            shown = "[red]Not applicable[/red]"
        else:
            shown = at.strftime("%H:%M")
        notes = []
        if prayer in times.overridden:
            notes.append("[dim]manual[/dim]")
        if projection and projection.prayer is prayer and projection.time.date() == times.date:
            notes.append("[green]next[/green]")
        table.add_row(prayer.display_name, shown, " ".join(notes))
    return table


def _countdown_panel(projection: Optional[NextPrayerProjection]) -> Panel:
    if projection is None:
        return Panel("[red]No upcoming prayer time could be computed[/red]", title="Next Prayer")
    window = f"\n[dim]{projection.current.display_name} time is in[/dim]" if projection.in_window else ""
    return Panel(
        f"[bold]{projection.name}[/bold] at {projection.time.strftime('%H:%M')}\n"
        f"[bold green]{projection.countdown}[/bold green]{window}",
        title="Next Prayer", border_style="green",
    )


def cmd_times(db_path: str):
    settings = load_prayer_settings(db_path)
    now = datetime.now(timezone.utc)
    times = times_for(settings, local_today(settings, now))
    projection = upcoming_prayer(settings, now)
    console.print(render_times_table(times, projection))
    for failure in times.failures.values():
        console.print(f"[yellow]{failure}[/yellow]")
    if projection:
        console.print(
            f"\n  Next: [bold]{projection.name}[/bold] in {humanize_remaining(projection.remaining)}"
        )


def cmd_countdown(db_path: str):
    settings = load_prayer_settings(db_path)
    console.print("[dim]Ctrl+C to stop[/dim]")
    try:
        with Live(console=console, refresh_per_second=1) as live:
            while True:
                live.update(_countdown_panel(upcoming_prayer(settings, datetime.now(timezone.utc))))
                sleep(1)
    except KeyboardInterrupt:
        pass


def cmd_log(db_path: str):
    today = current_date(db_path)
    names = [p.value for p in PRAYER_ORDER] + [n.value for n in NaflPrayer]
    prayer = parse_prayer(session_prompt("Prayer", choices=names))
    statuses = [s.value for s in PrayerStatus]
    status = PrayerStatus(session_prompt("Status", choices=statuses, default=PrayerStatus.ON_TIME.value))
    entry = PrayerEntry(status=status)
    sunnah = SUNNAH_RAKAHS.get(prayer, {})
    if "before" in sunnah:
        entry.sunnah_before = Confirm.ask(f"Prayed {sunnah['before']} rak'ah sunnah before?", default=False)
    if "after" in sunnah:
        entry.sunnah_after = Confirm.ask(f"Prayed {sunnah['after']} rak'ah sunnah after?", default=False)
    entry.khushu = session_int_prompt("Khushu (1-5)", choices=RATING_CHOICES)
    entry.notes = Prompt.ask("Notes", default="")
    record_prayer(db_path, today, prayer, entry)
    console.print(f"[green]{prayer.display_name} logged (+{entry_points(prayer, entry)} points)[/green]")


def cmd_memorize(db_path: str):
    surah = get_surah(int(session_prompt("Surah number (1-114)")))
    console.print(f"[cyan]{surah.name}[/cyan] — {surah.verses} ayahs")
    ayah_from = int(session_prompt("From ayah", default="1"))
    ayah_to = int(session_prompt("To ayah", default=str(surah.verses)))
    notes = Prompt.ask("Tajweed notes", default="")
    memorized = add_memorization(db_path, surah.number, ayah_from, ayah_to, tajweed_notes=notes)
    console.print(
        f"[green]Recorded {format_range(surah.number, ayah_from, ayah_to)}; "
        f"first revision due {memorized.next_revision_date.isoformat()}[/green]"
    )


def render_due_table(ranges: list, as_of: date) -> Table:
    table = Table(title="Due for Revision")
    table.add_column("#", justify="right")
    table.add_column("Range", style="cyan")
    table.add_column("Due", justify="right")
    table.add_column("Overdue", justify="right")
    table.add_column("Interval", justify="right")
    for r in ranges:
        overdue = days_overdue(r, as_of)
        table.add_row(
            str(r.id),
            format_range(r.surah_number, r.ayah_from, r.ayah_to),
            r.next_revision_date.isoformat(),
            f"[red]{overdue}d[/red]" if overdue else "today",
            f"{r.current_interval_days}d",
        )
    return table


def cmd_due(db_path: str):
    today = current_date(db_path)
    due = get_due_ranges(db_path, today)
    if not due:
        console.print("[green]Nothing due for revision today.[/green]")
        return
    console.print(render_due_table(due, today))


def cmd_solid(db_path: str):
    ranges = get_all_ranges(db_path)
    if not ranges:
        console.print("[dim]No memorized ranges yet.[/dim]")
        return
    for r in ranges:
        mark = "[green]solid[/green]" if r.is_solid else ""
        console.print(f"  {r.id:>4}  {format_range(r.surah_number, r.ayah_from, r.ayah_to)} {mark}")
    range_id = int(session_prompt("Range #"))
    set_solid(db_path, range_id, Confirm.ask("Solid?", default=True))
    console.print("[green]Saved.[/green]")


def run_revision_session(db_path: str, ranges: list, revised_on: Optional[date] = None) -> int:
    """Rate each range in turn; returns how many were revised."""
    if not ranges:
        console.print("[green]Nothing due for revision today.[/green]")
        return 0
    console.print(f"\n[bold]Revision Session[/bold] — {len(ranges)} ranges\n")
    revised = 0
    for i, r in enumerate(ranges, 1):
        console.print(Panel(
            format_range(r.surah_number, r.ayah_from, r.ayah_to),
            title=f"Range {i}/{len(ranges)}", border_style="cyan",
        ))
        session_prompt("[dim]Recite, then press Enter[/dim]", default="")
        rating = session_int_prompt(
            "How was your recall? (1=forgot, 3=hesitant, 5=perfect)", choices=RATING_CHOICES,
        )
        updated = record_revision(db_path, r.id, rating, occurred_at=revised_on)
        console.print(f"[dim]Next revision in {updated.current_interval_days} day(s)[/dim]\n")
        revised += 1
    return revised


def cmd_revise(db_path: str):
    try:
        today = current_date(db_path)
        run_revision_session(db_path, get_due_ranges(db_path, today, limit=20), revised_on=today)
    except SessionExitRequested:
        console.print("[dim]Revision paused; progress so far is saved.[/dim]")


def cmd_dashboard(db_path: str):
    today = current_date(db_path)
    prayer = get_prayer_stats(db_path, today)
    hifz = get_memorization_stats(db_path, today)
    score = prayer["score"]
    color = get_score_color(score)

    bar_filled = int(score / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(Panel("[bold]Today[/bold]", title="Ibadat Dashboard", border_style="green"))
    console.print(
        f"\n  Prayers: [bold]{prayer['completed']}/{prayer['total']}[/bold] {bar} "
        f"[{color}]{get_score_label(score)}[/{color}]"
    )
    console.print(
        f"  Points today: [bold]{prayer['points']}[/bold]  |  Jama'ah: [bold]{prayer['jamaah']}[/bold]  |  "
        f"Week: [bold]{prayer['week']['percentage']}%[/bold] ({prayer['week']['points']} pts)"
    )

    table = Table(title="Hifz")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Ranges memorized", str(hifz["ranges"]))
    table.add_row("Ayahs memorized", str(hifz["ayahs"]))
    table.add_row("Surahs touched", str(hifz["surahs"]))
    table.add_row("Marked solid", str(hifz["solid"]))
    table.add_row("Due today", str(hifz["due_today"]))
    table.add_row("Revisions logged", str(hifz["revisions_logged"]))
    table.add_row("Average interval", f"{hifz['avg_interval_days']} days")
    console.print(table)

    logged = get_day(db_path, today)
    missing = [p.display_name for p in PRAYER_ORDER if p not in logged]
    if missing:
        console.print(f"\n  [yellow]Not yet logged: {', '.join(missing)}[/yellow]")


def cmd_settings(db_path: str):
    current = load_prayer_settings(db_path)
    where = (
        f"{current.latitude}, {current.longitude}" if current.latitude is not None else current.city
    )
    console.print(
        f"Location: [cyan]{where}[/cyan]  Method: [cyan]{current.method}[/cyan]  "
        f"Madhab: [cyan]{current.madhab.value}[/cyan]  High latitudes: [cyan]{current.high_latitude_rule.value}[/cyan]"
    )
    choice = Prompt.ask("Change", choices=["city", "coords", "method", "madhab", "highlat", "override", "done"],
                        default="done")
    if choice == "city":
        set_city(db_path, Prompt.ask("City"))
    elif choice == "coords":
        lat = float(Prompt.ask("Latitude"))
        lon = float(Prompt.ask("Longitude"))
        tz = Prompt.ask("Time zone (blank to detect)", default="")
        set_coordinates(db_path, lat, lon, tz or None)
    elif choice == "method":
        set_method(db_path, Prompt.ask("Method", choices=list(METHODS)))
    elif choice == "madhab":
        set_madhab(db_path, Prompt.ask("Madhab", choices=[m.value for m in Madhab]))
    elif choice == "highlat":
        set_high_latitude_rule(db_path, Prompt.ask("Rule", choices=[r.value for r in HighLatitudeRule]))
    elif choice == "override":
        prayer = Prompt.ask("Prayer", choices=[p.value for p in PRAYER_ORDER])
        set_override(db_path, prayer, Prompt.ask("Time HH:MM (blank to clear)", default=""))
    if choice != "done":
        console.print("[green]Saved.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    result = import_file(db_path, file_path)
    console.print(f"[green]Imported {result['imported']} ranges from {result['filename']}[/green]")
    if result["skipped"]:
        console.print(f"[yellow]Skipped records: {', '.join(map(str, result['skipped']))}[/yellow]")


def main():
    logging.basicConfig(
        level=logging.WARNING, format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="times").strip().lower()
        try:
            if choice == "times":
                cmd_times(db_path)
            elif choice == "countdown":
                cmd_countdown(db_path)
            elif choice == "log":
                cmd_log(db_path)
            elif choice == "memorize":
                cmd_memorize(db_path)
            elif choice == "revise":
                cmd_revise(db_path)
            elif choice == "due":
                cmd_due(db_path)
            elif choice == "solid":
                cmd_solid(db_path)
            elif choice == "dashboard":
                cmd_dashboard(db_path)
            elif choice == "settings":
                cmd_settings(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Ma'a as-salamah.[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            continue
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except SabrError as e:
            console.print(f"[yellow]Check input: {e}[/yellow]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
