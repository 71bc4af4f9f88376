"""Rich UI components for terminal interface"""

from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .icons import COLOR_THEMES
from .models import PetState, StateMessage, TodoItem, UserStatusSnapshot, PetConfiguration
from .widget import PetEntry, SMALL, format_clock, inactive_emoji, inactive_message, max_todo_count


console = Console()


def print_error(message: str):
    """Print error message"""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str):
    """Print success message"""
    console.print(f"[bold green]✓[/bold green] {message}")


def print_info(message: str):
    """Print info message"""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str):
    """Print warning message"""
    console.print(f"[yellow]⚠[/yellow] {message}")


def create_pet_panel(
    state: Optional[PetState],
    icon: Optional[str],
    message: Optional[str],
    test_mode: bool = False,
    footer: Optional[str] = None
) -> Panel:
    """Create the main pet status panel"""
    state = state or PetState.HAPPY
    primary, secondary, _ = COLOR_THEMES.get(state, COLOR_THEMES[PetState.HAPPY])

    lines = [
        f"[bold {primary}]{icon or '😺'}[/bold {primary}]",
        "",
        f"[{secondary}]{message or ''}[/{secondary}]",
        "",
        f"[dim]State:[/dim] {state.value}  [dim]Emotion:[/dim] {state.emotion.value}",
    ]
    if footer:
        lines.extend(["", f"[dim]{footer}[/dim]"])

    title = "Desk Pet"
    if test_mode:
        title += " [yellow](test mode)[/yellow]"

    return Panel(
        "\n".join(lines),
        box=box.ROUNDED,
        border_style=primary,
        title=title,
        title_align="left"
    )


def _todo_lines(todos: List[TodoItem], limit: int) -> List[str]:
    lines = []
    for todo in todos[:limit]:
        mark = "[green]✓[/green]" if todo.is_completed else "○"
        text = f"[strike dim]{todo.text}[/strike dim]" if todo.is_completed else todo.text
        lines.append(f"{mark} {text}")
    if len(todos) > limit:
        lines.append(f"[dim]{len(todos) - limit} more...[/dim]")
    return lines


def create_widget_display(entry: PetEntry, size: str = SMALL, test_mode: bool = False) -> Panel:
    """Render a widget timeline entry the way the home screen widget lays it out"""
    if entry.is_inactive:
        emoji = inactive_emoji(entry.inactive_hours)
        phrase = inactive_message(entry.inactive_hours)
        style = "magenta"
    else:
        emoji = entry.emoji
        phrase = entry.phrase
        style = "cyan"

    lines = [f"[bold]{emoji}[/bold]", phrase]

    if test_mode:
        lines.append(f"[yellow]{format_clock(entry.inactive_seconds)}[/yellow]")
        if entry.inactive_hours > 0:
            lines.append(f"[dim]away {entry.inactive_hours}h[/dim]")

    limit = max_todo_count(size, entry.todos)
    if limit:
        lines.append("")
        lines.extend(_todo_lines(entry.todos, limit))

    return Panel(
        "\n".join(lines),
        box=box.ROUNDED,
        border_style=style,
        title=entry.date.strftime('%H:%M:%S'),
        title_align="right",
        width=32 if size == SMALL else 48
    )


def display_todo_list(todos: List[TodoItem]):
    """Display list of all todos"""
    if not todos:
        console.print("[dim]No todos yet. Add one with 'pet todo add'[/dim]")
        return

    table = Table(title="Todos", show_header=True, box=box.ROUNDED)
    table.add_column("#", style="cyan", width=4)
    table.add_column("Id", style="dim")
    table.add_column("Todo", style="white")
    table.add_column("Done", justify="center")

    for idx, todo in enumerate(todos, 1):
        table.add_row(
            str(idx),
            todo.id[:8],
            todo.text,
            "[green]✓[/green]" if todo.is_completed else ""
        )

    console.print(table)


def display_thresholds(thresholds: Dict[str, float], test_mode: bool):
    """Display reminder thresholds with their effective values"""
    factor = thresholds['time_scale_factor']
    table = Table(
        title=f"Reminder thresholds ({'test mode, ' + str(int(factor)) + 'x' if test_mode else 'normal'})",
        show_header=True,
        box=box.SIMPLE
    )
    table.add_column("Threshold", style="cyan")
    table.add_column("Configured", style="white", justify="right")
    table.add_column("Effective", style="yellow", justify="right")

    rows = [
        ("Inactivity warning", 'inactivity_warning'),
        ("Inactivity limit", 'inactivity_limit'),
        ("Check interval", 'check_interval'),
        ("Continuous usage warning", 'continuous_warning'),
    ]
    for label, key in rows:
        effective = thresholds[key]
        configured = effective * factor if test_mode else effective
        table.add_row(label, _seconds_text(configured), _seconds_text(effective))

    console.print(table)


def display_time_scaling(rows: List[Tuple[str, float, float]]):
    """Display how test mode scales each interval"""
    table = Table(show_header=True, box=box.SIMPLE)
    table.add_column("Interval", style="cyan")
    table.add_column("Normal", justify="right")
    table.add_column("Test mode", style="yellow", justify="right")
    for description, normal, scaled in rows:
        table.add_row(description, _seconds_text(normal), _seconds_text(scaled))
    console.print(table)


def _seconds_text(seconds: float) -> str:
    if seconds >= 3600:
        return f"{seconds / 3600:g}h"
    if seconds >= 60:
        return f"{seconds / 60:g}m"
    return f"{seconds:g}s"


def display_messages(state: PetState, messages: List[StateMessage]):
    """Display the message pool for one state"""
    if not messages:
        console.print(f"[dim]No messages for {state.value}[/dim]")
        return

    table = Table(title=f"Messages for {state.value}", show_header=True, box=box.ROUNDED)
    table.add_column("Id", style="dim")
    table.add_column("Message", style="white")
    table.add_column("Source", style="cyan")
    table.add_column("Used", justify="right")
    table.add_column("Last used", style="dim")

    for message in messages:
        table.add_row(
            message.id[:8],
            message.content,
            message.source.value,
            str(message.used_count),
            message.last_used.strftime('%b %d %H:%M') if message.last_used else "Never"
        )

    console.print(table)


def display_state_list():
    """Display every pet state with its category and emotion"""
    table = Table(show_header=True, box=box.SIMPLE)
    table.add_column("State", style="cyan")
    table.add_column("Category")
    table.add_column("Emotion", style="dim")
    for state in PetState:
        table.add_row(state.value, state.category.value, state.emotion.value)
    console.print(table)


def display_detection(snapshot: UserStatusSnapshot):
    """Display a detection result"""
    lines = [
        f"[bold cyan]{snapshot.detected_state.value}[/bold cyan]",
        f"[dim]Source:[/dim] {snapshot.source.value}",
        f"[dim]Confidence:[/dim] {snapshot.confidence:.0%}",
    ]
    for key, value in snapshot.context.items():
        lines.append(f"[dim]{key}:[/dim] {value}")

    console.print(Panel("\n".join(lines), box=box.ROUNDED, border_style="cyan", title="Detected status"))


def display_configuration(configuration: PetConfiguration):
    """Display the pet configuration"""
    prefs = configuration.notification_preference
    quiet = f"{prefs.quiet_hours[0]:02d}-{prefs.quiet_hours[1]:02d}" if prefs.quiet_hours else "none"
    thresholds = configuration.thresholds

    lines = [
        f"[bold cyan]{configuration.name}[/bold cyan] {configuration.appearance.accessory}",
        f"[dim]Form:[/dim] {configuration.appearance.base_form}  [dim]Colour:[/dim] {configuration.appearance.color_hex}",
        "",
        f"Screen time limit: {thresholds.screen_time_limit_minutes}m",
        f"Rest reminder: {thresholds.rest_reminder_minutes}m",
        f"Focus idle: {thresholds.focus_detection_idle_minutes}m",
        f"Sensitivity: {configuration.sensitivity:.1f}",
        "",
        f"Notifications: {'on' if prefs.enable_notifications else 'off'}",
        f"Greetings: {', '.join(prefs.daily_greeting_times) or 'none'}",
        f"Quiet hours: {quiet}",
    ]
    console.print(Panel("\n".join(lines), box=box.ROUNDED, border_style="cyan", title="Pet configuration"))


def display_notification(title: str, body: str):
    """Display a delivered notification"""
    console.print(Panel(
        Text(body),
        box=box.ROUNDED,
        border_style="yellow",
        title=f"🔔 {title}"
    ))
