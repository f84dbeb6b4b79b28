"""Interactive CLI application."""
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from study_planner.config import DEFAULT_DB_PATH, DEFAULT_USER_ID, REVIEW_MINUTES_PER_UNIT
from study_planner.db import init_db
from study_planner.errors import PlannerError
from study_planner.ledger import get_friends, get_or_create_points, get_profile, get_ranking
from study_planner.logging_config import configure_logging
from study_planner.models import ActiveTask, Review
from study_planner.plans import create_plan, get_plans_by_user, pause_plan, resume_plan
from study_planner.progress import achievability_color, calculate_progress, evaluate_achievability
from study_planner.recording import record_session
from study_planner.reviews import get_review_items_by_plan, get_review_items_by_user, upcoming_reviews_summary
from study_planner.sessions import get_sessions_by_plan
from study_planner.tasks import load_tasks_for_date, load_today_tasks

console = Console()


class SessionExitRequested(Exception):
    """User typed q/menu inside a prompt sequence."""


def session_prompt(message: str, default: str | None = None) -> str:
    value = Prompt.ask(message, default=default) if default is not None else Prompt.ask(message)
    if value.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return value


def session_int_prompt(message: str, choices: list[str] | None = None, default: int | None = None) -> int:
    while True:
        raw = session_prompt(message, default=str(default) if default is not None else None)
        if choices and raw.strip() not in choices:
            console.print(f"[red]Choose one of: {', '.join(choices)}[/red]")
            continue
        try:
            return int(raw)
        except ValueError:
            console.print("[red]Enter a whole number.[/red]")


def show_welcome():
    console.print(Panel(
        "[bold]Study Planner[/bold]\n[dim]Daily tasks and spaced review[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's open tasks"),
        ("date", "Open tasks for another day"),
        ("record", "Record a study session"),
        ("review", "Review a unit range of a plan"),
        ("plans", "List plans and progress"),
        ("new-plan", "Create a study plan"),
        ("pause", "Pause a plan"),
        ("resume", "Resume a plan"),
        ("points", "Points, level and upcoming reviews"),
        ("ranking", "Weekly ranking with friends"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_tasks(tasks: list[ActiveTask], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Plan", style="cyan")
    table.add_column("Units")
    table.add_column("Est.", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Pace")
    for i, t in enumerate(tasks, 1):
        color = achievability_color(t.achievability)
        table.add_row(
            str(i),
            "Review" if t.kind == "review" else "Study",
            t.plan.title,
            f"{t.task.start_unit}-{t.task.end_unit} ({t.task.units})",
            f"{t.task.estimated_minutes}m",
            f"{t.progress * 100:.0f}%",
            f"[{color}]{t.achievability}[/{color}]",
        )
    return table


def run_task_session(db_path: str, user_id: str, active: ActiveTask):
    """Prompt for the results of one task and record them."""
    task = active.task
    console.print(Panel(
        f"{active.plan.title}: units {task.start_unit}-{task.end_unit}",
        title="Review" if active.kind == "review" else "Study", border_style="cyan",
    ))
    duration = session_int_prompt("Minutes spent", default=task.estimated_minutes)
    difficulty = session_int_prompt(
        "Difficulty (1=easy .. 5=hard)", choices=["1", "2", "3", "4", "5"], default=3,
    )
    if active.kind == "review":
        outcome = record_session(
            db_path, user_id, active.plan.id, duration,
            unit_range=(task.start_unit, task.end_unit),
            intent=Review(item_ids=tuple(task.review_item_ids)),
            difficulty=difficulty,
        )
    else:
        units = session_int_prompt("Units completed", default=task.units)
        outcome = record_session(
            db_path, user_id, active.plan.id, duration,
            units=units, task=task, difficulty=difficulty,
        )

    s = outcome.session
    console.print(f"[green]Recorded units {s.start_unit}-{s.end_unit}[/green] (+{outcome.points_awarded} pts)")
    if outcome.minted_review_ids:
        console.print(f"[dim]{len(outcome.minted_review_ids)} units scheduled for review[/dim]")
    if outcome.advanced_review_ids:
        console.print(f"[dim]{len(outcome.advanced_review_ids)} review items rescheduled[/dim]")
    if outcome.leveled_up:
        console.print(Panel(f"[bold]Level {outcome.level}![/bold]", title="Level up", border_style="green"))
    for failure in outcome.secondary_failures:
        console.print(f"[yellow]Not applied: {failure.step} ({failure.target}): {failure.message}[/yellow]")
    return outcome


def cmd_today(db_path: str, user_id: str):
    tasks = load_today_tasks(db_path, user_id)
    if not tasks:
        console.print("[green]Nothing left for today.[/green]")
        return []
    console.print(render_tasks(tasks, f"Open tasks for {date.today().isoformat()}"))
    return tasks


def cmd_date(db_path: str, user_id: str):
    raw = session_prompt("Date (YYYY-MM-DD)")
    try:
        day = date.fromisoformat(raw.strip())
    except ValueError:
        console.print(f"[red]Not a date: {raw}[/red]")
        return
    tasks = load_tasks_for_date(db_path, user_id, day)
    if not tasks:
        console.print(f"[dim]No open tasks on {day.isoformat()}.[/dim]")
        return
    console.print(render_tasks(tasks, f"Open tasks for {day.isoformat()}"))


def cmd_record(db_path: str, user_id: str):
    tasks = cmd_today(db_path, user_id)
    if not tasks:
        return
    choice = session_int_prompt("Task #", choices=[str(i) for i in range(1, len(tasks) + 1)])
    run_task_session(db_path, user_id, tasks[choice - 1])


def cmd_review(db_path: str, user_id: str):
    """Review a unit range freely; items due on or before today in it advance."""
    plan = _pick_plan(db_path, user_id)
    if not plan:
        return
    due = [i for i in get_review_items_by_plan(db_path, plan.id) if i.is_due(date.today())]
    if due:
        console.print(f"[dim]{len(due)} items due, units {', '.join(str(i.unit_number) for i in due)}[/dim]")
    start = session_int_prompt("From unit", default=plan.unit_start)
    end = session_int_prompt("To unit", default=start)
    duration = session_int_prompt("Minutes spent", default=(end - start + 1) * REVIEW_MINUTES_PER_UNIT)
    difficulty = session_int_prompt(
        "Difficulty (1=easy .. 5=hard)", choices=["1", "2", "3", "4", "5"], default=3,
    )
    outcome = record_session(
        db_path, user_id, plan.id, duration,
        unit_range=(start, end), intent=Review(), difficulty=difficulty,
    )
    console.print(f"[green]Reviewed units {start}-{end}[/green] ({len(outcome.advanced_review_ids)} items rescheduled)")
    for failure in outcome.secondary_failures:
        console.print(f"[yellow]Not applied: {failure.step} ({failure.target}): {failure.message}[/yellow]")
    return outcome


def cmd_plans(db_path: str, user_id: str):
    plans = get_plans_by_user(db_path, user_id)
    if not plans:
        console.print("[yellow]No plans yet. Use 'new-plan' to create one.[/yellow]")
        return []
    table = Table(title="Study Plans")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Units")
    table.add_column("Deadline")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Pace")
    for i, plan in enumerate(plans, 1):
        sessions = get_sessions_by_plan(db_path, plan.id)
        progress = calculate_progress(plan, sessions)
        label = evaluate_achievability(plan, sessions)
        color = achievability_color(label)
        table.add_row(
            str(i),
            plan.title,
            f"{plan.unit_start}-{plan.unit_end}",
            plan.deadline.isoformat(),
            plan.status,
            f"{progress.ratio * 100:.0f}%",
            f"[{color}]{label}[/{color}]",
        )
    console.print(table)
    return plans


def cmd_new_plan(db_path: str, user_id: str):
    title = session_prompt("Title")
    total = session_int_prompt("Total units")
    start = session_int_prompt("First unit number", default=1)
    deadline = date.fromisoformat(session_prompt("Deadline (YYYY-MM-DD)").strip())
    rounds = session_int_prompt("Rounds", default=1)
    days = session_prompt("Study weekdays (1=Mon .. 7=Sun)", default="1,2,3,4,5")
    study_days = [int(d) for d in days.replace(" ", "").split(",") if d]
    plan = create_plan(
        db_path, user_id, title, total, deadline,
        unit_start=start, target_rounds=rounds, study_days=study_days,
    )
    console.print(f"[green]Created {plan.title} ({plan.unit_start}-{plan.unit_end}).[/green]")


def _pick_plan(db_path: str, user_id: str):
    plans = cmd_plans(db_path, user_id)
    if not plans:
        return None
    choice = session_int_prompt("Plan #", choices=[str(i) for i in range(1, len(plans) + 1)])
    return plans[choice - 1]


def cmd_pause(db_path: str, user_id: str):
    plan = _pick_plan(db_path, user_id)
    if plan:
        pause_plan(db_path, plan.id)
        console.print(f"[yellow]Paused {plan.title}.[/yellow]")


def cmd_resume(db_path: str, user_id: str):
    plan = _pick_plan(db_path, user_id)
    if plan:
        resume_plan(db_path, plan.id)
        console.print(f"[green]Resumed {plan.title}.[/green]")


def cmd_points(db_path: str, user_id: str):
    points = get_or_create_points(db_path, user_id)
    profile = get_profile(db_path, user_id)
    console.print(Panel(
        f"Level [bold]{points.level}[/bold]  |  Points [bold]{points.points}[/bold]  |  "
        f"This week [bold]{points.weekly_points}[/bold]  |  Hours [bold]{profile.total_study_hours}[/bold]",
        title="Progress", border_style="blue",
    ))
    upcoming = upcoming_reviews_summary(get_review_items_by_user(db_path, user_id))
    if upcoming:
        console.print("\n[bold]Upcoming reviews:[/bold]")
        for day, count in upcoming:
            console.print(f"  {day.isoformat()}  [cyan]{count}[/cyan]")


def cmd_ranking(db_path: str, user_id: str):
    user_ids = [user_id] + [f.user_id for f in get_friends(db_path, user_id)]
    entries = get_ranking(db_path, user_ids)
    table = Table(title="Weekly Ranking")
    table.add_column("Rank", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Level", justify="right")
    for e in entries:
        table.add_row(str(e.rank), f"{e.avatar} {e.name}", str(e.points), str(e.level))
    console.print(table)


COMMANDS = {
    "today": cmd_today,
    "date": cmd_date,
    "record": cmd_record,
    "review": cmd_review,
    "plans": cmd_plans,
    "new-plan": cmd_new_plan,
    "pause": cmd_pause,
    "resume": cmd_resume,
    "points": cmd_points,
    "ranking": cmd_ranking,
}


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    user_id = DEFAULT_USER_ID
    init_db(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]See you tomorrow![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path, user_id)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except PlannerError as e:
            console.print(f"[red]{e}[/red]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
