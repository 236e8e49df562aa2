"""Interactive CLI application."""
import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from term_tutor.catalog import get_chapter, get_chapters, get_terms
from term_tutor.dashboard import (
    get_status_color, get_study_stats, mastery_list, strength_color, strength_label,
    summarize_chapter,
)
from term_tutor.db import DEFAULT_DB_PATH, init_db
from term_tutor.errors import NothingDueError, TutorError
from term_tutor.importer import import_deck
from term_tutor.models import QuestionKind
from term_tutor.progress import (
    SqliteProgressStore, SqliteStudyTimer, format_duration, reset_all_progress,
)
from term_tutor.quiz import build_quiz, record_quiz_answer, score_summary
from term_tutor.seed import is_seeded, seed_all
from term_tutor.session import ReviewSession, SessionState, StartMode, utc_now
from term_tutor.settings import (
    get_max_recycles, get_mixed_sample_size, get_quiz_size, set_max_recycles,
    set_mixed_sample_size, set_quiz_size,
)

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "quit", "menu")
RATING_CHOICES = ["0", "1", "2", "3", "4", "5"]


class SessionExitRequested(Exception):
    """Raised when the user types an exit word in the middle of a session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    # Choices are checked here so exit words get through Prompt.ask
    while True:
        answer = session_prompt(prompt).strip()
        if answer in choices:
            return int(answer)
        console.print(f"[red]Please enter one of: {', '.join(choices)}[/red]")


def ask_int(prompt: str, default: int, minimum: int = 1) -> int:
    while True:
        value = IntPrompt.ask(prompt, default=default)
        if value >= minimum:
            return value
        console.print(f"[red]Please enter a number of at least {minimum}[/red]")


def ask_optional_int(prompt: str, default: str = "") -> int | None:
    """Blank input means None; anything else must be a whole number >= 0."""
    while True:
        raw = Prompt.ask(prompt, default=default).strip()
        if not raw:
            return None
        if raw.isdecimal():
            return int(raw)
        console.print("[red]Please enter a whole number, or leave blank[/red]")


def show_welcome():
    console.print(Panel(
        "[bold]Term Tutor[/bold]\n[dim]Spaced repetition for terminology[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("chapters", "Chapter overview"),
        ("study", "Review due terms in a chapter"),
        ("review", "Review every term in a chapter"),
        ("mixed", "Random terms from all chapters"),
        ("quiz", "Self-test quiz"),
        ("mastery", "Memory strength per term"),
        ("dashboard", "Study statistics"),
        ("import", "Add a deck of terms"),
        ("settings", "Quiz size and session options"),
        ("reset", "Forget all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def make_session(db_path: str) -> ReviewSession:
    return ReviewSession(
        SqliteProgressStore(db_path),
        SqliteStudyTimer(db_path),
        max_recycles=get_max_recycles(db_path),
    )


def choose_chapter(db_path: str):
    chapters = get_chapters(db_path)
    if not chapters:
        console.print("[yellow]The catalog is empty. Use 'import' to add terms.[/yellow]")
        return None
    for c in chapters:
        console.print(f"  [cyan]{c.id}[/cyan]) {c.title}")
    chapter_id = Prompt.ask("Select chapter", choices=[c.id for c in chapters])
    return get_chapter(db_path, chapter_id)


def run_review_session(session: ReviewSession) -> None:
    """Drive an Active session until it completes or the user exits."""
    try:
        while session.state is SessionState.ACTIVE:
            term = session.current
            console.print(Panel(
                f"[bold]{term.term}[/bold]",
                title=f"Card {session.position}/{session.queue_length}", border_style="cyan",
            ))
            session_prompt("[dim]Press Enter to reveal the definition[/dim]", default="")
            back = term.definition
            if term.ai_explanation:
                back += f"\n\n[magenta]{term.ai_explanation}[/magenta]"
            console.print(Panel(back, border_style="green"))
            rating = session_int_prompt(
                "Rate yourself (0=blackout, 1=wrong, 2=hard, 3=pass, 4=good, 5=perfect)",
                choices=RATING_CHOICES,
            )
            record = session.rate(rating)
            if rating < 3:
                console.print("[yellow]This one comes back later in the session.[/yellow]")
            else:
                console.print(f"[dim]Next review in {record.interval} day(s).[/dim]")
            console.print()
    except (SessionExitRequested, KeyboardInterrupt):
        elapsed = session.exit()
        console.print(f"[dim]Session ended early after {format_duration(elapsed)}.[/dim]")
        return
    console.print(f"[green]Session complete![/green] [dim]({format_duration(session.last_elapsed)})[/dim]")
    session.exit()


def run_quiz_session(db_path: str, questions: list) -> tuple[int, int]:
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return 0, 0
    correct = 0
    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions\n")
    try:
        for i, q in enumerate(questions, 1):
            label = "Multiple Choice" if q.kind is QuestionKind.MULTIPLE_CHOICE else "Type the Answer"
            console.print(f"[bold]Q{i}.[/bold] [dim]{label}[/dim]\n{q.term.definition}\n")
            if q.kind is QuestionKind.MULTIPLE_CHOICE:
                letters = "abcd"[:len(q.options)]
                for letter, option in zip(letters, q.options):
                    console.print(f"  [cyan]{letter})[/cyan] {option}")
                choice = session_prompt("\nYour answer", choices=list(letters) + list(EXIT_WORDS))
                answer = q.options[letters.index(choice)]
            else:
                answer = session_prompt("\nType the term")
            if record_quiz_answer(db_path, q, answer):
                console.print(f"[green]Correct![/green] [dim]Answer: {q.term.term}[/dim]")
                correct += 1
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{q.term.term}[/green]")
            console.print()
    except SessionExitRequested:
        console.print("[dim]Quiz stopped.[/dim]")
        return correct, len(questions)
    percentage, message = score_summary(correct, len(questions))
    console.print(f"[bold]Score: {correct}/{len(questions)} ({percentage}%)[/bold] {message}\n")
    return correct, len(questions)


def cmd_chapters(db_path: str):
    progress = SqliteProgressStore(db_path).load()
    now = utc_now()
    table = Table(title="Chapters")
    table.add_column("ID", style="cyan")
    table.add_column("Chapter")
    table.add_column("Cards", justify="right")
    table.add_column("Due", justify="right")
    table.add_column("Status")
    for chapter in get_chapters(db_path):
        s = summarize_chapter(chapter, get_terms(db_path, chapter.id), progress, now)
        color = get_status_color(s["status"])
        table.add_row(
            s["chapter_id"], s["title"], str(s["total"]),
            str(s["due"]) if s["due"] else "[green]All Done[/green]",
            f"[{color}]{s['status']}[/{color}]",
        )
    console.print(table)


def cmd_study(db_path: str, force_all: bool = False):
    chapter = choose_chapter(db_path)
    if chapter is None:
        return
    terms = get_terms(db_path, chapter.id)
    session = make_session(db_path)
    mode = StartMode.FORCE_ALL if force_all else StartMode.DUE_ONLY
    try:
        session.start(terms, mode)
    except NothingDueError:
        console.print(f"[green]Nothing due in {chapter.title}.[/green]")
        if not Confirm.ask("Review all terms anyway?", default=False):
            return
        session.start(terms, StartMode.FORCE_ALL)
    console.print(f"\n[bold]{chapter.title}[/bold] — {session.queue_length} cards [dim](q to stop)[/dim]\n")
    run_review_session(session)


def cmd_mixed(db_path: str):
    terms = get_terms(db_path)
    session = make_session(db_path)
    session.start(terms, StartMode.RANDOM_SAMPLE, sample_size=get_mixed_sample_size(db_path))
    console.print(f"\n[bold]Mixed Review[/bold] — {session.queue_length} cards [dim](q to stop)[/dim]\n")
    run_review_session(session)


def cmd_quiz(db_path: str):
    console.print("\n[bold]Practice Quiz[/bold]")
    mode = Prompt.ask("Quiz scope", choices=["chapter", "all"], default="chapter")
    if mode == "chapter":
        chapter = choose_chapter(db_path)
        if chapter is None:
            return
        pool = get_terms(db_path, chapter.id)
    else:
        pool = get_terms(db_path)
    count = ask_int("Number of questions", default=get_quiz_size(db_path))
    run_quiz_session(db_path, build_quiz(pool, size=count))


def cmd_mastery(db_path: str):
    chapter = choose_chapter(db_path)
    if chapter is None:
        return
    progress = SqliteProgressStore(db_path).load()
    table = Table(title=f"Memory Status — {chapter.title}")
    table.add_column("Term")
    table.add_column("Interval", justify="right")
    table.add_column("Strength")
    for term in mastery_list(get_terms(db_path, chapter.id), progress):
        p = progress.get(term.id)
        color = strength_color(p)
        table.add_row(
            term.term,
            f"{p.interval}d" if p else "-",
            f"[{color}]{strength_label(p)}[/{color}]",
        )
    console.print(table)


def cmd_dashboard(db_path: str):
    stats = get_study_stats(db_path, SqliteProgressStore(db_path).load())
    console.print(Panel(
        f"Learned: [bold]{stats['terms_learned']}[/bold] / {stats['terms_total']} terms\n"
        f"Study time: [bold]{format_duration(stats['study_seconds'])}[/bold] "
        f"over {stats['sessions']} sessions\n"
        f"Quiz: [bold]{stats['avg_quiz_score']}%[/bold] across {stats['quiz_answers']} answers",
        title="Dashboard", border_style="blue",
    ))


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_deck(db_path, file_path)
    console.print(
        f"[green]Imported {result['count']} terms from {result['filename']} "
        f"→ {result['title']} ({result['chapter_id']})[/green]"
    )


def cmd_settings(db_path: str):
    cap = get_max_recycles(db_path)
    console.print(f"  Quiz size: [bold]{get_quiz_size(db_path)}[/bold]")
    console.print(f"  Mixed review size: [bold]{get_mixed_sample_size(db_path)}[/bold]")
    console.print(f"  Max requeues per term: [bold]{'unlimited' if cap is None else cap}[/bold]")
    if not Confirm.ask("Change settings?", default=False):
        return
    quiz_size = ask_int("Quiz size", default=get_quiz_size(db_path))
    mixed_size = ask_int("Mixed review size", default=get_mixed_sample_size(db_path))
    cap = ask_optional_int(
        "Max requeues per term (blank for unlimited)", default="" if cap is None else str(cap),
    )
    # Nothing is saved until every answer is valid
    set_quiz_size(db_path, quiz_size)
    set_mixed_sample_size(db_path, mixed_size)
    set_max_recycles(db_path, cap)
    console.print("[green]Settings saved.[/green]")


def cmd_reset(db_path: str):
    if Confirm.ask("[red]Forget all ratings, quiz results and study time?[/red]", default=False):
        reset_all_progress(db_path)
        console.print("[green]Progress reset.[/green]")


COMMANDS = {
    "chapters": cmd_chapters,
    "study": cmd_study,
    "review": lambda db_path: cmd_study(db_path, force_all=True),
    "mixed": cmd_mixed,
    "quiz": cmd_quiz,
    "mastery": cmd_mastery,
    "dashboard": cmd_dashboard,
    "import": cmd_import,
    "settings": cmd_settings,
    "reset": cmd_reset,
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="term-tutor", description="Spaced repetition for terminology")
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help="SQLite database path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log session activity")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    db_path = args.db
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="study").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Happy studying![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[yellow]{e}[/yellow]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
