from __future__ import annotations
import asyncio
import json
from pathlib import Path
from typing import Dict
import typer

from ..config import get_settings
from ..domain import Status
from ..errors import SubmissionError
from ..schemas import FIELD_NAMES, TEXT_FIELDS
from ..security.sanitization import sanitize
from ..session import FormSession, create_session
from ..storage.draft_storage import DraftStore, FileKeyValueStore
from ..utils.dates import normalize_date_input
from ..utils.logging import configure_logging
from ..validation.rules import build_rules, validate

cli = typer.Typer(help="Job application form CLI")
draft_cli = typer.Typer(help="Inspect or discard the saved draft")
cli.add_typer(draft_cli, name="draft")

DATE_FIELDS = ("dateApplied", "responseDate")

FIELD_LABELS: Dict[str, str] = {
    "roleTitle": "Role",
    "companyName": "Company",
    "roleType": "Role Type",
    "location": "Location",
    "salary": "Salary",
    "dateApplied": "Date Applied (YYYY-MM-DD)",
    "advertLink": "Advert Link",
    "cvUsed": "CV Used",
    "responseDate": "Response Date (YYYY-MM-DD)",
    "status": "Status",
    "contactName": "Contact Name",
    "contactEmail": "Contact Email",
    "contactPhone": "Contact Phone",
    "isLinkedInConnection": "LinkedIn Connection",
}


def _draft_store() -> DraftStore:
    settings = get_settings()
    return DraftStore(FileKeyValueStore(settings.DRAFT_DIR), key=settings.DRAFT_KEY)


@cli.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")):
    settings = get_settings()
    configure_logging(debug=verbose or settings.DEBUG)


def _prompt_field(session: FormSession, field: str) -> None:
    label = FIELD_LABELS.get(field, field)
    current = session.field_state(field).value
    while True:
        if field in TEXT_FIELDS:
            if field == "status":
                label_text = f"{label} ({', '.join(s.value for s in Status)})"
            else:
                label_text = label
            value = typer.prompt(label_text, default=current, show_default=bool(current))
            if field in DATE_FIELDS:
                value = normalize_date_input(value)
        else:
            value = typer.confirm(label, default=bool(current))
        # Every prompt answer is both a change and a loss of focus
        if value != current or not session.field_state(field).touched:
            session.edit(field, value)
        state = session.blur(field)
        if not state.invalid:
            return
        typer.secho(f"  {state.error_message}", fg=typer.colors.RED)
        current = state.value


@cli.command("fill")
def fill_cmd(
    fresh: bool = typer.Option(False, "--fresh", help="Ignore and discard any saved draft"),
):
    """Fill in a job application interactively, then submit it."""
    session = create_session()
    if fresh:
        session.draft_store.clear()
    elif session.start():
        typer.secho("Resuming your saved draft.", fg=typer.colors.CYAN)

    for field in FIELD_NAMES:
        _prompt_field(session, field)

    try:
        result = asyncio.run(session.submit())
    except SubmissionError:
        typer.secho(f"Submission failed: {session.submit_error}", fg=typer.colors.RED)
        typer.secho("Your draft has been kept; run `jobform fill` to retry.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    if not result.ok:
        for issue in result.issues:
            typer.secho(f"{issue.path}: {issue.message}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    record = result.value
    typer.secho(
        f"Submitted: {record.role_title} at {record.company_name} | status={record.status}",
        fg=typer.colors.GREEN,
    )


@cli.command("validate")
def validate_cmd(path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)):
    """Validate a JSON job application file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        typer.secho(f"Could not read {path}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    if not isinstance(data, dict):
        typer.secho("Expected a JSON object.", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    settings = get_settings()
    result = validate(data, build_rules(strict_optional_text=settings.STRICT_OPTIONAL_TEXT))
    if result.ok:
        typer.secho("Valid.", fg=typer.colors.GREEN)
        return
    for issue in result.issues:
        typer.secho(f"{issue.path}: {issue.message}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@cli.command("sanitize")
def sanitize_cmd(text: str):
    """Print TEXT with all markup removed."""
    typer.echo(sanitize(text))


@draft_cli.command("show")
def draft_show_cmd():
    record = _draft_store().load()
    if record is None:
        typer.secho("No saved draft.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=0)
    typer.echo(json.dumps(record.to_wire(), indent=2, ensure_ascii=False))


@draft_cli.command("clear")
def draft_clear_cmd():
    store = _draft_store()
    if not store.has_draft():
        typer.secho("No saved draft.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=0)
    store.clear()
    typer.secho("Draft cleared.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    # Allow running via: python -m jobform.cli.main [COMMANDS]
    cli()
