"""Console script for smartgrade."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config.loader import ConfigLoader
from .config.models import AppConfig
from .course.summary import course_summary
from .errors import SmartGradeError
from .grading.composite import grade_assessment
from .grading.models import assessment_key
from .grading.peer import MAX_PEER_SCORE, MIN_PEER_SCORE, teammates
from .grading.workflow import record_peer_reviews, set_custom_score, set_level_score
from .output.export import assignment_table, roster_table, write_csv
from .rubrics.loader import RubricLoader
from .rubrics.models import AssignmentType, Rubric
from .storage.gradebook import Gradebook, GradebookRepository
from .storage.store import FileStore
from .utils.files import csv_export_path
from .utils.logging import setup_logging

app = typer.Typer(help="Rubric grading, rosters and course summaries.")
console = Console()


@dataclass
class CliState:
    config: AppConfig
    repository: GradebookRepository


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _load_gradebook(state: CliState) -> Gradebook:
    try:
        return state.repository.load()
    except SmartGradeError as e:
        _fail(str(e))


def _rubric(gradebook: Gradebook, rubric_id: Optional[str]) -> Rubric:
    if rubric_id is None:
        return gradebook.current_rubric
    rubric = gradebook.rubric(rubric_id)
    if rubric is None:
        _fail(f"Rubric not found: {rubric_id}")
    return rubric


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a YAML configuration file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """Load configuration and open the gradebook store."""
    try:
        app_config = ConfigLoader().load(config)
        setup_logging(
            level=logging.DEBUG if verbose else app_config.logging.level,
            log_file=log_file or app_config.logging.file,
        )
    except (SmartGradeError, ValueError) as e:
        _fail(str(e))
    repository = GradebookRepository(
        FileStore(app_config.data_dir), app_config.owner, app_config.grading
    )
    ctx.obj = CliState(config=app_config, repository=repository)


@app.command("import-roster")
def import_roster(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Text or CSV file with the roster"),
    assignment_type: AssignmentType = typer.Option(
        AssignmentType.INDIVIDUAL, "--type", "-t", help="individual or group"
    ),
):
    """Import students or groups from a text/CSV file."""
    state = _state(ctx)
    if not source.exists():
        _fail(f"File not found: {source}")

    gradebook = _load_gradebook(state)
    result = gradebook.import_roster(source.read_text(encoding="utf-8"), assignment_type)
    if result.created:
        state.repository.save(gradebook)

    console.print(f"[green]Imported {result.success_count} {assignment_type.value} record(s)[/green]")
    for message in result.errors:
        console.print(f"  [yellow]-[/yellow] {message}")


@app.command("add-student")
def add_student(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Student name"),
    student_id: str = typer.Option("", "--id", help="Student id (generated if omitted)"),
):
    """Add a single student to the roster."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    try:
        student = gradebook.add_student(name, student_id)
    except ValueError as e:
        _fail(str(e))
    state.repository.save(gradebook)
    console.print(f"Added [bold]{student.name}[/bold] ({student.id})")


@app.command("export-roster")
def export_roster(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="Destination CSV file"),
    assignment_type: AssignmentType = typer.Option(
        AssignmentType.INDIVIDUAL, "--type", "-t", help="individual or group"
    ),
):
    """Write the roster as CSV that import-roster reads back."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    write_csv(roster_table(gradebook.assignees, assignment_type), output)
    console.print(f"Roster written to {output}")


@app.command("add-rubric")
def add_rubric(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Rubric YAML/JSON file"),
    assignment_type: AssignmentType = typer.Option(
        AssignmentType.INDIVIDUAL, "--type", "-t", help="Type for generated rubric documents"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Validate only"),
):
    """Validate a rubric file and add it to the gradebook."""
    state = _state(ctx)
    loader = RubricLoader(source.parent, defaults=state.config.grading)
    try:
        rubric = loader.load(source.name, assignment_type)
    except FileNotFoundError as e:
        _fail(str(e))
    except SmartGradeError as e:
        _fail(str(e))

    console.print(rubric.to_prompt_text())
    unscorable = [c.title for c in rubric.criteria if not c.is_scorable]
    if unscorable:
        console.print(f"[yellow]Criteria without levels:[/yellow] {', '.join(unscorable)}")
    if dry_run:
        return

    gradebook = _load_gradebook(state)
    try:
        gradebook.add_rubric(rubric)
    except ValueError as e:
        _fail(str(e))
    state.repository.save(gradebook)
    console.print(f"[green]Added rubric {rubric.id}[/green]")


@app.command("score")
def score(
    ctx: typer.Context,
    assignee_id: str = typer.Argument(..., help="Student or group id"),
    criterion_id: str = typer.Argument(..., help="Criterion id"),
    level_id: Optional[str] = typer.Option(None, "--level", "-l", help="Level id"),
    value: Optional[float] = typer.Option(None, "--value", help="Custom score"),
    rubric_id: Optional[str] = typer.Option(None, "--rubric", "-r", help="Rubric id"),
):
    """Score one criterion by level or by custom value."""
    state = _state(ctx)
    if (level_id is None) == (value is None):
        _fail("Give exactly one of --level or --value")

    gradebook = _load_gradebook(state)
    rubric = _rubric(gradebook, rubric_id)
    if gradebook.assignee(assignee_id) is None:
        _fail(f"Assignee not found: {assignee_id}")

    assessment = gradebook.assessment_for(rubric.id, assignee_id)
    if level_id is not None:
        updated = set_level_score(rubric, assessment, criterion_id, level_id)
    else:
        updated = set_custom_score(rubric, assessment, criterion_id, value)
    gradebook.save_assessment(updated)
    state.repository.save(gradebook)
    console.print(f"{assignee_id}: {updated.total_score:.2f}% on {rubric.title}")


@app.command("peer-review")
def peer_review(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group id"),
    evaluator: str = typer.Argument(..., help="Member string of the reviewer"),
    scores: list[str] = typer.Option(
        ..., "--score", "-s", help="Review as MEMBER=SCORE (0-100), repeatable"
    ),
    rubric_id: Optional[str] = typer.Option(None, "--rubric", "-r", help="Rubric id"),
):
    """Record a member's peer reviews, replacing earlier ones."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    rubric = _rubric(gradebook, rubric_id)
    group = gradebook.assignee(group_id)
    if group is None or not group.is_group:
        _fail(f"Group not found: {group_id}")
    if evaluator not in group.members:
        _fail(f"{evaluator} is not a member of {group.name}")

    reviewable = teammates(group, evaluator)
    parsed: dict[str, float] = {}
    for item in scores:
        subject, sep, raw = item.rpartition("=")
        if not sep or subject not in reviewable:
            _fail(f"Invalid review: {item}")
        try:
            value = float(raw)
        except ValueError:
            _fail(f"Invalid score: {raw}")
        if not MIN_PEER_SCORE <= value <= MAX_PEER_SCORE:
            _fail(f"Score for {subject} must be between 0 and 100: {raw}")
        parsed[subject] = value

    assessment = gradebook.assessment_for(rubric.id, group_id)
    updated = record_peer_reviews(rubric, assessment, evaluator, parsed)
    gradebook.save_assessment(updated)
    state.repository.save(gradebook)
    console.print(f"Saved {len(parsed)} review(s) by {evaluator}")


@app.command("show-grade")
def show_grade(
    ctx: typer.Context,
    assignee_id: str = typer.Argument(..., help="Student or group id"),
    rubric_id: Optional[str] = typer.Option(None, "--rubric", "-r", help="Rubric id"),
):
    """Show the composite grade of one assignee."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    rubric = _rubric(gradebook, rubric_id)
    assessment = gradebook.assessments.get(assessment_key(rubric.id, assignee_id))
    grade = grade_assessment(rubric, assessment)
    composite = grade.composite

    table = Table(title=f"{rubric.title} / {assignee_id}")
    table.add_column("Component")
    table.add_column("Value", justify="right")
    table.add_row("Rubric score", f"{grade.breakdown.raw_score:g} / {grade.breakdown.max_raw_score:g}")
    table.add_row(f"Teacher ({composite.teacher_weight_pct:g}%)", f"{composite.teacher_component:.2f}")
    table.add_row(f"Peer ({composite.peer_weight_pct:g}%)", f"{composite.peer_component:.2f}")
    table.add_row("Assignment %", f"{composite.assignment_percentage:.2f}")
    table.add_row(
        f"Course contribution ({rubric.assignment_weight:g}%)",
        f"{composite.course_contribution:.2f}",
    )
    table.add_row("Status", grade.status.value)
    console.print(table)


@app.command("export-assignment")
def export_assignment(
    ctx: typer.Context,
    rubric_id: Optional[str] = typer.Option(None, "--rubric", "-r", help="Rubric id"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination CSV"),
):
    """Export grades of one assignment."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    rubric = _rubric(gradebook, rubric_id)
    table = assignment_table(
        rubric, gradebook.assignees, gradebook.assessments, state.config.export.decimals
    )
    output = output or csv_export_path(rubric.title)
    write_csv(table, output, state.config.export.delimiter)
    console.print(f"Exported {len(table) - 1} rows to {output}")


@app.command("course-summary")
def export_course_summary(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination CSV"),
):
    """Export course totals across all assignments."""
    state = _state(ctx)
    gradebook = _load_gradebook(state)
    summary = course_summary(gradebook.assignees, gradebook.assessments, gradebook.rubrics)
    table = summary.to_table(state.config.export.decimals)

    preview = Table(title="Course Summary")
    for header in table[0]:
        preview.add_column(header)
    for row in table[1:]:
        preview.add_row(*row)
    console.print(preview)

    output = output or csv_export_path("all_assignments", prefix="course_summary_")
    write_csv(table, output, state.config.export.delimiter)
    console.print(f"Exported {len(summary.rows)} students to {output}")


if __name__ == "__main__":
    app()
