"""Command-line interface for depmatrix."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

from depmatrix import __version__
from depmatrix.config import DepMatrixSettings, load_settings

if TYPE_CHECKING:
    from depmatrix.analysis.models import (
        MatrixStats,
        NormalizationReport,
        SubAttributeNormalization,
    )
    from depmatrix.models import Matrix, Submission

app = typer.Typer(
    name="depmatrix",
    help="Aggregate dependency-matrix submissions into normalized priority weights.",
    no_args_is_help=True,
)
console = Console(width=min(100, Console().width))


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"depmatrix {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Aggregate dependency-matrix submissions into normalized priority weights."""


# ---------------------------------------------------------------------------
# Shared option types
# ---------------------------------------------------------------------------

MatrixArg = Annotated[
    Path,
    typer.Argument(help="Matrix file (JSON or YAML): {rows, columns, dependencies}."),
]
SubmissionsOpt = Annotated[
    Path | None,
    typer.Option("--submissions", "-s", help="Submissions file (list with unwrapped data)."),
]
HistoryOpt = Annotated[
    Path | None,
    typer.Option("--history", "-H", help="History export (entries with matrixSnapshot)."),
]
VerboseOpt = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging."),
]


def _setup(verbose: bool, **overrides: object) -> DepMatrixSettings:
    from depmatrix.logging import setup_logging

    settings = load_settings(**overrides)
    setup_logging(output_dir=settings.output_dir, verbose=verbose)
    return settings


def _load_inputs(
    matrix_path: Path,
    submissions_path: Path | None,
    history_path: Path | None,
    settings: DepMatrixSettings,
) -> tuple[Matrix, list[Submission]]:
    """Load the matrix and its submissions, exiting with a message on bad input."""
    from depmatrix.io import MatrixInputError, load_history, load_matrix, load_submissions
    from depmatrix.snapshots import submissions_from_history

    if submissions_path is not None and history_path is not None:
        console.print("[red]Pass either --submissions or --history, not both.[/red]")
        raise typer.Exit(1)
    try:
        matrix = load_matrix(matrix_path)
        if submissions_path is not None:
            submissions = load_submissions(submissions_path)
        elif history_path is not None:
            submissions = submissions_from_history(
                load_history(history_path),
                action=settings.submission_action,
                exclude_usernames=settings.excluded_usernames,
            )
        else:
            submissions = []
    except MatrixInputError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    return matrix, submissions


def _fmt(value: float, places: int = 1) -> str:
    return f"{value:.{places}f}"


# ---------------------------------------------------------------------------
# normalize
# ---------------------------------------------------------------------------


@app.command()
def normalize(
    matrix_path: MatrixArg,
    submissions_path: SubmissionsOpt = None,
    history_path: HistoryOpt = None,
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Category to show sub-attributes for."),
    ] = None,
    category_min: Annotated[
        float | None, typer.Option("--category-min", help="Category range minimum."),
    ] = None,
    category_max: Annotated[
        float | None, typer.Option("--category-max", help="Category range maximum."),
    ] = None,
    sub_min: Annotated[
        float | None, typer.Option("--sub-min", help="Sub-attribute range minimum."),
    ] = None,
    sub_max: Annotated[
        float | None, typer.Option("--sub-max", help="Sub-attribute range maximum."),
    ] = None,
    min_submissions: Annotated[
        int | None,
        typer.Option("--min-submissions", help="Submissions needed for full progress."),
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the full report as JSON."),
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the JSON report to a file."),
    ] = None,
    verbose: VerboseOpt = False,
) -> None:
    """Aggregate submissions and print normalized category and sub-attribute weights."""
    from depmatrix.analysis.report import UnknownCategoryError, build_report

    try:
        settings = _setup(
            verbose,
            category_new_min=category_min,
            category_new_max=category_max,
            sub_attribute_new_min=sub_min,
            sub_attribute_new_max=sub_max,
            min_submissions_required=min_submissions,
        )
        category_params = settings.category_params()
        sub_params = settings.sub_attribute_params()
    except ValueError as e:
        console.print(f"[red]Invalid normalization range: {e}[/red]")
        raise typer.Exit(1) from e

    matrix, submissions = _load_inputs(matrix_path, submissions_path, history_path, settings)
    try:
        report = build_report(
            matrix,
            submissions,
            category=category,
            category_params=category_params,
            sub_attribute_params=sub_params,
            min_required=settings.min_submissions_required,
        )
    except UnknownCategoryError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
        if not as_json:
            console.print(f"Report written to [bold]{output}[/bold]")

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    _print_stats(report.stats)
    _print_categories(report)
    if report.selected_category is not None:
        _print_sub_attributes(report.sub_attributes[report.selected_category])


def _print_stats(stats: MatrixStats) -> None:
    console.print()
    console.print(
        f"  Submissions [bold]{stats.submission_count}[/bold]"
        f" [dim]({_fmt(stats.submission_progress, 0)}% of required)[/dim]"
    )
    console.print(
        f"  Filled cells [bold]{stats.filled_relationships}[/bold]"
        f" / {stats.max_possible_relationships}"
        f" [dim]({_fmt(stats.percentage_filled)}%)[/dim]"
    )
    console.print(f"  Total dependencies [bold]{stats.total_relationships}[/bold]")
    console.print()


def _print_categories(report: NormalizationReport) -> None:
    cats = report.categories
    table = Table(title="Category normalization")
    for header in (
        "Category", "Sub-attributes", "Total", "Sub total", "Combined",
        "Weight", "Normalized", "Comparison",
    ):
        table.add_column(header, justify="left" if header == "Category" else "right")
    for name, count in cats.row_counts.items():
        style = "bold" if name == report.selected_category else None
        table.add_row(
            name,
            str(count),
            str(cats.totals.get(name, 0)),
            str(cats.subtotals.get(name, 0)),
            str(cats.combined_totals.get(name, 0)),
            _fmt(cats.weights[name]),
            _fmt(cats.normalized[name]),
            _fmt(cats.comparison[name], 2),
            style=style,
        )
    console.print(table)


def _print_sub_attributes(result: SubAttributeNormalization) -> None:
    table = Table(title=f"Sub-attributes: {result.category}")
    table.add_column("Sub-attribute")
    table.add_column("Weight", justify="right")
    table.add_column("Normalized", justify="right")
    for row_id, weight in result.weights.items():
        table.add_row(
            result.names.get(row_id) or str(row_id),
            str(weight),
            _fmt(result.normalized[row_id]),
        )
    console.print(table)

    # Upper triangle only
    ids = list(result.weights)
    matrix_table = Table(title="Sub-attribute comparison matrix")
    matrix_table.add_column("")
    for row_id in ids:
        matrix_table.add_column(result.names.get(row_id) or str(row_id), justify="right")
    for i, a in enumerate(ids):
        cells = []
        for j, b in enumerate(ids):
            if i == j:
                cells.append("[dim]-[/dim]")
            elif i < j:
                cells.append(_fmt(result.comparisons[a][b], 2))
            else:
                cells.append("")
        matrix_table.add_row(result.names.get(a) or str(a), *cells)
    console.print(matrix_table)


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


@app.command()
def stats(
    matrix_path: MatrixArg,
    submissions_path: SubmissionsOpt = None,
    history_path: HistoryOpt = None,
    min_submissions: Annotated[
        int | None,
        typer.Option("--min-submissions", help="Submissions needed for full progress."),
    ] = None,
    verbose: VerboseOpt = False,
) -> None:
    """Show coverage statistics for the aggregated submissions."""
    from depmatrix.analysis.aggregate import aggregate
    from depmatrix.analysis.stats import compute_stats

    settings = _setup(verbose, min_submissions_required=min_submissions)
    matrix, submissions = _load_inputs(matrix_path, submissions_path, history_path, settings)
    aggregation = aggregate(matrix, submissions)
    if aggregation.invalid_count:
        console.print(
            f"[yellow]{aggregation.invalid_count} submission(s) skipped"
            " (unusable snapshot)[/yellow]"
        )
    _print_stats(
        compute_stats(
            matrix,
            aggregation.votes,
            aggregation.submission_count,
            settings.min_submissions_required,
        )
    )


# ---------------------------------------------------------------------------
# averages
# ---------------------------------------------------------------------------


@app.command()
def averages(
    matrix_path: MatrixArg,
    history_path: Annotated[
        Path,
        typer.Option("--history", "-H", help="History export (entries with matrixSnapshot)."),
    ],
    verbose: VerboseOpt = False,
) -> None:
    """Average dependencies per column across every stored snapshot."""
    from depmatrix.analysis.timeline import column_averages
    from depmatrix.io import MatrixInputError, load_history, load_matrix
    from depmatrix.snapshots import parse_snapshot

    _setup(verbose)
    try:
        matrix = load_matrix(matrix_path)
        entries = load_history(history_path)
    except MatrixInputError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    snapshots = [parse_snapshot(e.matrix_snapshot) for e in entries if e.matrix_snapshot is not None]
    if not snapshots:
        console.print("No history data available for this matrix.")
        return

    table = Table(title="Column averages")
    table.add_column("Column")
    table.add_column("Average", justify="right")
    for avg in column_averages(matrix, snapshots):
        table.add_row(avg.name or str(avg.id), _fmt(avg.average, 2))
    console.print(table)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to serve on."),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", help="Development mode: auto-reload on Python changes."),
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Launch the normalization API server."""
    try:
        import uvicorn
    except ImportError:
        console.print("[red]Server dependencies not installed.[/red]")
        console.print("Install with: [bold]pip install depmatrix[serve][/bold]")
        raise typer.Exit(1)

    settings = _setup(verbose, port=port)
    console.print(
        f"\n  API docs: [bold cyan]http://127.0.0.1:{settings.port}/api/docs[/bold cyan]\n"
    )

    if reload:
        # uvicorn calls the factory itself on reload; pass flags via env
        import os

        if verbose:
            os.environ["_DEPMATRIX_VERBOSE"] = "1"
        uvicorn.run(
            "depmatrix.server.app:create_app",
            host="127.0.0.1",
            port=settings.port,
            reload=True,
            factory=True,
            log_level="info" if verbose else "warning",
        )
    else:
        from depmatrix.server.app import create_app

        uvicorn.run(
            create_app(settings=settings, verbose=verbose),
            host="127.0.0.1",
            port=settings.port,
            log_level="info" if verbose else "warning",
        )
