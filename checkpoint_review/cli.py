# checkpoint_review/cli.py
"""
CLI interface for checkpoint-review.

Thin presentation layer: resolves artifacts, runs the checkpoint pipeline (or
the single-shot review), prints the rendered report to stdout and progress,
summaries and errors to stderr.
"""

import asyncio
import signal
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from checkpoint_review.config import ReviewConfig, load_config
from checkpoint_review.engine import create_engine
from checkpoint_review.errors import PipelineStopped, ReviewError
from checkpoint_review.logging_config import configure_logging
from checkpoint_review.pipeline import (
    AggregatedReport,
    CheckpointExecutor,
    CheckpointPipeline,
    ReviewInput,
    ReviewVariant,
)
from checkpoint_review.report import ReportRenderer, ReportWriter, report_filename
from checkpoint_review.single_shot import execute_review, prepare_prompt, summarize_review
from checkpoint_review.sources import GitHubPullRequestSource, read_artifacts, read_required, resolve_paths
from checkpoint_review.static_analysis import StaticAnalysisRunner, load_report
from checkpoint_review.variants import VARIANTS, get_variant
from checkpoint_review.variants.prompt import PROMPT_TEMPLATE_ROLE, TEST_SUITE_ROLE

app = typer.Typer(
    name="checkpoint-review",
    help="Multi-checkpoint AI code and prompt reviews with one aggregated report.",
    no_args_is_help=True,
)

console = Console(stderr=True)


def _fmt_duration(seconds: float) -> str:
    """Format seconds as human-readable duration (e.g. '5m17s', '42s')."""
    s = int(seconds)
    if s < 60:
        return f"{s}s"
    m, s = divmod(s, 60)
    return f"{m}m{s:02d}s"


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _setup(verbose: bool) -> ReviewConfig:
    config = load_config()
    verbosity = "verbose" if verbose else config.output.verbosity
    configure_logging(verbosity, json_output=config.output.json_logs)
    return config


def _project_root(config: ReviewConfig) -> Path:
    return Path(config.paths.project_root)


def _output_dir(config: ReviewConfig, output: str | None) -> Path:
    return _project_root(config) / (output or config.output.output_dir)


def exit_code(report: AggregatedReport) -> int:
    """1 for blockers, critical violations or a failed checklist; otherwise 0."""
    assessment = report.overall_assessment
    if assessment.has_production_blockers:
        return 1
    if report.violations_by_severity.critical:
        return 1
    if assessment.pass_fail_status == "FAIL":
        return 1
    return 0


def _static_report(variant: ReviewVariant, root: Path, static_report: str | None):
    if static_report:
        return load_report(Path(static_report))
    if variant.static_analysis is None:
        return None
    with Status(f"[dim]Running {variant.static_analysis.tool}...[/dim]", console=console, spinner="dots"):
        return StaticAnalysisRunner(root).run(variant.static_analysis)


async def _execute_pipeline(
    variant: ReviewVariant, config: ReviewConfig, engine, inputs: ReviewInput
) -> AggregatedReport:
    """Run the checkpoint pipeline behind a spinner; Ctrl+C stops after the current checkpoint."""
    root = _project_root(config)
    executor = CheckpointExecutor(variant, engine, root / config.paths.templates_root)
    pipeline = CheckpointPipeline(variant, executor, project_root=root)

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, pipeline.request_stop)
    except (NotImplementedError, RuntimeError):
        # Windows event loops have no signal handlers
        pass

    total = len(variant.checkpoints)
    try:
        with Status("[dim]Starting review...[/dim]", console=console, spinner="dots") as status:

            def progress(fraction: float, phase: str) -> None:
                done = round(fraction * total)
                status.update(f"[dim]\\[{done}/{total}] {phase}[/dim]")

            return await pipeline.execute(inputs, progress_callback=progress)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
        close = getattr(engine, "close", None)
        if close is not None:
            await close()


def _print_summary(report: AggregatedReport) -> None:
    assessment = report.overall_assessment
    buckets = report.violations_by_severity
    critical, high = len(buckets.critical), len(buckets.high)
    total = report.metadata.total_violations

    console.print()
    if assessment.pass_fail_status == "PASS":
        console.print("[green]✓ Review PASSED[/green] - all criteria met")
    elif assessment.pass_fail_status == "FAIL":
        console.print("[red]✗ Review FAILED[/red] - not all criteria met")
    elif assessment.has_production_blockers or critical:
        console.print("[red]✗ Review completed with CRITICAL issues[/red]")
    elif high:
        console.print("[yellow]⚠ Review completed with warnings[/yellow]")
    elif total:
        console.print("[green]✓ Review completed with minor issues[/green]")
    else:
        console.print("[green]✓ Review completed - no violations found[/green]")

    console.print(f"  Production Readiness: {assessment.production_readiness}")
    console.print(f"  Confidence Score: {assessment.confidence_score}")
    console.print(f"  Total Violations: {total}")
    if critical or high:
        console.print(f"  Critical: {critical}")
        console.print(f"  High: {high}")

    if assessment.pass_criteria:
        for name, met in assessment.pass_criteria.items():
            console.print(f"  {'[green]✓[/green]' if met else '[red]✗[/red]'} {name}")

    if assessment.has_production_blockers:
        console.print("[red]DEPLOYMENT BLOCKED: production blockers detected[/red]")


def _finish_modular(
    variant: ReviewVariant,
    report: AggregatedReport,
    output_dir: Path,
    ticket: str | None,
    elapsed: float,
) -> None:
    """Save markdown and JSON, print the report and summary, exit with the verdict."""
    renderer = ReportRenderer.for_variant(variant)
    markdown = renderer.render_markdown(report)

    writer = ReportWriter(output_dir)
    name = report_filename(variant.name, ticket)
    path = writer.write(name, markdown)
    writer.write(name.removesuffix(".md") + ".json", renderer.render_json(report))

    typer.echo(markdown)
    _print_summary(report)
    console.print(f"[dim]Saved:[/dim] {path}  [dim]time:[/dim] {_fmt_duration(elapsed)}")

    code = exit_code(report)
    if code:
        raise typer.Exit(code)


def _review_sources(
    variant: ReviewVariant,
    files: str | None,
    pr: str | None,
    all_files: bool,
    ticket: str | None,
    output: str | None,
    verbose: bool,
    static_report: str | None,
    monolithic: bool = False,
) -> None:
    config = _setup(verbose)
    root = _project_root(config)
    start = time.monotonic()

    try:
        engine = create_engine(config)
        github = GitHubPullRequestSource(token=config.github.token, api_url=config.github.api_url)
        paths = _run(resolve_paths(variant, root, files=files, pr_url=pr, all_files=all_files, github=github))
        console.print(f"[dim]Reviewing {len(paths)} {variant.artifact_label} file(s)[/dim]")
        report_data = _static_report(variant, root, static_report)

        if monolithic:
            _single_shot(variant, config, engine, paths, report_data, output, ticket)
            return

        inputs = ReviewInput(artifacts=read_artifacts(paths, root), static_report=report_data)
        report = _run(_execute_pipeline(variant, config, engine, inputs))
    except PipelineStopped as e:
        console.print(f"[yellow]⏹ {escape(str(e))}[/yellow]")
        raise typer.Exit(130)
    except ReviewError as e:
        console.print(f"[red]✗ Code review failed[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    _finish_modular(variant, report, _output_dir(config, output), ticket, time.monotonic() - start)


async def _execute_single_shot(engine, prompt: str) -> str:
    try:
        return await execute_review(engine, prompt)
    finally:
        close = getattr(engine, "close", None)
        if close is not None:
            await close()


def _single_shot(
    variant: ReviewVariant,
    config: ReviewConfig,
    engine,
    paths: list[str],
    static_report,
    output: str | None,
    ticket: str | None,
) -> None:
    if not variant.single_shot_template:
        raise ReviewError(f"'{variant.name}' reviews have no monolithic mode")

    template = _project_root(config) / config.paths.templates_root / variant.single_shot_template
    prompt = prepare_prompt(template, static_report, paths)
    with Status("[dim]Executing code review (this may take 2-3 minutes)...[/dim]", console=console, spinner="dots"):
        review_text = _run(_execute_single_shot(engine, prompt))

    path = ReportWriter(_output_dir(config, output)).write(
        report_filename(variant.name, ticket, modular=False), review_text
    )
    console.print(f"[green]✓ Code review complete[/green]: {path}")
    console.print("\n=== Code Review Summary ===")
    for line in summarize_review(review_text):
        console.print(line)
    console.print(f"\nFull report: {path}")


@app.command()
def apex(
    files: str = typer.Option(None, "--files", "-f", help="Comma-separated file paths to review"),
    pr: str = typer.Option(None, "--pr", "-p", help="GitHub PR URL to review"),
    all_files: bool = typer.Option(False, "--all", "-a", help="Review all Apex classes in force-app/"),
    ticket: str = typer.Option(None, "--ticket", "-t", help="Ticket ID prefixed to the report file name"),
    output: str = typer.Option(None, "--output", "-o", help="Output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    static_report: str = typer.Option(None, "--static-report", help="Use an existing PMD JSON report"),
    mode: str = typer.Option("monolithic", "--mode", help="Review mode: monolithic or modular"),
):
    """Review Apex classes (PMD plus eight checkpoints in modular mode)."""
    if mode not in ("monolithic", "modular"):
        console.print(f"[red]✗ Unknown mode '{mode}'[/red]: use monolithic or modular")
        raise typer.Exit(2)
    _review_sources(
        get_variant("apex"), files, pr, all_files, ticket, output, verbose, static_report,
        monolithic=mode == "monolithic",
    )


@app.command()
def lwc(
    files: str = typer.Option(None, "--files", "-f", help="Comma-separated file paths to review"),
    pr: str = typer.Option(None, "--pr", "-p", help="GitHub PR URL to review"),
    all_files: bool = typer.Option(False, "--all", "-a", help="Review all LWC components"),
    ticket: str = typer.Option(None, "--ticket", "-t", help="Ticket ID prefixed to the report file name"),
    output: str = typer.Option(None, "--output", "-o", help="Output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    static_report: str = typer.Option(None, "--static-report", help="Use an existing ESLint JSON report"),
):
    """Review Lightning Web Components (ESLint plus five checkpoints)."""
    _review_sources(get_variant("lwc"), files, pr, all_files, ticket, output, verbose, static_report)


@app.command()
def prompt(
    prompt_path: str = typer.Option(..., "--prompt", "-p", help="Prompt template file to review"),
    test_path: str = typer.Option(..., "--test", "-t", help="Test suite file for the template"),
    ticket: str = typer.Option(None, "--ticket", help="Ticket ID prefixed to the report file name"),
    output: str = typer.Option(None, "--output", "-o", help="Output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """Review a prompt template and its test suite against a PASS/FAIL checklist."""
    variant = get_variant("prompt")
    config = _setup(verbose)
    root = _project_root(config)
    start = time.monotonic()

    try:
        engine = create_engine(config)
        artifacts = [
            read_required(prompt_path, root, PROMPT_TEMPLATE_ROLE, "Prompt template"),
            read_required(test_path, root, TEST_SUITE_ROLE, "Test suite"),
        ]
        report = _run(_execute_pipeline(variant, config, engine, ReviewInput(artifacts=artifacts)))
    except PipelineStopped as e:
        console.print(f"[yellow]⏹ {escape(str(e))}[/yellow]")
        raise typer.Exit(130)
    except ReviewError as e:
        console.print(f"[red]✗ Prompt review failed[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    _finish_modular(variant, report, _output_dir(config, output), ticket, time.monotonic() - start)


@app.command()
def checkpoints(variant: str = typer.Argument(..., help=f"One of: {', '.join(VARIANTS)}")):
    """List the checkpoint table of a review variant."""
    try:
        selected = get_variant(variant)
    except KeyError as e:
        console.print(f"[red]✗[/red] {escape(e.args[0])}")
        raise typer.Exit(1)

    table = Table(title=selected.title)
    table.add_column("#", justify="right")
    table.add_column("Checkpoint")
    table.add_column("Priority")
    table.add_column("Weight", justify="right")
    table.add_column("Consumes", style="dim")
    table.add_column("Produces", style="dim")
    for checkpoint in selected.ordered():
        table.add_row(
            str(checkpoint.order),
            checkpoint.name,
            checkpoint.priority.value,
            f"{checkpoint.weight:.1f}",
            ", ".join(checkpoint.consumes),
            ", ".join(checkpoint.produces),
        )
    Console().print(table)


if __name__ == "__main__":
    app()
