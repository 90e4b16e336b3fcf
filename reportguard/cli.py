"""reportguard CLI: moderation and false-report triage from the shell."""

import asyncio
import json
import logging
from datetime import datetime

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reportguard import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """reportguard: content moderation and false-report risk scoring.

    Screens incident reports before they are stored and scores stored
    reports for signs of being false or spam.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_settings(config_path: str | None, log_dir: str | None = None):
    from reportguard.config import load_settings
    from reportguard.errors import ConfigError

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))
    if log_dir:
        settings.log_dir = log_dir
    return settings


def _open_log(settings):
    from reportguard.audit.moderation_log import ModerationLog

    return ModerationLog(settings.log_dir or None)


# ── Precheck ─────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
def precheck(text: str):
    """Run the offline pre-filter on TEXT."""
    from reportguard.moderation.precheck import precheck as run_precheck

    result = run_precheck(text)
    if result.allowed:
        console.print("[green]v[/] Passed pre-check")
        return
    console.print(f"[red]x[/] Blocked ({result.category}): {result.reason}")
    raise SystemExit(1)


# ── Moderate ─────────────────────────────────────────────────────────


@main.command()
@click.option("--title", "-t", default="", help="Report title")
@click.option("--description", "-d", default="", help="Report description")
@click.option("--media", "-m", multiple=True, help="Image URL (repeatable)")
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--log-dir", default=None, help="Moderation log directory")
@click.option("--json", "as_json", is_flag=True, help="Print the raw analysis as JSON")
def moderate(
    title: str,
    description: str,
    media: tuple[str, ...],
    config_path: str | None,
    log_dir: str | None,
    as_json: bool,
):
    """Moderate a submission with the configured classifiers."""
    from reportguard.errors import ReportValidationError
    from reportguard.moderation.models import ModerationRequest
    from reportguard.moderation.precheck import format_user_message
    from reportguard.pipeline import moderate_submission

    settings = _load_settings(config_path, log_dir)
    request = ModerationRequest(title=title, description=description, media=list(media))

    try:
        outcome = asyncio.run(
            moderate_submission(request, settings=settings, log=_open_log(settings))
        )
    except ReportValidationError as e:
        raise click.UsageError(str(e))

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        return

    analysis = outcome.effective
    if not outcome.success:
        console.print(f"[yellow]![/] Pipeline error, showing fallback result: {outcome.error}")

    if analysis.is_legitimate:
        console.print(
            Panel(
                f"Confidence: {analysis.legitimacy_confidence}%\n"
                f"Method: {analysis.method}",
                title="[green]Allowed[/]",
            )
        )
        return

    console.print(
        Panel(
            format_user_message(analysis.violation_type, analysis.reasoning),
            title=f"[red]Blocked[/] ({analysis.violation_type or 'unknown'})",
        )
    )
    raise SystemExit(1)


# ── Risk ─────────────────────────────────────────────────────────────


def _read_json(path: str):
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Failed to read {path}: {e}")


@main.command()
@click.argument("report_json")
@click.option("--history", default=None, help="JSON file with the author's prior reports")
@click.option("--now", default=None, help="Reference time (ISO 8601) for undated reports")
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--json", "as_json", is_flag=True, help="Print the raw analysis as JSON")
def risk(
    report_json: str,
    history: str | None,
    now: str | None,
    config_path: str | None,
    as_json: bool,
):
    """Score REPORT_JSON for signs of being a false report."""
    from reportguard.errors import ReportValidationError
    from reportguard.models.report import Report, normalize_timestamp
    from reportguard.risk import (
        analyze_potential_false_report,
        auto_flag_rules_matched,
        generate_analysis_summary,
    )

    settings = _load_settings(config_path)
    try:
        report = Report.from_dict(_read_json(report_json))
        prior = [Report.from_dict(r) for r in _read_json(history)] if history else []
        reference: datetime | None = normalize_timestamp(now) if now else None
    except ReportValidationError as e:
        raise click.ClickException(str(e))

    analysis = analyze_potential_false_report(
        report, prior, now=reference, thresholds=settings.risk
    )
    rules = auto_flag_rules_matched(analysis, settings.risk)

    if as_json:
        data = analysis.to_dict()
        data["autoFlagRules"] = rules
        click.echo(json.dumps(data, indent=2))
        return

    summary = generate_analysis_summary(analysis)
    color = "red" if analysis.is_suspicious else "green"
    console.print(
        f"\n[bold {color}]{summary.verdict}[/] "
        f"score={analysis.suspicion_score} risk={summary.risk_level} "
        f"confidence={summary.confidence}\n"
    )

    table = Table(title="Breakdown")
    table.add_column("Analyzer", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Reasons")
    for sub in analysis.breakdown:
        table.add_row(sub.name, str(sub.score), "\n".join(sub.reasons) or "-")
    console.print(table)

    console.print(f"\n{summary.recommendation}")
    if rules:
        console.print(f"[red]Auto-flag:[/] {', '.join(rules)}")


# ── Status ───────────────────────────────────────────────────────────


@main.command()
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
def status(config_path: str | None):
    """Show which classifiers are configured."""
    from reportguard.classifiers import classifier_status

    settings = _load_settings(config_path)
    st = classifier_status(settings.text_classifier(), settings.image_classifier())
    mark = "[green]v[/]" if st.configured else "[yellow]![/]"
    console.print(f"  {mark} {st.level}: {st.message}")
    console.print(
        f"  profile={settings.moderation.profile} "
        f"nsfw_threshold={settings.moderation.nsfw} "
        f"text_threshold={settings.moderation.text_attribute}"
    )


# ── Logs ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--kind", default=None, type=click.Choice(["moderation", "risk"]))
@click.option("--action", default=None, help="Filter by action (approved, rejected, ...)")
@click.option("--violation", default=None, help="Filter by violation type")
@click.option("--limit", default=20, help="Maximum entries to show")
@click.option("--export", "export_fmt", default=None, type=click.Choice(["json", "csv"]))
@click.option("--log-dir", default=None, help="Moderation log directory")
def logs(
    kind: str | None,
    action: str | None,
    violation: str | None,
    limit: int,
    export_fmt: str | None,
    log_dir: str | None,
):
    """List or export moderation log entries."""
    settings = _load_settings(None, log_dir)
    log = _open_log(settings)
    filters = {"kind": kind, "action": action, "violation_type": violation}

    if export_fmt:
        click.echo(log.export(export_fmt, limit=limit, **filters))
        return

    entries = log.get_entries(limit=limit, **filters)
    if not entries:
        console.print("[yellow]No log entries found.[/]")
        return

    table = Table(title=f"Moderation log ({len(entries)} entries)")
    table.add_column("Time", style="dim")
    table.add_column("Kind")
    table.add_column("Action", style="cyan")
    table.add_column("Violation")
    table.add_column("Confidence", justify="right")
    table.add_column("Preview")
    for e in entries:
        table.add_row(
            e.timestamp[:19],
            e.kind,
            e.action,
            e.violation_type or "-",
            str(e.confidence),
            e.content_preview[:50],
        )
    console.print(table)


if __name__ == "__main__":
    main()
