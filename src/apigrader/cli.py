"""apigrader CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from apigrader import __version__

if TYPE_CHECKING:
    from collections.abc import Callable

_FORMATS = ("rich", "json", "porcelain")
_STRICT_CHECKPOINT_SCORE = 70

_spec_argument = click.argument(
    "spec",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def _load(path: Path) -> dict[str, Any]:
    """Load a spec file, exiting with code 2 when it cannot be read."""
    from apigrader.document.loader import LoadError, load_document

    try:
        return load_document(path)
    except LoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


def _emit(output: str) -> None:
    if output:
        click.echo(output.rstrip("\n"))


def _resolve_format(fmt: str | None) -> str:
    if fmt is None:
        return "rich" if sys.stdout.isatty() else "porcelain"
    return fmt


@click.group()
@click.version_option(version=__version__, prog_name="apigrader")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """apigrader - score OpenAPI documents against a quality standard."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose=verbose, quiet=quiet)


# ---------------------------------------------------------------------------
# grade
# ---------------------------------------------------------------------------


@main.command()
@_spec_argument
@click.option(
    "--profile",
    default=None,
    help="Grading profile id, or 'auto' to detect one (default: fixed prerequisites).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Grading config file (default: ./apigrader.yml if present).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(_FORMATS),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option("--strict", is_flag=True, default=False, help="Exit 1 if the grade does not pass.")
def grade(
    *,
    spec: Path,
    profile: str | None,
    config_path: Path | None,
    fmt: str | None,
    strict: bool,
) -> None:
    """Grade SPEC with the rule registry.

    Exit codes: 0 = graded (or failed without --strict), 1 = blocked by
    prerequisites or failed with --strict, 2 = load error, configuration error
    or unknown profile.
    """
    from apigrader.config import ConfigurationError, load_grading_config
    from apigrader.detection.patterns import classify
    from apigrader.pipeline import grade_document, resolve_profile
    from apigrader.report import format_json, format_porcelain, format_rich

    try:
        config = load_grading_config(config_path)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    doc = _load(spec)
    try:
        active = resolve_profile(profile, classify(doc)) if profile is not None else None
    except KeyError as exc:
        click.echo(f"Error: {exc.args[0]}", err=True)
        sys.exit(2)

    outcome = grade_document(doc, profile=active, config=config)

    formatters: dict[str, Callable[[Any], str]] = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    _emit(formatters[_resolve_format(fmt)](outcome))

    if outcome.blocked or (strict and not outcome.passed):
        sys.exit(1)


# ---------------------------------------------------------------------------
# checkpoints
# ---------------------------------------------------------------------------


@main.command()
@_spec_argument
@click.option(
    "--format",
    "fmt",
    type=click.Choice(_FORMATS),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help=f"Exit 1 on any auto-fail or a score below {_STRICT_CHECKPOINT_SCORE}.",
)
def checkpoints(*, spec: Path, fmt: str | None, strict: bool) -> None:
    """Score SPEC against the 100-point checkpoint catalogue."""
    from apigrader.checkpoints import grade_api
    from apigrader.report import (
        format_checkpoints_json,
        format_checkpoints_porcelain,
        format_checkpoints_rich,
    )

    report = grade_api(_load(spec))
    formatters: dict[str, Callable[[Any], str]] = {
        "rich": format_checkpoints_rich,
        "json": format_checkpoints_json,
        "porcelain": format_checkpoints_porcelain,
    }
    _emit(formatters[_resolve_format(fmt)](report))

    if strict and (report.auto_failed or report.score < _STRICT_CHECKPOINT_SCORE):
        sys.exit(1)


# ---------------------------------------------------------------------------
# prereqs
# ---------------------------------------------------------------------------


@main.command()
@_spec_argument
@click.option("--profile", default=None, help="Grading profile id, or 'auto'.")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def prereqs(*, spec: Path, profile: str | None, output_json: bool) -> None:
    """Run only the prerequisite gate on SPEC.

    Exit codes: 0 = passed, 1 = blocked, 2 = load error or unknown profile.
    """
    from apigrader.detection.patterns import classify
    from apigrader.pipeline import resolve_profile
    from apigrader.report import format_prereqs_json, format_prereqs_rich
    from apigrader.scoring.prerequisites import check_prerequisites

    doc = _load(spec)
    try:
        active = resolve_profile(profile, classify(doc)) if profile is not None else None
    except KeyError as exc:
        click.echo(f"Error: {exc.args[0]}", err=True)
        sys.exit(2)

    result = check_prerequisites(doc, active)
    _emit(format_prereqs_json(result) if output_json else format_prereqs_rich(result))
    if not result.passed:
        sys.exit(1)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


@main.command()
@_spec_argument
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def classify(*, spec: Path, output_json: bool) -> None:
    """Show pattern family scores for SPEC and the profile they suggest."""
    from apigrader.detection.patterns import check_rest_best_practices
    from apigrader.detection.patterns import classify as run_classify
    from apigrader.detection.profiles import profile_for_classification
    from apigrader.report import format_classification_json, format_classification_rich

    doc = _load(spec)
    classification = run_classify(doc)
    profile = profile_for_classification(classification)
    if output_json:
        _emit(format_classification_json(classification, profile))
        return

    _emit(format_classification_rich(classification, profile))
    advice = check_rest_best_practices(doc)
    if advice:
        click.echo("")
        click.echo("REST advice:")
        for line in advice:
            click.echo(f"  - {line}")


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


@main.command()
@click.option("--category", default=None, help="Only rules in this category.")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def rules(*, category: str | None, output_json: bool) -> None:
    """List the rules in the built-in registry."""
    from apigrader.rules.registry import DEFAULT_REGISTRY

    selected = [r for r in DEFAULT_REGISTRY.values() if category is None or r.category == category]
    if output_json:
        click.echo(json.dumps([r.to_dict() for r in selected], ensure_ascii=False, indent=2))
        return
    if not selected:
        click.echo(f"No rules in category '{category}'.")
        return
    for rule in selected:
        points = "gate" if rule.is_prerequisite else f"{rule.points:g} pts"
        click.echo(f"{rule.id:<11} {rule.category:<16} {rule.severity:<12} {points:>7}  {rule.description}")


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------


@main.command()
@click.argument("baseline", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("current", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def compare(*, baseline: Path, current: Path, output_json: bool) -> None:
    """Grade BASELINE and CURRENT and show how the grade moved."""
    from apigrader.pipeline import compare_documents
    from apigrader.report import format_comparison_json, format_comparison_rich

    result = compare_documents(_load(baseline), _load(current))
    _emit(format_comparison_json(result) if output_json else format_comparison_rich(result))
