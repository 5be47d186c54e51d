"""Click CLI for radiology-clean."""

import json
import logging
import sys
import typing
from enum import Enum

import click

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _split_assignment(raw: str, option: str) -> tuple[str, str]:
    path, sep, value = raw.partition("=")
    if not sep or not path.strip():
        raise click.BadParameter(f"expected PATH=VALUE, got '{raw}'", param_hint=option)
    return path.strip(), value


def _flatten(data: dict, prefix: str = "") -> dict:
    flat = {}
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{path}."))
        else:
            flat[path] = value
    return flat


def _describe(annotation) -> tuple[str, str]:
    if typing.get_origin(annotation) is frozenset:
        (item_type,) = typing.get_args(annotation)
        return "multi", " | ".join(m.value for m in item_type)
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return "choice", " | ".join(m.value for m in annotation)
    if annotation is bool:
        return "flag", ""
    return "text", ""


def _default_text(value) -> str:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, frozenset):
        return ", ".join(sorted(v.value for v in value))
    return repr(value) if isinstance(value, str) else str(value)


def _print_result(result) -> None:
    click.echo(f"PROTOCOL\n  {result.protocol_summary or '—'}")
    if result.context_tags:
        click.echo(f"\nCONTEXT\n  {', '.join(result.context_tags)}")

    click.echo("\nDIFFERENTIAL DIAGNOSIS")
    if not result.differentials:
        click.echo("  (none)")
    for d in result.differentials:
        score = f"  [score {d.score}]" if d.score is not None else ""
        click.echo(f"  {d.likelihood.value:8s} {d.name}{score}")
        for why in d.rationale:
            click.echo(f"           - {why}")

    click.echo("\nRECOMMENDATIONS")
    if not result.recommendations:
        click.echo("  (none)")
    for i, r in enumerate(result.recommendations, 1):
        urgency = f"[{r.urgency.value}] " if r.urgency else ""
        action = "  (apply available)" if r.has_action else ""
        click.echo(f"  {i}. {urgency}{r.text}{action}")
        for detail in r.details:
            click.echo(f"       - {detail}")

    if result.patterns:
        click.echo("\nPATTERN SUPPORT")
        for p in result.patterns:
            click.echo(f"  {p.title}: {p.tag} (score {p.score})")

    if result.features:
        click.echo("\nFEATURES")
        for f in result.features:
            click.echo(f"  +{f.weight} {f.label}")

    click.echo(f"\nREPORT\n{result.narrative}")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: RADCLEAN_LOG_LEVEL or INFO)",
)
def cli(log_level):
    """radiology-clean: structured radiology findings to DDX, protocol advice and report text."""
    from radclean.config import settings

    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@cli.command()
def modules():
    """List registered organ modules."""
    from radclean.modules import list_modules

    for m in list_modules():
        click.echo(f"  {m.module_id:12s}  {m.title}")


@cli.command()
@click.argument("module_id")
def fields(module_id):
    """List the settable field paths of a module with kinds, choices and defaults."""
    from radclean.errors import RadcleanError
    from radclean.modules import get_module
    from radclean.store import field_annotation, field_paths, read_path

    try:
        module = get_module(module_id)
    except RadcleanError as e:
        click.echo(e.message, err=True)
        sys.exit(1)

    default = module.state_cls()
    for path in field_paths(module.state_cls):
        kind, choices = _describe(field_annotation(module.state_cls, path))
        line = f"  {path:34s} {kind:7s} default={_default_text(read_path(default, path))}"
        if choices:
            line += f"  [{choices}]"
        click.echo(line)


@cli.command()
@click.argument("module_id")
def defaults(module_id):
    """Print the default finding state of a module as JSON."""
    from radclean.errors import RadcleanError
    from radclean.modules import get_module

    try:
        module = get_module(module_id)
    except RadcleanError as e:
        click.echo(e.message, err=True)
        sys.exit(1)

    data = module.state_cls().model_dump(mode="json")
    for key, value in data.items():
        if isinstance(value, list):
            data[key] = sorted(value)
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@cli.command()
@click.argument("module_id")
@click.option("--state", "state_file", type=click.File("r"), default=None, help="JSON file with field values")
@click.option("--set", "assignments", multiple=True, metavar="PATH=VALUE", help="Set one field")
@click.option("--toggle", "toggles", multiple=True, metavar="PATH=ITEM", help="Toggle a multi-select item or a flag")
@click.option("--apply", "apply_indexes", multiple=True, type=int, metavar="N", help="Apply recommendation N (1-based)")
@click.option("--json", "as_json", is_flag=True, help="Print the derived result as JSON")
@click.option("--copy", "copy", is_flag=True, help="Copy the report text to the clipboard")
def derive(module_id, state_file, assignments, toggles, apply_indexes, as_json, copy):
    """Derive DDX, recommendations and the report for a set of findings."""
    from radclean.clipboard import copy_narrative
    from radclean.errors import RadcleanError
    from radclean.modules import get_module

    try:
        module = get_module(module_id)
        store = module.new_store()

        if state_file is not None:
            try:
                data = json.load(state_file)
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"invalid JSON: {e}", param_hint="--state")
            if not isinstance(data, dict):
                raise click.BadParameter("expected a JSON object", param_hint="--state")
            store.update(_flatten(data))

        for raw in assignments:
            store.set(*_split_assignment(raw, "--set"))
        for raw in toggles:
            store.toggle(*_split_assignment(raw, "--toggle"))

        for index in apply_indexes:
            recs = module.derive(store.state).recommendations
            if not 1 <= index <= len(recs):
                click.echo(f"No recommendation #{index} (have {len(recs)})", err=True)
                sys.exit(1)
            rec = recs[index - 1]
            if not rec.has_action:
                click.echo(f"Recommendation #{index} has no action to apply", err=True)
                continue
            rec.apply(store)
            click.echo(f"Applied: {rec.text}", err=True)
    except RadcleanError as e:
        click.echo(e.message, err=True)
        sys.exit(1)

    result = module.derive(store.state)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)

    if copy:
        feedback = copy_narrative(result.narrative)
        click.echo(feedback.message, err=not feedback.ok)
