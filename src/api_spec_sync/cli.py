"""CLI entry point for api-spec-sync."""

from pathlib import Path

import click

from api_spec_sync.config import DEFAULT_SPEC_PATH, ConfigError, load_config
from api_spec_sync.engine.pipeline import reconcile
from api_spec_sync.engine.report import OperationStatus, operation_statuses, summarize
from api_spec_sync.engine.schema_match import match_schemas
from api_spec_sync.log import setup_logging
from api_spec_sync.model.base import ApiSpecification, DiffStatus, HttpMethod
from api_spec_sync.service import SpecSyncService
from api_spec_sync.store.yaml_store import SpecStoreError, load_spec, save_spec


def _load(file_path: Path, required: bool = True) -> ApiSpecification | None:
    try:
        spec = load_spec(file_path)
    except SpecStoreError as e:
        raise click.ClickException(str(e)) from e
    if spec is None and required:
        raise click.ClickException(f"{file_path} holds no API specification")
    return spec


def _filter_operations(
    rows: list[OperationStatus],
    methods: tuple[str, ...] = (),
    path_prefix: str | None = None,
    diff: str | None = None,
) -> list[OperationStatus]:
    """Keep rows matching every given filter. Empty filters match everything."""
    wanted = {m.upper() for m in methods}
    result = []
    for row in rows:
        if wanted and row.method.value not in wanted:
            continue
        if path_prefix and not row.path.startswith(path_prefix):
            continue
        if diff and row.diff.value != diff:
            continue
        result.append(row)
    return result


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every per-operation verdict.")
def main(verbose: bool):
    """API Spec Sync: keep a curated API specification in step with the live service."""
    setup_logging(verbose)


@main.command()
@click.argument("live_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-s", "--spec", "spec_path", default=DEFAULT_SPEC_PATH, envvar="API_SPEC_SYNC_SPEC", show_default=True, type=click.Path(dir_okay=False, path_type=Path), help="Persisted specification file.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write the result here instead of updating --spec in place.")
@click.option("--config", "config_path", default=None, envvar="API_SPEC_SYNC_CONFIG", type=click.Path(dir_okay=False, path_type=Path), help="YAML file with sync settings.")
@click.option("--verify-all-responses", is_flag=True, envvar="API_SPEC_SYNC_VERIFY_ALL_RESPONSES", help="Compare responses even where the live operation did not opt in.")
def sync(live_path: Path, spec_path: Path, output: Path | None, config_path: Path | None, verify_all_responses: bool):
    """Reconcile the persisted specification with a live one."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verify_all_responses:
        config.verify_all_responses = True

    live = _load(live_path)
    click.echo(f"Reconciling {spec_path} with {live_path}...")

    try:
        if output is None:
            result = SpecSyncService(spec_path, config).synchronize(live)
            target = spec_path
        else:
            result = reconcile(_load(spec_path, required=False), live, config)
            save_spec(result, output)
            target = output
    except SpecStoreError as e:
        raise click.ClickException(str(e)) from e

    summary = summarize(result)
    click.echo(f"{summary.total} operations:")
    for status in DiffStatus:
        count = summary.diff.get(status, 0)
        if count:
            click.echo(f"  diff={status.value}: {count}")
    click.echo(f"Saved to {target}")


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-m", "--method", "methods", multiple=True, type=click.Choice([m.value for m in HttpMethod], case_sensitive=False), help="Only these methods (repeatable).")
@click.option("-p", "--path", "path_prefix", default=None, help="Only paths starting with this prefix.")
@click.option("--diff", default=None, type=click.Choice([d.value for d in DiffStatus]), help="Only operations with this diff status.")
def status(spec_path: Path, methods: tuple[str, ...], path_prefix: str | None, diff: str | None):
    """List operations with their sync status."""
    spec = _load(spec_path)
    rows = _filter_operations(operation_statuses(spec), methods, path_prefix, diff)
    for row in rows:
        click.echo(
            f"{row.method.value:<7} {row.path:<40} diff={row.diff.value:<9} "
            f"progress={row.progress.value:<10} tag={row.tag} id={row.identifier or '-'}"
        )
    click.echo(f"{len(rows)} operations")


@main.command()
@click.argument("live_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def schemas(live_path: Path, spec_path: Path):
    """Show which named schemas still match between live and persisted."""
    live = _load(live_path)
    spec = _load(spec_path)
    table = match_schemas(live.schema_registry(), spec.schema_registry())
    for name in sorted(table):
        click.echo(f"{name}: {'matched' if table[name] else 'unmatched'}")
