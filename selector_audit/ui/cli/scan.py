"""
CLI commands for selector scans.

Thin wrappers over ``selector_audit.core.use_cases.audit``.

Usage::

    selaudit scan cluster
    selaudit scan cluster -n shop -n payments --json
    selaudit scan manifests deploy/ --strict
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from selector_audit.core.models.config import AuditConfig

# Exit status when --strict is given and collisions were found
_EXIT_COLLISIONS = 2


def _load_config(
    ctx: click.Context,
    *,
    exclude: tuple[str, ...] = (),
    **overrides: object,
) -> AuditConfig:
    """Load selaudit.yml (or defaults) and apply CLI overrides; exit 1 on error.

    Overrides replace the file's values; ``exclude`` adds to its
    ``exclude_namespaces``.
    """
    from selector_audit.core.config.loader import ConfigError, load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    update = {k: v for k, v in overrides.items() if v}
    if exclude:
        update["exclude_namespaces"] = list(dict.fromkeys([*config.exclude_namespaces, *exclude]))
    return config.model_copy(update=update) if update else config


def _report(ctx: click.Context, result, *, as_json: bool, strict: bool) -> None:
    """Print an AuditResult and exit with the matching status."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
    else:
        for report in result.collisions:
            click.echo(report.line)

        if not ctx.obj.get("quiet"):
            color = "yellow" if result.collisions else "green"
            click.echo()
            click.secho(
                f"   {len(result.collisions)} collisions "
                f"({result.services_seen} services, {result.owners_seen} owners, "
                f"{len(result.registry)} namespaces)",
                fg=color,
                bold=True,
            )

    if result.error:
        sys.exit(1)
    if strict and result.collisions:
        sys.exit(_EXIT_COLLISIONS)


@click.group("scan")
def scan() -> None:
    """Scan selectors — live cluster or manifest files."""


@scan.command("cluster")
@click.option("--namespace", "-n", "namespaces", multiple=True, help="Restrict to a namespace (repeatable; replaces selaudit.yml namespaces).")
@click.option("--exclude", "-x", "exclude_namespaces", multiple=True, help="Skip a namespace (repeatable; adds to selaudit.yml excludes).")
@click.option("--context", default=None, help="kubectl context to use.")
@click.option("--kubeconfig", default=None, help="Path to a kubeconfig file.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--strict", is_flag=True, help="Exit with status 2 when collisions are found.")
@click.pass_context
def cluster(
    ctx: click.Context,
    namespaces: tuple[str, ...],
    exclude_namespaces: tuple[str, ...],
    context: str | None,
    kubeconfig: str | None,
    as_json: bool,
    strict: bool,
) -> None:
    """Audit Services, Deployments and StatefulSets in the current cluster."""
    from selector_audit.core.use_cases.audit import audit_cluster

    config = _load_config(
        ctx,
        exclude=exclude_namespaces,
        namespaces=list(namespaces),
        context=context,
        kubeconfig=kubeconfig,
    )

    if not as_json and not ctx.obj.get("quiet"):
        click.secho("☸️  Scanning cluster selectors...", fg="cyan", err=True)

    result = audit_cluster(config)
    _report(ctx, result, as_json=as_json, strict=strict)


@scan.command("manifests")
@click.argument("path", required=False, type=click.Path(exists=False, path_type=Path))
@click.option("--exclude", "-x", "exclude_namespaces", multiple=True, help="Skip a namespace (repeatable; adds to selaudit.yml excludes).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--strict", is_flag=True, help="Exit with status 2 when collisions are found.")
@click.pass_context
def manifests(
    ctx: click.Context,
    path: Path | None,
    exclude_namespaces: tuple[str, ...],
    as_json: bool,
    strict: bool,
) -> None:
    """Audit Kubernetes manifest files under PATH.

    Without PATH, the directory holding selaudit.yml (or the current
    directory) is scanned, restricted to its manifest_dirs when set.
    """
    from selector_audit.core.use_cases.audit import audit_manifests

    config = _load_config(ctx, exclude=exclude_namespaces)

    # An explicit PATH is scanned as given; manifest_dirs only narrow the
    # default root, the directory holding selaudit.yml.
    dirs: list[str] | None = None
    if path is None:
        config_path: Path | None = ctx.obj.get("config_path")
        if config_path is None:
            from selector_audit.core.config.loader import find_config_file

            config_path = find_config_file()
        path = config_path.parent.resolve() if config_path else Path.cwd()
        dirs = config.manifest_dirs or None

    result = audit_manifests(path, config, dirs=dirs)
    _report(ctx, result, as_json=as_json, strict=strict)
