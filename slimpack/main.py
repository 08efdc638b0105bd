"""
slimpack — CLI entrypoint.

Usage:
    slimpack --help
    slimpack package
    slimpack package --only authorizer --keep-workdir
    slimpack config check
    slimpack status
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from slimpack import __version__
from slimpack.core.observability.logging_config import resolve_level, setup_logging


def _human_size(size: int | None) -> str:
    if size is None:
        return "—"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


@click.group()
@click.version_option(version=__version__, prog_name="slimpack")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to slimpack.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """slimpack — trim serverless deployment archives per function."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


@cli.command("package")
@click.option("--only", "only", multiple=True, help="Only trim this package (repeatable).")
@click.option("--keep-workdir", is_flag=True, help="Keep the working folder of a failed package.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def package_cmd(ctx: click.Context, only: tuple[str, ...], keep_workdir: bool, as_json: bool) -> None:
    """Unzip, trim, reinstall dependencies and rezip each package."""
    from slimpack.core.use_cases.package import run_packaging

    result = run_packaging(
        config_path=ctx.obj.get("config_path"),
        only=list(only) or None,
        keep_workdir=keep_workdir,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    quiet = ctx.obj.get("quiet", False)
    for report in result.reports:
        if report.status == "ok":
            if not quiet:
                click.secho(f"✅ {report.name}", fg="green", nl=False)
                click.echo(
                    f"  {_human_size(report.size_before)} → {_human_size(report.size_after)}"
                )
                for dep in report.removed_dependencies:
                    click.echo(f"   − dependency {dep}")
                for folder in report.removed_folders:
                    click.echo(f"   − folder {folder}")
                for section in report.removed_sections:
                    click.echo(f"   − config section {section}")
        else:
            click.secho(f"❌ {report.name} (failed at {report.step})", fg="red")

    if not result.ok:
        click.secho(f"Packaging error: {result.error}", fg="red", err=True)
        sys.exit(1)


@cli.group()
def config() -> None:
    """Packager configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate slimpack.yml against the project on disk."""
    from slimpack.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Packages: {len(result.config.packages)}")
        click.echo(f"   Package manager: {result.config.package_manager}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show configured packages and their archives."""
    from slimpack.core.use_cases.status import get_status

    result = get_status(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.config is not None
    click.secho(f"📦 {result.config.serverless_dir} ({result.config.package_manager})", fg="cyan", bold=True)
    for pkg in result.packages:
        marker = "✓" if pkg.present else "✗"
        leftover = "  (working folder left over)" if pkg.workdir_present else ""
        click.echo(f"   {marker} {pkg.name:<20} {_human_size(pkg.size):>10}{leftover}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
