"""
Command-line interface for skillhub.

Failures are printed to stderr and the command returns normally; a broken
registry or a denied install never raises out of :func:`main`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillhub.builtin import ensure_builtin_skills
from skillhub.config import HubConfig
from skillhub.errors import SkillHubError
from skillhub.hub.gateway import RegistrySkillHubGateway, SkillHubGateway
from skillhub.hub.lockfile import read_lockfile
from skillhub.hub.retry import retry_async
from skillhub.hub.types import InstallOptions
from skillhub.local import LocalSkills
from skillhub.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

RESTART_HINT = "Restart the agent or run /reload-skills to activate."


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search, install and list registry skills",
        prog="skillhub",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Config file (default: $SKILLHUB_CONFIG or ./skillhub.config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    search_parser = subparsers.add_parser("search", help="Search for skills")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument("-n", "--limit", type=positive_int, default=10, help="Maximum results")

    install_parser = subparsers.add_parser("install", help="Install a skill")
    install_parser.add_argument("slug", help="Skill slug")
    install_parser.add_argument("--version", dest="skill_version", help="Exact version (default: latest)")
    install_parser.add_argument(
        "--force",
        action="store_true",
        help="Reinstall even if already at the target version",
    )

    list_parser = subparsers.add_parser("list", help="List installed registry skills")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    available_parser = subparsers.add_parser("available", help="List local skills")
    available_parser.add_argument(
        "--all",
        action="store_true",
        help="Include ineligible skills with diagnostics",
    )

    inspect_parser = subparsers.add_parser("inspect", help="Show skill details")
    inspect_parser.add_argument("slug", help="Skill slug")

    subparsers.add_parser("init", help="Seed built-in skills into the skills directory")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        config = HubConfig.load(args.config)
    except SkillHubError as e:
        report_failure("Config", e)
        return 1

    if args.command == "search":
        asyncio.run(cmd_search(args, config))
    elif args.command == "install":
        asyncio.run(cmd_install(args, config))
    elif args.command == "list":
        cmd_list(args, config)
    elif args.command == "available":
        cmd_available(args, config)
    elif args.command == "inspect":
        asyncio.run(cmd_inspect(args, config))
    elif args.command == "init":
        cmd_init(args, config)
    else:
        parser.print_help()
    return 0


def report_failure(action: str, error: SkillHubError) -> None:
    """Print ``<Action> failed (<category>): <message>`` to stderr."""
    err_console.print(f"[red]{action} failed ({error.category}):[/red] {escape(str(error))}")


def create_gateway(config: HubConfig) -> SkillHubGateway:
    return RegistrySkillHubGateway.from_config(config)


async def cmd_search(args: argparse.Namespace, config: HubConfig) -> None:
    """Search the registry."""
    gateway = create_gateway(config)
    try:
        results = await retry_async(lambda: gateway.search(args.query, args.limit, "trending"))
    except SkillHubError as e:
        report_failure("Search", e)
        return
    finally:
        await gateway.aclose()

    if not results:
        console.print(f"[dim]No skills found for '{escape(args.query)}'[/dim]")
        return

    table = Table(title=f"Found {len(results)} skills")
    table.add_column("Slug", style="cyan")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Installs", justify="right")
    table.add_column("VirusTotal", style="dim")

    for r in results:
        scan = f"{r.virustotal.status} ({r.virustotal.report_count})" if r.virustotal else "-"
        table.add_row(r.slug, r.name, r.description[:60], str(r.install_count), scan)

    console.print(table)


async def cmd_install(args: argparse.Namespace, config: HubConfig) -> None:
    """Install or upgrade a skill."""
    options = InstallOptions(
        force=args.force,
        skip_gates=False,
        skip_security=config.skip_security_warnings,
    )
    gateway = create_gateway(config)
    try:
        result = await retry_async(
            lambda: gateway.install(
                args.slug,
                args.skill_version,
                config.skills_dir,
                config.lockfile_path,
                options,
            )
        )
    except SkillHubError as e:
        report_failure("Install", e)
        return
    finally:
        await gateway.aclose()

    for warning in result.warnings:
        err_console.print(f"[yellow]⚠[/yellow] {escape(warning)}")
    console.print(escape(result.message))
    if result.requires_restart:
        console.print(f"[dim]{RESTART_HINT}[/dim]")


def cmd_list(args: argparse.Namespace, config: HubConfig) -> None:
    """List skills recorded in the lock file."""
    try:
        lock = read_lockfile(config.lockfile_path)
    except SkillHubError as e:
        report_failure("List", e)
        return

    if args.json:
        data = {slug: entry.to_dict() for slug, entry in sorted(lock.skills.items())}
        console.print_json(json.dumps(data))
        return

    if not lock.skills:
        console.print("No registry skills installed.")
        return

    table = Table(title="Installed registry skills")
    table.add_column("Slug", style="cyan")
    table.add_column("Version")
    table.add_column("Installed", style="dim")
    for slug, entry in sorted(lock.skills.items()):
        table.add_row(slug, f"v{entry.installed_version}", entry.installed_at.strftime("%Y-%m-%d %H:%M:%S %Z"))
    console.print(table)


def cmd_available(args: argparse.Namespace, config: HubConfig) -> None:
    """List skills present in the skills directory."""
    statuses = LocalSkills.from_config(config).check_skills()
    if not args.all:
        statuses = [s for s in statuses if s.eligible]

    table = Table(title="Available skills" if not args.all else "All local skills")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Source", style="dim")
    if args.all:
        table.add_column("Status")

    for status in statuses:
        skill = status.skill
        emoji = skill.metadata.emoji or "🔧"
        source = skill.source.value
        version = status.installed_version or skill.metadata.version
        if version:
            source = f"{source} v{version}"
        row = [f"{emoji} {skill.name}", skill.description[:60], source]
        if args.all:
            row.append("[green]ok[/green]" if status.eligible else f"[red]{escape(status.reason or 'ineligible')}[/red]")
        table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]Total: {len(statuses)} skills in {config.skills_dir}[/dim]")


async def cmd_inspect(args: argparse.Namespace, config: HubConfig) -> None:
    """Show registry metadata for one skill."""
    gateway = create_gateway(config)
    try:
        meta = await retry_async(lambda: gateway.get_skill(args.slug))
    except SkillHubError as e:
        report_failure("Inspect", e)
        return
    finally:
        await gateway.aclose()

    console.print(f"\n[bold]{escape(meta.name)}[/bold] ({meta.slug})")
    if meta.description:
        console.print(f"[dim]{escape(meta.description)}[/dim]")

    console.print("\n[bold]Versions:[/bold]")
    for v in meta.versions:
        marker = " [green](latest)[/green]" if v.latest else ""
        console.print(f"  v{escape(v.version)}{marker}")

    if meta.virustotal:
        console.print(f"\nVirusTotal: {meta.virustotal.status} ({meta.virustotal.report_count} reports)")


def cmd_init(args: argparse.Namespace, config: HubConfig) -> None:
    """Seed built-in skills."""
    try:
        created = ensure_builtin_skills(config.skills_dir)
    except SkillHubError as e:
        report_failure("Init", e)
        return
    console.print(f"[green]Seeded {len(created)} built-in skill files into {config.skills_dir}[/green]")


if __name__ == "__main__":
    sys.exit(main())
