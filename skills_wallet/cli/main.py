"""
Typer CLI for the skills wallet.

Commands:
    skills-wallet db init                 - Create database tables
    skills-wallet skills list             - List skills with content counts
    skills-wallet skills view             - Show one member's view of a skill
    skills-wallet skills roster           - Show assignments with computed progress
    skills-wallet skills prune-orphans    - Delete ledger records of removed content
    skills-wallet serve                   - Run the API server

Usage:
    skills-wallet --help
    skills-wallet skills view --member m-1 --skill skill-abc
    skills-wallet skills roster --member m-1
"""

from __future__ import annotations

import sys
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from skills_wallet.core.errors import SkillsWalletError
from skills_wallet.core.logging import configure_logging
from skills_wallet.core.progress import AssignmentStatus, ProgressView
from skills_wallet.db.database import init_db, session_scope
from skills_wallet.skills.catalog import SkillCatalog
from skills_wallet.skills.lifecycle import AssignmentLifecycleManager
from skills_wallet.skills.service import SkillProgressService
from skills_wallet.skills.store import SqlAlchemySkillStore

app = typer.Typer(help="skills-wallet CLI: skill assignments and member progress")
console = Console()

STATUS_STYLE = {
    AssignmentStatus.NOT_STARTED: "dim",
    AssignmentStatus.IN_PROGRESS: "yellow",
    AssignmentStatus.COMPLETED: "green",
}


def _status_cell(view: ProgressView) -> str:
    style = STATUS_STYLE[view.status]
    suffix = f" ({view.resolution.value})" if view.resolution.value != "calculated" else ""
    return f"[{style}]{view.status.value}[/{style}]{suffix}"


def _fail(exc: SkillsWalletError) -> None:
    rprint(f"[red]{exc.kind}:[/red] {exc.message}")
    raise typer.Exit(code=1)


# ========================================
# DB COMMANDS
# ========================================

db_app = typer.Typer(help="Database operations")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Create all database tables."""
    init_db()
    rprint("[green]Database tables initialized[/green]")


# ========================================
# SKILLS COMMANDS
# ========================================

skills_app = typer.Typer(help="Skills, assignments and progress")
app.add_typer(skills_app, name="skills")


@skills_app.command("list")
def skills_list(
    include_inactive: bool = typer.Option(False, "--all", help="Include deactivated skills"),
) -> None:
    """List skills with their content counts."""
    with session_scope() as session:
        skills = SkillCatalog(SqlAlchemySkillStore(session)).list_skills(active_only=not include_inactive)

        table = Table(title="Skills", show_header=True)
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Level")
        table.add_column("Items", justify="right")
        table.add_column("Active")
        for skill, count in skills:
            table.add_row(skill.id, skill.name, skill.level, str(count), "yes" if skill.is_active else "no")
        console.print(table)


@skills_app.command("view")
def skills_view(
    member_id: str = typer.Option(..., "--member", "-m", help="Member id"),
    skill_id: str = typer.Option(..., "--skill", "-s", help="Skill id"),
) -> None:
    """Show one member's computed view of a skill, item by item."""
    try:
        with session_scope() as session:
            detail = SkillProgressService(SqlAlchemySkillStore(session)).get_skill_view(member_id, skill_id)

            rprint(f"\n[bold cyan]{detail.skill.name}[/bold cyan] ({detail.skill.level})")
            rprint(f"  Status: {_status_cell(detail.view)}")
            rprint(
                f"  Progress: {detail.view.progress}% "
                f"({detail.view.completed_count}/{detail.view.total_count})"
            )
            if detail.assignment.admin_notes:
                rprint(f"  Admin notes: {detail.assignment.admin_notes}")

            table = Table(show_header=True)
            table.add_column("#", justify="right", style="dim")
            table.add_column("Title")
            table.add_column("Type")
            table.add_column("Done", justify="center")
            for entry in detail.view.items:
                table.add_row(
                    str(entry.item.display_order),
                    entry.item.title,
                    entry.item.content_type,
                    "[green]✓[/green]" if entry.is_completed else "-",
                )
            console.print(table)
    except SkillsWalletError as exc:
        _fail(exc)


@skills_app.command("roster")
def skills_roster(
    member_id: Optional[str] = typer.Option(None, "--member", "-m", help="Only this member"),
) -> None:
    """Show every assignment with its computed progress."""
    with session_scope() as session:
        rosters = SkillProgressService(SqlAlchemySkillStore(session)).roster(member_id)

        table = Table(title="Assignments", show_header=True)
        table.add_column("Member", style="cyan")
        table.add_column("Skill")
        table.add_column("Status")
        table.add_column("Progress", justify="right")
        table.add_column("Approved")
        for roster in rosters:
            for detail in roster.skills:
                table.add_row(
                    roster.member_name,
                    detail.skill.name,
                    _status_cell(detail.view),
                    f"{detail.view.progress}%",
                    detail.assignment.approval.value,
                )
        console.print(table)


@skills_app.command("prune-orphans")
def skills_prune_orphans() -> None:
    """Delete completion records whose content item no longer exists."""
    with session_scope() as session:
        pruned = AssignmentLifecycleManager(SqlAlchemySkillStore(session)).prune_orphan_records()
    rprint(f"[green]Pruned {pruned} orphan ledger records[/green]")


# ========================================
# SERVER
# ========================================


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (defaults to settings.api_host)"),
    port: Optional[int] = typer.Option(None, help="Bind port (defaults to settings.api_port)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "skills_wallet.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """CLI entry point."""
    configure_logging(level="WARNING")
    logger.debug(f"skills-wallet CLI invoked with {sys.argv[1:]}")
    app()


if __name__ == "__main__":
    main()
