#!/usr/bin/env python3
"""
Database migration runner for Supabase.

Connects directly to the Supabase PostgreSQL database and applies the
SQL files in migrations/ that have not been applied yet, in name order.

Usage:
    python run_migrations.py              # Apply pending migrations
    python run_migrations.py --status     # Show migration status
    python run_migrations.py --dry-run    # Show what would run

Configuration:
    Set SUPABASE_DB_URL in your .env file (Supabase Dashboard →
    Settings → Database → Connection string → URI).
"""

import argparse
import hashlib
import sys
from dataclasses import dataclass
from pathlib import Path

import psycopg2
from psycopg2 import sql
from rich.console import Console
from rich.table import Table

from shared.config import get_settings

console = Console()

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
MIGRATIONS_TABLE = "_migrations"


@dataclass(frozen=True)
class Migration:
    name: str
    path: Path
    checksum: str

    @property
    def sql(self) -> str:
        return self.path.read_text()


def checksum_of(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()[:16]


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """All migration files in apply order."""
    if not directory.exists():
        return []
    return [
        Migration(name=path.name, path=path, checksum=checksum_of(path.read_text()))
        for path in sorted(directory.glob("*.sql"))
    ]


def split_pending(
    migrations: list[Migration],
    applied: dict[str, str],
) -> tuple[list[Migration], list[Migration]]:
    """
    Split migrations into (pending, changed).

    ``applied`` maps migration name to the checksum recorded when it ran.
    Changed migrations were edited after being applied and are not re-run.
    """
    pending = [m for m in migrations if m.name not in applied]
    changed = [
        m for m in migrations
        if m.name in applied and applied[m.name] != m.checksum
    ]
    return pending, changed


def connect():
    settings = get_settings()
    if not settings.supabase_db_url:
        console.print("[red]Error:[/red] SUPABASE_DB_URL is not set.")
        sys.exit(1)

    try:
        return psycopg2.connect(settings.supabase_db_url)
    except psycopg2.Error as e:
        console.print(f"[red]Database connection failed:[/red] {e}")
        sys.exit(1)


def ensure_migrations_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL(
                "CREATE TABLE IF NOT EXISTS {} ("
                " name VARCHAR(255) PRIMARY KEY,"
                " checksum VARCHAR(64) NOT NULL,"
                " applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW())"
            ).format(sql.Identifier(MIGRATIONS_TABLE))
        )
    conn.commit()


def fetch_applied(conn) -> dict[str, str]:
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("SELECT name, checksum FROM {} ORDER BY name").format(
                sql.Identifier(MIGRATIONS_TABLE)
            )
        )
        return {name: checksum for name, checksum in cur.fetchall()}


def apply(conn, migration: Migration) -> None:
    """Run one migration and record it, in a single transaction."""
    console.print(f"[blue]Applying[/blue] {migration.name}...")
    try:
        with conn.cursor() as cur:
            cur.execute(migration.sql)
            cur.execute(
                sql.SQL("INSERT INTO {} (name, checksum) VALUES (%s, %s)").format(
                    sql.Identifier(MIGRATIONS_TABLE)
                ),
                (migration.name, migration.checksum),
            )
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        console.print(f"[red]✗[/red] {migration.name} failed: {e}")
        raise
    console.print(f"[green]✓[/green] {migration.name}")


def print_status(migrations: list[Migration], applied: dict[str, str]) -> None:
    if not migrations:
        console.print("[dim]No migrations found.[/dim]")
        return

    table = Table(title="Migration Status")
    table.add_column("Migration", style="cyan")
    table.add_column("Status")
    table.add_column("Checksum")

    for m in migrations:
        if m.name not in applied:
            status = "[yellow]Pending[/yellow]"
        elif applied[m.name] != m.checksum:
            status = "[red]Changed since applied[/red]"
        else:
            status = "[green]Applied[/green]"
        table.add_row(m.name, status, m.checksum)

    console.print(table)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run database migrations for Supabase")
    parser.add_argument("--status", action="store_true", help="Show status without running anything")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations without running them")
    args = parser.parse_args()

    console.print("[bold]Scribe Database Migrations[/bold]")

    migrations = discover_migrations()
    conn = connect()
    try:
        ensure_migrations_table(conn)
        applied = fetch_applied(conn)

        if args.status:
            print_status(migrations, applied)
            return

        pending, changed = split_pending(migrations, applied)
        for m in changed:
            console.print(f"[yellow]Warning:[/yellow] {m.name} has changed since it was applied")

        if not pending:
            console.print("[green]All migrations are up to date![/green]")
            return

        for m in pending:
            if args.dry_run:
                console.print(f"[cyan]Would apply:[/cyan] {m.name}")
            else:
                apply(conn, m)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
