#!/usr/bin/env python3
"""
Database migration runner for the portal's Supabase database.

Applies the SQL files in migrations/ in name order and records each one,
with a checksum, in a tracking table.

Usage:
    uv run python run_migrations.py                    # Apply pending migrations
    uv run python run_migrations.py --status           # Show migration status
    uv run python run_migrations.py --dry-run          # Show what would run
    uv run python run_migrations.py --force 002        # Re-apply one migration

Configuration:
    Set SUPABASE_DB_URL in your .env file to the database connection URI
    (Supabase Dashboard > Settings > Database > Connection string).
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

    @classmethod
    def from_file(cls, path: Path) -> "Migration":
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(name=path.name, path=path, checksum=digest)


def discover_migrations() -> list[Migration]:
    if not MIGRATIONS_DIR.exists():
        console.print(f"[yellow]Warning:[/yellow] No migrations directory at {MIGRATIONS_DIR}")
        return []
    return [Migration.from_file(path) for path in sorted(MIGRATIONS_DIR.glob("*.sql"))]


def connect():
    """Open a connection using SUPABASE_DB_URL, or exit with instructions."""
    db_url = get_settings().supabase_db_url
    if not db_url:
        console.print("[red]Error:[/red] SUPABASE_DB_URL is not set.")
        console.print("Add the database connection URI to your .env file.")
        sys.exit(1)

    try:
        return psycopg2.connect(db_url)
    except psycopg2.Error as e:
        console.print(f"[red]Database connection failed:[/red] {e}")
        sys.exit(1)


def ensure_tracking_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL(
                """
                CREATE TABLE IF NOT EXISTS {} (
                    id SERIAL PRIMARY KEY,
                    name VARCHAR(255) NOT NULL UNIQUE,
                    checksum VARCHAR(64) NOT NULL,
                    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
                """
            ).format(sql.Identifier(MIGRATIONS_TABLE))
        )
    conn.commit()


def applied_migrations(conn) -> dict[str, tuple[str, object]]:
    """Applied migration name -> (checksum, applied_at)."""
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("SELECT name, checksum, applied_at FROM {} ORDER BY name").format(
                sql.Identifier(MIGRATIONS_TABLE)
            )
        )
        return {name: (checksum, applied_at) for name, checksum, applied_at in cur.fetchall()}


def pending_migrations(conn) -> list[Migration]:
    applied = applied_migrations(conn)
    pending = []
    for migration in discover_migrations():
        if migration.name not in applied:
            pending.append(migration)
        elif applied[migration.name][0] != migration.checksum:
            console.print(f"[yellow]Warning:[/yellow] {migration.name} changed after it was applied")
    return pending


def apply(conn, migration: Migration, dry_run: bool = False) -> None:
    """Run one migration and record it, in a single transaction."""
    if dry_run:
        console.print(f"[cyan]Would run:[/cyan] {migration.name}")
        return

    console.print(f"[blue]Running:[/blue] {migration.name}...")
    try:
        with conn.cursor() as cur:
            cur.execute(migration.path.read_text())
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
    console.print(f"[green]✓[/green] {migration.name} applied")


def show_status(conn) -> None:
    applied = applied_migrations(conn)
    pending = pending_migrations(conn)
    if not applied and not pending:
        console.print("[dim]No migrations found.[/dim]")
        return

    table = Table(title="Migration Status")
    table.add_column("Migration", style="cyan")
    table.add_column("Status")
    table.add_column("Applied At")
    table.add_column("Checksum")

    for name, (checksum, applied_at) in applied.items():
        stamp = applied_at.strftime("%Y-%m-%d %H:%M:%S") if applied_at else ""
        table.add_row(name, "[green]Applied[/green]", stamp, checksum)
    for migration in pending:
        table.add_row(migration.name, "[yellow]Pending[/yellow]", "", migration.checksum)

    console.print(table)


def force(conn, prefix: str) -> None:
    """Forget one applied migration and run it again."""
    matches = [m for m in discover_migrations() if m.name.startswith(prefix)]
    if len(matches) != 1:
        if matches:
            console.print(f"[red]Error:[/red] '{prefix}' matches {', '.join(m.name for m in matches)}")
        else:
            console.print(f"[red]Error:[/red] No migration matches '{prefix}'")
        sys.exit(1)

    migration = matches[0]
    console.print(f"[yellow]Warning:[/yellow] Re-running {migration.name}; it may fail if its objects exist.")
    if input("Continue? [y/N] ").lower() != "y":
        console.print("Aborted.")
        return

    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("DELETE FROM {} WHERE name = %s").format(sql.Identifier(MIGRATIONS_TABLE)),
            (migration.name,),
        )
    conn.commit()
    apply(conn, migration)


def main():
    parser = argparse.ArgumentParser(description="Apply database migrations for the distributor portal")
    parser.add_argument("--status", action="store_true", help="Show migration status and exit")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations without running them")
    parser.add_argument("--force", metavar="PREFIX", help="Re-apply the migration with this prefix (e.g. '002')")
    args = parser.parse_args()

    console.print("[bold]Distributor Portal Database Migrations[/bold]\n")

    conn = connect()
    try:
        ensure_tracking_table(conn)
        if args.status:
            show_status(conn)
            return
        if args.force:
            force(conn, args.force)
            return

        pending = pending_migrations(conn)
        if not pending:
            console.print("[green]All migrations are up to date![/green]")
            return

        console.print(f"Found {len(pending)} pending migration(s)")
        for migration in pending:
            apply(conn, migration, dry_run=args.dry_run)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
