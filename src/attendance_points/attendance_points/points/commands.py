from __future__ import annotations

from datetime import datetime, time
from typing import Optional

import click
from flask import Flask
from flask.cli import AppGroup

from ..common.datetime_utils import now_local, parse_iso_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    group = AppGroup("points", help="Attendance point ledger jobs.")

    @group.command("process-expirations")
    @click.option("--date", "run_date", default=None, help="Run as of this date (YYYY-MM-DD); defaults to now.")
    @click.option("--dry-run", is_flag=True, help="Report what would expire without writing.")
    def process_expirations(run_date: Optional[str], dry_run: bool) -> None:
        """Apply Standard and Good-Behavior Roll-Off to outstanding points."""
        now = now_local()
        if run_date:
            now = datetime.combine(parse_iso_date(run_date), time(now.hour, now.minute, now.second))

        summary = container.expiration_engine.run(now=now, dry_run=dry_run)
        if summary.skipped:
            click.echo("skipped: another expiration run is in progress")
            return
        click.echo(
            f"{'[dry-run] ' if dry_run else ''}"
            f"sro={summary.sro_expired} gbro={summary.gbro_expired} "
            f"employees={summary.employees_affected} failures={summary.failures}"
        )

    app.cli.add_command(group)
