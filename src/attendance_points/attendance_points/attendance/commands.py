from __future__ import annotations

import click
from flask import Flask
from flask.cli import AppGroup

from ..common.datetime_utils import now_local, parse_iso_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    group = AppGroup("attendance", help="Shift record maintenance jobs.")

    @group.command("detect-absences")
    @click.option("--date", "shift_date", required=True, help="Shift date to close out (YYYY-MM-DD).")
    def detect_absences(shift_date: str) -> None:
        """Create NCNS/leave records for scheduled employees with no scans."""
        result = container.attendance_service.detect_absences(parse_iso_date(shift_date), now=now_local())
        click.echo(f"closed={len(result.succeeded)} failed={len(result.failed)}")
        for failure in result.failed:
            click.echo(f"  employee {failure.employee_id} {failure.shift_date}: {failure.error}", err=True)
        if result.failed:
            raise SystemExit(1)

    @group.command("purge-scans")
    def purge_scans() -> None:
        """Delete scans past the retention window."""
        purged = container.attendance_service.purge_scans(now=now_local())
        click.echo(f"purged={purged}")

    app.cli.add_command(group)
