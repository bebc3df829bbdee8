"""Flask entry point: `flask points process-expirations`, `flask attendance ...`."""

from src.attendance_points.attendance_points.main import create_app

app = create_app()
