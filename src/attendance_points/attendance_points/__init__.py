"""Attendance Points package.

Turns biometric scan uploads into per-shift attendance records and keeps an
accountability point ledger with scheduled roll-off. Organized by feature
modules (schedules, scans, attendance, points) with repository Protocols,
MySQL implementations and a thin Flask CLI layer.
"""
