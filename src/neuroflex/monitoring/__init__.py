"""Event recording.

Responsibility: Keeps the scrolling event log shown next to the telemetry.
"""

from .event_log import EventLog, LogEntry, LogType

__all__ = ["EventLog", "LogEntry", "LogType"]
