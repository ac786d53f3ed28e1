"""Task list with per-task countdown timers and completion notifications."""

__version__ = "0.1.0"
