"""Run CLI programs as scheduled tasks, with helpers for a terminal UI."""

__version__ = "0.1.0"