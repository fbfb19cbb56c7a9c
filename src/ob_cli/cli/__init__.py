"""CLI helpers exposed for other modules."""

from .helpers import SpinnerStep, configure_logging, console, spinner

__all__ = ["SpinnerStep", "configure_logging", "console", "spinner"]
