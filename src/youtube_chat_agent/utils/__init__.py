"""Utility functions for the chat agent."""

from datetime import datetime


def get_date_context() -> str:
    """Get a formatted string describing the current date context.

    Returns:
        Human-readable date context for prompts.
    """
    now = datetime.now()
    return f"Today is {now.strftime('%B %d, %Y')}. The current year is {now.year}."


def elapsed_ms(started_at: float, now: float) -> int:
    """Milliseconds between two ``time.perf_counter`` readings."""
    return int((now - started_at) * 1000)
