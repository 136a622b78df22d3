"""Coffee Log CLI.

Usage:
    coffeelog add "beans" method    Log a brew
    coffeelog list                  Show recent brews
    coffeelog sync                  Push queued changes and refresh
    coffeelog status                Show queued changes
"""

from coffee_log.cli.main import app, main

__all__ = ["app", "main"]
