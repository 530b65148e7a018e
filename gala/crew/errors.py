"""Crew errors."""


class CrewConfigurationError(Exception):
    """Crew definition is invalid (no agents or tasks, bad agent references)."""

    pass
