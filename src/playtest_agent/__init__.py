"""Playtest session orchestrator for autonomous in-level test actors."""

__version__ = "0.1.0"
