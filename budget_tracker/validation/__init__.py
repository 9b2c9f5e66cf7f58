"""Input validation package."""

from budget_tracker.validation.validator import InputValidator

__all__ = ["InputValidator"]
