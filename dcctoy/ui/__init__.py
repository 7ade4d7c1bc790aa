"""User interface helpers for the DCC toy model."""

from .interactive import run_interactive_wizard

__all__ = ["run_interactive_wizard"]
