"""Chronicle: daily activity reports from Git, checklists and notes."""

__version__ = "0.1.0"

__all__ = ["__version__"]
