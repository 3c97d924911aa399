"""Console presentation package for romcleaner."""

from .clean_tui import CleanTUI

__all__ = ["CleanTUI"]
