"""Classification package for romcleaner.

- classify: Decide UNKNOWN / FIRST_OCCURRENCE / DUPLICATE for a hashed file.
- SeenHashRegistry: Run-wide, lock-guarded set of claimed hashes.

Example:
    >>> from romcleaner.classification import SeenHashRegistry, classify
    >>> seen = SeenHashRegistry()
    >>> classify(candidate, catalog, seen).disposition
    <Disposition.FIRST_OCCURRENCE: 'first_occurrence'>
"""

from .classifier import SeenHashRegistry, classify

__all__ = ["SeenHashRegistry", "classify"]
