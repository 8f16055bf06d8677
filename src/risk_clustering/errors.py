"""Exceptions and warnings raised by the clustering pipeline."""
from typing import List


class InvalidInput(ValueError):
    """Request parameters are missing, contradictory or out of range."""


class DegenerateColumn(ValueError):
    """One or more clustering columns hold at most one distinct value."""

    def __init__(self, columns: List[str]):
        self.columns = list(columns)
        super().__init__(
            f"Clustering columns with <= 1 distinct value: {', '.join(self.columns)}"
        )


class ReportingDegraded(UserWarning):
    """Report styling could not be applied; an unstyled report was written."""
