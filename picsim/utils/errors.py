"""
Exceptions raised by picsim simulations and scans
"""

from typing import Iterable, Optional


class InvalidParameter(ValueError):
    """Raised when an input is out of range or has the wrong shape."""


class DegenerateInput(ValueError):
    """Raised when a marker column has (numerically) zero variance."""

    def __init__(self, message: str, marker_indices: Optional[Iterable[int]] = None):
        super().__init__(message)
        self.marker_indices = [int(i) for i in marker_indices] if marker_indices is not None else []
