"""
Marker correlation (LD) matrices
"""

from .ld import PICSIM_LD

__all__ = ['PICSIM_LD']
