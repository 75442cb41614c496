"""
Association testing for simulated panels
"""

from .scan import PICSIM_Scan

__all__ = ['PICSIM_Scan']
