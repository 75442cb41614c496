"""
Plots and reports for scan results
"""

from .pic import PICSIM_Report

__all__ = ['PICSIM_Report']
