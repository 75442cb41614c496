"""
Synthetic genotype panels and phenotypes
"""

from .panel import PICSIM_SimulatePanel
from .phenotype import PICSIM_SimulatePhenotype

__all__ = ['PICSIM_SimulatePanel', 'PICSIM_SimulatePhenotype']
