"""
picsim: PIC-plot simulations for single- and two-causal-variant scenarios

Simulates two correlated haplotype blocks bridged by a boundary marker,
phenotypes driven by one or two causal markers, and single-marker
association scans reporting r² with reference markers against -log10(p).
"""

__version__ = "0.1.0"
__author__ = "picsim Development Team"

from .utils.data_types import Panel, Phenotype, CausalSet, AssociationRecord, ScanResult
from .utils.errors import InvalidParameter, DegenerateInput
from .simulation.panel import PICSIM_SimulatePanel
from .simulation.phenotype import PICSIM_SimulatePhenotype
from .association.scan import PICSIM_Scan
from .matrix.ld import PICSIM_LD
from .visualization.pic import PICSIM_Report

__all__ = [
    'Panel',
    'Phenotype',
    'CausalSet',
    'AssociationRecord',
    'ScanResult',
    'InvalidParameter',
    'DegenerateInput',
    'PICSIM_SimulatePanel',
    'PICSIM_SimulatePhenotype',
    'PICSIM_Scan',
    'PICSIM_LD',
    'PICSIM_Report',
]
