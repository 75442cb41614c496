import argparse
from typing import List, Optional, Sequence

from ..pipelines.scenarios import OUTPUT_CHOICES

SCENARIO_CHOICES = (
    'bridge',
    'within_block',
    'two_causal',
    'proxy',
)


def normalize_outputs(outputs: List[str]) -> List[str]:
    """Helper to normalize output choices"""
    if not outputs:
        return list(OUTPUT_CHOICES)
    valid = []
    for o in outputs:
        for part in str(o).split(','):
            part = part.strip().lower()
            if part in OUTPUT_CHOICES and part not in valid:
                valid.append(part)
    return valid if valid else list(OUTPUT_CHOICES)


def normalize_scenarios(scenarios: Optional[str]) -> List[str]:
    """Split a comma-separated scenario list; unknown names raise ValueError"""
    if not scenarios:
        return list(SCENARIO_CHOICES)
    selected = []
    for part in scenarios.split(','):
        part = part.strip().lower()
        if not part:
            continue
        if part not in SCENARIO_CHOICES:
            raise ValueError(f"Invalid scenario: {part} (choose from {', '.join(SCENARIO_CHOICES)})")
        if part not in selected:
            selected.append(part)
    return selected if selected else list(SCENARIO_CHOICES)


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments for the PIC scenario pipeline"""
    parser = argparse.ArgumentParser(
        description="Simulate single- and two-causal-variant scenarios and draw PIC plots",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("--outputdir", "-o", default="./PIC_results",
                        help="Output directory")
    parser.add_argument("--scenarios", default=",".join(SCENARIO_CHOICES),
                        help="Scenarios to run (comma-separated)")

    # Panel
    parser.add_argument("--n-individuals", "-n", type=int, default=1000,
                        help="Number of simulated individuals")
    parser.add_argument("--markers-per-block", "-k", type=int, default=10,
                        help="Markers in each of the two blocks")
    parser.add_argument("--rho", type=float, default=0.8,
                        help="Intra-block correlation")
    parser.add_argument("--noise-step", type=float, default=0.1,
                        help="Noise SD added per marker of distance from the block boundary")
    parser.add_argument("--noise-orientation", default="boundary",
                        choices=['boundary', 'edges'],
                        help="Where the panel is least noisy")
    parser.add_argument("--bridge-fraction", type=float, default=0.5,
                        help="Share of individuals whose boundary marker is bridged (bridging scenarios)")
    parser.add_argument("--seed", type=int, default=100,
                        help="Random seed")

    # Phenotype
    parser.add_argument("--phenotype-noise", type=float, default=1.0,
                        help="Phenotype noise standard deviation")

    # Output
    parser.add_argument("--outputs", nargs='+',
                        choices=list(OUTPUT_CHOICES),
                        default=list(OUTPUT_CHOICES),
                        help="Outputs to generate")
    parser.add_argument("--quiet", action='store_true',
                        help="Suppress progress messages")

    return parser.parse_args(argv)
