#!/usr/bin/env python3
"""
Run the PIC simulation scenarios and write tables and plots
"""
import dataclasses
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from picsim.cli.utils import normalize_outputs, normalize_scenarios, parse_args
from picsim.pipelines.scenarios import ScenarioPipeline, default_scenarios


def build_scenarios(args):
    """Default scenarios filtered by --scenarios, with --bridge-fraction applied"""
    selected = normalize_scenarios(args.scenarios)
    scenarios = []
    for scenario in default_scenarios(args.markers_per_block):
        if scenario.name not in selected:
            continue
        if scenario.bridge_fraction > 0:
            scenario = dataclasses.replace(scenario, bridge_fraction=args.bridge_fraction)
        scenarios.append(scenario)
    return scenarios


def main(argv=None):
    args = parse_args(argv)

    pipeline = ScenarioPipeline(
        output_dir=args.outputdir,
        n_individuals=args.n_individuals,
        markers_per_block=args.markers_per_block,
        rho=args.rho,
        seed=args.seed,
        noise_step=args.noise_step,
        noise_orientation=args.noise_orientation,
        phenotype_noise_sd=args.phenotype_noise,
        verbose=not args.quiet,
    )

    try:
        pipeline.run(scenarios=build_scenarios(args), outputs=normalize_outputs(args.outputs))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.quiet:
        print("\n" + "=" * 60)
        print(f"Results saved to: {pipeline.output_dir}")
        print("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
