"""
Phenotype simulation from designated causal markers
"""

from typing import Mapping, Sequence, Union

import numpy as np

from ..utils.data_types import CausalSet, Panel, Phenotype
from ..utils.errors import InvalidParameter
from .panel import SeedLike, resolve_rng


def PICSIM_SimulatePhenotype(panel: Panel,
                             causal: Union[CausalSet, int, Sequence[int], Mapping[int, float]],
                             noise_sd: float = 1.0,
                             seed: SeedLike = None,
                             verbose: bool = False) -> Phenotype:
    """Simulate y = sum_i w_i * G[:, causal_i] + N(0, noise_sd^2)

    Args:
        panel: Genotype panel
        causal: CausalSet, a marker id, a list of ids (weight 1.0 each), or an
            id -> weight mapping. Ids are 1-based panel marker ids.
        noise_sd: Standard deviation of the independent Gaussian noise
        seed: Integer seed or numpy Generator
        verbose: Print a one-line summary

    Returns:
        Phenotype carrying the causal set that produced it
    """
    causal_set = CausalSet.coerce(causal)
    missing = [idx for idx in causal_set.indices if idx not in panel]
    if missing:
        raise InvalidParameter(
            f"Causal marker(s) {missing} outside the panel "
            f"(ids {int(panel.marker_ids[0])}..{int(panel.marker_ids[-1])}, {panel.n_markers} markers)"
        )
    try:
        noise_sd = float(noise_sd)
    except (TypeError, ValueError):
        raise InvalidParameter(f"noise_sd must be a number, got {noise_sd!r}") from None
    if not np.isfinite(noise_sd) or noise_sd < 0:
        raise InvalidParameter(f"noise_sd must be finite and non-negative, got {noise_sd}")

    rng = resolve_rng(seed)
    columns = [panel.column_of(idx) for idx in causal_set.indices]
    weights = np.asarray(causal_set.weights, dtype=np.float64)
    signal = panel.values[:, columns] @ weights
    y = signal + rng.normal(0.0, noise_sd, size=panel.n_individuals)

    if verbose:
        effects = ", ".join(f"M{i}*{w:g}" for i, w in zip(causal_set.indices, causal_set.weights))
        print(f"Simulated phenotype: {effects} + N(0, {noise_sd:g}^2)")

    return Phenotype(y, causal=causal_set, noise_sd=noise_sd)
