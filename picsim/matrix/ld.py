"""
Marker correlation (LD) matrix for a simulated panel

Each panel gets its own matrix; scenarios never share one.
"""

import warnings
from typing import Dict, Optional

import numpy as np
import pandas as pd

from ..utils.data_types import BLOCK_A, BLOCK_B, Panel
from ..utils.stats import constant_columns


def PICSIM_LD(panel: Panel, verbose: bool = False) -> pd.DataFrame:
    """Pearson correlation between all pairs of panel markers

    Args:
        panel: Genotype panel
        verbose: Print matrix dimensions

    Returns:
        DataFrame (n_markers × n_markers) indexed by marker id on both axes.
        Pairs involving a zero-variance marker are NaN, except the diagonal
        which is always 1.0.
    """
    G = panel.values
    constant = constant_columns(G)
    with np.errstate(divide='ignore', invalid='ignore'):
        G_c = G - G.mean(axis=0)
        ss = np.sum(G_c * G_c, axis=0)
        denom = np.sqrt(np.outer(ss, ss))
        corr = (G_c.T @ G_c) / denom
    corr[constant, :] = np.nan
    corr[:, constant] = np.nan
    corr = np.clip(corr, -1.0, 1.0)
    np.fill_diagonal(corr, 1.0)

    if np.any(constant):
        constant_ids = [int(mid) for mid in panel.marker_ids[constant]]
        warnings.warn(f"Zero-variance markers present; their correlations are NaN: {constant_ids}",
                      RuntimeWarning)
    if verbose:
        print(f"LD matrix: {panel.n_markers} x {panel.n_markers}")

    ids = pd.Index(panel.marker_ids, name="Marker")
    return pd.DataFrame(corr, index=ids, columns=ids.rename("Marker2"))


def melt_ld_matrix(ld: pd.DataFrame, squared: bool = False) -> pd.DataFrame:
    """Long-format LD table with columns Marker1, Marker2 and r (or r2)

    Args:
        ld: Square correlation matrix from PICSIM_LD
        squared: Report r² instead of r
    """
    value_name = "r2" if squared else "r"
    values = ld.to_numpy()
    if squared:
        values = values * values
    melted = pd.DataFrame(values, index=ld.index.to_numpy(), columns=ld.columns.to_numpy())
    melted.index.name = "Marker1"
    melted = melted.reset_index().melt(id_vars="Marker1", var_name="Marker2", value_name=value_name)
    melted["Marker2"] = melted["Marker2"].astype(np.int64)
    return melted.sort_values(["Marker1", "Marker2"], ignore_index=True)


def mean_block_correlation(panel: Panel, ld: Optional[pd.DataFrame] = None) -> Dict[str, float]:
    """Mean off-diagonal correlation within each block and across blocks"""
    if ld is None:
        ld = PICSIM_LD(panel)
    corr = ld.to_numpy()
    blocks = np.asarray(panel.blocks)
    in_a = blocks == BLOCK_A
    in_b = blocks == BLOCK_B

    def _mean(rows, cols, drop_diagonal):
        sub = corr[np.ix_(rows, cols)]
        if drop_diagonal:
            mask = ~np.eye(sub.shape[0], dtype=bool)
            sub = sub[mask]
        sub = sub[np.isfinite(sub)]
        return float(np.mean(sub)) if sub.size else float("nan")

    return {
        BLOCK_A: _mean(in_a, in_a, True),
        BLOCK_B: _mean(in_b, in_b, True),
        "cross": _mean(in_a, in_b, False),
    }
