"""
Statistical utilities for association scans and PIC summaries
"""

import numpy as np
import pandas as pd
from typing import Dict, Tuple
from scipy import stats

from .data_types import BLOCKS, ScanResult

LN10 = np.log(10.0)

# Relative spread below which a column counts as constant
CONSTANT_RTOL = 1e-10


def neg_log10_t_pvalue(t_stats: np.ndarray, df: float) -> np.ndarray:
    """-log10 of the two-sided Student-t p-value

    Computed from the log survival function so that very strong associations
    stay finite instead of underflowing to p = 0.

    Args:
        t_stats: Array of t-statistics (sign is ignored)
        df: Residual degrees of freedom

    Returns:
        Array of -log10(p) values
    """
    t_abs = np.abs(np.asarray(t_stats, dtype=np.float64))
    log_p = np.atleast_1d(np.log(2.0) + stats.t.logsf(t_abs, df))
    t_abs = np.atleast_1d(t_abs)

    # Tail asymptotic sf(t) ~ pdf(t) * (df + t^2) / ((df - 1) * t) where sf underflows
    underflow = ~np.isfinite(log_p) & np.isfinite(t_abs)
    if df > 1 and np.any(underflow):
        t_u = t_abs[underflow]
        log_p[underflow] = (np.log(2.0) + stats.t.logpdf(t_u, df)
                            + np.log((df + t_u * t_u) / ((df - 1.0) * t_u)))

    out = np.maximum(-log_p / LN10, 0.0)
    return out if np.ndim(t_stats) else out[0]


def constant_columns(values: np.ndarray, rtol: float = CONSTANT_RTOL) -> np.ndarray:
    """Flag columns (or a single vector) that are numerically constant

    A column is constant when its range is within rtol of its largest
    absolute value, so the test does not depend on the units of the data.
    All-zero columns are constant.
    """
    arr = np.asarray(values, dtype=np.float64)
    spread = np.ptp(arr, axis=0)
    scale = np.max(np.abs(arr), axis=0)
    return spread <= rtol * scale


def genomic_inflation_factor(pvalues: np.ndarray) -> float:
    """Calculate genomic inflation factor (lambda)

    Args:
        pvalues: Array of p-values

    Returns:
        Genomic inflation factor (lambda)
    """
    pvalues = np.asarray(pvalues, dtype=np.float64)
    valid_pvals = pvalues[np.isfinite(pvalues) & (pvalues > 0)]
    if len(valid_pvals) == 0:
        return 1.0

    chi2_values = stats.chi2.isf(valid_pvals, df=1)
    median_chi2 = np.median(chi2_values)
    expected_median = stats.chi2.ppf(0.5, df=1)

    return float(median_chi2 / expected_median)


def qq_plot_data(pvalues: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Expected and observed -log10(p) for a Q-Q plot

    P-values outside (0, 1] and NaN markers are ignored. Both arrays are
    sorted from the strongest signal down, expected quantiles i / (n + 1).
    """
    pvalues = np.asarray(pvalues, dtype=np.float64)
    usable = np.sort(pvalues[np.isfinite(pvalues) & (pvalues > 0) & (pvalues <= 1)])
    ranks = np.arange(1, usable.size + 1, dtype=np.float64)
    return -np.log10(ranks / (usable.size + 1)), -np.log10(usable)


def decay_by_distance(scan: ScanResult, origin: int, ref: int) -> pd.DataFrame:
    """Mean r² and -log10(p) by block and distance from an origin marker

    Args:
        scan: Scan result
        origin: Marker id distances are measured from (usually the causal marker)
        ref: Reference marker whose r² column is summarised

    Returns:
        DataFrame with columns Block, Distance, MeanR2, MeanNegLog10P, Markers
        sorted by block then distance
    """
    df = pd.DataFrame({
        "Block": scan.blocks,
        "Distance": np.abs(scan.marker_indices - int(origin)),
        "R2": scan.rsq(ref),
        "NegLog10P": scan.neg_log10_p,
    })
    grouped = df.groupby(["Block", "Distance"], sort=True).agg(
        MeanR2=("R2", "mean"),
        MeanNegLog10P=("NegLog10P", "mean"),
        Markers=("R2", "size"),
    )
    return grouped.reset_index()


def fit_pic_lines(scan: ScanResult, ref: int) -> Dict[str, Dict[str, float]]:
    """Per-block least-squares line of -log10(p) on r²

    Two clearly different slopes between the blocks are the "two regression
    lines" of a PIC plot. Blocks with fewer than two testable markers, or with
    no spread in r², get NaN coefficients.
    """
    rsq = scan.rsq(ref)
    nlp = scan.neg_log10_p
    blocks = scan.blocks
    lines = {}
    for block in BLOCKS:
        mask = (blocks == block) & np.isfinite(rsq) & np.isfinite(nlp)
        x = rsq[mask]
        y = nlp[mask]
        if x.size < 2 or np.ptp(x) < 1e-12:
            lines[block] = {"slope": np.nan, "intercept": np.nan, "n": int(x.size)}
            continue
        slope, intercept = np.polyfit(x, y, 1)
        lines[block] = {"slope": float(slope), "intercept": float(intercept), "n": int(x.size)}
    return lines
