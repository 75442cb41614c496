"""
PIC plot, decay plot, LD heatmap and Q-Q plot visualization for scan results
"""

import warnings
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..utils.data_types import BLOCK_A, BLOCK_B, BLOCKS, ScanResult
from ..utils.stats import fit_pic_lines, genomic_inflation_factor, qq_plot_data

BLOCK_COLORS = {BLOCK_A: "#1f77b4", BLOCK_B: "#ff7f0e"}
CAUSAL_COLOR = "#d62728"
PLOT_TYPES = ("pic", "decay", "qq", "ld_heatmap")


def _default_ref(scan: ScanResult, ref: Optional[int]) -> int:
    if ref is None:
        if not scan.references:
            raise ValueError("Scan result has no reference markers")
        return scan.references[0]
    return int(ref)


def create_pic_plot(scan: ScanResult,
                    ref: Optional[int] = None,
                    title: str = "PIC Plot",
                    figsize: Tuple[int, int] = (6, 5),
                    point_size: float = 40.0,
                    show_fit: bool = True,
                    annotate: bool = True) -> plt.Figure:
    """Scatter of r² with a reference marker against -log10(p)

    Args:
        scan: Scan result
        ref: Reference marker id (defaults to the scan's first reference)
        title: Plot title
        figsize: Figure size
        point_size: Marker size
        show_fit: Draw the per-block least-squares line
        annotate: Label points with their marker id

    Returns:
        matplotlib Figure object
    """
    ref = _default_ref(scan, ref)
    rsq = scan.rsq(ref)
    nlp = scan.neg_log10_p
    blocks = scan.blocks
    causal = scan.causal_mask
    ids = scan.marker_indices

    fig, ax = plt.subplots(figsize=figsize)

    for block in BLOCKS:
        mask = (blocks == block) & ~causal
        if np.any(mask):
            ax.scatter(rsq[mask], nlp[mask], s=point_size, c=BLOCK_COLORS[block],
                       alpha=0.8, edgecolors='none', label=f"Block {block}")
    if np.any(causal):
        ax.scatter(rsq[causal], nlp[causal], s=point_size * 2, c=CAUSAL_COLOR,
                   marker='D', edgecolors='black', linewidths=0.5, label="Causal")

    if show_fit:
        lines = fit_pic_lines(scan, ref)
        x_line = np.linspace(0.0, 1.0, 50)
        for block, line in lines.items():
            if np.isfinite(line["slope"]):
                ax.plot(x_line, line["intercept"] + line["slope"] * x_line,
                        color=BLOCK_COLORS[block], linestyle='--', alpha=0.7)

    if annotate:
        for x, y, mid in zip(rsq, nlp, ids):
            if np.isfinite(x) and np.isfinite(y):
                ax.annotate(str(mid), (x, y), textcoords="offset points",
                            xytext=(3, 3), fontsize=7)

    ax.set_xlim(-0.05, 1.05)
    ax.set_xlabel(f"$r^2$ with M{ref}", fontsize=12)
    ax.set_ylabel(r'$-\log_{10}(P)$', fontsize=12)
    if title and title.strip():
        ax.set_title(title)
    ax.legend(loc='upper left', fontsize=8)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def create_decay_plot(scan: ScanResult,
                      ref: Optional[int] = None,
                      title: str = "Decay along the panel",
                      figsize: Tuple[int, int] = (9, 4)) -> plt.Figure:
    """r² with the reference and -log10(p) plotted against marker id"""
    ref = _default_ref(scan, ref)
    ids = scan.marker_indices
    rsq = scan.rsq(ref)
    nlp = scan.neg_log10_p
    blocks = scan.blocks

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)
    for block in BLOCKS:
        mask = blocks == block
        if not np.any(mask):
            continue
        ax1.plot(ids[mask], rsq[mask], 'o-', color=BLOCK_COLORS[block], label=f"Block {block}")
        ax2.plot(ids[mask], nlp[mask], 'o-', color=BLOCK_COLORS[block], label=f"Block {block}")

    for ax in (ax1, ax2):
        ax.axvline(ref, color=CAUSAL_COLOR, linestyle=':', alpha=0.8)
        ax.set_xlabel('Marker')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)
    ax1.set_ylabel(f"$r^2$ with M{ref}")
    ax2.set_ylabel(r'$-\log_{10}(P)$')

    plt.tight_layout()
    fig.suptitle(title, y=1.02)
    return fig


def create_ld_heatmap(ld: pd.DataFrame,
                      title: str = "Marker correlation",
                      squared: bool = False,
                      figsize: Tuple[int, int] = (7, 6)) -> plt.Figure:
    """Heatmap of the panel correlation matrix

    Args:
        ld: Square correlation matrix from PICSIM_LD
        title: Plot title
        squared: Show r² instead of r
        figsize: Figure size
    """
    values = ld * ld if squared else ld
    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(
        values,
        ax=ax,
        cmap="viridis" if squared else "coolwarm",
        vmin=0.0 if squared else -1.0,
        vmax=1.0,
        square=True,
        cbar_kws={"label": "$r^2$" if squared else "r"},
    )
    ax.set_xlabel("Marker")
    ax.set_ylabel("Marker")
    if title and title.strip():
        ax.set_title(title)

    plt.tight_layout()
    return fig


def create_qq_plot(pvalues: np.ndarray,
                   title: str = "Q-Q Plot",
                   figsize: Tuple[int, int] = (6, 6)) -> plt.Figure:
    """Observed against expected -log10(p), annotated with lambda_GC"""
    expected, observed = qq_plot_data(pvalues)
    fig, ax = plt.subplots(figsize=figsize)

    if expected.size == 0:
        ax.text(0.5, 0.5, "No testable markers", ha="center", va="center",
                transform=ax.transAxes)
        ax.set_title(title)
        return fig

    upper = float(max(expected.max(), observed.max()))
    ax.plot([0.0, upper], [0.0, upper], color="grey", linestyle="--", linewidth=1)
    ax.scatter(expected, observed, s=18, color=BLOCK_COLORS[BLOCK_A], alpha=0.8)

    ax.set_xlabel(r"Expected $-\log_{10}(P)$")
    ax.set_ylabel(r"Observed $-\log_{10}(P)$")
    ax.set_title(f"{title} (lambda_GC = {genomic_inflation_factor(pvalues):.3f})")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def summarize_scan(scan: ScanResult) -> Dict:
    """Summary statistics for a scan result"""
    nlp = scan.neg_log10_p
    testable = np.isfinite(nlp)
    causal_ids = [int(i) for i in scan.marker_indices[scan.causal_mask]]
    summary = {
        'n_markers': len(scan),
        'n_testable': int(testable.sum()),
        'lead_marker': scan.lead_index,
        'max_neg_log10_p': float(np.max(nlp[testable])) if testable.any() else np.nan,
        'lambda_gc': genomic_inflation_factor(scan.pvalues),
        'causal_markers': causal_ids,
        'references': list(scan.references),
    }
    for ref in scan.references:
        for block, line in fit_pic_lines(scan, ref).items():
            summary[f'slope_{block}_R2_{ref}'] = line['slope']
    return summary


def PICSIM_Report(results: Union[ScanResult, Dict[str, ScanResult]],
                  ld: Optional[Union[pd.DataFrame, Dict[str, pd.DataFrame]]] = None,
                  plot_types: List[str] = ["pic", "decay"],
                  output_prefix: str = "PICSIM_results",
                  dpi: int = 150,
                  verbose: bool = True,
                  save_plots: bool = True) -> Dict:
    """Generate PIC plots and summaries for one or several scans

    Args:
        results: ScanResult or dict of named ScanResults
        ld: Correlation matrix (or dict keyed like results) for "ld_heatmap"
        plot_types: Any of "pic", "decay", "qq", "ld_heatmap"
        output_prefix: Prefix for output files
        dpi: Plot resolution
        verbose: Print progress information
        save_plots: Save plots to files

    Returns:
        Dictionary with plot objects, summary statistics and created files
    """
    if verbose:
        print("Generating PIC report...")

    report = {
        'plots': {},
        'summary': {},
        'files_created': []
    }

    if isinstance(results, ScanResult):
        results_dict = {'scan': results}
    elif isinstance(results, dict):
        results_dict = results
    else:
        raise ValueError("Results must be ScanResult or dictionary of ScanResults")

    unknown = [p for p in plot_types if p not in PLOT_TYPES]
    if unknown:
        raise ValueError(f"Unknown plot types {unknown}; choose from {PLOT_TYPES}")

    for name, scan in results_dict.items():
        if verbose:
            print(f"Processing scan: {name}")
        plots = {}

        figures = []
        if "pic" in plot_types:
            for ref in scan.references:
                figures.append((f"pic_R2_{ref}", create_pic_plot(scan, ref=ref, title=f"{name} (M{ref})")))
        if "decay" in plot_types:
            figures.append(("decay", create_decay_plot(scan, title=name)))
        if "qq" in plot_types:
            figures.append(("qq", create_qq_plot(scan.pvalues, title=f"Q-Q Plot - {name}")))
        if "ld_heatmap" in plot_types:
            matrix = ld.get(name) if isinstance(ld, dict) else ld
            if matrix is None:
                warnings.warn(f"No LD matrix supplied for {name}; skipping heatmap")
            else:
                figures.append(("ld_heatmap", create_ld_heatmap(matrix, title=f"{name} correlation")))

        for key, fig in figures:
            plots[key] = fig
            if save_plots:
                filename = f"{output_prefix}_{name}_{key}.png"
                fig.savefig(filename, dpi=dpi, bbox_inches='tight')
                report['files_created'].append(filename)

        report['plots'][name] = plots
        summary = summarize_scan(scan)
        report['summary'][name] = summary

        if verbose:
            print(f"Summary for {name}:")
            print(f"  Markers tested: {summary['n_testable']}/{summary['n_markers']}")
            print(f"  Lead marker: {summary['lead_marker']}")
            print(f"  Max -log10(p): {summary['max_neg_log10_p']:.2f}")

    if verbose:
        print(f"Report generation complete. Created {len(report['files_created'])} plot files.")

    return report
