"""
Single-marker association scan with r² to reference markers.

Algorithm (vectorised over all markers, intercept-only FWL):
- Centre the phenotype once: y_c = y - mean(y).
- Centre every marker column: G_c = G - mean(G).
  - gTy = G_c.T @ y_c
  - gTg = sum(G_c^2, axis=0)
  - beta = gTy / gTg
  - SSE = y_c·y_c - gTy^2 / gTg
  - se = sqrt(SSE / df / gTg),  df = n - 2
  - t = beta / se,  p = 2 * sf(|t|, df)  (Student-t, two-sided)
- r² with reference column r: (G_c.T @ r_c)^2 / (gTg * r_c·r_c), and exactly
  1.0 for the reference marker itself.

Markers whose values are numerically constant (range within 1e-10 of their
largest magnitude, see constant_columns) are degenerate. By default they get
effect 0 and NaN SE/p/-log10(p)/r² (a RuntimeWarning names them);
strict=True raises DegenerateInput instead.
"""

import warnings
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np
from scipy import stats

from ..utils.data_types import AssociationRecord, CausalSet, Panel, Phenotype, ScanResult
from ..utils.errors import DegenerateInput, InvalidParameter
from ..utils.stats import constant_columns, neg_log10_t_pvalue

LEAD = "lead"
MAX_REFERENCES = 2

ReferenceLike = Union[int, str]


def _marker_statistics(G: np.ndarray, y: np.ndarray):
    """Per-marker OLS slope, SE, t, p and -log10(p) plus centred columns."""
    n = G.shape[0]
    df = n - 2

    valid = ~constant_columns(G)

    # Degenerate columns are handled by the validity mask below
    with np.errstate(divide='ignore', over='ignore', invalid='ignore'):
        y_c = y - y.mean()
        G_c = G - G.mean(axis=0)
        gTy = G_c.T @ y_c
        gTg = np.sum(G_c * G_c, axis=0)
        yy = float(y_c @ y_c)

        beta = np.zeros_like(gTg)
        beta[valid] = gTy[valid] / gTg[valid]
        sse = np.maximum(yy - beta * gTy, 0.0)
        se = np.full_like(gTg, np.nan)
        se[valid] = np.sqrt(sse[valid] / df / gTg[valid])

        t_stats = np.zeros_like(gTg)
        positive_se = valid & (se > 0)
        t_stats[positive_se] = beta[positive_se] / se[positive_se]
        # Perfect fit: unbounded t for a non-zero slope
        exact = valid & (se == 0) & (beta != 0)
        t_stats[exact] = np.sign(beta[exact]) * np.inf

    pvalues = np.full_like(gTg, np.nan)
    pvalues[valid] = 2.0 * stats.t.sf(np.abs(t_stats[valid]), df)
    nlp = np.full_like(gTg, np.nan)
    nlp[valid] = neg_log10_t_pvalue(t_stats[valid], df)

    return {
        'valid': valid,
        'centred': G_c,
        'gTg': gTg,
        'effects': beta,
        'se': se,
        'pvalues': pvalues,
        'neg_log10_p': nlp,
    }


def _lead_marker(marker_ids: np.ndarray, nlp: np.ndarray, valid: np.ndarray) -> Optional[int]:
    """Best-associated testable marker; ties resolve to the lowest id."""
    if not np.any(valid):
        return None
    scores = np.where(valid, nlp, -np.inf)
    return int(marker_ids[int(np.argmax(scores))])


def _resolve_references(panel: Panel,
                        references: Optional[Union[ReferenceLike, Sequence[ReferenceLike]]],
                        causal_set: Optional[CausalSet],
                        lead: Optional[int]) -> List[int]:
    if references is None:
        present = [idx for idx in causal_set.indices if idx in panel] if causal_set else []
        requested = present or [LEAD]
    elif isinstance(references, (str, int, np.integer)):
        requested = [references]
    else:
        requested = list(references)

    if not 1 <= len(requested) <= MAX_REFERENCES:
        raise InvalidParameter(
            f"Expected one or two reference markers, got {len(requested)}"
        )

    resolved: List[int] = []
    for ref in requested:
        if isinstance(ref, str):
            if ref.strip().lower() != LEAD:
                raise InvalidParameter(f"Unknown reference {ref!r}; use a marker id or '{LEAD}'")
            if lead is None:
                raise DegenerateInput("No testable marker available to act as the lead reference")
            ref_id = lead
        elif isinstance(ref, (bool, np.bool_)) or not isinstance(ref, (int, np.integer)):
            raise InvalidParameter(f"Reference markers must be integer ids, got {ref!r}")
        else:
            ref_id = int(ref)
            if ref_id not in panel:
                raise InvalidParameter(f"Reference marker {ref_id} is not in the panel")
        if ref_id not in resolved:
            resolved.append(ref_id)
    return resolved


def PICSIM_Scan(panel: Panel,
                phenotype: Union[Phenotype, np.ndarray],
                references: Optional[Union[ReferenceLike, Sequence[ReferenceLike]]] = None,
                causal: Optional[Union[CausalSet, int, Sequence[int], Mapping[int, float]]] = None,
                strict: bool = False,
                verbose: bool = False) -> ScanResult:
    """Association scan of every panel marker against a phenotype

    Args:
        panel: Genotype panel
        phenotype: Phenotype (or a plain length-n vector)
        references: One or two reference markers for r². Each is a marker id
            or "lead" for the best-associated marker (proxy reference when the
            causal marker is not in the panel). Defaults to the causal markers
            present in the panel, else "lead".
        causal: Causal set used for the is_causal flag. Defaults to the
            phenotype's own causal set.
        strict: Raise DegenerateInput for zero-variance markers instead of
            reporting NaN statistics
        verbose: Print brief progress

    Returns:
        ScanResult with one record per marker in panel order
    """
    if isinstance(phenotype, Phenotype):
        y = phenotype.values
        causal_set = phenotype.causal if causal is None else CausalSet.coerce(causal)
    else:
        y = np.asarray(phenotype, dtype=np.float64)
        if y.ndim != 1:
            raise InvalidParameter("Phenotype must be a 1D vector")
        causal_set = CausalSet.coerce(causal) if causal is not None else None

    n, m = panel.shape
    if y.shape[0] != n:
        raise InvalidParameter(
            f"Phenotype has {y.shape[0]} individuals but the panel has {n}"
        )
    if n < 3:
        raise InvalidParameter(f"Need at least 3 individuals for a slope test, got {n}")
    if not np.all(np.isfinite(y)):
        raise InvalidParameter("Phenotype contains non-finite values")
    if constant_columns(y):
        raise DegenerateInput("Phenotype is constant; no marker can be tested")

    marker_ids = panel.marker_ids
    res = _marker_statistics(panel.values, y)
    valid = res['valid']

    degenerate = [int(mid) for mid in marker_ids[~valid]]
    if degenerate:
        if strict:
            raise DegenerateInput(
                f"Zero-variance marker(s) cannot be tested: {degenerate}",
                marker_indices=degenerate,
            )
        warnings.warn(
            f"Zero-variance marker(s) reported with NaN statistics: {degenerate}",
            RuntimeWarning,
        )

    lead = _lead_marker(marker_ids, res['neg_log10_p'], valid)
    refs = _resolve_references(panel, references, causal_set, lead)

    G_c = res['centred']
    gTg = res['gTg']
    rsq_columns = {}
    for ref in refs:
        j = panel.column_of(ref)
        with np.errstate(divide='ignore', invalid='ignore'):
            cross = G_c.T @ G_c[:, j]
            rsq = np.clip(cross * cross / (gTg * gTg[j]), 0.0, 1.0)
        if valid[j]:
            rsq[~valid] = np.nan
        else:
            rsq[:] = np.nan
        rsq[j] = 1.0
        rsq_columns[ref] = rsq

    records = []
    for pos, mid in enumerate(marker_ids):
        mid = int(mid)
        records.append(AssociationRecord(
            marker_index=mid,
            neg_log10_p=float(res['neg_log10_p'][pos]),
            rsq_ref={ref: float(rsq_columns[ref][pos]) for ref in refs},
            block=panel.blocks[pos],
            is_causal=bool(causal_set is not None and causal_set.contains(mid)),
            effect=float(res['effects'][pos]),
            se=float(res['se'][pos]),
            pvalue=float(res['pvalues'][pos]),
        ))

    if verbose:
        print(f"Association scan complete. {int(valid.sum())}/{m} markers tested")
        if lead is not None:
            print(f"Lead marker: M{lead} (-log10 p = {res['neg_log10_p'][panel.column_of(lead)]:.2f})")

    return ScanResult(records, references=refs, lead_index=lead)
