"""
Core data structures for picsim
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .errors import InvalidParameter

BLOCK_A = "A"
BLOCK_B = "B"
BLOCKS = (BLOCK_A, BLOCK_B)


def _is_marker_id(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


class Panel:
    """Simulated genotype panel (n_individuals × n_markers)

    Markers carry 1-based ids and a block label. Ids are kept when markers are
    dropped, so a panel with an ungenotyped causal marker still reports
    markers by their original position.
    """

    def __init__(self, data: np.ndarray,
                 blocks: Sequence[str],
                 marker_ids: Optional[Sequence[int]] = None):
        arr = np.array(data, dtype=np.float64, copy=True)
        if arr.ndim != 2:
            raise InvalidParameter("Panel data must be a 2D matrix")
        n, m = arr.shape
        if n == 0 or m == 0:
            raise InvalidParameter(f"Panel must be non-empty, got shape {arr.shape}")

        if marker_ids is None:
            ids = np.arange(1, m + 1, dtype=np.int64)
        else:
            ids = np.asarray(marker_ids, dtype=np.int64)
        if ids.shape != (m,):
            raise InvalidParameter("marker_ids must have one entry per column")
        if np.any(ids < 1) or np.any(np.diff(ids) <= 0):
            raise InvalidParameter("marker_ids must be positive and strictly increasing")

        labels = [str(b) for b in blocks]
        if len(labels) != m:
            raise InvalidParameter("blocks must have one label per column")
        unknown = set(labels) - set(BLOCKS)
        if unknown:
            raise InvalidParameter(f"Unknown block labels: {sorted(unknown)}")

        arr.setflags(write=False)
        ids.setflags(write=False)
        self._data = arr
        self._ids = ids
        self._blocks = tuple(labels)
        self._column = {int(mid): j for j, mid in enumerate(ids)}

    @property
    def shape(self):
        """Matrix shape (n_individuals, n_markers)"""
        return self._data.shape

    @property
    def n_individuals(self) -> int:
        return self._data.shape[0]

    @property
    def n_markers(self) -> int:
        return self._data.shape[1]

    @property
    def marker_ids(self) -> np.ndarray:
        return self._ids

    @property
    def blocks(self) -> tuple:
        return self._blocks

    @property
    def markers_per_block(self) -> Dict[str, int]:
        return {b: self._blocks.count(b) for b in BLOCKS}

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the genotype matrix"""
        return self._data

    def __contains__(self, marker_id) -> bool:
        return _is_marker_id(marker_id) and int(marker_id) in self._column

    def column_of(self, marker_id: int) -> int:
        """Column position of a marker id"""
        if not _is_marker_id(marker_id):
            raise InvalidParameter(f"Marker ids must be integers, got {marker_id!r}")
        try:
            return self._column[int(marker_id)]
        except KeyError:
            raise InvalidParameter(f"Marker {marker_id} is not in the panel") from None

    def block_of(self, marker_id: int) -> str:
        return self._blocks[self.column_of(marker_id)]

    def get_marker(self, marker_id: int) -> np.ndarray:
        """Genotype values of a single marker"""
        return self._data[:, self.column_of(marker_id)]

    def drop_markers(self, marker_ids: Iterable[int]) -> "Panel":
        """Return a new Panel without the given markers"""
        drop = {self.column_of(mid) for mid in marker_ids}
        keep = [j for j in range(self.n_markers) if j not in drop]
        if not keep:
            raise InvalidParameter("Cannot drop every marker from the panel")
        return Panel(self._data[:, keep],
                     blocks=[self._blocks[j] for j in keep],
                     marker_ids=self._ids[keep])

    def to_numpy(self) -> np.ndarray:
        """Writable copy of the genotype matrix"""
        return self._data.copy()

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self._data, columns=[f"M{mid}" for mid in self._ids])


@dataclass(frozen=True)
class CausalSet:
    """Causal marker ids and their effect weights."""

    indices: tuple
    weights: tuple

    def __post_init__(self):
        indices = tuple(self.indices)
        weights = tuple(self.weights)
        if not indices:
            raise InvalidParameter("Causal set must contain at least one marker")
        if len(indices) > 2:
            raise InvalidParameter(f"Causal set holds one or two markers, got {len(indices)}")
        if len(weights) != len(indices):
            raise InvalidParameter("Causal set needs exactly one weight per marker")
        for idx in indices:
            if not _is_marker_id(idx) or idx < 1:
                raise InvalidParameter(f"Causal marker ids must be positive integers, got {idx!r}")
        if len(set(int(i) for i in indices)) != len(indices):
            raise InvalidParameter("Causal marker ids must be unique")
        if not np.all(np.isfinite(np.asarray(weights, dtype=np.float64))):
            raise InvalidParameter("Causal weights must be finite")
        object.__setattr__(self, "indices", tuple(int(i) for i in indices))
        object.__setattr__(self, "weights", tuple(float(w) for w in weights))

    @classmethod
    def coerce(cls, causal: Union["CausalSet", int, Sequence[int], Mapping[int, float]]) -> "CausalSet":
        """Build a CausalSet from an id, a list of ids (weight 1.0) or an id → weight mapping"""
        if isinstance(causal, CausalSet):
            return causal
        if isinstance(causal, Mapping):
            return cls(tuple(causal.keys()), tuple(causal.values()))
        if isinstance(causal, (int, np.integer)) and not isinstance(causal, bool):
            return cls((int(causal),), (1.0,))
        if isinstance(causal, (list, tuple, np.ndarray)):
            ids = tuple(causal)
            return cls(ids, tuple(1.0 for _ in ids))
        raise InvalidParameter(f"Cannot interpret causal set from {type(causal).__name__}")

    def contains(self, marker_id: int) -> bool:
        return int(marker_id) in self.indices

    def __len__(self) -> int:
        return len(self.indices)


class Phenotype:
    """Simulated trait vector together with the causal set that produced it"""

    def __init__(self, values: np.ndarray, causal: CausalSet, noise_sd: float = 1.0):
        y = np.array(values, dtype=np.float64, copy=True)
        if y.ndim != 1 or y.size == 0:
            raise InvalidParameter("Phenotype must be a non-empty 1D vector")
        y.setflags(write=False)
        self._values = y
        self.causal = causal
        self.noise_sd = float(noise_sd)

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def n_individuals(self) -> int:
        return self._values.shape[0]

    def to_numpy(self) -> np.ndarray:
        return self._values.copy()


@dataclass
class AssociationRecord:
    """Single-marker association output."""

    marker_index: int
    neg_log10_p: float
    rsq_ref: Dict[int, float]
    block: str
    is_causal: bool
    effect: float = 0.0
    se: float = float("nan")
    pvalue: float = float("nan")

    def to_row(self) -> Dict[str, Union[int, float, str, bool]]:
        row = {
            "Marker": self.marker_index,
            "Block": self.block,
            "Causal": self.is_causal,
            "Effect": self.effect,
            "SE": self.se,
            "P": self.pvalue,
            "NegLog10P": self.neg_log10_p,
        }
        for ref, rsq in self.rsq_ref.items():
            row[f"R2_{ref}"] = rsq
        return row


class ScanResult:
    """Ordered association records for one panel/phenotype pair"""

    def __init__(self, records: Sequence[AssociationRecord],
                 references: Sequence[int],
                 lead_index: Optional[int] = None):
        self.records: List[AssociationRecord] = list(records)
        self.references = tuple(int(r) for r in references)
        self.lead_index = lead_index

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[AssociationRecord]:
        return iter(self.records)

    def __getitem__(self, position: int) -> AssociationRecord:
        return self.records[position]

    @property
    def marker_indices(self) -> np.ndarray:
        return np.array([r.marker_index for r in self.records], dtype=np.int64)

    @property
    def neg_log10_p(self) -> np.ndarray:
        return np.array([r.neg_log10_p for r in self.records], dtype=np.float64)

    @property
    def pvalues(self) -> np.ndarray:
        return np.array([r.pvalue for r in self.records], dtype=np.float64)

    @property
    def blocks(self) -> np.ndarray:
        return np.array([r.block for r in self.records])

    @property
    def causal_mask(self) -> np.ndarray:
        return np.array([r.is_causal for r in self.records], dtype=bool)

    def rsq(self, ref: int) -> np.ndarray:
        """r² of every marker with reference marker `ref`"""
        ref = int(ref)
        if ref not in self.references:
            raise KeyError(f"Marker {ref} is not a reference of this scan {self.references}")
        return np.array([r.rsq_ref[ref] for r in self.records], dtype=np.float64)

    def get(self, marker_id: int) -> AssociationRecord:
        for record in self.records:
            if record.marker_index == int(marker_id):
                return record
        raise KeyError(f"Marker {marker_id} not in scan result")

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to pandas DataFrame, one row per marker"""
        columns = ["Marker", "Block", "Causal", "Effect", "SE", "P", "NegLog10P"]
        columns += [f"R2_{ref}" for ref in self.references]
        return pd.DataFrame([r.to_row() for r in self.records], columns=columns)

    def to_csv(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        self.to_dataframe().to_csv(path, index=False)
        return path
