"""End-to-end PIC scenarios: bridging, within-block, two-causal and proxy reference."""

import numpy as np
import pytest

from picsim.association.scan import PICSIM_Scan
from picsim.simulation.panel import PICSIM_SimulatePanel
from picsim.simulation.phenotype import PICSIM_SimulatePhenotype
from picsim.utils.data_types import BLOCK_A, BLOCK_B
from picsim.utils.stats import decay_by_distance

SEED = 100
N = 1000
K = 10
RHO = 0.8
BRIDGE = K  # last marker of block A carries block B values for half the panel


def _simulate(causal, bridge_fraction=0.5, drop=None, references=None):
    rng = np.random.default_rng(SEED)
    panel = PICSIM_SimulatePanel(N, K, RHO, bridge_fraction=bridge_fraction, seed=rng)
    phenotype = PICSIM_SimulatePhenotype(panel, causal, noise_sd=1.0, seed=rng)
    if drop:
        panel = panel.drop_markers(drop)
    return PICSIM_Scan(panel, phenotype, references=references)


def _near_far_means(values, ids, origin, block_ids):
    """Mean over the three markers of a block nearest to and furthest from origin"""
    order = sorted(block_ids, key=lambda mid: abs(mid - origin))
    lookup = dict(zip(ids, values))
    near = np.mean([lookup[m] for m in order[:3]])
    far = np.mean([lookup[m] for m in order[-3:]])
    return near, far


@pytest.fixture(scope="module")
def bridge_scan():
    return _simulate({BRIDGE: 1.0})


def test_bridge_scenario_decays_in_both_blocks(bridge_scan) -> None:
    ids = list(bridge_scan.marker_indices)
    rsq = bridge_scan.rsq(BRIDGE)
    nlp = bridge_scan.neg_log10_p
    block_a = [m for m in range(1, K) if m != BRIDGE]
    block_b = list(range(K + 1, 2 * K + 1))

    for block_ids in (block_a, block_b):
        near_r2, far_r2 = _near_far_means(rsq, ids, BRIDGE, block_ids)
        near_p, far_p = _near_far_means(nlp, ids, BRIDGE, block_ids)
        assert near_r2 > far_r2
        assert near_p > far_p

    # The bridging marker is linked to both blocks
    assert np.min(rsq[[ids.index(m) for m in block_a]]) > 0.03
    assert np.min(rsq[[ids.index(m) for m in block_b]]) > 0.03
    assert bridge_scan.lead_index == BRIDGE


def test_bridge_scenario_decay_table(bridge_scan) -> None:
    table = decay_by_distance(bridge_scan, origin=BRIDGE, ref=BRIDGE)

    assert set(table["Block"]) == {BLOCK_A, BLOCK_B}
    for block in (BLOCK_A, BLOCK_B):
        sub = table[(table["Block"] == block) & (table["Distance"] > 0)]
        # Correlation with distance is negative on average
        assert np.corrcoef(sub["Distance"], sub["MeanR2"])[0, 1] < 0
        assert np.corrcoef(sub["Distance"], sub["MeanNegLog10P"])[0, 1] < 0


def test_within_block_scenario_confines_signal() -> None:
    causal = 5
    scan = _simulate({causal: 1.0}, bridge_fraction=0.0)
    rsq = scan.rsq(causal)
    nlp = scan.neg_log10_p
    in_b = scan.blocks == BLOCK_B
    in_a = scan.blocks == BLOCK_A

    assert np.max(rsq[in_b]) < 0.02
    assert np.max(nlp[in_b]) < 4.0
    assert np.min(rsq[in_a]) > 0.2
    assert np.mean(rsq[in_a]) > 10 * np.mean(rsq[in_b])
    assert scan.lead_index == causal


def test_two_causal_scenario_superimposes_patterns(bridge_scan) -> None:
    second = K + 5
    scan = _simulate({BRIDGE: 1.0, second: 0.5})
    ids = list(scan.marker_indices)
    in_b = (scan.blocks == BLOCK_B) & (scan.marker_indices != second)

    assert scan.references == (BRIDGE, second)
    assert set(scan.marker_indices[scan.causal_mask]) == {BRIDGE, second}
    assert scan.lead_index == BRIDGE

    # Block B picks up the second source on top of the bridge signal
    assert np.mean(scan.neg_log10_p[in_b]) > np.mean(bridge_scan.neg_log10_p[in_b])
    assert np.mean(scan.rsq(second)[in_b]) > np.mean(scan.rsq(BRIDGE)[in_b])

    # Local peak at the second causal marker
    nlp = scan.neg_log10_p
    assert nlp[ids.index(second)] > nlp[ids.index(second - 1)]
    assert nlp[ids.index(second)] > nlp[ids.index(second + 1)]


def test_proxy_reference_produces_two_lines() -> None:
    scan = _simulate({BRIDGE: 1.0}, drop=[BRIDGE], references=["lead"])
    lead = scan.lead_index
    rsq = scan.rsq(lead)
    nlp = scan.neg_log10_p
    in_a = scan.blocks == BLOCK_A

    assert len(scan) == 2 * K - 1
    assert not scan.causal_mask.any()
    assert lead == K + 1
    # Block A stays clearly associated while being nearly unlinked to the proxy
    assert np.max(rsq[in_a]) < 0.05
    assert np.min(nlp[in_a]) > 5.0
    assert np.min(rsq[~in_a]) > 0.2
