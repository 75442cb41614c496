import numpy as np
import pytest

from picsim.matrix.ld import mean_block_correlation
from picsim.simulation import panel as panel_sim
from picsim.simulation.panel import PICSIM_SimulatePanel
from picsim.utils.data_types import BLOCK_A, BLOCK_B
from picsim.utils.errors import InvalidParameter


@pytest.mark.parametrize("n, k", [(1, 1), (5, 3), (200, 10)])
def test_panel_shape_and_labels(n, k) -> None:
    panel = PICSIM_SimulatePanel(n, k, 0.8, seed=1)

    assert panel.shape == (n, 2 * k)
    np.testing.assert_array_equal(panel.marker_ids, np.arange(1, 2 * k + 1))
    assert panel.blocks == tuple([BLOCK_A] * k + [BLOCK_B] * k)
    assert panel.markers_per_block == {BLOCK_A: k, BLOCK_B: k}


def test_intra_block_correlation_approaches_rho() -> None:
    panel = PICSIM_SimulatePanel(
        20000, 4, 0.5, noise_step=0.0, bridge_fraction=0.0, seed=7
    )

    corr = mean_block_correlation(panel)

    assert corr[BLOCK_A] == pytest.approx(0.5, abs=0.03)
    assert corr[BLOCK_B] == pytest.approx(0.5, abs=0.03)
    assert corr["cross"] == pytest.approx(0.0, abs=0.03)


def test_same_seed_reproduces_panel_and_generator_seed_accepted() -> None:
    first = PICSIM_SimulatePanel(100, 5, 0.8, seed=100)
    second = PICSIM_SimulatePanel(100, 5, 0.8, seed=100)
    third = PICSIM_SimulatePanel(100, 5, 0.8, seed=101)
    from_generator = PICSIM_SimulatePanel(100, 5, 0.8, seed=np.random.default_rng(100))

    np.testing.assert_array_equal(first.values, second.values)
    np.testing.assert_array_equal(first.values, from_generator.values)
    assert not np.array_equal(first.values, third.values)


def test_bridge_copies_first_block_b_marker_for_first_half() -> None:
    n, k = 100, 4
    panel = PICSIM_SimulatePanel(n, k, 0.8, noise_step=0.0, bridge_fraction=0.5, seed=3)
    last_a = panel.get_marker(k)
    first_b = panel.get_marker(k + 1)

    np.testing.assert_array_equal(last_a[: n // 2], first_b[: n // 2])
    assert not np.any(last_a[n // 2:] == first_b[n // 2:])


def test_no_bridge_keeps_blocks_independent() -> None:
    panel = PICSIM_SimulatePanel(5000, 3, 0.8, noise_step=0.0, bridge_fraction=0.0, seed=4)

    r = np.corrcoef(panel.get_marker(3), panel.get_marker(4))[0, 1]

    assert abs(r) < 0.05


def test_noise_grows_away_from_boundary_by_default() -> None:
    k = 10
    panel = PICSIM_SimulatePanel(20000, k, 0.8, noise_step=0.1, bridge_fraction=0.0, seed=5)
    variances = np.var(panel.values, axis=0)

    # Boundary markers are noise-free, block edges carry SD 0.9 of extra noise
    assert variances[k - 1] == pytest.approx(1.0, abs=0.05)
    assert variances[k] == pytest.approx(1.0, abs=0.05)
    assert variances[0] == pytest.approx(1.81, abs=0.08)
    assert variances[2 * k - 1] == pytest.approx(1.81, abs=0.08)


def test_edges_orientation_reverses_noise_profile() -> None:
    k = 10
    panel = PICSIM_SimulatePanel(
        20000, k, 0.8, noise_step=0.1, noise_orientation="edges", bridge_fraction=0.0, seed=5
    )
    variances = np.var(panel.values, axis=0)

    assert variances[0] == pytest.approx(1.0, abs=0.05)
    assert variances[k - 1] == pytest.approx(1.81, abs=0.08)


def test_explicit_noise_profile() -> None:
    profile = np.array([0.0, 2.0])
    panel = PICSIM_SimulatePanel(20000, 2, 0.3, noise_profile=profile, bridge_fraction=0.0, seed=9)
    variances = np.var(panel.values, axis=0)

    # Block A: column 0 is the far marker, column 1 the boundary marker
    assert variances[0] == pytest.approx(5.0, rel=0.05)
    assert variances[1] == pytest.approx(1.0, abs=0.05)


def test_rho_of_one_gives_identical_noise_free_columns() -> None:
    panel = PICSIM_SimulatePanel(50, 3, 1.0, noise_step=0.0, bridge_fraction=0.0, seed=2)

    np.testing.assert_allclose(panel.get_marker(1), panel.get_marker(2), atol=1e-8)


def test_panel_is_read_only() -> None:
    panel = PICSIM_SimulatePanel(10, 2, 0.8, seed=1)

    with pytest.raises(ValueError):
        panel.values[0, 0] = 5.0
    copy = panel.to_numpy()
    copy[0, 0] = 5.0
    assert panel.values[0, 0] != 5.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n_individuals": 0},
        {"n_individuals": -3},
        {"markers_per_block": 0},
        {"markers_per_block": 2.5},
        {"rho": 0.0},
        {"rho": 1.5},
        {"rho": float("nan")},
        {"bridge_fraction": 1.2},
        {"noise_profile": [0.1, 0.2]},
        {"noise_profile": [0.0, -1.0, 0.5]},
        {"noise_step": -0.1},
        {"noise_orientation": "middle"},
    ],
)
def test_invalid_parameters_raise(kwargs) -> None:
    params = {"n_individuals": 10, "markers_per_block": 3, "rho": 0.8}
    params.update(kwargs)

    with pytest.raises(InvalidParameter):
        PICSIM_SimulatePanel(**params, seed=1)


def test_helpers() -> None:
    cov = panel_sim.block_covariance(3, 0.4)
    np.testing.assert_allclose(np.diag(cov), 1.0)
    assert cov[0, 2] == pytest.approx(0.4)

    np.testing.assert_allclose(panel_sim.linear_noise_profile(4, 0.2), [0.0, 0.2, 0.4, 0.6])
    assert panel_sim.boundary_markers(10) == (10, 11)


def test_explicit_noise_profile_ignores_orientation() -> None:
    profile = [0.0, 0.5, 1.0]
    boundary = PICSIM_SimulatePanel(40, 3, 0.8, noise_profile=profile, seed=12)
    edges = PICSIM_SimulatePanel(40, 3, 0.8, noise_profile=profile, noise_orientation="edges", seed=12)

    np.testing.assert_array_equal(boundary.values, edges.values)


@pytest.mark.parametrize("n, fraction, expected", [(1, 0.5, 1), (5, 0.5, 3), (3, 0.5, 2), (4, 0.25, 1), (10, 0.0, 0)])
def test_bridge_count_rounds_half_up(n, fraction, expected) -> None:
    k = 2
    panel = PICSIM_SimulatePanel(n, k, 0.5, noise_step=0.0, bridge_fraction=fraction, seed=6)
    bridged = panel.get_marker(k) == panel.get_marker(k + 1)

    assert int(bridged.sum()) == expected
    assert bridged[:expected].all()
