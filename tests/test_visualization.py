import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from picsim.association.scan import PICSIM_Scan
from picsim.matrix.ld import PICSIM_LD
from picsim.simulation.panel import PICSIM_SimulatePanel
from picsim.simulation.phenotype import PICSIM_SimulatePhenotype
from picsim.visualization import pic


@pytest.fixture(scope="module")
def simulated():
    rng = np.random.default_rng(100)
    panel = PICSIM_SimulatePanel(300, 4, 0.8, seed=rng)
    phenotype = PICSIM_SimulatePhenotype(panel, {4: 1.0, 6: 0.5}, seed=rng)
    scan = PICSIM_Scan(panel, phenotype)
    return panel, scan


def test_create_pic_plot_with_fit_and_labels(simulated) -> None:
    _, scan = simulated

    fig = pic.create_pic_plot(scan, ref=6, title="PIC")

    assert isinstance(fig, plt.Figure)
    ax = fig.axes[0]
    assert "M6" in ax.get_xlabel()
    assert ax.get_title() == "PIC"
    plt.close(fig)


def test_create_pic_plot_defaults_to_first_reference(simulated) -> None:
    _, scan = simulated

    fig = pic.create_pic_plot(scan, show_fit=False, annotate=False, title="")

    assert "M4" in fig.axes[0].get_xlabel()
    plt.close(fig)


def test_decay_and_heatmap_and_qq_plots(simulated) -> None:
    panel, scan = simulated

    decay = pic.create_decay_plot(scan)
    heatmap = pic.create_ld_heatmap(PICSIM_LD(panel), squared=True)
    qq = pic.create_qq_plot(scan.pvalues)
    empty_qq = pic.create_qq_plot(np.array([np.nan, 0.0]))

    for fig in (decay, heatmap, qq, empty_qq):
        assert isinstance(fig, plt.Figure)
        plt.close(fig)


def test_summarize_scan(simulated) -> None:
    _, scan = simulated

    summary = pic.summarize_scan(scan)

    assert summary["n_markers"] == 8
    assert summary["n_testable"] == 8
    assert summary["lead_marker"] == scan.lead_index
    assert summary["causal_markers"] == [4, 6]
    assert summary["references"] == [4, 6]
    assert "slope_A_R2_4" in summary and "slope_B_R2_6" in summary
    assert summary["max_neg_log10_p"] == pytest.approx(np.max(scan.neg_log10_p))


def test_picsim_report_saves_files(simulated, tmp_path) -> None:
    panel, scan = simulated

    report = pic.PICSIM_Report(
        {"two_causal": scan},
        ld={"two_causal": PICSIM_LD(panel)},
        plot_types=["pic", "decay", "qq", "ld_heatmap"],
        output_prefix=str(tmp_path / "out"),
        verbose=False,
        save_plots=True,
    )

    plots = report["plots"]["two_causal"]
    assert set(plots) == {"pic_R2_4", "pic_R2_6", "decay", "qq", "ld_heatmap"}
    assert len(report["files_created"]) == 5
    for filename in report["files_created"]:
        assert (tmp_path / filename.split("/")[-1]).exists()
    assert report["summary"]["two_causal"]["n_markers"] == 8
    for fig in plots.values():
        plt.close(fig)


def test_picsim_report_single_scan_without_ld_warns(simulated, capsys) -> None:
    _, scan = simulated

    with pytest.warns(UserWarning, match="No LD matrix"):
        report = pic.PICSIM_Report(scan, plot_types=["ld_heatmap"], save_plots=False, verbose=True)

    assert report["plots"]["scan"] == {}
    assert "Report generation complete" in capsys.readouterr().out


def test_picsim_report_rejects_bad_inputs(simulated) -> None:
    _, scan = simulated

    with pytest.raises(ValueError):
        pic.PICSIM_Report([scan], save_plots=False, verbose=False)
    with pytest.raises(ValueError):
        pic.PICSIM_Report(scan, plot_types=["manhattan"], save_plots=False, verbose=False)


def test_qq_plot_draws_qq_plot_data_points(simulated) -> None:
    from picsim.utils.stats import qq_plot_data

    _, scan = simulated
    expected, observed = qq_plot_data(scan.pvalues)

    fig = pic.create_qq_plot(scan.pvalues, title="QQ")
    offsets = fig.axes[0].collections[0].get_offsets()

    np.testing.assert_allclose(offsets[:, 0], expected)
    np.testing.assert_allclose(offsets[:, 1], observed)
    assert fig.axes[0].get_title().startswith("QQ (lambda_GC = ")
    plt.close(fig)
