import matplotlib.pyplot as plt

from loraadr.utils.plotting import parse_formats, plot_snr_history, save_multi_format


def test_parse_formats():
    assert parse_formats("png, pdf,,") == ["png", "pdf"]


def test_estimate_line_only_when_given():
    without = plot_snr_history([1.0, 2.0, 3.0], threshold=2.5)
    with_estimate = plot_snr_history([1.0, 2.0, 3.0], threshold=2.5, estimate=2.0)
    try:
        assert len(without.axes[0].lines) == 2
        assert len(with_estimate.axes[0].lines) == 3
    finally:
        plt.close(without)
        plt.close(with_estimate)


def test_save_multi_format(tmp_path):
    fig = plot_snr_history([0.0, 1.0], threshold=0.5, title="SF12")
    try:
        saved = save_multi_format(fig, tmp_path / "out" / "snr", [".PNG", "svg"])
    finally:
        plt.close(fig)
    assert saved == [tmp_path / "out" / "snr.png", tmp_path / "out" / "snr.svg"]
    assert all(path.is_file() for path in saved)
