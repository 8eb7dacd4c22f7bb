"""Figures for inspecting the SNR window behind an ADR decision."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


def save_multi_format(
    fig,
    base_path: str | Path,
    formats: Sequence[str] | None = ("png",),
    dpi: int = 300,
) -> list[Path]:
    """Write ``fig`` once per extension in ``formats`` next to ``base_path``.

    ``base_path`` carries no extension; missing parent directories are
    created. ``dpi`` only applies to raster formats. Returns the written
    paths in the order of ``formats``.
    """
    base = Path(base_path)
    base.parent.mkdir(parents=True, exist_ok=True)
    saved = []
    for ext in formats or []:
        ext = ext.lstrip(".").lower()
        path = base.with_suffix(f".{ext}")
        fig.savefig(path, dpi=dpi if ext in {"png", "jpg", "jpeg"} else None)
        saved.append(path)
    return saved


def parse_formats(value: str) -> list[str]:
    """Split the ``--formats`` option (``"png,pdf"``) into extensions."""
    return [fmt.strip() for fmt in value.split(",") if fmt.strip()]


def plot_snr_history(
    snrs: Sequence[float],
    threshold: float,
    estimate: float | None = None,
    *,
    title: str | None = None,
):
    """Return a figure with the per-packet SNR of the ADR window.

    ``snrs`` are ordered most recent first, as returned by
    :func:`loraadr.controller.estimator.record_snrs`. The threshold
    (required SNR plus device margin) is drawn as a dashed line; the
    estimate is drawn only when given, i.e. when a decision was taken.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots()
    packets = list(range(len(snrs)))
    ax.plot(packets, list(snrs), marker="o", label="SNR per packet")
    if estimate is not None:
        ax.axhline(estimate, color="tab:green", label=f"Estimate ({estimate:.1f} dB)")
    ax.axhline(threshold, color="tab:red", linestyle="--", label="Required + margin")
    ax.set_xlabel("Packet age (0 = most recent)")
    ax.set_ylabel("SNR (dB)")
    if title:
        ax.set_title(title)
    ax.grid(True)
    ax.legend()
    fig.tight_layout()
    return fig
