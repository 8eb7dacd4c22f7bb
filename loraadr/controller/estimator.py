"""Link quality estimation from the reception history of a device."""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from .config import AdrConfig, DEFAULT_CONFIG, GatewayReduction, HistoryReduction
from .status import ReceptionRecord

logger = logging.getLogger(__name__)


def power_to_snr(power: float, config: AdrConfig = DEFAULT_CONFIG) -> float:
    """Convert a received power (dBm) into an SNR (dB).

    Thermal noise only: ``-174 dBm/Hz + 10 log10(B) + NF``. Interfering
    transmissions are ignored.
    """

    return power + 174.0 - 10.0 * math.log10(config.bandwidth) - config.noise_figure


def snr_floor(config: AdrConfig = DEFAULT_CONFIG) -> float:
    """Lowest SNR an estimate may report."""
    return power_to_snr(config.snr_floor_power, config)


def received_power(record: ReceptionRecord, config: AdrConfig = DEFAULT_CONFIG) -> float:
    """Reduce the gateway powers of ``record`` to a single value (dBm)."""

    powers = np.asarray(record.rx_powers(), dtype=float)
    floor = config.snr_floor_power
    if powers.size == 0:
        return floor
    if config.gateway_reduction is GatewayReduction.STRONGEST:
        return float(max(floor, powers.max()))
    return float(powers.mean())


def record_snrs(
    history: Sequence[ReceptionRecord],
    config: AdrConfig = DEFAULT_CONFIG,
    window: int | None = None,
) -> np.ndarray:
    """Per-packet SNR of the latest ``window`` records, most recent first."""

    window = config.history_range if window is None else window
    latest = list(history[-window:])[::-1] if window > 0 else []
    return np.array([power_to_snr(received_power(r, config), config) for r in latest])


def estimate_snr(
    history: Sequence[ReceptionRecord],
    config: AdrConfig = DEFAULT_CONFIG,
) -> float:
    """Return the SNR estimate (dB) over the last ``history_range`` packets.

    Parameters
    ----------
    history : sequence of ReceptionRecord
        Reception history, oldest first.
    config : AdrConfig
        Selects the gateway and history reductions.

    Returns
    -------
    float
        Maximum or mean SNR of the window. The maximum never drops below
        :func:`snr_floor`; an empty window yields the floor.
    """

    snrs = record_snrs(history, config)
    floor = snr_floor(config)
    if snrs.size == 0:
        return floor
    if len(history) < config.history_range:
        logger.debug(
            "estimate_snr: only %d of %d packets available.",
            len(history),
            config.history_range,
        )
    if config.history_reduction is HistoryReduction.MAX:
        return float(max(floor, snrs.max()))
    return float(snrs.mean())


__all__ = [
    "estimate_snr",
    "power_to_snr",
    "received_power",
    "record_snrs",
    "snr_floor",
]
