"""Conversion of an SNR margin into spreading factor and power steps."""

from __future__ import annotations

import math

from .config import AdrConfig, DEFAULT_CONFIG, SF_RANGE
from .lorawan import sf_to_dr

# One SF step or one power step is worth 3 dB of margin
STEP_DB = 3.0


def required_snr(spreading_factor: int, config: AdrConfig = DEFAULT_CONFIG) -> float:
    """Demodulation threshold (dB) for ``spreading_factor``."""

    if not SF_RANGE[0] <= spreading_factor <= SF_RANGE[1]:
        raise ValueError(f"spreading factor {spreading_factor} outside 7..12")
    return config.required_snr[sf_to_dr(spreading_factor)]


def margin_steps(
    snr: float, spreading_factor: int, config: AdrConfig = DEFAULT_CONFIG
) -> int:
    """Signed number of 3 dB steps funded by the SNR margin."""

    margin = snr - required_snr(spreading_factor, config) - config.margin_offset
    return math.floor(margin / STEP_DB)


def plan_adjustment(
    snr: float,
    spreading_factor: int,
    tx_power: float,
    config: AdrConfig = DEFAULT_CONFIG,
) -> tuple[int, float]:
    """Return the ``(spreading_factor, tx_power)`` proposed for a device.

    Positive steps first lower the spreading factor down to ``min_sf`` and
    then cut the power by 3 dB down to ``min_tx_power``. Negative steps
    raise the power by 3 dB up to ``max_tx_power``; the spreading factor
    is never raised, devices back off on their own. Steps that cannot be
    applied are dropped.
    """

    steps = margin_steps(snr, spreading_factor, config)
    sf = spreading_factor
    power = tx_power

    while steps > 0 and sf > config.min_sf:
        sf -= 1
        steps -= 1
    while steps > 0 and power > config.min_tx_power:
        power = max(power - STEP_DB, config.min_tx_power)
        steps -= 1
    while steps < 0 and power < config.max_tx_power:
        power = min(power + STEP_DB, config.max_tx_power)
        steps += 1

    return sf, power


__all__ = ["STEP_DB", "margin_steps", "plan_adjustment", "required_snr"]
