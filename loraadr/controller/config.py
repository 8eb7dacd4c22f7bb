"""Immutable ADR configuration and helpers to load it from disk.

The defaults reproduce the EU868 settings of the network-server ADR
component: a 20 packet window, averaged SNR and a 10 dB device margin.
Files may be written either as JSON objects or as INI files with an
``[adr]`` section, so that deployments can try alternative margins or
reduction policies without touching the code.
"""

from __future__ import annotations

import configparser
import json
import math
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Tuple

# Required SNR (dB) for rate indices 0..5, i.e. SF7..SF12
REQUIRED_SNR: Tuple[float, ...] = (-20.0, -17.5, -15.0, -12.5, -10.0, -7.5)

# Lowest and highest spreading factors usable on a 125 kHz channel
SF_RANGE = (7, 12)


class GatewayReduction(str, Enum):
    """How the powers reported by several gateways become one value."""

    STRONGEST = "strongest"
    AVERAGE = "average"


class HistoryReduction(str, Enum):
    """How the per-packet SNR values of the window become one estimate."""

    MAX = "max"
    AVERAGE = "average"


@dataclass(frozen=True)
class AdrConfig:
    """Constants driving one ADR decision."""

    history_range: int = 20
    gateway_reduction: GatewayReduction = GatewayReduction.AVERAGE
    history_reduction: HistoryReduction = HistoryReduction.AVERAGE
    min_sf: int = 7
    min_tx_power: float = 2.0
    max_tx_power: float = 14.0
    margin_offset: float = 10.0
    bandwidth: float = 125000.0
    noise_figure: float = 6.0
    required_snr: Tuple[float, ...] = REQUIRED_SNR
    enabled_channels: Tuple[int, ...] = (1, 2, 3)
    repetitions: int = 1
    floor_power: float | None = None

    def __post_init__(self) -> None:
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(
            self, "gateway_reduction", GatewayReduction(self.gateway_reduction)
        )
        object.__setattr__(
            self, "history_reduction", HistoryReduction(self.history_reduction)
        )
        object.__setattr__(
            self, "required_snr", tuple(float(v) for v in self.required_snr)
        )
        object.__setattr__(
            self, "enabled_channels", tuple(int(c) for c in self.enabled_channels)
        )

        if isinstance(self.history_range, bool) or not isinstance(
            self.history_range, int
        ):
            raise TypeError("history_range must be an integer")
        if self.history_range <= 0:
            raise ValueError("history_range must be > 0")
        if not (self.bandwidth > 0 and math.isfinite(self.bandwidth)):
            raise ValueError("bandwidth must be a positive finite number")
        if not SF_RANGE[0] <= self.min_sf <= SF_RANGE[1]:
            raise ValueError("min_sf must lie within 7..12")
        if self.min_tx_power > self.max_tx_power:
            raise ValueError("min_tx_power must be <= max_tx_power")
        if len(self.required_snr) != SF_RANGE[1] - SF_RANGE[0] + 1:
            raise ValueError("required_snr must contain 6 values (SF7 to SF12)")
        if not 1 <= self.repetitions <= 15:
            raise ValueError("repetitions must lie within 1..15")
        if any(not 0 <= ch < 16 for ch in self.enabled_channels):
            raise ValueError("enabled channel indices must lie in 0..15")

    @property
    def snr_floor_power(self) -> float:
        """Power (dBm) below which reductions never go."""

        if self.floor_power is None:
            return float(self.min_tx_power)
        return float(self.floor_power)


DEFAULT_CONFIG = AdrConfig()


def _split_values(raw: str) -> list[str]:
    return [x for x in raw.replace(",", " ").split() if x]


def _coerce(name: str, raw: Any) -> Any:
    """Convert ``raw`` to the type expected by the ``AdrConfig`` field."""

    if name in {"history_range", "min_sf", "repetitions"}:
        if isinstance(raw, bool):
            raise TypeError(f"{name} must be an integer, not bool")
        if isinstance(raw, float):
            if not raw.is_integer():
                raise ValueError(f"{name} must be an integer, got {raw}")
            return int(raw)
        return int(raw)
    if name in {"required_snr"}:
        values = _split_values(raw) if isinstance(raw, str) else raw
        return tuple(float(v) for v in values)
    if name == "enabled_channels":
        values = _split_values(raw) if isinstance(raw, str) else raw
        return tuple(int(v) for v in values)
    if name in {"gateway_reduction", "history_reduction"}:
        return str(raw).strip().lower()
    if name == "floor_power":
        if raw is None or (isinstance(raw, str) and raw.strip().lower() == "none"):
            return None
        return float(raw)
    return float(raw)


def config_from_mapping(values: dict[str, Any]) -> AdrConfig:
    """Build an :class:`AdrConfig` from a plain mapping.

    Unknown keys raise :class:`ValueError` so that typos in configuration
    files do not go unnoticed.
    """

    known = {f.name for f in fields(AdrConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"unknown ADR settings: {', '.join(sorted(unknown))}")
    kwargs = {name: _coerce(name, raw) for name, raw in values.items()}
    return AdrConfig(**kwargs)


def load_config(path: str | Path | None) -> AdrConfig:
    """Load an ADR configuration from *path*.

    ``path`` may point to a JSON file holding an object or to an INI file
    with an ``[adr]`` section. Missing keys keep their default value. When
    *path* is ``None`` the default configuration is returned.
    """

    if path is None:
        return DEFAULT_CONFIG

    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        with p.open("r", encoding="utf8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("JSON ADR configuration must be an object")
        return config_from_mapping(data)

    if suffix in {".ini", ".cfg"}:
        cp = configparser.ConfigParser()
        if not cp.read(p, encoding="utf8"):
            raise FileNotFoundError(p)
        if not cp.has_section("adr"):
            return DEFAULT_CONFIG
        return config_from_mapping(dict(cp.items("adr")))

    raise ValueError("Unsupported file format; use JSON or INI")


__all__ = [
    "AdrConfig",
    "DEFAULT_CONFIG",
    "GatewayReduction",
    "HistoryReduction",
    "REQUIRED_SNR",
    "SF_RANGE",
    "config_from_mapping",
    "load_config",
]
