"""LoRaWAN constants and the ``LinkADRReq`` MAC command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

LINK_ADR_REQ_CID = 0x03


class MType(IntEnum):
    """Message types carried in the MAC header (LoRaWAN 1.0)."""

    JOIN_REQUEST = 0
    JOIN_ACCEPT = 1
    UNCONFIRMED_DATA_UP = 2
    UNCONFIRMED_DATA_DOWN = 3
    CONFIRMED_DATA_UP = 4
    CONFIRMED_DATA_DOWN = 5


def sf_to_dr(sf: int) -> int:
    """Rate index used by the ADR algorithm for ``sf`` (SF7 -> 0, SF12 -> 5)."""
    return sf - 7


def dr_to_sf(dr: int) -> int:
    return dr + 7


def tx_power_index(tx_power: float) -> int:
    """Return the ``TXPower`` field value for ``tx_power`` (dBm)."""

    for index, threshold in enumerate((16, 14, 12, 10, 8, 6, 4)):
        if tx_power >= threshold:
            return index
    return 7


def channel_mask(channels) -> int:
    """Build the 16-bit ``ChMask`` with one bit per enabled channel index."""

    mask = 0
    for ch in channels:
        if not 0 <= ch < 16:
            raise ValueError(f"channel index {ch} outside 0..15")
        mask |= 1 << ch
    return mask


@dataclass(frozen=True)
class LinkAdrReq:
    """Rate/power command queued in a downlink reply.

    ``data_rate`` follows the ADR rate index and ``tx_power`` is expressed
    in dBm; both are converted to the over-the-air fields by
    :meth:`to_bytes`.
    """

    data_rate: int
    tx_power: float
    enabled_channels: Tuple[int, ...] = (1, 2, 3)
    repetitions: int = 1

    @property
    def ch_mask(self) -> int:
        return channel_mask(self.enabled_channels)

    def to_bytes(self) -> bytes:
        if not 0 <= self.data_rate <= 0x0F:
            raise ValueError("data_rate must fit in 4 bits")
        dr_power = (self.data_rate << 4) | tx_power_index(self.tx_power)
        if not 1 <= self.repetitions <= 0x0F:
            raise ValueError("repetitions must fit in 4 bits")
        redundancy = self.repetitions
        return (
            bytes([LINK_ADR_REQ_CID, dr_power])
            + self.ch_mask.to_bytes(2, "little")
            + bytes([redundancy])
        )


__all__ = [
    "LINK_ADR_REQ_CID",
    "LinkAdrReq",
    "MType",
    "channel_mask",
    "dr_to_sf",
    "sf_to_dr",
    "tx_power_index",
]
