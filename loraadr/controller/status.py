"""In-memory device and network status read by the controller components.

These objects stand for the bookkeeping a network server keeps per
end device. Components borrow them for the duration of one call; the
caller is responsible for serialising access to a given device.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from .lorawan import MType


@dataclass(frozen=True)
class GatewayReception:
    """Reception of one uplink by one gateway."""

    gateway_id: int
    rx_power: float


@dataclass(frozen=True)
class ReceptionRecord:
    """One uplink as heard by every gateway that received it."""

    fcnt: int
    gateways: Mapping[int, GatewayReception] = field(default_factory=dict)

    @classmethod
    def from_powers(cls, fcnt: int, powers: Mapping[int, float]) -> "ReceptionRecord":
        """Build a record from a ``{gateway_id: rx_power}`` mapping."""
        return cls(
            fcnt,
            {gw: GatewayReception(gw, float(p)) for gw, p in powers.items()},
        )

    def rx_powers(self) -> List[float]:
        return [rx.rx_power for rx in self.gateways.values()]


@dataclass
class UplinkFrame:
    """Fields of the last uplink frame header relevant to ADR."""

    fcnt: int = 0
    adr: bool = False
    adr_ack_req: bool = False


@dataclass
class FrameHeader:
    """Direction and MAC commands of the frame being prepared."""

    uplink: bool = True
    commands: list = field(default_factory=list)

    def set_as_downlink(self) -> None:
        self.uplink = False

    def add_command(self, command) -> None:
        self.commands.append(command)


@dataclass
class MacHeader:
    """Message type of the reply; ``None`` until a component sets it."""

    mtype: MType | None = None


@dataclass
class Reply:
    """Downlink being prepared for a device."""

    needs_reply: bool = False
    frame_header: FrameHeader = field(default_factory=FrameHeader)
    mac_header: MacHeader = field(default_factory=MacHeader)


class EndDeviceStatus:
    """Server-side view of one end device."""

    def __init__(
        self,
        dev_addr: int,
        spreading_factor: int = 12,
        tx_power: float = 14.0,
        *,
        max_history: int | None = None,
    ) -> None:
        if max_history is not None and max_history <= 0:
            raise ValueError("max_history must be > 0 when provided")
        self.dev_addr = dev_addr
        self.spreading_factor = spreading_factor
        self.tx_power = tx_power
        self.max_history = max_history
        self.received_packets: List[ReceptionRecord] = []
        self.last_uplink: UplinkFrame | None = None
        self.reply = Reply()
        self.failed_adr_replies = 0

    def record_reception(
        self, record: ReceptionRecord, uplink: UplinkFrame | None = None
    ) -> None:
        """Append ``record`` to the history, evicting the oldest entries."""

        self.received_packets.append(record)
        if self.max_history is not None and len(self.received_packets) > self.max_history:
            del self.received_packets[: len(self.received_packets) - self.max_history]
        if uplink is not None:
            self.last_uplink = uplink

    def extend_history(self, records: Iterable[ReceptionRecord]) -> None:
        for record in records:
            self.record_reception(record)

    def reset_reply(self) -> None:
        """Discard the pending reply once it has been handed to a gateway."""
        self.reply = Reply()

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"EndDeviceStatus(dev_addr={self.dev_addr:#010x}, "
            f"sf={self.spreading_factor}, tx_power={self.tx_power})"
        )


class NetworkStatus:
    """Registry of the devices known to the network server."""

    def __init__(self) -> None:
        self.end_device_statuses: Dict[int, EndDeviceStatus] = {}

    def add_device(self, status: EndDeviceStatus) -> EndDeviceStatus:
        if status.dev_addr in self.end_device_statuses:
            raise ValueError(f"device {status.dev_addr:#010x} already registered")
        self.end_device_statuses[status.dev_addr] = status
        return status

    def get_end_device_status(self, dev_addr: int) -> EndDeviceStatus:
        try:
            return self.end_device_statuses[dev_addr]
        except KeyError:
            raise KeyError(f"unknown device {dev_addr:#010x}") from None

    def __contains__(self, dev_addr: int) -> bool:
        return dev_addr in self.end_device_statuses

    def __len__(self) -> int:
        return len(self.end_device_statuses)


__all__ = [
    "EndDeviceStatus",
    "FrameHeader",
    "GatewayReception",
    "MacHeader",
    "NetworkStatus",
    "ReceptionRecord",
    "Reply",
    "UplinkFrame",
]
