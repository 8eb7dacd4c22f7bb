"""Dispatch of network-server events to the registered components."""

from __future__ import annotations

import logging
from typing import List

from .status import EndDeviceStatus, NetworkStatus, UplinkFrame

logger = logging.getLogger(__name__)


class NetworkControllerComponent:
    """Base class for logic plugged into :class:`NetworkController`.

    Subclasses override the hooks they care about; the defaults do nothing.
    """

    def on_received_packet(
        self,
        uplink: UplinkFrame,
        status: EndDeviceStatus,
        network_status: NetworkStatus,
    ) -> None:
        pass

    def before_sending_reply(
        self, status: EndDeviceStatus, network_status: NetworkStatus
    ) -> None:
        pass

    def on_failed_reply(
        self, status: EndDeviceStatus, network_status: NetworkStatus
    ) -> None:
        pass


class NetworkController:
    """Forward server events to every installed component, in order."""

    def __init__(self, network_status: NetworkStatus | None = None) -> None:
        self.network_status = network_status or NetworkStatus()
        self.components: List[NetworkControllerComponent] = []

    def install(self, component: NetworkControllerComponent) -> None:
        self.components.append(component)

    def on_new_packet(self, dev_addr: int, uplink: UplinkFrame) -> None:
        status = self.network_status.get_end_device_status(dev_addr)
        status.last_uplink = uplink
        for component in self.components:
            component.on_received_packet(uplink, status, self.network_status)

    def before_sending_reply(self, dev_addr: int) -> EndDeviceStatus:
        """Let components fill the pending reply of ``dev_addr``."""
        status = self.network_status.get_end_device_status(dev_addr)
        for component in self.components:
            component.before_sending_reply(status, self.network_status)
        return status

    def on_failed_reply(self, dev_addr: int) -> None:
        status = self.network_status.get_end_device_status(dev_addr)
        logger.debug("NetworkController: reply to %#010x failed.", dev_addr)
        for component in self.components:
            component.on_failed_reply(status, self.network_status)


__all__ = ["NetworkController", "NetworkControllerComponent"]
