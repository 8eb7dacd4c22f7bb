"""Network-server ADR: ``LinkADRReq`` generation before each reply."""

from __future__ import annotations

import logging

from .config import AdrConfig, DEFAULT_CONFIG
from .estimator import estimate_snr
from .lorawan import LinkAdrReq, MType, sf_to_dr
from .network_controller import NetworkControllerComponent
from .planner import plan_adjustment
from .status import EndDeviceStatus, NetworkStatus, UplinkFrame

logger = logging.getLogger(__name__)


def build_command(
    data_rate: int, tx_power: float, config: AdrConfig = DEFAULT_CONFIG
) -> LinkAdrReq:
    """Package the new rate and power with the configured channels."""

    return LinkAdrReq(
        data_rate,
        tx_power,
        enabled_channels=config.enabled_channels,
        repetitions=config.repetitions,
    )


class AdrComponent(NetworkControllerComponent):
    """Adapt data rate and transmit power of devices that request ADR."""

    def __init__(self, config: AdrConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def on_received_packet(
        self,
        uplink: UplinkFrame,
        status: EndDeviceStatus,
        network_status: NetworkStatus,
    ) -> None:
        # Decisions wait for the reply so that every gateway has reported
        logger.debug(
            "AdrComponent: uplink %d from %#010x (ADR=%s).",
            uplink.fcnt,
            status.dev_addr,
            uplink.adr,
        )

    def should_run(self, status: EndDeviceStatus) -> bool:
        """Return ``True`` when a rate/power decision is due for ``status``."""

        uplink = status.last_uplink
        if uplink is None or not uplink.adr:
            return False
        if len(status.received_packets) < self.config.history_range:
            logger.debug(
                "AdrComponent: not enough packets received by %#010x (%d/%d).",
                status.dev_addr,
                len(status.received_packets),
                self.config.history_range,
            )
            return False
        return True

    def decide(self, status: EndDeviceStatus) -> tuple[int, float]:
        """Return the proposed ``(data_rate, tx_power)`` for ``status``."""

        snr = estimate_snr(status.received_packets, self.config)
        sf, power = plan_adjustment(
            snr, status.spreading_factor, status.tx_power, self.config
        )
        logger.debug(
            "AdrComponent: %#010x SNR=%.2f dB, SF%d/%g dBm -> SF%d/%g dBm.",
            status.dev_addr,
            snr,
            status.spreading_factor,
            status.tx_power,
            sf,
            power,
        )
        return sf_to_dr(sf), power

    def before_sending_reply(
        self, status: EndDeviceStatus, network_status: NetworkStatus
    ) -> LinkAdrReq | None:
        if not self.should_run(status):
            return None

        status.reply.needs_reply = True
        data_rate, tx_power = self.decide(status)
        command = build_command(data_rate, tx_power, self.config)
        logger.debug(
            "AdrComponent: sending LinkAdrReq with DR=%d and TP=%g dBm.",
            data_rate,
            tx_power,
        )
        status.reply.frame_header.add_command(command)
        status.reply.frame_header.set_as_downlink()
        status.reply.mac_header.mtype = MType.UNCONFIRMED_DATA_DOWN
        return command

    def on_failed_reply(
        self, status: EndDeviceStatus, network_status: NetworkStatus
    ) -> None:
        # TODO: choose between retrying, backing off the requested rate or
        # restoring the last acknowledged link settings.
        status.failed_adr_replies += 1
        logger.warning(
            "AdrComponent: reply to %#010x went unanswered (%d so far).",
            status.dev_addr,
            status.failed_adr_replies,
        )


__all__ = ["AdrComponent", "build_command"]
