# ADR decision logic of the network server
from .config import (
    AdrConfig,
    DEFAULT_CONFIG,
    GatewayReduction,
    HistoryReduction,
    REQUIRED_SNR,
    load_config,
)
from .lorawan import LinkAdrReq, MType, dr_to_sf, sf_to_dr, tx_power_index
from .status import (
    EndDeviceStatus,
    GatewayReception,
    NetworkStatus,
    ReceptionRecord,
    UplinkFrame,
)
from .estimator import estimate_snr, power_to_snr
from .planner import plan_adjustment
from .network_controller import NetworkController, NetworkControllerComponent
from .adr_component import AdrComponent, build_command

__all__ = [
    "AdrComponent",
    "AdrConfig",
    "DEFAULT_CONFIG",
    "EndDeviceStatus",
    "GatewayReception",
    "GatewayReduction",
    "HistoryReduction",
    "LinkAdrReq",
    "MType",
    "NetworkController",
    "NetworkControllerComponent",
    "NetworkStatus",
    "REQUIRED_SNR",
    "ReceptionRecord",
    "UplinkFrame",
    "build_command",
    "dr_to_sf",
    "estimate_snr",
    "load_config",
    "plan_adjustment",
    "power_to_snr",
    "sf_to_dr",
    "tx_power_index",
]
