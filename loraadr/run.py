"""Replay a reception trace through the ADR component.

The trace is a CSV file with one row per (uplink, gateway) pair::

    fcnt,gateway,rx_power_dbm
    1,0,-112.5
    1,1,-118.0
    2,0,-111.9

Rows are grouped by ``fcnt`` in ascending order to rebuild the reception
history of a single device, then one decision is taken as if a reply were
about to be sent.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import pandas as pd

from .controller.adr_component import AdrComponent
from .controller.config import GatewayReduction, HistoryReduction, load_config
from .controller.estimator import estimate_snr, record_snrs
from .controller.planner import required_snr
from .controller.status import (
    EndDeviceStatus,
    NetworkStatus,
    ReceptionRecord,
    UplinkFrame,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("fcnt", "gateway", "rx_power_dbm")
DEFAULT_DEV_ADDR = 0x26011BDA


def load_trace(path: str | Path) -> list[ReceptionRecord]:
    """Read a reception trace CSV into a list of records, oldest first."""

    df = pd.read_csv(path)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"trace is missing columns: {', '.join(missing)}")
    df = df.dropna(subset=list(REQUIRED_COLUMNS))
    records = []
    for fcnt, group in df.groupby("fcnt", sort=True):
        powers = {
            int(gw): float(p) for gw, p in zip(group["gateway"], group["rx_power_dbm"])
        }
        records.append(ReceptionRecord.from_powers(int(fcnt), powers))
    return records


def _ensure_sf(value: str) -> int:
    sf = int(value)
    if not 7 <= sf <= 12:
        raise argparse.ArgumentTypeError("spreading factor must be within 7..12")
    return sf


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run one ADR decision on a reception trace",
    )
    parser.add_argument("trace", type=Path, help="Reception trace CSV file")
    parser.add_argument(
        "--sf", type=_ensure_sf, default=12, help="Current spreading factor (default: 12)"
    )
    parser.add_argument(
        "--tx-power",
        type=float,
        default=14.0,
        help="Current transmit power in dBm (default: 14)",
    )
    parser.add_argument("--config", type=Path, help="ADR settings (INI or JSON)")
    parser.add_argument(
        "--gateway-reduction",
        choices=[r.value for r in GatewayReduction],
        help="Override the gateway power reduction",
    )
    parser.add_argument(
        "--history-reduction",
        choices=[r.value for r in HistoryReduction],
        help="Override the SNR history reduction",
    )
    parser.add_argument(
        "--no-adr",
        action="store_true",
        help="Treat the last uplink as not requesting ADR",
    )
    parser.add_argument("--plot", type=Path, help="Base path of the SNR figure")
    parser.add_argument(
        "--formats",
        default="png",
        help="Comma-separated figure formats (default: png)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    try:
        config = load_config(args.config)
        overrides = {}
        if args.gateway_reduction:
            overrides["gateway_reduction"] = GatewayReduction(args.gateway_reduction)
        if args.history_reduction:
            overrides["history_reduction"] = HistoryReduction(args.history_reduction)
        if overrides:
            config = replace(config, **overrides)
        records = load_trace(args.trace)
    except (OSError, ValueError) as exc:
        logger.error("Error: %s", exc)
        return 2

    network_status = NetworkStatus()
    status = network_status.add_device(
        EndDeviceStatus(DEFAULT_DEV_ADDR, args.sf, args.tx_power)
    )
    status.extend_history(records)
    last_fcnt = records[-1].fcnt if records else 0
    status.last_uplink = UplinkFrame(fcnt=last_fcnt, adr=not args.no_adr)

    component = AdrComponent(config)
    command = component.before_sending_reply(status, network_status)
    if command is None:
        logger.info(
            "No LinkADRReq: ADR %s, %d/%d packets in history.",
            "not requested" if args.no_adr else "requested",
            len(records),
            config.history_range,
        )
    else:
        snr = estimate_snr(status.received_packets, config)
        logger.info("Estimated SNR: %.2f dB", snr)
        logger.info(
            "LinkADRReq: DR=%d TP=%g dBm channels=%s nbtrans=%d payload=%s",
            command.data_rate,
            command.tx_power,
            ",".join(str(c) for c in command.enabled_channels),
            command.repetitions,
            command.to_bytes().hex(),
        )

    if args.plot is not None and records:
        from .utils.plotting import parse_formats, plot_snr_history, save_multi_format

        threshold = required_snr(args.sf, config) + config.margin_offset
        fig = plot_snr_history(
            record_snrs(records, config),
            threshold,
            None if command is None else estimate_snr(records, config),
            title=f"SF{args.sf}, {args.tx_power:g} dBm",
        )
        for path in save_multi_format(fig, args.plot, parse_formats(args.formats)):
            logger.info("Figure saved to %s", path)
        import matplotlib.pyplot as plt

        plt.close(fig)
    return 0


if __name__ == "__main__":
    sys.exit(main())
