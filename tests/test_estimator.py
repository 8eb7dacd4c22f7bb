import math

import pytest

from loraadr.controller.config import AdrConfig, GatewayReduction, HistoryReduction
from loraadr.controller.estimator import (
    estimate_snr,
    power_to_snr,
    received_power,
    record_snrs,
    snr_floor,
)
from loraadr.controller.status import ReceptionRecord

# SNR of a 0 dBm reception with the default bandwidth and noise figure
OFFSET = 174.0 - 10.0 * math.log10(125000) - 6.0


def _record(fcnt, *snrs):
    return ReceptionRecord.from_powers(
        fcnt, {gw: snr - OFFSET for gw, snr in enumerate(snrs)}
    )


def test_power_to_snr_formula():
    assert power_to_snr(0.0) == pytest.approx(OFFSET)
    assert power_to_snr(-120.0) == pytest.approx(-120.0 + 117.0309, abs=1e-4)
    config = AdrConfig(bandwidth=250000.0, noise_figure=3.0)
    expected = -120.0 + 174.0 - 10.0 * math.log10(250000) - 3.0
    assert power_to_snr(-120.0, config) == pytest.approx(expected)


def test_default_averages_gateways_and_history():
    history = [_record(i, 4.0, 8.0) for i in range(20)]
    assert estimate_snr(history) == pytest.approx(6.0)


def test_average_uses_only_latest_window():
    old = [_record(i, 40.0) for i in range(10)]
    recent = [_record(10 + i, float(i)) for i in range(20)]
    assert estimate_snr(old + recent) == pytest.approx(sum(range(20)) / 20)


def test_record_snrs_most_recent_first():
    history = [_record(i, float(i)) for i in range(25)]
    snrs = record_snrs(history)
    assert len(snrs) == 20
    assert snrs[0] == pytest.approx(24.0)
    assert snrs[-1] == pytest.approx(5.0)


def test_strongest_gateway_with_low_floor():
    config = AdrConfig(gateway_reduction=GatewayReduction.STRONGEST, floor_power=-200.0)
    history = [_record(i, -3.0, 5.0, 1.0) for i in range(20)]
    assert estimate_snr(history, config) == pytest.approx(5.0)


def test_strongest_gateway_never_below_min_tx_power_snr():
    config = AdrConfig(gateway_reduction=GatewayReduction.STRONGEST)
    history = [_record(i, -3.0, 5.0) for i in range(20)]
    assert estimate_snr(history, config) == pytest.approx(power_to_snr(2.0))
    assert snr_floor(config) == pytest.approx(power_to_snr(2.0))


def test_max_history_with_low_floor():
    config = AdrConfig(history_reduction=HistoryReduction.MAX, floor_power=-200.0)
    history = [_record(i, float(i % 7)) for i in range(20)]
    assert estimate_snr(history, config) == pytest.approx(6.0)


def test_max_history_floor():
    config = AdrConfig(history_reduction=HistoryReduction.MAX)
    history = [_record(i, -10.0) for i in range(20)]
    assert estimate_snr(history, config) == pytest.approx(snr_floor(config))


def test_policies_switch_independently():
    history = [_record(i, 0.0, 6.0) for i in range(19)] + [_record(19, 12.0, 18.0)]
    low_floor = dict(floor_power=-200.0)
    avg_avg = estimate_snr(history, AdrConfig(**low_floor))
    strong_avg = estimate_snr(
        history, AdrConfig(gateway_reduction="strongest", **low_floor)
    )
    avg_max = estimate_snr(history, AdrConfig(history_reduction="max", **low_floor))
    strong_max = estimate_snr(
        history,
        AdrConfig(gateway_reduction="strongest", history_reduction="max", **low_floor),
    )
    assert avg_avg == pytest.approx((19 * 3.0 + 15.0) / 20)
    assert strong_avg == pytest.approx((19 * 6.0 + 18.0) / 20)
    assert avg_max == pytest.approx(15.0)
    assert strong_max == pytest.approx(18.0)


def test_empty_history_returns_floor():
    assert estimate_snr([]) == pytest.approx(snr_floor())


def test_record_without_gateways_uses_floor_power():
    record = ReceptionRecord(1, {})
    assert received_power(record) == 2.0


def test_short_history_is_averaged_over_available_packets():
    history = [_record(i, 3.0) for i in range(5)]
    assert estimate_snr(history) == pytest.approx(3.0)
