import pytest

from loraadr.controller.lorawan import (
    LINK_ADR_REQ_CID,
    LinkAdrReq,
    MType,
    channel_mask,
    tx_power_index,
)


@pytest.mark.parametrize(
    "power,index",
    [(20, 0), (16, 0), (14, 1), (12, 2), (11, 3), (8, 4), (6, 5), (5, 6), (2, 7)],
)
def test_tx_power_index(power, index):
    assert tx_power_index(power) == index


def test_channel_mask():
    assert channel_mask((1, 2, 3)) == 0b1110
    assert channel_mask(()) == 0
    with pytest.raises(ValueError):
        channel_mask((16,))


def test_link_adr_req_encoding():
    payload = LinkAdrReq(3, 14.0).to_bytes()
    assert payload == bytes([LINK_ADR_REQ_CID, 0x31, 0x0E, 0x00, 0x01])


def test_link_adr_req_rejects_wide_data_rate():
    with pytest.raises(ValueError):
        LinkAdrReq(16, 14.0).to_bytes()


def test_mtype_values():
    assert MType.UNCONFIRMED_DATA_DOWN == 3
    assert MType.CONFIRMED_DATA_UP == 4


@pytest.mark.parametrize("repetitions", [0, 16])
def test_link_adr_req_rejects_repetitions_outside_nibble(repetitions):
    with pytest.raises(ValueError):
        LinkAdrReq(3, 14.0, repetitions=repetitions).to_bytes()


def test_link_adr_req_encodes_max_repetitions():
    assert LinkAdrReq(3, 14.0, repetitions=15).to_bytes()[-1] == 15
