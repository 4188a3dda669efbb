import pytest

from protosim.arbitration import ArbitrationError, arbitrate, resolve_arbitration
from protosim.decode import decode_i2c
from protosim.frames import FrameType, MasterState, wired_and
from protosim.views import arbitration_view


def test_arbitration_0x21_vs_0x25_b_loses_at_bit_2():
    result = arbitrate(0x21, 0x25)
    assert result.lost_at == (None, 2)
    assert result.winners == (0,)
    assert not result.tied
    assert set(result.states(0)) == {MasterState.ACTIVE}

    states_b = result.states(1)
    first_lost = states_b.index(MasterState.LOST)
    assert result.trace.frames[first_lost].label == "A2"
    assert all(s is MasterState.ACTIVE for s in states_b[:first_lost])
    assert all(s is MasterState.LOST for s in states_b[first_lost:])


def test_arbitration_loser_releases_from_next_bit():
    result = arbitrate(0x21, 0x25)
    view = arbitration_view(result)
    # 0x25 proposes 0 on bit 1, but it already lost on bit 2.
    a1 = [v for v in view if v.frame.label == "A1"]
    assert all(v.sda_b == 1 for v in a1)
    assert all(v.sda_a == 0 and v.frame.sda == 0 for v in a1)
    # On the losing bit itself it still drives the 1 it proposed.
    a2 = [v for v in view if v.frame.label == "A2"]
    assert all(v.sda_a == 0 and v.sda_b == 1 and v.frame.sda == 0 for v in a2)


def test_arbitration_swapped_masters():
    result = arbitrate(0x25, 0x21)
    assert result.lost_at == (2, None)
    assert result.winners == (1,)


def test_arbitration_identical_addresses_tie():
    result = arbitrate(0x21, 0x21)
    assert result.tied
    assert result.lost_at == (None, None)
    for master in (0, 1):
        assert set(result.states(master)) == {MasterState.ACTIVE}


def test_arbitration_masks_addresses():
    assert arbitrate(0xA1, 0x21).tied


def test_arbitration_bus_is_wired_and_of_drivers():
    result = arbitrate(0x4B, 0x47)
    for frame, row in zip(result.trace.frames, result.drives):
        levels = [d.level for d in row]
        if frame.type is FrameType.ACK:
            assert levels == [1, 1]
            assert frame.sda == 0
        else:
            assert frame.sda == wired_and(levels)


def test_arbitration_lost_state_is_monotonic():
    result = arbitrate(0x70, 0x0F)
    for master in (0, 1):
        states = result.states(master)
        if MasterState.LOST in states:
            first = states.index(MasterState.LOST)
            assert all(s is MasterState.LOST for s in states[first:])


@pytest.mark.parametrize(
    "address_a,address_b",
    [(0x21, 0x25), (0x00, 0x7F), (0x7F, 0x00), (0x50, 0x51), (0x3C, 0x1C), (0x12, 0x13), (0x40, 0x3F)],
)
def test_arbitration_lower_address_wins(address_a, address_b):
    result = arbitrate(address_a, address_b)
    loser = 1 if address_a < address_b else 0
    assert result.winners == (1 - loser,)
    assert result.lost_at[loser] == (address_a ^ address_b).bit_length() - 1
    assert decode_i2c(result.trace).address == min(address_a, address_b)


def test_arbitration_trace_shape():
    result = arbitrate(0x21, 0x25)
    frames = result.trace.frames
    assert (frames[0].sda, frames[0].scl) == (1, 1)
    assert (frames[-1].sda, frames[-1].scl) == (1, 1)
    assert [f.index for f in frames] == list(range(len(frames)))
    assert all(f.duration > 0 for f in frames)
    assert len(result.drives) == len(frames)
    transfer = decode_i2c(result.trace)
    assert transfer.rw == 0
    assert transfer.acks == (True,)
    assert transfer.data is None


def test_arbitration_is_deterministic():
    assert arbitrate(0x21, 0x25) == arbitrate(0x21, 0x25)


def test_three_masters():
    result = resolve_arbitration([0x30, 0x21, 0x25])
    assert result.lost_at == (4, None, 2)
    assert result.winners == (1,)


def test_idle_master_never_drives():
    result = resolve_arbitration([0x21, None])
    assert set(result.states(1)) == {MasterState.IDLE}
    assert all(row[1].level == 1 for row in result.drives)
    assert result.winners == (0,)
    assert decode_i2c(result.trace).address == 0x21


def test_arbitration_needs_a_participant():
    with pytest.raises(ArbitrationError):
        resolve_arbitration([None, None])
    with pytest.raises(ArbitrationError):
        resolve_arbitration([])


def test_arbitration_view_fields():
    result = arbitrate(0x21, 0x21)
    view = arbitration_view(result)
    assert len(view) == len(result.trace)
    assert view[0].master_a_state is MasterState.ACTIVE
    assert view[0].master_b_state is MasterState.ACTIVE
    assert (view[1].sda_a, view[1].sda_b) == (0, 0)


@pytest.mark.parametrize("addresses", [(0x21, 0x25), (0x25, 0x21), (0x30, 0x21, 0x25), (0x00, 0x7F)])
def test_arbitration_loser_drives_released_for_rest_of_trace(addresses):
    result = resolve_arbitration(list(addresses))
    frames = result.trace.frames
    for master, lost_at in enumerate(result.lost_at):
        if lost_at is None:
            continue
        label = f"A{lost_at}"
        last = max(f.index for f in frames if f.label == label)
        rest = range(last + 1, len(frames))
        assert {frames[i].label for i in rest} >= {"W", "Stop"}
        assert all(result.drives[i][master].level == 1 for i in rest)
        assert all(result.drives[i][master].state is MasterState.LOST for i in rest)
