import pytest

from app.services.client_state import ClientState
from tests.conftest import FakeClock


def test_defaults_to_first_known_model():
    state = ClientState(["x", "y"])
    assert state.active_model == "x"


def test_unknown_initial_model_is_rejected():
    with pytest.raises(ValueError):
        ClientState(["x"], active_model="z")


def test_empty_model_list_is_rejected():
    with pytest.raises(ValueError):
        ClientState([])


def test_set_active_model_ignores_unknown():
    state = ClientState(["x", "y"])
    assert state.set_active_model("nope") is False
    assert state.active_model == "x"


def test_reserve_slot_spaces_back_to_back_callers():
    clock = FakeClock()
    state = ClientState(["x"], clock=clock)

    assert state.reserve_request_slot(3.0) == 0.0
    assert state.reserve_request_slot(3.0) == pytest.approx(3.0)
    # Second caller booked t+3, so a third arriving now waits until t+6.
    assert state.reserve_request_slot(3.0) == pytest.approx(6.0)
    assert state.request_count == 3


def test_request_count_resets_after_a_minute():
    clock = FakeClock()
    state = ClientState(["x"], clock=clock)
    state.reserve_request_slot(3.0)
    state.reserve_request_slot(3.0)

    clock.advance(120.0)
    assert state.reserve_request_slot(3.0) == 0.0
    assert state.request_count == 1
