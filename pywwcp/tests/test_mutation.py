from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from pywwcp.exceptions import InvalidIdentifier, InvalidStatusRequest, InvalidStatusValue, MutationConflict, \
    UnknownIdentifier
from pywwcp.mutation import StatusFanout
from pywwcp.projection import project_history
from pywwcp.status import AdminStatusTypes, StatusAxis
from pywwcp.upstream import CallbackUpstreamNotifier

T1 = datetime(2017, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fanout(network):
    return StatusFanout(network, max_retries=2)


def test_set_admin_status_of_pool(network, fanout):
    assert fanout.set_status("OP1*P1", StatusAxis.ADMIN, "OutOfService", T1) == 1
    pool = network.lookup("OP1*P1")
    assert project_history(pool, StatusAxis.ADMIN, 2) == [
        {"timestamp": "2017-01-31T12:00:00.000Z", "status": "OutOfService"}
    ]
    # Only the owning entity is touched
    assert len(network.lookup("OP1*P2").admin_status) == 0
    assert len(network.lookup("OP1").admin_status) == 0


def test_set_status_of_operator_uses_network_as_container(network, fanout):
    assert fanout.set_status("OP2", "status", "Available") == 1
    assert network.lookup("OP2").status.current.value.value == "Available"


def test_unknown_child_is_an_error(fanout):
    with pytest.raises(UnknownIdentifier):
        fanout.set_status("OP1*P9", "adminStatus", "OutOfService")
    with pytest.raises(UnknownIdentifier):
        fanout.set_status("OP9*P1*S1*E1", "status", "Available")


def test_malformed_input(fanout):
    with pytest.raises(InvalidIdentifier):
        fanout.set_status("OP1**P1", "status", "Available")
    with pytest.raises(InvalidStatusValue):
        fanout.set_status("OP1", "status", "Charging")
    with pytest.raises(InvalidStatusValue):
        fanout.set_status("OP1*P1*S1*E1", "adminStatus", "Charging")
    with pytest.raises(InvalidStatusRequest):
        fanout.set_status("OP1*P1", "sideways", "Available")
    with pytest.raises(InvalidStatusRequest):
        fanout.set_status("OP1*P1", "status", "Available", "yesterday-ish")


def test_timestamp_text_is_parsed(network, fanout):
    fanout.set_status("OP1*P1*S1*E1", "status", "Charging", "2017-01-31T13:00:00+01:00")
    assert network.lookup("OP1*P1*S1*E1").status.current.timestamp == T1


def test_upstream_is_notified(network):
    callback = MagicMock()
    fanout = StatusFanout(network, upstream=CallbackUpstreamNotifier(callback))
    fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    callback.assert_called_once()
    event = callback.call_args[0][0]
    assert event.to_json() == {"@id": "OP1*P1", "kind": "pool", "axis": "adminStatus",
                               "timestamp": "2017-01-31T12:00:00.000Z", "newstatus": "OutOfService"}


def test_upstream_disabled(network):
    callback = MagicMock()
    fanout = StatusFanout(network, upstream=CallbackUpstreamNotifier(callback), send_upstream=False)
    fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    callback.assert_not_called()


def test_upstream_failure_keeps_local_append(network):
    callback = MagicMock(side_effect=RuntimeError("queue down"))
    fanout = StatusFanout(network, upstream=CallbackUpstreamNotifier(callback))
    assert fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1) == 1
    assert network.lookup("OP1*P1").admin_status.current.value == AdminStatusTypes.OutOfService


def test_busy_history_is_retried(network, fanout):
    history = network.lookup("OP1*P1").admin_status
    real_append = history.append
    attempts = []

    def busy_once(value, timestamp):
        attempts.append(value)
        if len(attempts) == 1:
            raise MutationConflict("Unable to acquire history lock within the specified timeout.")
        return real_append(value, timestamp)

    with patch.object(history, "append", side_effect=busy_once) as append:
        assert fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1) == 1
    assert append.call_count == 2
    assert history.current.value == AdminStatusTypes.OutOfService


def test_exhausted_retries_raise_mutation_conflict(network, fanout):
    history = network.lookup("OP1*P1").admin_status
    busy = MutationConflict("Unable to acquire history lock within the specified timeout.")
    with patch.object(history, "append", side_effect=busy) as append:
        with pytest.raises(MutationConflict):
            fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    assert append.call_count == 3


def test_lock_timeout_is_a_mutation_conflict(network, fanout):
    history = network.lookup("OP1*P1").admin_status
    history.timeout = 0.01
    history.api_lock.acquire()
    try:
        with pytest.raises(MutationConflict):
            fanout.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    finally:
        history.api_lock.release()
    assert len(history) == 0


class TestApplyStatusRequest:
    def test_ok(self, network, fanout):
        reply = fanout.apply_status_request("OP1*P1", "adminStatus", {"newstatus": "OutOfService"})
        assert reply.ok
        assert reply.applied_count == 1
        assert reply.to_json() == {"description": "OK"}

    def test_json_text_with_timestamp(self, network, fanout):
        reply = fanout.apply_status_request("OP1*P1", "status",
                                            '{"newstatus": "Available", "timestamp": "2017-01-31T12:00:00Z"}')
        assert reply.ok
        assert network.lookup("OP1*P1").status.current.timestamp == T1

    @pytest.mark.parametrize("body", [{}, {"newstatus": ""}, "not json", {"newstatus": 42}])
    def test_malformed_body(self, fanout, body):
        reply = fanout.apply_status_request("OP1*P1", "adminStatus", body)
        assert not reply.ok
        assert reply.error_kind == "InvalidStatusRequest"
        assert "description" in reply.to_json()

    def test_unknown_identifier(self, fanout):
        reply = fanout.apply_status_request("OP1*P9", "adminStatus", {"newstatus": "OutOfService"})
        assert not reply.ok
        assert reply.error_kind == "UnknownIdentifier"
        assert reply.to_json() == {"description": "Unknown pool 'OP1*P9'!"}

    def test_invalid_status(self, fanout):
        reply = fanout.apply_status_request("OP1*P1", "adminStatus", {"newstatus": "Exploded"})
        assert reply.error_kind == "InvalidStatusValue"
