from datetime import datetime, timedelta, timezone

import pytest

from pywwcp.entities import EntityKind
from pywwcp.exceptions import InvalidHistorySize
from pywwcp.projection import project_history, project_history_collection
from pywwcp.status import AdminStatusTypes, StatusAxis, StatusTypes

T0 = datetime(2020, 5, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def station(network):
    station = network.lookup("OP1*P1*S1")
    for i, value in enumerate([StatusTypes.Available, StatusTypes.Charging, StatusTypes.Available]):
        station.status.append(value, T0 + timedelta(minutes=i))
    return station


def test_history_is_newest_first_and_bounded(station):
    assert project_history(station, StatusAxis.OPERATIONAL, 2) == [
        {"timestamp": "2020-05-01T08:02:00.000Z", "status": "Available"},
        {"timestamp": "2020-05-01T08:01:00.000Z", "status": "Charging"},
    ]


def test_history_size_larger_than_retained(station):
    assert len(project_history(station, "status", 10)) == 3


def test_default_history_size_is_one(station):
    assert project_history(station, "status") == [{"timestamp": "2020-05-01T08:02:00.000Z", "status": "Available"}]


def test_axes_are_independent(station):
    assert project_history(station, StatusAxis.ADMIN, 5) == []
    station.admin_status.append(AdminStatusTypes.Operational, T0)
    assert project_history(station, "adminStatus", 5) == [{"timestamp": "2020-05-01T08:00:00.000Z",
                                                            "status": "Operational"}]


@pytest.mark.parametrize("size", [0, -1, "abc", 1.5, None, True])
def test_invalid_history_size_is_rejected(station, size):
    with pytest.raises(InvalidHistorySize):
        project_history(station, "status", size)


def test_invalid_history_size_is_rejected_before_projection():
    with pytest.raises(InvalidHistorySize):
        project_history_collection(None, "status", 0)


def test_history_collection(network, station):
    result = project_history_collection(network.entities(EntityKind.STATION), "status", 1, skip=0, take=2)
    assert result.total_count == 3
    assert list(result.content) == ["OP1*P1*S1", "OP1*P2*S1"]
    assert result.content["OP1*P1*S1"] == [{"timestamp": "2020-05-01T08:02:00.000Z", "status": "Available"}]
    assert result.content["OP1*P2*S1"] == []


def test_history_collection_pagination(network):
    result = project_history_collection(network.entities(EntityKind.POOL), StatusAxis.ADMIN, 1, skip=2)
    assert list(result.content) == ["OP2*P1"]
    assert result.total_count == 3
