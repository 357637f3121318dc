from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

import pywwcp
from pywwcp import RoamingNetworkAPI
from pywwcp.exceptions import InvalidHistorySize, InvalidIdentifier, InvalidQueryOptions, UnknownIdentifier
from pywwcp.models import QueryOptions
from pywwcp.upstream import CallbackUpstreamNotifier, HTTPUpstreamNotifier

T1 = datetime(2017, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


def test_version():
    assert pywwcp.__version__ == "%d.%d.%d" % pywwcp.version_tuple


def test_network_info(api):
    out = api.network_info()
    assert out["@id"] == "Prod"
    assert out["@context"].endswith("/RoamingNetwork")
    assert out["chargingStationOperatorIds"] == ["OP1", "OP2"]
    assert out["chargingPoolIds"] == ["OP1*P1", "OP1*P2", "OP2*P1"]


def test_network_info_expanded_operators_subsume_lower_levels(api):
    out = api.network_info(expand="operators")
    assert [o["@id"] for o in out["chargingStationOperators"]] == ["OP1", "OP2"]
    assert "roamingNetworkId" not in out["chargingStationOperators"][0]
    for key in ("chargingPoolIds", "chargingStationIds", "EVSEIds"):
        assert key not in out


def test_operators_scenario(api):
    result = api.operators(expand=["chargingpools"])
    assert result.total_count == 2
    pool = result.content[0]["chargingPools"][0]
    assert pool["chargingStationIds"] == ["OP1*P1*S1"]
    assert result.headers() == {"X-ExpectedTotalNumberOfItems": "2"}


def test_collections_of_one_operator(api):
    result = api.pools("OP1", take=1)
    assert [p["@id"] for p in result.content] == ["OP1*P1"]
    assert result.total_count == 2
    assert api.stations("OP2").total_count == 1
    assert api.evses().total_count == 3
    assert [g["@id"] for g in api.groups("OP1").content] == ["OP1*G1"]
    assert api.groups("OP1").content[0]["chargingStationIds"] == ["OP1*P1*S1", "OP1*P2*S1"]
    assert api.brands().content[0]["chargingPoolIds"] == ["OP1*P1"]
    assert api.tariffs().content[0]["EVSEIds"] == ["OP1*P1*S1*E1"]
    with pytest.raises(UnknownIdentifier):
        api.pools("OP9")


def test_options_object(api):
    result = api.stations(options=QueryOptions(skip=1, take=5))
    assert [s["@id"] for s in result.content] == ["OP1*P2*S1", "OP2*P1*S1"]
    assert result.total_count == 3


def test_details(api):
    assert api.operator("OP1")["name"] == "Operator One"
    assert api.pool("OP1*P1")["chargingStationOperatorId"] == "OP1"
    assert api.station("OP1*P1*S1", expand="evses")["EVSEs"][1]["@id"] == "OP1*P1*S1*E2"
    assert api.evse("OP1*P1*S1*E1")["chargingTariffIds"] == ["OP1*T1"]
    assert api.group("OP1*G1") == {"@id": "OP1*G1",
                                   "@context": "https://open.charging.cloud/contexts/wwcp+json/ChargingStationGroup"}
    assert api.brand("OP1*B1", include="stations")["chargingStationIds"] == ["OP1*P2*S1"]
    assert api.tariff("OP1*T1", include="operator")["chargingStationOperatorId"] == "OP1"


def test_detail_errors(api):
    with pytest.raises(InvalidIdentifier):
        api.pool("OP1*P1*S1")
    with pytest.raises(UnknownIdentifier):
        api.pool("OP1*P9")
    with pytest.raises(InvalidHistorySize):
        api.operator("OP1", historySize=0)


def test_count(api):
    assert api.count("pool") == 3
    assert api.count("station", "OP1") == 2
    assert api.count(pywwcp.EntityKind.NETWORK) == 1
    with pytest.raises(InvalidQueryOptions):
        api.count("spaceship")


def test_status_and_history(api):
    assert api.set_status("OP1*P1", "adminStatus", "OutOfService", T1) == 1
    result = api.admin_status("pool", "OP1")
    assert result.total_count == 2
    assert result.content == {
        "OP1*P1": [{"timestamp": "2017-01-31T12:00:00.000Z", "status": "OutOfService"}],
        "OP1*P2": [],
    }
    assert api.status("pool").content["OP1*P1"] == []
    assert api.history("OP1*P1", "adminStatus", historySize=2) == [
        {"timestamp": "2017-01-31T12:00:00.000Z", "status": "OutOfService"}
    ]
    with pytest.raises(InvalidHistorySize):
        api.history("OP1*P1", "adminStatus", historySize=0)


def test_default_history_size_from_settings(network, settings):
    settings.default_history_size = 2
    api = RoamingNetworkAPI(network, settings=settings)
    for value in ("Available", "Charging", "Available"):
        api.set_status("OP1*P1*S1*E1", "status", value)
    assert len(api.history("OP1*P1*S1*E1")) == 2


def test_apply_status_request(api):
    reply = api.apply_status_request("OP1*P1", "adminStatus", {"newstatus": "OutOfService"})
    assert reply.ok and reply.applied_count == 1
    reply = api.apply_status_request("OP1*P9", "adminStatus", {"newstatus": "OutOfService"})
    assert reply.error_kind == "UnknownIdentifier"


def test_upstream_from_settings(network, settings):
    settings.upstream_url = "http://upstream.example/status"
    api = RoamingNetworkAPI(network, settings=settings)
    assert isinstance(api.upstream, HTTPUpstreamNotifier)
    api.close()


def test_explicit_upstream(network, settings):
    callback = MagicMock()
    api = RoamingNetworkAPI(network, settings=settings, upstream=CallbackUpstreamNotifier(callback))
    api.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    callback.assert_called_once()


def test_from_json(network_data, settings):
    api = RoamingNetworkAPI.from_json(network_data, settings=settings)
    assert api.network.lookup("OP1*P1").status.max_depth == 5
    assert api.count("evse") == 3


@pytest.mark.parametrize("size", [1.5, 2.9, True, "1.5"])
def test_fractional_or_boolean_history_size_is_rejected(api, size):
    api.set_status("OP1*P1", "adminStatus", "OutOfService", T1)
    with pytest.raises(InvalidHistorySize):
        api.history("OP1*P1", "adminStatus", historySize=size)
    with pytest.raises(InvalidHistorySize):
        api.status("pool", historySize=size)
