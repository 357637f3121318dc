"""Pytest configuration and fixtures."""
import copy

import pytest

from pywwcp import RoamingNetworkAPI
from pywwcp.config import Settings
from pywwcp.network import load_network

NETWORK_DATA = {
    "@id": "Prod",
    "name": "Production",
    "operators": [
        {
            "@id": "OP1",
            "name": "Operator One",
            "attributes": {"hotline": "+49 123 456"},
            "brands": [{"@id": "OP1*B1", "name": "Brand One"}],
            "pools": [
                {
                    "@id": "OP1*P1",
                    "name": "Pool One",
                    "brandIds": ["OP1*B1"],
                    "stations": [
                        {
                            "@id": "OP1*P1*S1",
                            "evses": [{"@id": "OP1*P1*S1*E1"}, {"@id": "OP1*P1*S1*E2"}],
                        }
                    ],
                },
                {
                    "@id": "OP1*P2",
                    "stations": [
                        {"@id": "OP1*P2*S1", "brandIds": ["OP1*B1"], "evses": [{"@id": "OP1*P2*S1*E1"}]}
                    ],
                },
            ],
            "groups": [{"@id": "OP1*G1", "chargingStationIds": ["OP1*P1*S1", "OP1*P2*S1"]}],
            "tariffs": [{"@id": "OP1*T1", "EVSEIds": ["OP1*P1*S1*E1"]}],
        },
        {
            "@id": "OP2",
            "pools": [{"@id": "OP2*P1", "stations": [{"@id": "OP2*P1*S1"}]}],
        },
    ],
}


@pytest.fixture
def network_data():
    """Nested JSON description of a small roaming network."""
    return copy.deepcopy(NETWORK_DATA)


@pytest.fixture
def network(network_data):
    return load_network(network_data, history_max_depth=5)


@pytest.fixture
def settings():
    """Settings independent of the WWCP_* environment of the test run."""
    return Settings(history_max_depth=5, default_history_size=1, lock_timeout=0.5, mutation_retries=2,
                    send_upstream=True, upstream_url=None, upstream_timeout=1.0, debug=False)


@pytest.fixture
def api(network, settings):
    return RoamingNetworkAPI(network, settings=settings)
