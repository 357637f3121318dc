# pyWWCP Module - Relations
# -*- coding: utf-8 -*-
"""
 Declarative table of the named relations between entity kinds

 A relation names an edge kind from one entity kind to another, the JSON keys
 used to render it (ids only or expanded), how to resolve the related ids
 through the RoamingNetwork index, and the relation on the target pointing
 back (its inverse), which the projector hides while expanding.
"""
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from pywwcp.entities import EntityKind

K = EntityKind


class Relation(NamedTuple):
    name: str
    target: EntityKind
    ids_key: str
    expand_key: str
    resolve: Callable
    inverse: Optional[str] = None
    to_one: bool = False
    # Relations on the same entity which, when expanded, already reach this one
    subsumed_by: Tuple[str, ...] = ()


def _children(kind):
    return lambda network, entity: network.children(entity.id, kind)


def _group_pools(network, group) -> List:
    stations = network.known(K.STATION, group.station_ids)
    return sorted(set(s.pool_id for s in stations))


def _group_evses(network, group) -> List:
    evses = []
    for station_id in network.known(K.STATION, group.station_ids):
        evses.extend(network.children(station_id, K.EVSE))
    return sorted(evses)


# Per source kind, in rendering order
RELATIONS: Dict[EntityKind, Tuple[Relation, ...]] = {
    K.NETWORK: (
        Relation("operators", K.OPERATOR, "chargingStationOperatorIds", "chargingStationOperators",
                 _children(K.OPERATOR), inverse="network"),
        Relation("chargingpools", K.POOL, "chargingPoolIds", "chargingPools",
                 _children(K.POOL), subsumed_by=("operators",)),
        Relation("chargingstations", K.STATION, "chargingStationIds", "chargingStations",
                 _children(K.STATION), subsumed_by=("operators", "chargingpools")),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs",
                 _children(K.EVSE), subsumed_by=("operators", "chargingpools", "chargingstations")),
    ),
    K.OPERATOR: (
        Relation("network", K.NETWORK, "roamingNetworkId", "roamingNetwork",
                 lambda network, e: network.id, inverse="operators", to_one=True),
        Relation("chargingpools", K.POOL, "chargingPoolIds", "chargingPools",
                 _children(K.POOL), inverse="operator"),
        Relation("chargingstations", K.STATION, "chargingStationIds", "chargingStations",
                 _children(K.STATION), inverse="operator", subsumed_by=("chargingpools",)),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs",
                 _children(K.EVSE), inverse="operator", subsumed_by=("chargingpools", "chargingstations")),
        Relation("groups", K.GROUP, "chargingStationGroupIds", "chargingStationGroups",
                 _children(K.GROUP), inverse="operator"),
        Relation("brands", K.BRAND, "brandIds", "brands",
                 _children(K.BRAND), inverse="operator"),
        Relation("tariffs", K.TARIFF, "chargingTariffIds", "chargingTariffs",
                 _children(K.TARIFF), inverse="operator"),
    ),
    K.POOL: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="chargingpools", to_one=True),
        Relation("chargingstations", K.STATION, "chargingStationIds", "chargingStations",
                 _children(K.STATION), inverse="pool"),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs",
                 _children(K.EVSE), inverse="pool", subsumed_by=("chargingstations",)),
        Relation("brands", K.BRAND, "brandIds", "brands",
                 lambda network, e: network.known(K.BRAND, e.brand_ids), inverse="chargingpools"),
    ),
    K.STATION: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="chargingstations", to_one=True),
        Relation("pool", K.POOL, "chargingPoolId", "chargingPool",
                 lambda network, e: e.id.pool_id, inverse="chargingstations", to_one=True),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs",
                 _children(K.EVSE), inverse="station"),
        Relation("groups", K.GROUP, "chargingStationGroupIds", "chargingStationGroups",
                 lambda network, e: network.groups_of(e.id), inverse="chargingstations"),
        Relation("brands", K.BRAND, "brandIds", "brands",
                 lambda network, e: network.known(K.BRAND, e.brand_ids), inverse="chargingstations"),
    ),
    K.EVSE: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="evses", to_one=True),
        Relation("pool", K.POOL, "chargingPoolId", "chargingPool",
                 lambda network, e: e.id.pool_id, inverse="evses", to_one=True),
        Relation("station", K.STATION, "chargingStationId", "chargingStation",
                 lambda network, e: e.id.station_id, inverse="evses", to_one=True),
        Relation("tariffs", K.TARIFF, "chargingTariffIds", "chargingTariffs",
                 lambda network, e: network.tariffs_of(e.id), inverse="evses"),
    ),
    K.GROUP: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="groups", to_one=True),
        Relation("chargingpools", K.POOL, "chargingPoolIds", "chargingPools", _group_pools),
        Relation("chargingstations", K.STATION, "chargingStationIds", "chargingStations",
                 lambda network, e: network.known(K.STATION, e.station_ids), inverse="groups"),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs", _group_evses,
                 subsumed_by=("chargingstations",)),
    ),
    K.BRAND: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="brands", to_one=True),
        Relation("chargingpools", K.POOL, "chargingPoolIds", "chargingPools",
                 lambda network, e: network.pools_with_brand(e.id), inverse="brands"),
        Relation("chargingstations", K.STATION, "chargingStationIds", "chargingStations",
                 lambda network, e: network.stations_with_brand(e.id), inverse="brands"),
    ),
    K.TARIFF: (
        Relation("operator", K.OPERATOR, "chargingStationOperatorId", "chargingStationOperator",
                 lambda network, e: e.id.operator_id, inverse="tariffs", to_one=True),
        Relation("evses", K.EVSE, "EVSEIds", "EVSEs",
                 lambda network, e: network.known(K.EVSE, e.evse_ids), inverse="tariffs"),
    ),
}

RELATION_NAMES = frozenset(r.name for relations in RELATIONS.values() for r in relations)

# Alternative spellings accepted in expand/include, all lower case
ALIASES = {
    "pools": "chargingpools",
    "chargingpool": "pool",
    "stations": "chargingstations",
    "chargingstation": "station",
    "networks": "network",
    "roamingnetwork": "network",
    "chargingstationoperators": "operators",
    "chargingstationoperator": "operator",
    "chargingstationgroups": "groups",
    "chargingtariffs": "tariffs",
}


def canonical_name(token: str) -> Optional[str]:
    """Map a lower case token to its relation name, or None if unknown."""
    name = ALIASES.get(token, token)
    return name if name in RELATION_NAMES else None


def relations_of(kind: EntityKind) -> Tuple[Relation, ...]:
    return RELATIONS.get(kind, ())
