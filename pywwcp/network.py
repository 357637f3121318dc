# pyWWCP Module - Roaming Network
# -*- coding: utf-8 -*-
"""
 The roaming network: root entity of the graph and index of all entities

 Entities are registered under exactly one container. The container of an
 operator is the network; the container of every other entity is the operator
 named by the first segment of its identifier. Relations are answered from
 the index by identifier, so entities never hold references to each other.
"""
import logging
from typing import Any, Dict, List, Optional, Set, Union

from pywwcp import ids
from pywwcp.entities import (Brand, ChargingPool, ChargingStation, ChargingStationGroup,
                             ChargingStationOperator, ChargingTariff, Entity, EntityKind, EVSE,
                             KIND_OF_ID)
from pywwcp.exceptions import DuplicateIdentifier, InvalidNetworkData, OwnershipConflict, UnknownIdentifier
from pywwcp.status import DEFAULT_MAX_DEPTH

log = logging.getLogger(__name__)

# Kinds whose members are indexed below each parent id
_HIERARCHY_PARENTS = {
    EntityKind.POOL: lambda i: [i.operator_id],
    EntityKind.STATION: lambda i: [i.operator_id, i.pool_id],
    EntityKind.EVSE: lambda i: [i.operator_id, i.pool_id, i.station_id],
    EntityKind.GROUP: lambda i: [i.operator_id],
    EntityKind.BRAND: lambda i: [i.operator_id],
    EntityKind.TARIFF: lambda i: [i.operator_id],
}

# The entity that must exist before a child can be registered
_REQUIRED_PARENT = {
    EntityKind.POOL: (EntityKind.OPERATOR, lambda i: i.operator_id),
    EntityKind.STATION: (EntityKind.POOL, lambda i: i.pool_id),
    EntityKind.EVSE: (EntityKind.STATION, lambda i: i.station_id),
    EntityKind.GROUP: (EntityKind.OPERATOR, lambda i: i.operator_id),
    EntityKind.BRAND: (EntityKind.OPERATOR, lambda i: i.operator_id),
    EntityKind.TARIFF: (EntityKind.OPERATOR, lambda i: i.operator_id),
}


class RoamingNetwork(Entity):
    """A roaming network and the arena of every entity reachable from it."""
    kind = EntityKind.NETWORK

    def __init__(self, network_id, name: str = "", description: str = "",
                 attributes: Optional[Dict[str, Any]] = None,
                 history_max_depth: int = DEFAULT_MAX_DEPTH, lock_timeout: float = 2.0):
        super().__init__(network_id, name=name, description=description, attributes=attributes,
                         history_max_depth=history_max_depth, lock_timeout=lock_timeout)
        self.history_max_depth = history_max_depth
        self.lock_timeout = lock_timeout
        self._index: Dict[EntityKind, Dict[ids.Identifier, Entity]] = {
            kind: {} for kind in EntityKind if kind != EntityKind.NETWORK
        }
        self._members: Dict[ids.Identifier, Dict[EntityKind, Set[ids.Identifier]]] = {}

    # Registration

    def add(self, entity: Entity, container_id=None) -> Entity:
        """
        Register an entity under its container.

        Raises:
            DuplicateIdentifier: The identifier is already registered.
            OwnershipConflict: container_id is not the container the identifier names.
            UnknownIdentifier: The parent entity is not registered.
        """
        kind = entity.kind
        if kind == EntityKind.NETWORK:
            raise OwnershipConflict("A roaming network cannot be registered inside another one!")
        if entity.id in self._index[kind]:
            raise DuplicateIdentifier(f"{kind.value} '{entity.id}' is already registered!")

        owner = self.container_id_of(entity.id)
        if container_id is not None and str(container_id) != str(owner):
            raise OwnershipConflict(f"{kind.value} '{entity.id}' does not belong to '{container_id}'!")

        if kind in _REQUIRED_PARENT:
            parent_kind, parent_of = _REQUIRED_PARENT[kind]
            parent_id = parent_of(entity.id)
            if parent_id not in self._index[parent_kind]:
                raise UnknownIdentifier(f"Unknown {parent_kind.value} '{parent_id}' for {kind.value} '{entity.id}'!")
            for parent in _HIERARCHY_PARENTS[kind](entity.id):
                self._members.setdefault(parent, {}).setdefault(kind, set()).add(entity.id)

        self._index[kind][entity.id] = entity
        log.debug(f"Registered {kind.value} {entity.id} in roaming network {self.id}")
        return entity

    def _create(self, entity_type, entity_id, **kwargs) -> Entity:
        kwargs.setdefault("history_max_depth", self.history_max_depth)
        kwargs.setdefault("lock_timeout", self.lock_timeout)
        return self.add(entity_type(entity_id, **kwargs))

    def add_operator(self, operator_id, **kwargs) -> ChargingStationOperator:
        return self._create(ChargingStationOperator, operator_id, **kwargs)

    def add_pool(self, pool_id, **kwargs) -> ChargingPool:
        return self._create(ChargingPool, pool_id, **kwargs)

    def add_station(self, station_id, **kwargs) -> ChargingStation:
        return self._create(ChargingStation, station_id, **kwargs)

    def add_evse(self, evse_id, **kwargs) -> EVSE:
        return self._create(EVSE, evse_id, **kwargs)

    def add_group(self, group_id, **kwargs) -> ChargingStationGroup:
        return self._create(ChargingStationGroup, group_id, **kwargs)

    def add_brand(self, brand_id, **kwargs) -> Brand:
        return self._create(Brand, brand_id, **kwargs)

    def add_tariff(self, tariff_id, **kwargs) -> ChargingTariff:
        return self._create(ChargingTariff, tariff_id, **kwargs)

    # Lookup

    def get(self, kind: EntityKind, entity_id) -> Optional[Entity]:
        if kind == EntityKind.NETWORK:
            return self if str(entity_id) == str(self.id) else None
        try:
            key = ids.parse_any(str(entity_id)) if isinstance(entity_id, str) else entity_id
        except ValueError:
            return None
        return self._index[kind].get(key)

    def lookup(self, entity_id: Union[str, ids.Identifier]) -> Entity:
        """Resolve an identifier (text or object) to its entity; the network's own id resolves to itself."""
        if entity_id == self.id:
            return self
        key = ids.parse_any(entity_id) if isinstance(entity_id, str) else entity_id
        entity = self._index.get(KIND_OF_ID.get(type(key)), {}).get(key)
        if entity is None and isinstance(entity_id, str) and entity_id.strip() == str(self.id):
            return self
        if entity is None:
            raise UnknownIdentifier(f"Unknown identifier '{entity_id}'!")
        return entity

    def entities(self, kind: EntityKind, operator_id=None) -> List[Entity]:
        """Snapshot of all entities of a kind, optionally only those of one operator."""
        if kind == EntityKind.NETWORK:
            return [self]
        if operator_id is None:
            return list(self._index[kind].values())
        operator_id = ids.OperatorId.parse(operator_id)
        if operator_id not in self._index[EntityKind.OPERATOR]:
            raise UnknownIdentifier(f"Unknown operator '{operator_id}'!")
        if kind == EntityKind.OPERATOR:
            return [self._index[kind][operator_id]]
        return [self._index[kind][i] for i in self.children(operator_id, kind)]

    def count(self, kind: EntityKind) -> int:
        return 1 if kind == EntityKind.NETWORK else len(self._index[kind])

    def children(self, parent_id, kind: EntityKind) -> List[ids.Identifier]:
        """Identifiers of all entities of kind below parent_id, ascending."""
        if parent_id == self.id and kind == EntityKind.OPERATOR:
            return sorted(self._index[EntityKind.OPERATOR])
        if parent_id == self.id:
            return sorted(self._index[kind])
        return sorted(self._members.get(parent_id, {}).get(kind, ()))

    # Containment

    def container_id_of(self, child_id) -> ids.Identifier:
        if isinstance(child_id, ids.OperatorId):
            return self.id
        return child_id.operator_id

    def containers_for(self, child_id) -> List[Entity]:
        """Every container entity that could own child_id."""
        if isinstance(child_id, ids.OperatorId):
            return [self]
        return [self._index[EntityKind.OPERATOR][i] for i in sorted(self._index[EntityKind.OPERATOR])]

    def contains(self, container: Entity, child_id) -> bool:
        kind = KIND_OF_ID.get(type(child_id))
        if kind is None or kind == EntityKind.NETWORK:
            return False
        if container is self:
            return kind == EntityKind.OPERATOR and child_id in self._index[EntityKind.OPERATOR]
        return child_id in self._members.get(container.id, {}).get(kind, ())

    # Cross-cutting memberships

    def groups_of(self, station_id) -> List[ids.Identifier]:
        return sorted(g.id for g in list(self._index[EntityKind.GROUP].values()) if station_id in g.station_ids)

    def pools_with_brand(self, brand_id) -> List[ids.Identifier]:
        return sorted(p.id for p in list(self._index[EntityKind.POOL].values()) if brand_id in p.brand_ids)

    def stations_with_brand(self, brand_id) -> List[ids.Identifier]:
        return sorted(s.id for s in list(self._index[EntityKind.STATION].values()) if brand_id in s.brand_ids)

    def tariffs_of(self, evse_id) -> List[ids.Identifier]:
        return sorted(t.id for t in list(self._index[EntityKind.TARIFF].values()) if evse_id in t.evse_ids)

    def known(self, kind: EntityKind, identifiers) -> List[ids.Identifier]:
        """The registered subset of identifiers, ascending."""
        index = self._index[kind]
        return sorted(i for i in identifiers if i in index)


def load_network(data: dict, history_max_depth: int = DEFAULT_MAX_DEPTH, lock_timeout: float = 2.0) -> RoamingNetwork:
    """
    Build a RoamingNetwork from nested JSON data.

    Expected layout:
        {"@id": "Prod", "name": "...",
         "operators": [{"@id": "OP1",
                        "pools": [{"@id": "OP1*P1", "brandIds": [...],
                                   "stations": [{"@id": "OP1*P1*S1", "brandIds": [...],
                                                 "evses": [{"@id": "OP1*P1*S1*E1"}]}]}],
                        "brands": [{"@id": "OP1*B1"}],
                        "groups": [{"@id": "OP1*G1", "chargingStationIds": [...]}],
                        "tariffs": [{"@id": "OP1*T1", "EVSEIds": [...]}]}]}

    Raises:
        InvalidNetworkData: A node is not an object, lacks its "@id" or holds a list of the wrong type.
        InvalidIdentifier, DuplicateIdentifier, OwnershipConflict, UnknownIdentifier: See RoamingNetwork.add().
    """
    _check_node(data, "roaming network")
    network = RoamingNetwork(data["@id"], history_max_depth=history_max_depth, lock_timeout=lock_timeout,
                             **_descriptive(data))
    for operator in _nodes(data, "operators"):
        network.add_operator(operator["@id"], **_descriptive(operator))
        # Brands first, pools and stations refer to them
        for brand in _nodes(operator, "brands"):
            network.add_brand(brand["@id"], **_descriptive(brand))
        for pool in _nodes(operator, "pools"):
            network.add_pool(pool["@id"], brand_ids=_ids(pool, "brandIds"), **_descriptive(pool))
            for station in _nodes(pool, "stations"):
                network.add_station(station["@id"], brand_ids=_ids(station, "brandIds"), **_descriptive(station))
                for evse in _nodes(station, "evses"):
                    network.add_evse(evse["@id"], **_descriptive(evse))
        for group in _nodes(operator, "groups"):
            network.add_group(group["@id"], station_ids=_ids(group, "chargingStationIds"), **_descriptive(group))
        for tariff in _nodes(operator, "tariffs"):
            network.add_tariff(tariff["@id"], evse_ids=_ids(tariff, "EVSEIds"), **_descriptive(tariff))
    log.debug(f"Loaded roaming network {network.id} with {network.count(EntityKind.OPERATOR)} operator(s)")
    return network


def _check_node(node, what: str):
    if not isinstance(node, dict):
        raise InvalidNetworkData(f"Invalid {what}: expected a JSON object, got {type(node).__name__}!")
    if not isinstance(node.get("@id"), str) or not node["@id"].strip():
        raise InvalidNetworkData(f"Invalid {what}: missing or empty '@id' in {node!r}!")


def _list(node: dict, key: str) -> list:
    value = node.get(key, [])
    if not isinstance(value, list):
        raise InvalidNetworkData(f"'{key}' of '{node['@id']}' must be a list!")
    return value


def _nodes(parent: dict, key: str) -> list:
    children = _list(parent, key)
    for child in children:
        _check_node(child, f"entry of '{key}' in '{parent['@id']}'")
    return children


def _ids(node: dict, key: str) -> list:
    values = _list(node, key)
    if not all(isinstance(v, str) for v in values):
        raise InvalidNetworkData(f"'{key}' of '{node['@id']}' must be a list of identifiers!")
    return values


def _descriptive(data: dict) -> dict:
    attributes = data.get("attributes", {})
    if not isinstance(attributes, dict):
        raise InvalidNetworkData(f"'attributes' of '{data['@id']}' must be an object!")
    return {
        "name": data.get("name", ""),
        "description": data.get("description", ""),
        "attributes": attributes,
    }
