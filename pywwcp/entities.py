# pyWWCP Module - Entities
# -*- coding: utf-8 -*-
"""
 Entities of the WWCP domain graph

 Entities hold only their own data: identifier, descriptive fields, their two
 status histories and, for cross-cutting entities, the identifiers of their
 members. Relations between entities are resolved through the RoamingNetwork
 index (see pywwcp.network and pywwcp.relations).
"""
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from pywwcp import ids
from pywwcp.status import (AdminStatusTypes, StatusAxis, StatusHistory, StatusTypes,
                           DEFAULT_MAX_DEPTH)


class EntityKind(Enum):
    NETWORK = "network"
    OPERATOR = "operator"
    POOL = "pool"
    STATION = "station"
    EVSE = "evse"
    GROUP = "group"
    BRAND = "brand"
    TARIFF = "tariff"


ID_TYPES = {
    EntityKind.NETWORK: ids.RoamingNetworkId,
    EntityKind.OPERATOR: ids.OperatorId,
    EntityKind.POOL: ids.ChargingPoolId,
    EntityKind.STATION: ids.ChargingStationId,
    EntityKind.EVSE: ids.EVSEId,
    EntityKind.GROUP: ids.ChargingStationGroupId,
    EntityKind.BRAND: ids.BrandId,
    EntityKind.TARIFF: ids.ChargingTariffId,
}

KIND_OF_ID = {id_type: kind for kind, id_type in ID_TYPES.items()}

CONTEXTS = {
    EntityKind.NETWORK: "RoamingNetwork",
    EntityKind.OPERATOR: "ChargingStationOperator",
    EntityKind.POOL: "ChargingPool",
    EntityKind.STATION: "ChargingStation",
    EntityKind.EVSE: "EVSE",
    EntityKind.GROUP: "ChargingStationGroup",
    EntityKind.BRAND: "Brand",
    EntityKind.TARIFF: "ChargingTariff",
}
CONTEXT_PREFIX = "https://open.charging.cloud/contexts/wwcp+json/"

_S = StatusTypes
_A = AdminStatusTypes
_COMMON_STATUS = {_S.Unknown, _S.Unspecified, _S.Offline, _S.InDeployment, _S.Available, _S.Error}
_COMMON_ADMIN = {_A.Unknown, _A.Unspecified, _A.Planned, _A.InDeployment, _A.OutOfService, _A.Operational}

# Status codes each entity kind accepts, per axis
ALLOWED_STATUS = {
    EntityKind.NETWORK: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
    EntityKind.OPERATOR: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
    EntityKind.POOL: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS | {_S.PartialAvailable, _S.Reserved, _S.Charging,
                                                           _S.OutOfService}),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
    EntityKind.STATION: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS | {_S.PartialAvailable, _S.Reserved, _S.WaitingForPlugin,
                                                           _S.PluggedIn, _S.Charging, _S.DoorNotClosed,
                                                           _S.OutOfService}),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN | {_A.Blocked}),
    },
    EntityKind.EVSE: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS | {_S.Reserved, _S.WaitingForPlugin, _S.PluggedIn,
                                                           _S.Charging, _S.DoorNotClosed, _S.OutOfService,
                                                           _S.Blocked}),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN | {_A.Blocked}),
    },
    EntityKind.GROUP: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
    EntityKind.BRAND: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
    EntityKind.TARIFF: {
        StatusAxis.OPERATIONAL: frozenset(_COMMON_STATUS),
        StatusAxis.ADMIN: frozenset(_COMMON_ADMIN),
    },
}

STATUS_TYPES = {
    StatusAxis.OPERATIONAL: StatusTypes,
    StatusAxis.ADMIN: AdminStatusTypes,
}


class Entity(object):
    """A node of the domain graph."""
    kind: EntityKind

    def __init__(self, entity_id, name: str = "", description: str = "",
                 attributes: Optional[Dict[str, Any]] = None,
                 history_max_depth: int = DEFAULT_MAX_DEPTH, lock_timeout: float = 2.0):
        self.id = ID_TYPES[self.kind].parse(entity_id)
        self.name = name or ""
        self.description = description or ""
        self.attributes = dict(attributes or {})
        self.histories = {
            StatusAxis.OPERATIONAL: StatusHistory(history_max_depth, lock_timeout),
            StatusAxis.ADMIN: StatusHistory(history_max_depth, lock_timeout),
        }

    def history(self, axis) -> StatusHistory:
        return self.histories[StatusAxis.parse(axis)]

    @property
    def status(self) -> StatusHistory:
        return self.histories[StatusAxis.OPERATIONAL]

    @property
    def admin_status(self) -> StatusHistory:
        return self.histories[StatusAxis.ADMIN]

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self.id)!r})"


class ChargingStationOperator(Entity):
    kind = EntityKind.OPERATOR


class ChargingPool(Entity):
    kind = EntityKind.POOL

    def __init__(self, entity_id, brand_ids: Iterable = (), **kwargs):
        super().__init__(entity_id, **kwargs)
        self.brand_ids = set(ids.BrandId.parse(b) for b in brand_ids)


class ChargingStation(Entity):
    kind = EntityKind.STATION

    def __init__(self, entity_id, brand_ids: Iterable = (), **kwargs):
        super().__init__(entity_id, **kwargs)
        self.brand_ids = set(ids.BrandId.parse(b) for b in brand_ids)


class EVSE(Entity):
    kind = EntityKind.EVSE


class ChargingStationGroup(Entity):
    kind = EntityKind.GROUP

    def __init__(self, entity_id, station_ids: Iterable = (), **kwargs):
        super().__init__(entity_id, **kwargs)
        self.station_ids = set(ids.ChargingStationId.parse(s) for s in station_ids)


class Brand(Entity):
    kind = EntityKind.BRAND


class ChargingTariff(Entity):
    kind = EntityKind.TARIFF

    def __init__(self, entity_id, evse_ids: Iterable = (), **kwargs):
        super().__init__(entity_id, **kwargs)
        self.evse_ids = set(ids.EVSEId.parse(e) for e in evse_ids)


ENTITY_TYPES = {
    EntityKind.OPERATOR: ChargingStationOperator,
    EntityKind.POOL: ChargingPool,
    EntityKind.STATION: ChargingStation,
    EntityKind.EVSE: EVSE,
    EntityKind.GROUP: ChargingStationGroup,
    EntityKind.BRAND: Brand,
    EntityKind.TARIFF: ChargingTariff,
}
