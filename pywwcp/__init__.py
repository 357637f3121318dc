# pyWWCP Module
# -*- coding: utf-8 -*-
"""
 Python module to project a WWCP e-mobility roaming network as JSON

 Features
    * Hierarchical identifiers: operator, charging pool, charging station, EVSE,
      charging station group, brand and charging tariff ids
    * Per request JSON shape through expand/include directives (Hidden / ShowIdOnly / Expand)
    * Cycle safe expansion of bidirectional relations
    * Stable pagination with the total item count of the same snapshot
    * Bounded, time-ordered operational and administrative status histories
    * Status mutation fan-out with optional upstream notification (HTTP or callback)

 Classes
    RoamingNetworkAPI(network, settings, upstream)

 Parameters
    network                   # RoamingNetwork to serve (see pywwcp.network.load_network)
    settings = None           # pywwcp.config.Settings (default: from WWCP_* environment variables)
    upstream = None           # UpstreamNotifier (default: HTTP notifier if WWCP_UPSTREAM_URL is set)

 Functions
    network_info(**options)                   # Return the roaming network object
    operators(**options)                      # Return ProjectionResult of charging station operators
    operator(operator_id, **options)          # Return one charging station operator
    pools(operator_id, **options)             # Return ProjectionResult of charging pools
    pool(pool_id, **options)                  # Return one charging pool
    stations(operator_id, **options)          # Return ProjectionResult of charging stations
    station(station_id, **options)            # Return one charging station
    evses(operator_id, **options)             # Return ProjectionResult of EVSEs
    evse(evse_id, **options)                  # Return one EVSE
    groups(operator_id, **options)            # Return ProjectionResult of charging station groups
    group(group_id, **options)                # Return one charging station group
    brands(operator_id, **options)            # Return ProjectionResult of brands
    brand(brand_id, **options)                # Return one brand
    tariffs(operator_id, **options)           # Return ProjectionResult of charging tariffs
    tariff(tariff_id, **options)              # Return one charging tariff
    status(kind, operator_id, **options)      # Return ProjectionResult of id -> operational status history
    admin_status(kind, operator_id, **options)  # Return ProjectionResult of id -> admin status history
    history(entity_id, axis, historySize)     # Return the newest status entries of one entity
    count(kind, operator_id)                  # Return number of entities of a kind
    set_status(child_id, axis, new_status, timestamp)   # Apply a status change, return containers updated
    apply_status_request(child_id, axis, body)          # Apply {"newstatus": ...}, return StatusReply

 Options
    skip, take, expand, include, historySize  # see pywwcp.models.QueryOptions

 Requirements
    This module requires the following modules: requests, python-dateutil, pydantic, pydantic-settings
    pip install requests python-dateutil pydantic pydantic-settings
"""
import logging
import sys
from typing import Optional, Union

version_tuple = (0, 1, 0)
version = __version__ = '%d.%d.%d' % version_tuple
__author__ = 'pywwcp'

from pywwcp import config, directives
from pywwcp.entities import EntityKind
from pywwcp.exceptions import InvalidQueryOptions, WWCPError
from pywwcp.ids import (BrandId, ChargingPoolId, ChargingStationGroupId, ChargingStationId, ChargingTariffId,
                        EVSEId, OperatorId)
from pywwcp.models import QueryOptions
from pywwcp.mutation import StatusFanout, StatusReply
from pywwcp.network import RoamingNetwork, load_network
from pywwcp.projection import (ProjectionResult, project, project_collection, project_history,
                               project_history_collection)
from pywwcp.status import StatusAxis
from pywwcp.upstream import UpstreamNotifier, notifier_from_settings

log = logging.getLogger(__name__)
log.debug('%s version %s', __name__, __version__)
log.debug('Python %s on %s', sys.version, sys.platform)


def set_debug(toggle=True, color=True):
    """Enable verbose logging"""
    if toggle:
        if color:
            logging.basicConfig(format='\x1b[31;1m%(levelname)s:%(message)s\x1b[0m', level=logging.DEBUG)
        else:
            logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.DEBUG)
        log.setLevel(logging.DEBUG)
        log.debug("%s [%s]\n" % (__name__, __version__))
    else:
        log.setLevel(logging.NOTSET)


# Endpoint classes per entity kind: (collection, detail)
ENDPOINTS = {
    EntityKind.NETWORK: (directives.NETWORK, directives.NETWORK),
    EntityKind.OPERATOR: (directives.OPERATORS, directives.OPERATOR),
    EntityKind.POOL: (directives.POOLS, directives.POOL),
    EntityKind.STATION: (directives.STATIONS, directives.STATION),
    EntityKind.EVSE: (directives.EVSES, directives.EVSE),
    EntityKind.GROUP: (directives.GROUPS, directives.GROUP),
    EntityKind.BRAND: (directives.BRANDS, directives.BRAND),
    EntityKind.TARIFF: (directives.TARIFFS, directives.TARIFF),
}

ID_PARSERS = {
    EntityKind.OPERATOR: OperatorId,
    EntityKind.POOL: ChargingPoolId,
    EntityKind.STATION: ChargingStationId,
    EntityKind.EVSE: EVSEId,
    EntityKind.GROUP: ChargingStationGroupId,
    EntityKind.BRAND: BrandId,
    EntityKind.TARIFF: ChargingTariffId,
}


def _kind(kind: Union[str, EntityKind]) -> EntityKind:
    if isinstance(kind, EntityKind):
        return kind
    try:
        return EntityKind(str(kind).lower())
    except ValueError:
        raise InvalidQueryOptions(f"Unknown entity kind '{kind}'!") from None


# pylint: disable=too-many-public-methods
class RoamingNetworkAPI(object):
    def __init__(self, network: RoamingNetwork, settings: Optional[config.Settings] = None,
                 upstream: Optional[UpstreamNotifier] = None):
        """
        JSON views and status mutation over one roaming network.

        Args:
            network     = RoamingNetwork to serve
            settings    = pywwcp.config.Settings (default: global settings)
            upstream    = UpstreamNotifier for status changes (default: from settings)
        """
        self.network = network
        self.settings = settings or config.settings
        if upstream is None:
            upstream = notifier_from_settings(self.settings)
        self.upstream = upstream
        self.fanout = StatusFanout(network, upstream=upstream, send_upstream=self.settings.send_upstream,
                                   max_retries=self.settings.mutation_retries)
        if self.settings.debug:
            set_debug(True)

    @classmethod
    def from_json(cls, data: dict, settings: Optional[config.Settings] = None,
                  upstream: Optional[UpstreamNotifier] = None) -> "RoamingNetworkAPI":
        """Build a RoamingNetwork from nested JSON data and serve it."""
        settings = settings or config.settings
        network = load_network(data, history_max_depth=settings.history_max_depth,
                               lock_timeout=settings.lock_timeout)
        return cls(network, settings=settings, upstream=upstream)

    # Helpers

    @staticmethod
    def _options(options: Optional[QueryOptions], params: dict) -> QueryOptions:
        if options is not None:
            return options
        return QueryOptions.parse(params)

    def _collection(self, kind: EntityKind, operator_id, options, params) -> ProjectionResult:
        opts = self._options(options, params)
        endpoint = ENDPOINTS[kind][0]
        resolved = directives.resolve_directives(endpoint, opts.expand, opts.include)
        entities = self.network.entities(kind, operator_id)
        return project_collection(self.network, entities, resolved, skip=opts.skip, take=opts.take)

    def _detail(self, kind: EntityKind, entity_id, options, params) -> dict:
        opts = self._options(options, params)
        entity = self.network.lookup(ID_PARSERS[kind].parse(entity_id))
        resolved = directives.resolve_directives(ENDPOINTS[kind][1], opts.expand, opts.include)
        return project(self.network, entity, resolved)

    def _history_size(self, opts: QueryOptions) -> int:
        return opts.history_size if opts.history_size is not None else self.settings.default_history_size

    # Roaming network

    def network_info(self, options: Optional[QueryOptions] = None, **params) -> dict:
        opts = self._options(options, params)
        resolved = directives.resolve_directives(directives.NETWORK, opts.expand, opts.include)
        return project(self.network, self.network, resolved)

    # Charging station operators

    def operators(self, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.OPERATOR, None, options, params)

    def operator(self, operator_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.OPERATOR, operator_id, options, params)

    # Charging pools, stations and EVSEs

    def pools(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.POOL, operator_id, options, params)

    def pool(self, pool_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.POOL, pool_id, options, params)

    def stations(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.STATION, operator_id, options, params)

    def station(self, station_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.STATION, station_id, options, params)

    def evses(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.EVSE, operator_id, options, params)

    def evse(self, evse_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.EVSE, evse_id, options, params)

    # Groups, brands and tariffs

    def groups(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.GROUP, operator_id, options, params)

    def group(self, group_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.GROUP, group_id, options, params)

    def brands(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.BRAND, operator_id, options, params)

    def brand(self, brand_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.BRAND, brand_id, options, params)

    def tariffs(self, operator_id=None, options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        return self._collection(EntityKind.TARIFF, operator_id, options, params)

    def tariff(self, tariff_id, options: Optional[QueryOptions] = None, **params) -> dict:
        return self._detail(EntityKind.TARIFF, tariff_id, options, params)

    # Status

    def status(self, kind, operator_id=None, axis=StatusAxis.OPERATIONAL,
               options: Optional[QueryOptions] = None, **params) -> ProjectionResult:
        """Mapping id -> newest status entries for every entity of a kind."""
        opts = self._options(options, params)
        entities = self.network.entities(_kind(kind), operator_id)
        return project_history_collection(entities, axis, self._history_size(opts), skip=opts.skip,
                                          take=opts.take)

    def admin_status(self, kind, operator_id=None, options: Optional[QueryOptions] = None,
                     **params) -> ProjectionResult:
        return self.status(kind, operator_id, StatusAxis.ADMIN, options, **params)

    def history(self, entity_id, axis=StatusAxis.OPERATIONAL, options: Optional[QueryOptions] = None,
                **params) -> list:
        """Newest status entries of one entity, newest first."""
        opts = self._options(options, params)
        entity = self.network.lookup(entity_id)
        return project_history(entity, axis, self._history_size(opts))

    def count(self, kind, operator_id=None) -> int:
        kind = _kind(kind)
        if operator_id is None:
            return self.network.count(kind)
        return len(self.network.entities(kind, operator_id))

    # Mutation

    def set_status(self, child_id, axis, new_status, timestamp=None) -> int:
        return self.fanout.set_status(child_id, axis, new_status, timestamp)

    def apply_status_request(self, child_id, axis, body) -> StatusReply:
        return self.fanout.apply_status_request(child_id, axis, body)

    def close(self):
        if self.upstream is not None:
            self.upstream.close()


__all__ = ["RoamingNetworkAPI", "RoamingNetwork", "load_network", "ProjectionResult", "StatusReply",
           "StatusAxis", "EntityKind", "WWCPError", "set_debug", "version", "__version__"]
