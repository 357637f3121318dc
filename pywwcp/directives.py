# pyWWCP Module - Expansion Directives
# -*- coding: utf-8 -*-
"""
 Resolve client expand/include lists into per-relation visibility directives

 Priority per relation, highest first:
    1. negated in expand ("-name")   -> HIDDEN
    2. listed in expand              -> EXPAND
    3. listed in include             -> SHOW_ID_ONLY
    4. endpoint class default

 Relations an endpoint class does not declare are always HIDDEN.
"""
import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from pywwcp.exceptions import InvalidDirectiveInput
from pywwcp.relations import RELATION_NAMES, canonical_name

log = logging.getLogger(__name__)


class InfoStatus(Enum):
    HIDDEN = "Hidden"
    SHOW_ID_ONLY = "ShowIdOnly"
    EXPAND = "Expand"


class EndpointClass(object):
    """A category of request with its explicit table of default directives."""

    def __init__(self, name: str, defaults: Mapping[str, InfoStatus]):
        unknown = set(defaults) - RELATION_NAMES
        if unknown:
            raise ValueError(f"Endpoint class {name} declares unknown relations: {sorted(unknown)}")
        self.name = name
        self.defaults = MappingProxyType(dict(defaults))

    def __repr__(self):
        return f"EndpointClass({self.name!r})"


def _table(show: Iterable[str] = (), hidden: Iterable[str] = ()) -> Dict[str, InfoStatus]:
    table = {name: InfoStatus.HIDDEN for name in hidden}
    table.update({name: InfoStatus.SHOW_ID_ONLY for name in show})
    return table


_ALL = ("network", "operators", "operator", "chargingpools", "pool", "chargingstations", "station",
        "evses", "groups", "brands", "tariffs")

NETWORK = EndpointClass("network", _table(show=_ALL))
OPERATORS = EndpointClass("operators", _table(show=_ALL))
OPERATOR = EndpointClass("operator", _table(show=_ALL))
POOLS = EndpointClass("pools", _table(show=_ALL))
POOL = EndpointClass("pool", _table(show=_ALL))
STATIONS = EndpointClass("stations", _table(show=_ALL))
STATION = EndpointClass("station", _table(show=_ALL))
EVSES = EndpointClass("evses", _table(show=_ALL))
EVSE = EndpointClass("evse", _table(show=_ALL))
# Cross-cutting views: lists show their owner and members, details hide everything by default
GROUPS = EndpointClass("groups", _table(show=("operator", "chargingstations"), hidden=_ALL))
GROUP = EndpointClass("group", _table(hidden=_ALL))
BRANDS = EndpointClass("brands", _table(show=("operator", "chargingpools", "chargingstations"), hidden=_ALL))
BRAND = EndpointClass("brand", _table(hidden=_ALL))
TARIFFS = EndpointClass("tariffs", _table(show=("operator", "evses"), hidden=_ALL))
TARIFF = EndpointClass("tariff", _table(hidden=_ALL))

ENDPOINTS = {e.name: e for e in (NETWORK, OPERATORS, OPERATOR, POOLS, POOL, STATIONS, STATION,
                                 EVSES, EVSE, GROUPS, GROUP, BRANDS, BRAND, TARIFFS, TARIFF)}


class DirectiveSet(object):
    """Immutable total mapping from relation name to InfoStatus."""

    def __init__(self, directives: Mapping[str, InfoStatus], ignored: Tuple[str, ...] = ()):
        self._directives = MappingProxyType(dict(directives))
        self.ignored = tuple(ignored)

    def get(self, name: str) -> InfoStatus:
        return self._directives.get(name, InfoStatus.HIDDEN)

    def with_hidden(self, name: Optional[str]) -> "DirectiveSet":
        """The same set with one relation forced to HIDDEN."""
        if name is None or self.get(name) == InfoStatus.HIDDEN:
            return self
        directives = dict(self._directives)
        directives[name] = InfoStatus.HIDDEN
        return DirectiveSet(directives, self.ignored)

    def items(self):
        return self._directives.items()

    def __eq__(self, other):
        if not isinstance(other, DirectiveSet):
            return NotImplemented
        return dict(self._directives) == dict(other._directives)

    def __hash__(self):
        return hash(frozenset(self._directives.items()))

    def __repr__(self):
        shown = ", ".join(f"{k}={v.value}" for k, v in sorted(self._directives.items()))
        return f"DirectiveSet({shown})"


def _tokens(values) -> Iterable[str]:
    if values is None:
        return
    if isinstance(values, str):
        values = [values]
    for value in values:
        for token in str(value).split(","):
            token = token.strip().lower()
            if token:
                yield token


def _parse_token(token: str, allow_negation: bool) -> Tuple[str, bool]:
    negated = token.startswith("-")
    if negated:
        if not allow_negation:
            raise InvalidDirectiveInput(f"Negation is not allowed here: '{token}'")
        token = token[1:]
    name = canonical_name(token)
    if name is None:
        raise InvalidDirectiveInput(f"Unknown relation '{token}'")
    return name, negated


def resolve_directives(endpoint: EndpointClass, expand=None, include=None) -> DirectiveSet:
    """
    Resolve expand/include token lists against an endpoint class.

    Args:
        endpoint: The EndpointClass of the request.
        expand: Relation tokens to embed; "-name" forces the relation hidden.
        include: Relation tokens to render as identifiers.

    Tokens are case-insensitive and may be comma separated. Invalid tokens are
    ignored and listed in DirectiveSet.ignored.
    """
    negated, expanded, included, ignored = set(), set(), set(), []
    for source, is_expand in ((expand, True), (include, False)):
        for token in _tokens(source):
            try:
                name, is_negated = _parse_token(token, allow_negation=is_expand)
            except InvalidDirectiveInput as e:
                log.debug(f"Ignoring directive token: {e.description}")
                ignored.append(token)
                continue
            if is_negated:
                negated.add(name)
            elif is_expand:
                expanded.add(name)
            else:
                included.add(name)

    directives = {}
    for name, default in endpoint.defaults.items():
        if name in negated:
            directives[name] = InfoStatus.HIDDEN
        elif name in expanded:
            directives[name] = InfoStatus.EXPAND
        elif name in included:
            directives[name] = InfoStatus.SHOW_ID_ONLY
        else:
            directives[name] = default
    result = DirectiveSet(directives, ignored)
    log.debug(f"Resolved directives for {endpoint.name}: {result}")
    return result
