# pyWWCP Module - Identifiers
# -*- coding: utf-8 -*-
"""
 Hierarchical identifiers of the WWCP domain graph

 Textual form (delimiter '*'):
    RoamingNetworkId        Prod
    OperatorId              OP1
    ChargingPoolId          OP1*P1
    ChargingStationId       OP1*P1*S1
    EVSEId                  OP1*P1*S1*E1
    ChargingStationGroupId  OP1*G1
    BrandId                 OP1*B1
    ChargingTariffId        OP1*T1

 Every identifier round-trips through parse() and str() and is ordered by its
 segments in ascending lexicographic order.
"""
import functools
import re
from typing import Optional, Tuple

from pywwcp.exceptions import InvalidIdentifier

DELIMITER = "*"
SEGMENT_REGEX = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")


def _split(text, expected: int, prefixes: Tuple[str, ...], type_name: str) -> Tuple[str, ...]:
    if not isinstance(text, str) or not text.strip():
        raise InvalidIdentifier(f"Invalid {type_name}: empty identifier!")
    segments = tuple(text.strip().split(DELIMITER))
    if len(segments) != expected:
        raise InvalidIdentifier(f"Invalid {type_name} '{text}': expected {expected} segment(s)!")
    for segment in segments:
        if not SEGMENT_REGEX.match(segment):
            raise InvalidIdentifier(f"Invalid {type_name} '{text}': malformed segment '{segment}'!")
    # First segment is the operator (or network) code, the rest carry a type prefix
    for segment, prefix in zip(segments[1:], prefixes):
        if len(segment) < 2 or segment[0].upper() != prefix:
            raise InvalidIdentifier(f"Invalid {type_name} '{text}': segment '{segment}' must start with '{prefix}'!")
    return segments


@functools.total_ordering
class Identifier(object):
    """Base class of all structured identifiers."""
    __slots__ = ("segments",)

    SEGMENTS = 1
    PREFIXES: Tuple[str, ...] = ()

    def __init__(self, *segments: str):
        object.__setattr__(self, "segments", _split(DELIMITER.join(segments), self.SEGMENTS,
                                                     self.PREFIXES, self.__class__.__name__))

    def __setattr__(self, key, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @classmethod
    def parse(cls, text: str):
        """Parse text into an identifier, raising InvalidIdentifier on malformed input."""
        if isinstance(text, cls):
            return text
        return cls(*_split(text, cls.SEGMENTS, cls.PREFIXES, cls.__name__))

    @classmethod
    def try_parse(cls, text: str):
        try:
            return cls.parse(text)
        except InvalidIdentifier:
            return None

    def __str__(self):
        return DELIMITER.join(self.segments)

    def __repr__(self):
        return f"{self.__class__.__name__}('{self}')"

    def __hash__(self):
        return hash((self.__class__.__name__, self.segments))

    def __eq__(self, other):
        if not isinstance(other, Identifier):
            return NotImplemented
        return type(self) is type(other) and self.segments == other.segments

    def __lt__(self, other):
        if not isinstance(other, Identifier):
            return NotImplemented
        return (self.segments, self.__class__.__name__) < (other.segments, other.__class__.__name__)

    @property
    def operator_id(self) -> Optional["OperatorId"]:
        return None


class RoamingNetworkId(Identifier):
    __slots__ = ()


class OperatorId(Identifier):
    __slots__ = ()

    @property
    def operator_id(self) -> "OperatorId":
        return self


class _OperatorScopedId(Identifier):
    __slots__ = ()

    @property
    def operator_id(self) -> OperatorId:
        return OperatorId(self.segments[0])

    @property
    def suffix(self) -> str:
        return self.segments[-1]


class ChargingPoolId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 2
    PREFIXES = ("P",)


class ChargingStationId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 3
    PREFIXES = ("P", "S")

    @property
    def pool_id(self) -> ChargingPoolId:
        return ChargingPoolId(*self.segments[:2])


class EVSEId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 4
    PREFIXES = ("P", "S", "E")

    @property
    def pool_id(self) -> ChargingPoolId:
        return ChargingPoolId(*self.segments[:2])

    @property
    def station_id(self) -> ChargingStationId:
        return ChargingStationId(*self.segments[:3])


class ChargingStationGroupId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 2
    PREFIXES = ("G",)


class BrandId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 2
    PREFIXES = ("B",)


class ChargingTariffId(_OperatorScopedId):
    __slots__ = ()
    SEGMENTS = 2
    PREFIXES = ("T",)


# Two-segment ids are told apart by the prefix of their second segment
_BY_PREFIX = {
    "P": ChargingPoolId,
    "G": ChargingStationGroupId,
    "B": BrandId,
    "T": ChargingTariffId,
}


def parse_any(text: str) -> Identifier:
    """Parse any operator-scoped identifier (or an operator id) detecting its type."""
    if not isinstance(text, str) or not text.strip():
        raise InvalidIdentifier("Invalid identifier: empty identifier!")
    segments = text.strip().split(DELIMITER)
    if len(segments) == 1:
        return OperatorId.parse(text)
    if len(segments) == 2:
        id_class = _BY_PREFIX.get(segments[1][:1].upper())
        if id_class is None:
            raise InvalidIdentifier(f"Invalid identifier '{text}': unknown type prefix!")
        return id_class.parse(text)
    if len(segments) == 3:
        return ChargingStationId.parse(text)
    if len(segments) == 4:
        return EVSEId.parse(text)
    raise InvalidIdentifier(f"Invalid identifier '{text}': too many segments!")
