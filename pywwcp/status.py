# pyWWCP Module - Status Histories
# -*- coding: utf-8 -*-
"""
 Status values and bounded, time-ordered status histories

 Every entity owns two independent histories, one per StatusAxis. Writers are
 serialised per history by a lock acquired with exponential backoff; readers
 take the current immutable tuple and never wait on writers.
"""
import bisect
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

from dateutil.parser import isoparse

from pywwcp.api_lock import uses_history_lock
from pywwcp.exceptions import InvalidStatusValue

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50


class StatusAxis(Enum):
    OPERATIONAL = "status"
    ADMIN = "adminStatus"

    @classmethod
    def parse(cls, text: Union[str, "StatusAxis"]) -> "StatusAxis":
        if isinstance(text, StatusAxis):
            return text
        token = str(text).strip().lower().replace("_", "").replace("-", "")
        if token in ("status", "operational", "operationalstatus"):
            return cls.OPERATIONAL
        if token in ("adminstatus", "admin", "administrative"):
            return cls.ADMIN
        raise ValueError(f"Unknown status axis '{text}'")


class StatusTypes(Enum):
    """Operational status codes."""
    Unknown = "Unknown"
    Unspecified = "Unspecified"
    Offline = "Offline"
    InDeployment = "InDeployment"
    Available = "Available"
    PartialAvailable = "PartialAvailable"
    Reserved = "Reserved"
    WaitingForPlugin = "WaitingForPlugin"
    PluggedIn = "PluggedIn"
    Charging = "Charging"
    DoorNotClosed = "DoorNotClosed"
    OutOfService = "OutOfService"
    Blocked = "Blocked"
    Error = "Error"


class AdminStatusTypes(Enum):
    """Administrative status codes."""
    Unknown = "Unknown"
    Unspecified = "Unspecified"
    Planned = "Planned"
    InDeployment = "InDeployment"
    OutOfService = "OutOfService"
    Operational = "Operational"
    Blocked = "Blocked"


class Timestamped(NamedTuple):
    timestamp: datetime
    value: Enum

    def to_json(self) -> dict:
        return {"timestamp": to_iso8601(self.timestamp), "status": self.value.value}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso8601(ts: datetime) -> str:
    """Format a timestamp as ISO 8601 UTC with millisecond precision, e.g. 2017-01-31T12:00:00.000Z"""
    ts = as_utc(ts)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def as_utc(ts: Union[datetime, str]) -> datetime:
    """Return a timezone-aware UTC datetime; naive values are taken as UTC."""
    if isinstance(ts, str):
        ts = isoparse(ts)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def parse_status(token, status_type, allowed=None) -> Enum:
    """
    Parse a status token (case-insensitive) into a member of status_type.

    Args:
        token: A status token string or an enum member.
        status_type: StatusTypes or AdminStatusTypes.
        allowed: Optional set of members valid for the entity kind.

    Raises:
        InvalidStatusValue: If the token is unknown or not allowed.
    """
    if isinstance(token, Enum):
        if not isinstance(token, status_type):
            raise InvalidStatusValue(f"Invalid {status_type.__name__} value '{token.value}'!")
        member = token
    else:
        wanted = str(token).strip().lower()
        member = next((m for m in status_type if m.value.lower() == wanted), None)
        if member is None:
            raise InvalidStatusValue(f"Unknown {status_type.__name__} value '{token}'!")
    if allowed is not None and member not in allowed:
        raise InvalidStatusValue(f"Status '{member.value}' is not allowed here!")
    return member


class StatusHistory(object):
    """
    Bounded history of Timestamped status values for one entity and one axis.

    Entries are kept ordered by timestamp; entries with equal timestamps keep
    their append order, so the last appended one is the current value. When
    more than max_depth entries exist the oldest ones are evicted.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, lock_timeout: float = 2.0):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.max_depth = max_depth
        self.timeout = lock_timeout
        self.api_lock = threading.Lock()
        self._entries: Tuple[Timestamped, ...] = ()
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> Tuple[Timestamped, ...]:
        """Immutable view of all retained entries, oldest first."""
        return self._entries

    @property
    def current(self) -> Optional[Timestamped]:
        entries = self._entries
        return entries[-1] if entries else None

    def latest(self, count: int) -> Tuple[Timestamped, ...]:
        """At most count entries, newest first."""
        entries = self._entries
        if count <= 0:
            return ()
        return tuple(reversed(entries[-count:]))

    def __len__(self):
        return len(self._entries)

    def append(self, value: Enum, timestamp: Optional[datetime] = None) -> Timestamped:
        entry = Timestamped(as_utc(timestamp) if timestamp is not None else utcnow(), value)
        self._append(entry)
        return entry

    @uses_history_lock
    def compare_and_append(self, expected_version: int, entry: Timestamped) -> bool:
        """Append entry only if no other append happened since expected_version was read."""
        if self._version != expected_version:
            log.debug(f"Version mismatch on append: expected {expected_version}, found {self._version}")
            return False
        self._insert(entry)
        return True

    @uses_history_lock
    def _append(self, entry: Timestamped):
        self._insert(entry)

    def _insert(self, entry: Timestamped):
        # Called with the lock held; readers keep whatever tuple they already hold
        entries = list(self._entries)
        keys = [e.timestamp for e in entries]
        entries.insert(bisect.bisect_right(keys, entry.timestamp), entry)
        if len(entries) > self.max_depth:
            entries = entries[len(entries) - self.max_depth:]
        self._entries = tuple(entries)
        self._version += 1
