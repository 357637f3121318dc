# pyWWCP Module - Status Mutation
# -*- coding: utf-8 -*-
"""
 Status mutation fan-out

 set_status() scans every container that could own a child identifier (the
 roaming network for operator ids, every operator otherwise). For each
 container that actually contains the child, the new value is appended to
 the child's history on the requested axis and, when configured, reported
 to the upstream channel.

 Ownership is unique (enforced when entities are registered), so at most
 one container is updated.
"""
import json
import logging
from typing import NamedTuple, Optional, Union

from pydantic import ValidationError

from pywwcp import ids
from pywwcp.entities import ALLOWED_STATUS, KIND_OF_ID, STATUS_TYPES
from pywwcp.exceptions import (InvalidStatusRequest, MutationConflict, UnknownIdentifier,
                               WWCPError)
from pywwcp.models import StatusChangeRequest
from pywwcp.status import StatusAxis, Timestamped, as_utc, parse_status, utcnow
from pywwcp.upstream import StatusChangeEvent, UpstreamNotifier

log = logging.getLogger(__name__)


class StatusReply(NamedTuple):
    """Outcome of a status mutation request."""
    ok: bool
    applied_count: int = 0
    error_kind: Optional[str] = None
    description: str = ""

    def to_json(self) -> dict:
        if self.ok:
            return {"description": "OK"}
        return {"description": self.description}


class StatusFanout(object):

    def __init__(self, network, upstream: Optional[UpstreamNotifier] = None, send_upstream: bool = True,
                 max_retries: int = 3):
        self.network = network
        self.upstream = upstream
        self.send_upstream = send_upstream
        self.max_retries = max_retries

    def set_status(self, child_id: Union[str, ids.Identifier], axis, new_status, timestamp=None) -> int:
        """
        Append new_status to the history of child_id on axis in every owning container.

        Args:
            child_id: Identifier (text or object) of a charging station operator, pool,
                      station, EVSE, group, brand or tariff.
            axis: StatusAxis or its name ("status", "adminStatus").
            new_status: Status token or enum member valid for the child's kind and axis.
            timestamp: datetime or ISO 8601 text, default now (UTC).

        Returns:
            Number of containers updated.

        Raises:
            InvalidIdentifier, InvalidStatusValue, InvalidStatusRequest: Malformed input.
            UnknownIdentifier: No container owns child_id.
            MutationConflict: The history lock stayed busy through all retries.
        """
        child_id = ids.parse_any(child_id) if isinstance(child_id, str) else child_id
        kind = KIND_OF_ID.get(type(child_id))
        if kind is None:
            raise UnknownIdentifier(f"Unknown identifier '{child_id}'!")
        try:
            axis = StatusAxis.parse(axis)
            when = as_utc(timestamp) if timestamp is not None else utcnow()
        except (ValueError, OverflowError) as e:
            raise InvalidStatusRequest(f"Invalid status request: {e}") from e
        value = parse_status(new_status, STATUS_TYPES[axis], ALLOWED_STATUS[kind][axis])
        entry = Timestamped(when, value)

        log.debug(f"{entry.timestamp.isoformat()} {self.network.id} SET {axis.value} of {child_id} "
                  f"to {value.value}")

        applied = 0
        for container in self.network.containers_for(child_id):
            if not self.network.contains(container, child_id):
                continue
            child = self.network.lookup(child_id)
            self._append(child.history(axis), entry)
            applied += 1
            self._notify(StatusChangeEvent(str(child_id), kind.value, axis, entry))

        if applied == 0:
            raise UnknownIdentifier(f"Unknown {kind.value} '{child_id}'!")
        if applied > 1:
            log.warning(f"{child_id} is owned by {applied} containers, its {axis.value} was applied {applied} times")
        log.info(f"Set {axis.value} of {child_id} to {value.value} ({applied} container(s))")
        return applied

    def _append(self, history, entry: Timestamped):
        # The new entry does not depend on the current history, so only lock timeouts conflict
        conflict = None
        for attempt in range(self.max_retries + 1):
            try:
                history.append(entry.value, entry.timestamp)
                return
            except MutationConflict as e:
                conflict = e
            log.debug(f"Retrying append after conflict (attempt {attempt + 1} of {self.max_retries + 1})")
        raise conflict

    def _notify(self, event: StatusChangeEvent):
        if not self.send_upstream or self.upstream is None:
            return
        if not self.upstream.notify(event):
            log.warning(f"Upstream was not notified about {event.axis.value} of {event.entity_id}")

    def apply_status_request(self, child_id, axis, body) -> StatusReply:
        """
        Apply a JSON status request {"newstatus": "<token>"} (dict or text).

        Never raises for client errors; the reply carries the error kind and
        a description suitable for {"description": ...} responses.
        """
        try:
            if isinstance(body, (str, bytes)):
                try:
                    body = json.loads(body)
                except ValueError as e:
                    raise InvalidStatusRequest(f"Invalid JSON request body: {e}") from e
            try:
                request = StatusChangeRequest.model_validate(body)
            except ValidationError as e:
                raise InvalidStatusRequest("Invalid status request: 'newstatus' is missing or invalid!") from e
            applied = self.set_status(child_id, axis, request.newstatus, request.timestamp)
        except WWCPError as e:
            log.debug(f"Rejected status request for {child_id}: {e.kind} {e.description}")
            return StatusReply(False, 0, e.kind, e.description)
        return StatusReply(True, applied)
