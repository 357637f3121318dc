# pyWWCP Module - Upstream Notification
# -*- coding: utf-8 -*-
"""
 Notify external systems about applied status changes

 Notifiers never raise: a failed notification is logged and the local
 history append it reports on stays in place.
"""
import logging
from typing import Callable, NamedTuple, Optional

import requests

from pywwcp.status import StatusAxis, Timestamped, to_iso8601

log = logging.getLogger(__name__)


class StatusChangeEvent(NamedTuple):
    entity_id: str
    kind: str
    axis: StatusAxis
    entry: Timestamped

    def to_json(self) -> dict:
        return {
            "@id": self.entity_id,
            "kind": self.kind,
            "axis": self.axis.value,
            "timestamp": to_iso8601(self.entry.timestamp),
            "newstatus": self.entry.value.value,
        }


class UpstreamNotifier(object):
    """Interface of the upstream event channel."""

    def notify(self, event: StatusChangeEvent) -> bool:
        raise NotImplementedError

    def close(self):
        pass


class CallbackUpstreamNotifier(UpstreamNotifier):
    """Hand every event to a callable, e.g. a message queue producer."""

    def __init__(self, callback: Callable[[StatusChangeEvent], None]):
        self.callback = callback

    def notify(self, event: StatusChangeEvent) -> bool:
        try:
            self.callback(event)
        except Exception as exc:
            log.error(f"Upstream callback failed for {event.entity_id}: {exc}")
            return False
        return True


class HTTPUpstreamNotifier(UpstreamNotifier):
    """POST every event as JSON to an upstream URL."""

    def __init__(self, url: str, timeout: float = 5.0, poolmaxsize: int = 10):
        self.url = url
        self.timeout = timeout
        # Create session object for http connection re-use
        self.session = requests.Session()
        a = requests.adapters.HTTPAdapter(pool_maxsize=poolmaxsize)
        self.session.mount('https://', a)
        self.session.mount('http://', a)

    def notify(self, event: StatusChangeEvent) -> bool:
        payload = event.to_json()
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            log.error(f"ERROR Timeout sending status of {event.entity_id} upstream to {self.url}")
            return False
        except requests.exceptions.ConnectionError:
            log.error(f"ERROR Unable to connect to upstream at {self.url}")
            return False
        except requests.exceptions.RequestException as exc:
            log.error(f"ERROR Unknown error sending status upstream to {self.url}: {exc}")
            return False
        if r.status_code >= 500:
            log.error(f"Server-side problem at upstream (status code {r.status_code}) at {self.url}")
            return False
        elif 400 <= r.status_code < 500:
            log.error(f"Upstream rejected status of {event.entity_id} (status code {r.status_code}) at {self.url}")
            return False
        log.debug(f"Sent {payload} upstream to {self.url}")
        return True

    def close(self):
        self.session.close()


def notifier_from_settings(settings) -> Optional[UpstreamNotifier]:
    """Build the notifier configured by WWCP_UPSTREAM_URL, or None."""
    if not settings.upstream_url:
        return None
    return HTTPUpstreamNotifier(settings.upstream_url, timeout=settings.upstream_timeout)
