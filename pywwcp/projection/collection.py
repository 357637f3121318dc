"""
 Collection projector: ordering, pagination and pre-pagination counts
"""
import logging
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence

from pywwcp.directives import DirectiveSet
from pywwcp.projection.decorators import atomic_projection
from pywwcp.projection.entity import _project

log = logging.getLogger(__name__)

# Name of the out-of-band count, e.g. an HTTP response header
TOTAL_COUNT_HEADER = "X-ExpectedTotalNumberOfItems"


class ProjectionResult(NamedTuple):
    """A projected page (or mapping) and the item count before pagination."""
    content: Any
    total_count: int

    def to_json(self) -> dict:
        return {"content": self.content, "totalCount": self.total_count}

    def headers(self) -> dict:
        return {TOTAL_COUNT_HEADER: str(self.total_count)}


def paginate(ordered: Sequence, skip: int = 0, take: Optional[int] = None) -> List:
    """Apply skip (clamped at 0) then take (None means unbounded)."""
    start = max(0, int(skip or 0))
    if take is None:
        return list(ordered[start:])
    return list(ordered[start:start + max(0, int(take))])


@atomic_projection
def project_collection(network, entities: Iterable, directives: DirectiveSet, skip: int = 0,
                       take: Optional[int] = None) -> ProjectionResult:
    """
    Project a collection of entities ordered by identifier.

    The total count is taken from the same ordered snapshot that the page is
    cut from.
    """
    ordered = sorted(entities, key=lambda e: e.id)
    page = paginate(ordered, skip, take)
    log.debug(f"Projecting {len(page)} of {len(ordered)} item(s) (skip={skip}, take={take})")
    items = [_project(network, entity, directives, None, False, frozenset()) for entity in page]
    return ProjectionResult(items, len(ordered))
