"""
 Status history projector
"""
import logging
from typing import Iterable, List, Optional

from pywwcp.exceptions import InvalidHistorySize
from pywwcp.projection.collection import ProjectionResult, paginate
from pywwcp.projection.decorators import atomic_projection
from pywwcp.status import StatusAxis

log = logging.getLogger(__name__)


def check_history_size(history_size) -> int:
    """Return history_size as int, raising InvalidHistorySize unless it is a positive integer."""
    if isinstance(history_size, bool) or (isinstance(history_size, float) and not history_size.is_integer()):
        raise InvalidHistorySize(f"Invalid history size '{history_size}'!")
    try:
        size = int(history_size)
    except (TypeError, ValueError):
        raise InvalidHistorySize(f"Invalid history size '{history_size}'!") from None
    if size <= 0:
        raise InvalidHistorySize(f"History size must be a positive integer, got '{history_size}'!")
    return size


def _bounded(entity, axis: StatusAxis, size: int) -> List[dict]:
    return [entry.to_json() for entry in entity.history(axis).latest(size)]


@atomic_projection
def project_history(entity, axis, history_size: int = 1) -> List[dict]:
    """The newest history_size entries of one entity's history on axis, newest first."""
    size = check_history_size(history_size)
    return _bounded(entity, StatusAxis.parse(axis), size)


@atomic_projection
def project_history_collection(entities: Iterable, axis, history_size: int = 1, skip: int = 0,
                               take: Optional[int] = None) -> ProjectionResult:
    """
    Map identifier text (ascending) to each entity's bounded history.

    Pagination and total count follow project_collection.
    """
    size = check_history_size(history_size)
    axis = StatusAxis.parse(axis)
    ordered = sorted(entities, key=lambda e: e.id)
    page = paginate(ordered, skip, take)
    log.debug(f"Projecting {axis.value} of {len(page)} of {len(ordered)} item(s), depth {size}")
    return ProjectionResult({str(e.id): _bounded(e, axis, size) for e in page}, len(ordered))
