import functools
import logging

from pywwcp.exceptions import ProjectionError, WWCPError

log = logging.getLogger(__name__)


# Projection Decorator
# Projections either return complete JSON or fail; unexpected faults are reported as ProjectionError
def atomic_projection(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WWCPError:
            raise
        except Exception as e:
            log.error(f"Projection [{func.__name__}] failed: {e!r}")
            raise ProjectionError(f"Internal error while projecting: {type(e).__name__}") from e
    return wrapper
