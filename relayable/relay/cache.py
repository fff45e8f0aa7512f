import logging
LOGGER = logging.getLogger(__name__)

import functools
import threading
from typing import Any, Callable, Dict, Tuple


_CACHE: Dict[Tuple, Any] = {}
_CACHE_LOCK = threading.RLock()


def _cache_key(func: Callable, args, kwargs) -> Tuple:
    # classmethods receive the class first; key on its qualified name so
    # subclasses get their own entry
    parts = []
    for arg in args:
        if isinstance(arg, type):
            parts.append(f"{arg.__module__}.{arg.__qualname__}")
        else:
            parts.append(arg)
    return (func.__module__, func.__qualname__, tuple(parts), tuple(sorted(kwargs.items())))


def relay_cache(func: Callable) -> Callable:
    """
    Memoize a factory so that repeated calls with the same arguments return
    the same object for the life of the process (or until relay_cache_clear).
    Arguments must be hashable.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        key = _cache_key(func, args, kwargs)
        with _CACHE_LOCK:
            if key in _CACHE:
                return _CACHE[key]
            value = func(*args, **kwargs)
            _CACHE[key] = value
            LOGGER.debug(f"Cached value for {func.__qualname__}")
            return value
    return wrapper


def relay_cache_clear() -> None:
    with _CACHE_LOCK:
        count = len(_CACHE)
        _CACHE.clear()
    LOGGER.info(f"Cleared {count} cached values")
