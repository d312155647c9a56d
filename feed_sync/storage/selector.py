"""Storage engine selection.

Backends register a factory under a name; resolve() looks the name up and
calls the factory. A name can also be registered as pending, which marks a
backend that is known but not usable yet.
"""

import threading
from typing import Callable, Dict, List, Optional, Set

from feed_sync.errors import BackendNotImplemented, UnknownBackend
from feed_sync.storage.base import Store

StoreFactory = Callable[..., Store]

_factories: Dict[str, StoreFactory] = {}
_pending: Set[str] = set()
_lock = threading.Lock()


def register_backend(name: str, factory: Optional[StoreFactory] = None):
    """Register a storage backend factory under a name.

    Can be used directly or as a class decorator:

        @register_backend("memory")
        class MemoryStore(Store): ...
    """
    def decorator(f: StoreFactory) -> StoreFactory:
        with _lock:
            _factories[name] = f
            _pending.discard(name)
        return f

    if factory is not None:
        return decorator(factory)
    return decorator


def register_pending_backend(*names: str) -> None:
    """Mark backend names as recognized but not implemented."""
    with _lock:
        for name in names:
            if name not in _factories:
                _pending.add(name)


def unregister_backend(name: str) -> None:
    with _lock:
        _factories.pop(name, None)
        _pending.discard(name)


def available_backends() -> List[str]:
    return sorted(_factories)


def resolve(name: str, **options) -> Store:
    """Resolve a backend name to a storage engine.

    Args:
        name: Backend name, e.g. "memory" or "sqlite"
        **options: Passed to the backend factory

    Returns:
        A new Store instance; no connection is opened here

    Raises:
        UnknownBackend: If the name is not recognized
        BackendNotImplemented: If the backend is recognized but unfinished
    """
    factory = _factories.get(name)
    if factory is not None:
        return factory(**options)
    if name in _pending:
        raise BackendNotImplemented(f"storage backend '{name}' is work in progress")
    raise UnknownBackend(f"unknown storage backend '{name}'")


register_pending_backend("mysql", "mariadb")
