"""
Foundation classes of the metadata object model.

Every database object has a name, an object type, optional documentation and
an owner. The owner is the composite that contains the object; it is stored
as a weak reference so the owning container's child collection is the only
strong link between parent and child.
"""

from __future__ import annotations

import logging
import threading
import weakref
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from schemagraph.errors import ConfigurationError, ImportFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DBObject:
    """
    Common base of all database objects.

    Args:
        name: Object name, may be None for anonymous constraints
        object_type: Lowercase type label, e.g. 'table' or 'foreign key constraint'
        owner: The composite containing this object
        doc: Free-text documentation (a table or column comment)
    """

    def __init__(
        self,
        name: Optional[str],
        object_type: str,
        owner: Optional["CompositeDBObject"] = None,
        doc: Optional[str] = None,
    ):
        self.name = name
        self.object_type = object_type
        self.doc = doc
        self._owner_ref: Optional[weakref.ReferenceType] = None
        self.owner = owner

    @property
    def owner(self) -> Optional["CompositeDBObject"]:
        return self._owner_ref() if self._owner_ref is not None else None

    @owner.setter
    def owner(self, owner: Optional["CompositeDBObject"]) -> None:
        self._owner_ref = weakref.ref(owner) if owner is not None else None

    def ensure_attached(self) -> None:
        """
        Raise if an owner up the chain has been garbage collected.

        Owners are weakly referenced, so an object kept alive on its own
        loses its schema and database once nothing refers to the Database.

        Raises:
            ConfigurationError: If the chain of owners is broken
        """
        current: Optional[DBObject] = self
        while current is not None and current._owner_ref is not None:
            owner = current._owner_ref()
            if owner is None:
                raise ConfigurationError(
                    f"Owner of {self.object_type} '{self.name}' is no longer alive, "
                    f"keep a reference to its Database while using it"
                )
            current = owner

    def is_identical(self, other: Any) -> bool:
        """Structural comparison that ignores the owner."""
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if other is None or type(self) is not type(other):
            return False
        return (
            self.name == other.name
            and self.object_type == other.object_type
            and self.owner == other.owner
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name, self.object_type))

    def __str__(self) -> str:
        return self.name or ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CompositeDBObject(DBObject):
    """A database object that contains other database objects."""

    def get_components(self) -> List[DBObject]:
        raise NotImplementedError

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, CompositeDBObject) or self.object_type != other.object_type:
            return False
        mine = self.get_components()
        theirs = other.get_components()
        if len(mine) != len(theirs):
            return False
        return all(a.is_identical(b) for a, b in zip(mine, theirs))


class OrderedNameMap(Generic[T]):
    """
    Mapping from object names to objects with case-insensitive lookup.

    Insertion order is preserved and the name casing of the first insert is
    kept for display.
    """

    def __init__(self) -> None:
        self._items: Dict[str, T] = {}
        self._names: Dict[str, str] = {}

    @staticmethod
    def _key(name: Optional[str]) -> str:
        return name.lower() if name is not None else ""

    def put(self, name: Optional[str], value: T) -> None:
        key = self._key(name)
        if key not in self._names:
            self._names[key] = name or ""
        self._items[key] = value

    def get(self, name: Optional[str]) -> Optional[T]:
        return self._items.get(self._key(name))

    def remove(self, name: Optional[str]) -> Optional[T]:
        key = self._key(name)
        self._names.pop(key, None)
        return self._items.pop(key, None)

    def names(self) -> List[str]:
        return list(self._names.values())

    def values(self) -> List[T]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()
        self._names.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))


class ImportState(str, Enum):
    """Lifecycle of a lazily imported aspect."""
    PENDING = "pending"
    IMPORTING = "importing"
    IMPORTED = "imported"


class ImportOnce:
    """
    Guards one lazily imported aspect so the fetch runs at most once.

    Concurrent callers block until the first import finishes. A call made by
    the importing thread itself while the fetch is running returns at once,
    which lets receivers use the public add methods of the container being
    filled. A failed fetch calls `reset`, puts the guard back into PENDING
    and raises, so a later call retries.
    """

    def __init__(self, aspect: str):
        self.aspect = aspect
        self.state = ImportState.PENDING
        self._lock = threading.RLock()

    @property
    def done(self) -> bool:
        return self.state == ImportState.IMPORTED

    def mark_imported(self) -> None:
        with self._lock:
            self.state = ImportState.IMPORTED

    def mark_pending(self) -> None:
        with self._lock:
            self.state = ImportState.PENDING

    def ensure(
        self,
        fetch: Callable[[], None],
        reset: Optional[Callable[[], None]] = None,
        owner: str = "",
    ) -> None:
        if self.state == ImportState.IMPORTED:
            return
        with self._lock:
            if self.state != ImportState.PENDING:
                return
            self.state = ImportState.IMPORTING
            try:
                fetch()
            except ImportFailedError:
                self._rollback(reset)
                raise
            except Exception as e:
                self._rollback(reset)
                raise ImportFailedError(self.aspect, owner, e) from e
            self.state = ImportState.IMPORTED
            logger.debug(f"Imported {self.aspect} of {owner}")

    def _rollback(self, reset: Optional[Callable[[], None]]) -> None:
        if reset is not None:
            reset()
        self.state = ImportState.PENDING
