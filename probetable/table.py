"""Open-addressing hash table with linear probing.

Slots are in one of three states (see `probetable.slot`). A lookup walks
forward from the key's home index and stops at the first slot that is
either never used, formerly live, or live with an equal key.

Stopping at formerly-live slots has a known limitation: if a key's probe
chain runs through a slot that was deleted after the key was inserted, the
key is reported absent by `get` until the next resize rebuilds the array
(resize drops every formerly-live slot) or the key is put again. Deleting
such a key still removes it. Construct the table with
`ProbePolicy.SKIP_DELETED` to have lookups walk past deleted slots instead.

Values returned by `get` are the stored objects themselves. Treat them as
invalid after the next put, delete or pop; `borrow` returns a view that
enforces this.
"""

from dataclasses import dataclass
import enum
import logging
from typing import Any, Hashable, Iterator

from .debug import dump_table
from .hasher import Hasher, builtin_hash
from .slot import FORMERLY_LIVE, NEVER_USED, FormerlyLive, Live, NeverUsed, Slot

logger = logging.getLogger(__name__)


GROW_FACTOR = 2


_debug_trace_resize = False


def set_debug_trace_resize(b: bool):
    global _debug_trace_resize
    _debug_trace_resize = b


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class PutOk:
    pass


@dataclass(frozen=True)
class PutError:
    reason: str


PutResult = PutOk | PutError


class ProbePolicy(enum.Enum):
    STOP_AT_DELETED = enum.auto()
    SKIP_DELETED = enum.auto()


class CapacityError(ValueError):
    pass


class StaleViewError(RuntimeError):
    pass


class ValueView:
    """Read-only handle on a stored value, valid until the table next mutates."""

    def __init__(self, table: "HashTable", value: Any) -> None:
        self._table = table
        self._version = table._version
        self._value = value

    def is_valid(self) -> bool:
        return self._table._version == self._version

    @property
    def value(self) -> Any:
        if not self.is_valid():
            raise StaleViewError("table was mutated after this value was borrowed")
        return self._value

    def __repr__(self) -> str:
        state = "valid" if self.is_valid() else "stale"
        return f"ValueView({self._value!r}, {state})"


class HashTable:
    def __init__(
        self,
        capacity: int,
        hasher: Hasher = builtin_hash,
        probe_policy: ProbePolicy = ProbePolicy.STOP_AT_DELETED,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise CapacityError(f"capacity must be an int, got {capacity!r}")
        if capacity < 1:
            raise CapacityError(f"capacity must be positive, got {capacity}")

        self._slots: list[Slot] = [NEVER_USED] * capacity
        self._occupancy = 0
        self._hasher = hasher
        self._probe_policy = probe_policy
        self._version = 0

        logger.debug(f"Created hash table with {capacity} slots")

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def occupancy(self) -> int:
        return self._occupancy

    @property
    def slots(self) -> tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def probe_policy(self) -> ProbePolicy:
        return self._probe_policy

    def home_index(self, key: Hashable) -> int:
        return self._hasher(key) % self.capacity

    def find_slot(self, key: Hashable) -> int:
        """Index of the live slot holding `key`, or of the slot where the walk stopped.

        The caller has to inspect the returned slot: only a live slot with an
        equal key is a hit, anything else is the insertion point.
        """
        capacity = self.capacity
        index = self.home_index(key)
        first_deleted: int | None = None

        for _ in range(capacity):
            match self._slots[index]:
                case NeverUsed():
                    return index if first_deleted is None else first_deleted
                case Live(key=k) if k is key or k == key:
                    return index
                case FormerlyLive():
                    if self._probe_policy is ProbePolicy.STOP_AT_DELETED:
                        return index
                    if first_deleted is None:
                        first_deleted = index
            index = (index + 1) % capacity

        # every slot was visited: only reachable with SKIP_DELETED, and the
        # load bound leaves at least one non-live slot to reuse
        assert first_deleted is not None, "probe walk found no free slot"
        return first_deleted

    def get(self, key: Hashable) -> Any | NotFound:
        if self._occupancy == 0:
            return NotFound()

        slot = self._slots[self.find_slot(key)]
        if isinstance(slot, Live) and (slot.key is key or slot.key == key):
            return slot.value
        return NotFound()

    def borrow(self, key: Hashable) -> ValueView | NotFound:
        value = self.get(key)
        if isinstance(value, NotFound):
            return value
        return ValueView(self, value)

    def put(self, key: Hashable, value: Any) -> PutResult:
        self._version += 1
        self._insert(key, value)

        # more than one doubling is only needed when growing from capacity 1
        while self._occupancy * 2 >= self.capacity:
            self._resize()

        return PutOk()

    def delete(self, key: Hashable) -> None:
        self.pop(key)

    def pop(self, key: Hashable) -> Any | NotFound:
        self._version += 1

        index = self.find_slot(key)
        slot = self._slots[index]
        if isinstance(slot, FormerlyLive):
            return self._retire_shadowed(index, key)
        if not isinstance(slot, Live) or not (slot.key is key or slot.key == key):
            return NotFound()

        self._slots[index] = FORMERLY_LIVE
        self._occupancy -= 1
        return slot.value

    def add_all(self, from_t: "HashTable"):
        for key, value in from_t.items():
            self.put(key, value)

    def items(self) -> Iterator[tuple[Hashable, Any]]:
        version = self._version
        for slot in self._slots:
            if self._version != version:
                raise StaleViewError("table was mutated during iteration")
            if isinstance(slot, Live):
                yield slot.key, slot.value

    def __contains__(self, key: Hashable) -> bool:
        return not isinstance(self.get(key), NotFound)

    def __len__(self) -> int:
        return self._occupancy

    def __repr__(self) -> str:
        return f"HashTable(capacity={self.capacity}, occupancy={self._occupancy})"

    def _insert(self, key: Hashable, value: Any):
        # Write without checking the load factor. Used by put and by resize.
        index = self.find_slot(key)
        match self._slots[index]:
            case Live():
                pass
            case FormerlyLive():
                self._retire_shadowed(index, key)
                self._occupancy += 1
            case NeverUsed():
                self._occupancy += 1

        self._slots[index] = Live(key, value)

    def _retire_shadowed(self, start: int, key: Hashable) -> Any | NotFound:
        # With STOP_AT_DELETED the walk may have stopped in front of a live
        # copy of the key; retire it and hand back its value.
        if self._probe_policy is not ProbePolicy.STOP_AT_DELETED:
            return NotFound()

        capacity = self.capacity
        index = (start + 1) % capacity
        for _ in range(capacity - 1):
            match self._slots[index]:
                case NeverUsed():
                    break
                case Live(key=k, value=v) if k is key or k == key:
                    self._slots[index] = FORMERLY_LIVE
                    self._occupancy -= 1
                    return v
            index = (index + 1) % capacity
        return NotFound()

    def _resize(self):
        old_capacity = self.capacity
        new_capacity = old_capacity * GROW_FACTOR

        old_slots = self._slots
        self._slots = [NEVER_USED] * new_capacity
        self._occupancy = 0
        self._version += 1

        for slot in old_slots:
            if isinstance(slot, Live):
                self._insert(slot.key, slot.value)

        # growing from capacity 1 leaves the table at half load; put doubles again
        assert self._occupancy * 2 < new_capacity or old_capacity == 1

        logger.debug(
            f"Resized hash table from {old_capacity} to {new_capacity} slots, "
            f"moved {self._occupancy} entries"
        )
        if _debug_trace_resize:
            dump_table(self, "resize")
