from dataclasses import dataclass
import enum
from typing import Any, Hashable, TypeGuard


@dataclass(frozen=True)
class NeverUsed:
    pass


@dataclass(frozen=True)
class Live:
    key: Hashable
    value: Any


@dataclass(frozen=True)
class FormerlyLive:
    pass


Slot = NeverUsed | Live | FormerlyLive

NEVER_USED = NeverUsed()
FORMERLY_LIVE = FormerlyLive()


class SlotState(enum.Enum):
    NEVER_USED = enum.auto()
    LIVE = enum.auto()
    FORMERLY_LIVE = enum.auto()


def state_of(slot: Slot) -> SlotState:
    match slot:
        case NeverUsed():
            return SlotState.NEVER_USED
        case Live():
            return SlotState.LIVE
        case FormerlyLive():
            return SlotState.FORMERLY_LIVE
    raise Exception("not a slot", slot)


def is_live(slot: Slot) -> TypeGuard[Live]:
    return isinstance(slot, Live)


def is_ever_used(slot: Slot) -> bool:
    return not isinstance(slot, NeverUsed)
