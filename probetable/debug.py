from typing import TYPE_CHECKING, Any

from .shared import printf
from .slot import FormerlyLive, Live, NeverUsed, Slot, SlotState, state_of

if TYPE_CHECKING:
    from .table import HashTable


def dump_table(table: "HashTable", name: str):
    printf(
        "== {0:s} (capacity {1:d}, occupancy {2:d}) ==\n",
        name,
        table.capacity,
        table.occupancy,
    )

    for index, slot in enumerate(table.slots):
        dump_slot(table, index, slot)


def dump_slot(table: "HashTable", index: int, slot: Slot):
    printf("{0:04d} ", index)
    match slot:
        case NeverUsed():
            printf("NEVER_USED\n")
        case FormerlyLive():
            printf("FORMERLY_LIVE\n")
        case Live(key, value):
            printf(
                "LIVE {0!r} -> {1!r} (probe {2:d})\n",
                key,
                value,
                probe_length(table, index, key),
            )


def probe_length(table: "HashTable", index: int, key: Any) -> int:
    """Number of steps from the key's home index to `index`."""
    return (index - table.home_index(key)) % table.capacity


def table_statistics(table: "HashTable") -> dict:
    counts = {state: 0 for state in SlotState}
    probes = []
    for index, slot in enumerate(table.slots):
        counts[state_of(slot)] += 1
        if isinstance(slot, Live):
            probes.append(probe_length(table, index, slot.key))

    return {
        "capacity": table.capacity,
        "occupancy": table.occupancy,
        "load_factor": table.occupancy / table.capacity,
        "live": counts[SlotState.LIVE],
        "formerly_live": counts[SlotState.FORMERLY_LIVE],
        "never_used": counts[SlotState.NEVER_USED],
        "max_probe_length": max(probes) if probes else 0,
        "avg_probe_length": sum(probes) / len(probes) if probes else 0.0,
    }
