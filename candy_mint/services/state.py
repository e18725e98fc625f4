"""Per-session candy machine state."""

from dataclasses import dataclass
from typing import Optional

from candy_mint.models.candy_machine import CandyGuardSnapshot, CandyMachineSnapshot


@dataclass
class ServiceState:
    """Most recently fetched machine and guard snapshots.

    Owned by the mint service facade; the orchestrator only reads it.
    Snapshots are replaced as a pair and never modified in place.
    """

    machine: Optional[CandyMachineSnapshot] = None
    guard: Optional[CandyGuardSnapshot] = None

    @property
    def is_ready(self) -> bool:
        return self.machine is not None and self.guard is not None

    def replace(self, machine: CandyMachineSnapshot, guard: CandyGuardSnapshot) -> None:
        self.machine = machine
        self.guard = guard

    def clear(self) -> None:
        self.machine = None
        self.guard = None
