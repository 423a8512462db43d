# RTD Sense - Reading types

from dataclasses import dataclass
from typing import FrozenSet, Optional

from rtdsense.core.faults import FaultKind, describe


@dataclass(frozen=True)
class RawCode:
    msb: int
    lsb: int

    @property
    def code(self) -> int:
        # Low bit of the pair is the fault flag
        return ((self.msb << 8) | self.lsb) >> 1

    @property
    def fault(self) -> bool:
        return bool(self.lsb & 0x01)


@dataclass(frozen=True)
class Temperature:
    celsius: float
    resistance: Optional[float] = None
    raw: Optional[RawCode] = None


@dataclass(frozen=True)
class Fault:
    kinds: FrozenSet[FaultKind]
    status: int = 0
    raw: Optional[RawCode] = None

    def describe(self):
        return ", ".join(describe(kind) for kind in sorted(self.kinds, key=lambda k: -k.value))
