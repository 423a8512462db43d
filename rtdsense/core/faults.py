# RTD Sense - Fault status decoding

from enum import Enum


class FaultKind(Enum):
    HIGH_THRESHOLD = 0x80
    LOW_THRESHOLD = 0x40
    REF_IN_LOW = 0x20       # REFIN- > 0.85 x VBIAS
    REF_IN_HIGH = 0x10      # REFIN- < 0.85 x VBIAS, FORCE- open
    RTD_IN_LOW = 0x08       # RTDIN- < 0.85 x VBIAS, FORCE- open
    OVER_UNDER_VOLTAGE = 0x04
    UNKNOWN = 0x00


_DESCRIPTIONS = {
    FaultKind.HIGH_THRESHOLD: "RTD high threshold exceeded",
    FaultKind.LOW_THRESHOLD: "RTD low threshold exceeded",
    FaultKind.REF_IN_LOW: "REFIN- > 0.85 x VBIAS",
    FaultKind.REF_IN_HIGH: "REFIN- < 0.85 x VBIAS (FORCE- open)",
    FaultKind.RTD_IN_LOW: "RTDIN- < 0.85 x VBIAS (FORCE- open)",
    FaultKind.OVER_UNDER_VOLTAGE: "Over/under voltage",
    FaultKind.UNKNOWN: "Fault flag set with empty status",
}

KNOWN_FAULTS = tuple(kind for kind in FaultKind if kind is not FaultKind.UNKNOWN)


def decode_faults(status):
    """Every set bit is its own fault; more than one can be active.

    Only called when the RTD fault flag was set, so a status with no known
    bit is reported as UNKNOWN rather than as no fault.
    """
    kinds = frozenset(kind for kind in KNOWN_FAULTS if status & kind.value)
    if not kinds:
        return frozenset([FaultKind.UNKNOWN])
    return kinds


def describe(kind):
    return _DESCRIPTIONS[kind]
