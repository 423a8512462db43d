# RTD Sense - Calibration and Session Options

import math
from dataclasses import dataclass, replace
from enum import Enum

from rtdsense.errors import InvalidArgument

# Reference boards: 1k reference for PT1000 is 4300 ohms, 100R for PT100 is 430
PT1000_NOMINAL = 1000.0
PT1000_REFERENCE = 4300.0
PT100_NOMINAL = 100.0
PT100_REFERENCE = 430.0

# Delay between the two config writes and before the result read (microseconds).
# Hardware dependent, tune per board.
DEFAULT_BIAS_DELAY_US = 65
DEFAULT_SETTLE_DELAY_US = 100

# SPI mode 1 (CPOL=0, CPHA=1)
DEFAULT_SPI_MODE = 1
DEFAULT_CLOCK_SPEED_HZ = 65536

SPI_MODES = (0, 1, 2, 3)


class WiringMode(Enum):
    TWO_OR_FOUR_WIRE = 2
    THREE_WIRE = 3


class FilterFrequency(Enum):
    HZ_50 = 50
    HZ_60 = 60


@dataclass(frozen=True)
class CalibrationParams:
    """Resistor values of the front-end board plus a multiplicative trim.

    correction_factor scales the measured resistance before the temperature
    solve; calibrate it against a reference thermometer.
    """

    nominal_resistance: float = PT1000_NOMINAL
    reference_resistor: float = PT1000_REFERENCE
    correction_factor: float = 1.0

    def __post_init__(self):
        if not (math.isfinite(self.nominal_resistance) and self.nominal_resistance > 0):
            raise InvalidArgument(f"nominal_resistance must be finite and positive, got {self.nominal_resistance}")
        if not (math.isfinite(self.reference_resistor) and self.reference_resistor > 0):
            raise InvalidArgument(f"reference_resistor must be finite and positive, got {self.reference_resistor}")
        if not (math.isfinite(self.correction_factor) and self.correction_factor > 0):
            raise InvalidArgument(f"correction_factor must be finite and positive, got {self.correction_factor}")

    def with_correction(self, correction_factor):
        return replace(self, correction_factor=correction_factor)


PT1000 = CalibrationParams(PT1000_NOMINAL, PT1000_REFERENCE)
PT100 = CalibrationParams(PT100_NOMINAL, PT100_REFERENCE)


@dataclass(frozen=True)
class SessionOptions:
    wiring: WiringMode = WiringMode.TWO_OR_FOUR_WIRE
    filter_frequency: FilterFrequency = FilterFrequency.HZ_60
    bias_delay_us: float = DEFAULT_BIAS_DELAY_US
    settle_delay_us: float = DEFAULT_SETTLE_DELAY_US
    spi_mode: int = DEFAULT_SPI_MODE
    clock_speed_hz: int = DEFAULT_CLOCK_SPEED_HZ
    # Enables the sub-zero polynomial. Unverified against hardware.
    extended_range: bool = False

    def __post_init__(self):
        if not (math.isfinite(self.bias_delay_us) and self.bias_delay_us >= 0):
            raise InvalidArgument(f"bias_delay_us must be finite and >= 0, got {self.bias_delay_us}")
        if not (math.isfinite(self.settle_delay_us) and self.settle_delay_us >= 0):
            raise InvalidArgument(f"settle_delay_us must be finite and >= 0, got {self.settle_delay_us}")
        if self.spi_mode not in SPI_MODES:
            raise InvalidArgument(f"spi_mode must be one of {SPI_MODES}, got {self.spi_mode}")
        if self.clock_speed_hz <= 0:
            raise InvalidArgument(f"clock_speed_hz must be positive, got {self.clock_speed_hz}")
