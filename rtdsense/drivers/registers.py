# RTD Sense - MAX31865 Register Map and Codec

import logging
from enum import Enum

from rtdsense.calibration import FilterFrequency, WiringMode
from rtdsense.errors import InvalidArgument

log = logging.getLogger(__name__)

# MAX31865 Register Addresses
MAX31865_CONFIG_REG = 0x00
MAX31865_RTDMSB_REG = 0x01
MAX31865_RTDLSB_REG = 0x02
MAX31865_HFAULTMSB_REG = 0x03
MAX31865_HFAULTLSB_REG = 0x04
MAX31865_LFAULTMSB_REG = 0x05
MAX31865_LFAULTLSB_REG = 0x06
MAX31865_FAULTSTAT_REG = 0x07

MAX31865_WRITE_BIT = 0x80

# MAX31865 Configuration bits
MAX31865_CONFIG_BIAS = 0x80
MAX31865_CONFIG_MODEAUTO = 0x40
MAX31865_CONFIG_1SHOT = 0x20
MAX31865_CONFIG_3WIRE = 0x10
MAX31865_CONFIG_FAULTCYCLE = 0x0C   # D3:D2, 00 = no action
MAX31865_CONFIG_FAULTSTAT = 0x02    # Self-clearing
MAX31865_CONFIG_FILT50HZ = 0x01

# Address byte + two payload bytes. The device answers one byte late.
FRAME_LENGTH = 3


def _frame(command, payload=0x00):
    frame = bytearray(FRAME_LENGTH)
    frame[0] = command
    frame[1] = payload
    return bytes(frame)


class ConversionMode(Enum):
    OFF = 0x00
    AUTO = MAX31865_CONFIG_MODEAUTO
    ONE_SHOT = MAX31865_CONFIG_1SHOT


class ConfigRegister:
    """Bitfield builder for the configuration register.

    Every field has its own setter so the byte is never assembled from one
    long mask expression. Setters return self and can be chained.
    """

    def __init__(self, value=0):
        self._value = value & 0xFF

    @classmethod
    def from_byte(cls, value):
        # Fault-status-clear reads back as garbage; never treat it as state
        return cls(value & ~MAX31865_CONFIG_FAULTSTAT)

    def to_byte(self):
        return self._value

    def _set(self, mask, enabled):
        if enabled:
            self._value |= mask
        else:
            self._value &= ~mask
        return self

    def set_bias(self, enabled=True):
        return self._set(MAX31865_CONFIG_BIAS, enabled)

    def set_conversion_mode(self, mode):
        self._value &= ~(MAX31865_CONFIG_MODEAUTO | MAX31865_CONFIG_1SHOT)
        self._value |= ConversionMode(mode).value
        return self

    def set_wiring(self, wiring):
        return self._set(MAX31865_CONFIG_3WIRE, WiringMode(wiring) is WiringMode.THREE_WIRE)

    def set_fault_clear(self, enabled=True):
        return self._set(MAX31865_CONFIG_FAULTSTAT, enabled)

    def clear_fault_detection(self):
        return self._set(MAX31865_CONFIG_FAULTCYCLE, False)

    def set_filter_frequency(self, frequency):
        return self._set(MAX31865_CONFIG_FILT50HZ, FilterFrequency(frequency) is FilterFrequency.HZ_50)

    @property
    def bias(self):
        return bool(self._value & MAX31865_CONFIG_BIAS)

    @property
    def conversion_mode(self):
        if self._value & MAX31865_CONFIG_MODEAUTO:
            return ConversionMode.AUTO
        if self._value & MAX31865_CONFIG_1SHOT:
            return ConversionMode.ONE_SHOT
        return ConversionMode.OFF

    @property
    def wiring(self):
        if self._value & MAX31865_CONFIG_3WIRE:
            return WiringMode.THREE_WIRE
        return WiringMode.TWO_OR_FOUR_WIRE

    @property
    def filter_frequency(self):
        if self._value & MAX31865_CONFIG_FILT50HZ:
            return FilterFrequency.HZ_50
        return FilterFrequency.HZ_60

    def __eq__(self, other):
        if not isinstance(other, ConfigRegister):
            return NotImplemented
        return self._value == other._value

    def __repr__(self):
        return f"ConfigRegister(0x{self._value:02x})"


class RegisterCodec:
    """Register reads and writes over a 3-byte full-duplex frame.

    ``spi`` only needs ``exchange(bytes) -> bytes``. Transport errors are not
    caught here.
    """

    def __init__(self, spi):
        self.spi = spi
        self.last_frame = b''

    def _exchange(self, tx):
        rx = self.spi.exchange(tx)
        self.last_frame = bytes(rx)
        log.debug("tx=%s rx=%s", tx.hex(), self.last_frame.hex())
        return self.last_frame

    def read_register(self, reg):
        rx = self._exchange(_frame(reg & 0x7F))
        # Reply lands in position 1, position 0 is clocked out during the address byte
        return rx[1]

    def read_register_pair(self, reg):
        rx = self._exchange(_frame(reg & 0x7F))
        return rx[1], rx[2]

    def write_register(self, reg, value):
        self._exchange(_frame((reg | MAX31865_WRITE_BIT) & 0xFF, value & 0xFF))

    def read_fault_thresholds(self):
        # Thresholds are 15-bit codes stored shifted left by one, like the RTD data
        high_msb, high_lsb = self.read_register_pair(MAX31865_HFAULTMSB_REG)
        low_msb, low_lsb = self.read_register_pair(MAX31865_LFAULTMSB_REG)
        high = ((high_msb << 8) | high_lsb) >> 1
        low = ((low_msb << 8) | low_lsb) >> 1
        return high, low

    def write_fault_thresholds(self, high, low):
        for code in (high, low):
            if not 0 <= code <= 0x7FFF:
                raise InvalidArgument(f"threshold code out of range: {code}")

        high_raw = high << 1
        low_raw = low << 1
        self.write_register(MAX31865_HFAULTMSB_REG, high_raw >> 8)
        self.write_register(MAX31865_HFAULTLSB_REG, high_raw & 0xFF)
        self.write_register(MAX31865_LFAULTMSB_REG, low_raw >> 8)
        self.write_register(MAX31865_LFAULTLSB_REG, low_raw & 0xFF)
