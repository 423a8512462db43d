# RTD Sense - Device Session

import logging
import threading

from rtdsense.calibration import CalibrationParams, SessionOptions
from rtdsense.drivers.max31865 import MAX31865
from rtdsense.drivers.spi_bus import SpiBus
from rtdsense.errors import InvalidArgument

log = logging.getLogger(__name__)

# CE0 and CE1 on the Raspberry Pi header
CHIP_SELECTS = (0, 1)


class DeviceSession:
    """Owns one SPI channel and the MAX31865 behind it.

    Sessions on different chip-selects share nothing. The lock keeps two
    threads using the same session from interleaving conversion cycles.
    """

    def __init__(self, device, calibration=None, options=None, bus=0, spi=None):
        if device not in CHIP_SELECTS:
            raise InvalidArgument(f"device index must be one of {CHIP_SELECTS}, got {device}")

        self.device = device
        self.calibration = calibration or CalibrationParams()
        self.options = options or SessionOptions()
        self.lock = threading.Lock()

        self.spi = spi if spi is not None else SpiBus(bus, device)
        try:
            self.spi.configure_mode(self.options.spi_mode)
            self.spi.configure_clock_speed(self.options.clock_speed_hz)
        except Exception:
            self.spi.close()
            raise

        self.sensor = MAX31865(self.spi, self.calibration, self.options)
        log.debug("session on CE%d ready (mode %d, %d Hz)",
                  device, self.options.spi_mode, self.options.clock_speed_hz)

    @property
    def last_frame(self):
        return self.sensor.last_frame

    @property
    def state(self):
        return self.sensor.state

    def read(self):
        with self.lock:
            return self.sensor.read()

    def read_config(self):
        with self.lock:
            return self.sensor.read_config()

    def clear_faults(self):
        with self.lock:
            self.sensor.clear_faults()

    def read_fault_thresholds(self):
        with self.lock:
            return self.sensor.codec.read_fault_thresholds()

    def write_fault_thresholds(self, high, low):
        with self.lock:
            self.sensor.codec.write_fault_thresholds(high, low)

    def close(self):
        self.spi.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
