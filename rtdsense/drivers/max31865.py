# RTD Sense - MAX31865 Driver

import logging
import time
from enum import Enum

from rtdsense.calibration import CalibrationParams, SessionOptions
from rtdsense.core.conversion import temperature_from_code
from rtdsense.core.faults import decode_faults
from rtdsense.core.reading import Fault, RawCode, Temperature
from rtdsense.drivers.registers import (
    MAX31865_CONFIG_REG,
    MAX31865_FAULTSTAT_REG,
    MAX31865_RTDMSB_REG,
    ConfigRegister,
    ConversionMode,
    RegisterCodec,
)

log = logging.getLogger(__name__)


class ConversionState(Enum):
    IDLE = "idle"
    CONFIG_READ = "config_read"
    BIAS_CONFIGURED = "bias_configured"
    CONVERSION_TRIGGERED = "conversion_triggered"
    SETTLING = "settling"
    RESULT_READ = "result_read"
    DONE = "done"
    FAULTED = "faulted"


def _sleep_us(us):
    time.sleep(us / 1_000_000)


class MAX31865:
    """One-shot RTD acquisition on a MAX31865.

    ``spi`` is anything with ``exchange(bytes) -> bytes``. Each call to
    read() runs a full cycle from IDLE; a transport error aborts the cycle
    and is raised as-is, nothing is retried.
    """

    def __init__(self, spi, calibration=None, options=None):
        self.codec = RegisterCodec(spi)
        self.calibration = calibration or CalibrationParams()
        self.options = options or SessionOptions()
        self.state = ConversionState.IDLE

    def _transition(self, state):
        log.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    @property
    def last_frame(self):
        return self.codec.last_frame

    def read_config(self):
        return ConfigRegister.from_byte(self.codec.read_register(MAX31865_CONFIG_REG))

    def build_config(self, current):
        return (ConfigRegister.from_byte(current.to_byte())
                .set_bias(True)
                .set_conversion_mode(ConversionMode.ONE_SHOT)
                .set_wiring(self.options.wiring)
                .set_filter_frequency(self.options.filter_frequency)
                .clear_fault_detection()
                .set_fault_clear(True))

    def read_fault_status(self):
        status = self.codec.read_register(MAX31865_FAULTSTAT_REG)
        return status, decode_faults(status)

    def clear_faults(self):
        config = self.read_config().clear_fault_detection().set_fault_clear(True)
        self.codec.write_register(MAX31865_CONFIG_REG, config.to_byte())

    def read_raw(self):
        self._transition(ConversionState.IDLE)
        current = self.read_config()
        self._transition(ConversionState.CONFIG_READ)

        # Clear faults, set bias, set one-shot
        config = self.build_config(current).to_byte()
        self.codec.write_register(MAX31865_CONFIG_REG, config)
        _sleep_us(self.options.bias_delay_us)
        self._transition(ConversionState.BIAS_CONFIGURED)

        # Second trigger: a single write hands back the previous conversion
        self.codec.write_register(MAX31865_CONFIG_REG, config)
        self._transition(ConversionState.CONVERSION_TRIGGERED)

        self._transition(ConversionState.SETTLING)
        _sleep_us(self.options.settle_delay_us)

        msb, lsb = self.codec.read_register_pair(MAX31865_RTDMSB_REG)
        self._transition(ConversionState.RESULT_READ)
        return RawCode(msb, lsb)

    def read(self):
        """Run one conversion cycle and return a Temperature or Fault reading."""
        raw = self.read_raw()

        if raw.fault:
            status, kinds = self.read_fault_status()
            self._transition(ConversionState.FAULTED)
            log.warning("RTD fault, status 0x%02x: %s", status, sorted(kind.name for kind in kinds))
            return Fault(kinds, status, raw)

        celsius, resistance = temperature_from_code(raw.code, self.calibration, self.options.extended_range)
        self._transition(ConversionState.DONE)
        return Temperature(celsius, resistance, raw)

    def read_temperature(self):
        reading = self.read()
        if isinstance(reading, Temperature):
            return reading.celsius
        return None
