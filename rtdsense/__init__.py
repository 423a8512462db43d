# RTD Sense - MAX31865 RTD acquisition over SPI

from rtdsense.calibration import PT100, PT1000, CalibrationParams, FilterFrequency, SessionOptions, WiringMode
from rtdsense.core.faults import FaultKind
from rtdsense.core.reading import Fault, RawCode, Temperature
from rtdsense.core.session import DeviceSession
from rtdsense.errors import ConversionError, InvalidArgument, RTDError, TransportError

__version__ = "0.1.0"
