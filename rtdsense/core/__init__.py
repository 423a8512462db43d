from rtdsense.core.conversion import temperature_from_code
from rtdsense.core.faults import FaultKind, decode_faults
from rtdsense.core.reading import Fault, RawCode, Temperature
