from rtdsense.drivers.max31865 import MAX31865
from rtdsense.drivers.registers import ConfigRegister, RegisterCodec
from rtdsense.drivers.spi_bus import SpiBus
