# RTD Sense - Linux spidev transport

import logging

import spidev

from rtdsense.errors import TransportError

log = logging.getLogger(__name__)


def device_path(bus, device):
    return f"/dev/spidev{bus}.{device}"


class SpiBus:
    """One /dev/spidevB.D channel. Knows nothing about the device on the other end."""

    def __init__(self, bus=0, device=0):
        self.bus = bus
        self.device = device
        self.path = device_path(bus, device)
        self.spi = spidev.SpiDev()
        try:
            self.spi.open(bus, device)
        except OSError as e:
            raise TransportError(f"can't open device {self.path}: {e}", self.path) from e
        log.debug("opened %s", self.path)

    def configure_mode(self, mode):
        try:
            self.spi.mode = mode
        except OSError as e:
            raise TransportError(f"can't set spi mode on {self.path}: {e}", self.path) from e

    def configure_clock_speed(self, hz):
        try:
            self.spi.max_speed_hz = hz
        except OSError as e:
            raise TransportError(f"can't set max speed hz on {self.path}: {e}", self.path) from e

    def exchange(self, tx):
        # xfer2 keeps CS asserted for the whole frame
        try:
            rx = self.spi.xfer2(list(tx))
        except OSError as e:
            raise TransportError(f"can't send spi message on {self.path}: {e}", self.path) from e
        return bytes(rx)

    def close(self):
        self.spi.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
