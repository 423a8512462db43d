# RTD Sense - Exceptions


class RTDError(Exception):
    """Base class for everything raised by rtdsense."""


class TransportError(RTDError):
    """The SPI channel could not be opened, configured or exchanged on.

    Always raised ``from`` the underlying OSError so the OS cause survives.
    """

    def __init__(self, message, device=None):
        super().__init__(message)
        self.device = device

    @property
    def errno(self):
        cause = self.__cause__
        return getattr(cause, 'errno', None)


class InvalidArgument(RTDError, ValueError):
    """Bad device index, calibration value or session option."""


class ConversionError(RTDError, ValueError):
    """Resistance outside the range the characteristic equation can solve."""
