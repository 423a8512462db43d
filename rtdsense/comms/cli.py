# RTD Sense - Command line interface

import argparse
import logging
import sys

from rtdsense.calibration import (
    DEFAULT_BIAS_DELAY_US,
    DEFAULT_CLOCK_SPEED_HZ,
    DEFAULT_SETTLE_DELAY_US,
    PT100,
    PT1000,
    FilterFrequency,
    SessionOptions,
    WiringMode,
)
from rtdsense.core.reading import Fault
from rtdsense.core.session import CHIP_SELECTS, DeviceSession
from rtdsense.errors import ConversionError, InvalidArgument, TransportError

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FAULT = 3


def build_parser():
    parser = argparse.ArgumentParser(
        prog="rtdsense",
        description="Read an RTD temperature from a MAX31865 on /dev/spidev<bus>.<device>.")
    parser.add_argument("device", type=int, choices=CHIP_SELECTS,
                        help="chip-select / device index (0 = CE0, 1 = CE1)")
    parser.add_argument("correction", type=float, nargs="?", default=1.0,
                        help="resistance correction factor (default 1.0)")
    parser.add_argument("--bus", type=int, default=0, help="SPI bus number (default 0)")
    parser.add_argument("--pt100", action="store_true",
                        help="PT100 with a 430 ohm reference (default PT1000 / 4300 ohm)")
    parser.add_argument("--three-wire", action="store_true", help="3-wire RTD (default 2/4-wire)")
    parser.add_argument("--filter", type=int, choices=(50, 60), default=60,
                        help="mains notch filter in Hz (default 60)")
    parser.add_argument("--bias-delay-us", type=float, default=DEFAULT_BIAS_DELAY_US,
                        help="delay between the two trigger writes")
    parser.add_argument("--settle-delay-us", type=float, default=DEFAULT_SETTLE_DELAY_US,
                        help="delay before reading the result")
    parser.add_argument("--speed", type=int, default=DEFAULT_CLOCK_SPEED_HZ, help="SPI clock in Hz")
    parser.add_argument("--extended-range", action="store_true",
                        help="use the (unverified) sub-zero polynomial below 0 C")
    parser.add_argument("--show-config", action="store_true",
                        help="print the configuration register before reading")
    parser.add_argument("-v", "--verbose", action="store_true", help="log register traffic")
    return parser


def options_from_args(args):
    calibration = (PT100 if args.pt100 else PT1000).with_correction(args.correction)
    options = SessionOptions(
        wiring=WiringMode.THREE_WIRE if args.three_wire else WiringMode.TWO_OR_FOUR_WIRE,
        filter_frequency=FilterFrequency(args.filter),
        bias_delay_us=args.bias_delay_us,
        settle_delay_us=args.settle_delay_us,
        clock_speed_hz=args.speed,
        extended_range=args.extended_range,
    )
    return calibration, options


class CLI:
    def __init__(self, session):
        self.session = session

    def cmd_config(self):
        config = self.session.read_config()
        print(f"Config:\t\t0x{config.to_byte():02x}")
        print(f"Bias:\t\t{'on' if config.bias else 'off'}")
        print(f"Mode:\t\t{config.conversion_mode.name}")
        print(f"Wiring:\t\t{config.wiring.value}-wire")
        print(f"Filter:\t\t{config.filter_frequency.value} Hz")

    def cmd_read(self):
        reading = self.session.read()
        raw = reading.raw
        print(f"Read: 0x{raw.msb:02x} 0x{raw.lsb:02x} (code {raw.code}, fault bit {int(raw.fault)})")
        # RTD pair on success, fault status register on a fault
        print("Frame: " + " ".join(f"0x{b:02x}" for b in self.session.last_frame))

        if isinstance(reading, Fault):
            print(f"Fault: 0x{reading.status:02x} {reading.describe()}")
            return EXIT_FAULT

        print(f"{reading.celsius:3.2f}")
        return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        calibration, options = options_from_args(args)
    except InvalidArgument as e:
        parser.error(str(e))

    try:
        with DeviceSession(args.device, calibration, options, bus=args.bus) as session:
            cli = CLI(session)
            if args.show_config:
                cli.cmd_config()
            return cli.cmd_read()
    except (TransportError, ConversionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
