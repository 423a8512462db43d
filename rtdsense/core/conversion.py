# RTD Sense - Resistance to temperature conversion
#
# Callendar-Van Dusen, IEC 60751 coefficients. The quadratic holds for
# T >= 0 degC; below that the fifth order fit is available but has not been
# checked against a reference sensor.

import logging
import math

from rtdsense.errors import ConversionError

log = logging.getLogger(__name__)

RTD_A = 3.9083e-3
RTD_B = -5.775e-7

# 15-bit ADC full scale
ADC_FULL_SCALE = 32768.0
MAX_CODE = 0x7FFF

# Fit against resistance normalised to a PT100, i.e. R / R0 * 100
NEGATIVE_POLYNOMIAL = (-242.02, 2.2228, 2.5859e-3, -4.8260e-6, -2.8183e-8, 1.5243e-10)

Z1 = -RTD_A
Z2 = RTD_A * RTD_A - (4 * RTD_B)
Z4 = 2 * RTD_B


def resistance_from_code(code, calibration):
    if not 0 <= code <= MAX_CODE:
        raise ConversionError(f"RTD code out of range: {code}")
    return (code / ADC_FULL_SCALE) * calibration.reference_resistor * calibration.correction_factor


def temperature_from_resistance(resistance, nominal_resistance):
    """Positive root of R = R0 * (1 + A*T + B*T^2)."""
    z3 = (4 * RTD_B) / nominal_resistance
    discriminant = Z2 + (z3 * resistance)
    if discriminant < 0:
        raise ConversionError(
            f"resistance {resistance:.2f} ohm is beyond the range of the RTD model (R0={nominal_resistance})")
    return (math.sqrt(discriminant) + Z1) / Z4


def temperature_from_resistance_extended(resistance, nominal_resistance):
    # Unverified: not yet compared against a reference sensor
    ratio = resistance / nominal_resistance * 100
    temperature = 0.0
    rpoly = 1.0
    for coefficient in NEGATIVE_POLYNOMIAL:
        temperature += coefficient * rpoly
        rpoly *= ratio
    return temperature


def temperature_from_code(code, calibration, extended_range=False):
    """Returns (celsius, resistance) for a 15-bit RTD code."""
    resistance = resistance_from_code(code, calibration)
    temperature = temperature_from_resistance(resistance, calibration.nominal_resistance)

    if temperature < 0 and extended_range:
        log.warning("%.2f C is below 0 C, using the unverified sub-zero polynomial", temperature)
        temperature = temperature_from_resistance_extended(resistance, calibration.nominal_resistance)

    return temperature, resistance
