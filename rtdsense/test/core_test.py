import math
import threading

import pytest

from rtdsense.calibration import PT100, PT1000, CalibrationParams, SessionOptions
from rtdsense.core import conversion
from rtdsense.core.faults import FaultKind, decode_faults, describe
from rtdsense.core.reading import Fault, RawCode, Temperature
from rtdsense.core.session import DeviceSession
from rtdsense.drivers import max31865
from rtdsense.errors import ConversionError, InvalidArgument
from rtdsense.test.fakes import FakeSPI, rtd_regs


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
	monkeypatch.setattr(max31865, '_sleep_us', lambda us: None)


def test_resistance_monotonic():
	previous = -1.0
	for code in range(conversion.MAX_CODE + 1):
		resistance = conversion.resistance_from_code(code, PT1000)
		assert resistance >= previous
		previous = resistance


def test_resistance_code_out_of_range():
	with pytest.raises(ConversionError):
		conversion.resistance_from_code(32768, PT1000)
	with pytest.raises(ConversionError):
		conversion.resistance_from_code(-1, PT1000)


def test_floating_sensor_floor():
	celsius, resistance = conversion.temperature_from_code(0, PT1000)
	assert resistance == 0.0
	assert celsius == (math.sqrt(conversion.Z2) + conversion.Z1) / conversion.Z4
	assert abs(celsius - (-246.86)) < 0.01


def test_full_scale_picks_positive_root():
	celsius, resistance = conversion.temperature_from_code(32767, PT1000)
	assert abs(resistance - 4299.87) < 0.01
	assert celsius > 300.0


def test_quadratic_matches_characteristic():
	for nominal in (100.0, 1000.0):
		assert abs(conversion.temperature_from_resistance(nominal, nominal)) < 1e-9
		for t in (25.0, 100.0, 420.0):
			r = nominal * (1 + conversion.RTD_A * t + conversion.RTD_B * t * t)
			assert abs(conversion.temperature_from_resistance(r, nominal) - t) < 1e-6


def test_correction_applied_before_solve():
	trimmed = PT1000.with_correction(1.02)
	celsius, resistance = conversion.temperature_from_code(8000, trimmed)
	plain = conversion.resistance_from_code(8000, PT1000)

	assert abs(resistance - plain * 1.02) < 1e-9
	assert celsius == conversion.temperature_from_resistance(resistance, 1000.0)


def test_unsolvable_resistance():
	with pytest.raises(ConversionError):
		conversion.temperature_from_code(32767, PT1000.with_correction(2.0))


def test_extended_range_below_zero():
	# R/R0 = 0.8, roughly -50 C
	code = 6096
	quadratic, _ = conversion.temperature_from_code(code, PT1000)
	extended, _ = conversion.temperature_from_code(code, PT1000, extended_range=True)

	assert quadratic < 0
	assert extended != quadratic
	assert abs(extended - quadratic) < 1.0


def test_extended_range_not_used_above_zero():
	code = 9000
	assert conversion.temperature_from_code(code, PT1000, extended_range=True) == \
		conversion.temperature_from_code(code, PT1000)


def test_extended_polynomial_near_zero():
	assert abs(conversion.temperature_from_resistance_extended(100.0, 100.0)) < 0.01


def test_pt100_preset():
	celsius, resistance = conversion.temperature_from_code(7621, PT100)
	assert abs(resistance - 100.0) < 0.02
	assert abs(celsius) < 0.1


def test_decode_faults_0x84():
	assert decode_faults(0x84) == {FaultKind.OVER_UNDER_VOLTAGE, FaultKind.HIGH_THRESHOLD}


def test_decode_faults_every_bit():
	kinds = decode_faults(0xFC)
	assert kinds == {
		FaultKind.HIGH_THRESHOLD,
		FaultKind.LOW_THRESHOLD,
		FaultKind.REF_IN_LOW,
		FaultKind.REF_IN_HIGH,
		FaultKind.RTD_IN_LOW,
		FaultKind.OVER_UNDER_VOLTAGE,
	}
	for kind in kinds:
		assert describe(kind)


def test_decode_faults_empty_status():
	assert decode_faults(0x00) == {FaultKind.UNKNOWN}
	# D1:D0 are unused
	assert decode_faults(0x03) == {FaultKind.UNKNOWN}


def test_raw_code():
	raw = RawCode(0xFF, 0xFF)
	assert raw.code == 32767
	assert raw.fault

	raw = RawCode(0x3E, 0x80)
	assert raw.code == 0x3E80 >> 1
	assert not raw.fault


def test_fault_describe_lists_all_kinds():
	fault = Fault(frozenset([FaultKind.HIGH_THRESHOLD, FaultKind.OVER_UNDER_VOLTAGE]), 0x84)
	text = fault.describe()
	assert "high threshold" in text
	assert "voltage" in text


def test_calibration_validation():
	with pytest.raises(InvalidArgument):
		CalibrationParams(nominal_resistance=0.0)
	with pytest.raises(InvalidArgument):
		CalibrationParams(reference_resistor=-430.0)
	with pytest.raises(InvalidArgument):
		CalibrationParams(nominal_resistance=float('inf'))
	with pytest.raises(InvalidArgument):
		CalibrationParams(nominal_resistance=float('nan'))
	with pytest.raises(InvalidArgument):
		CalibrationParams(reference_resistor=float('inf'))
	with pytest.raises(InvalidArgument):
		CalibrationParams(reference_resistor=float('nan'))
	with pytest.raises(InvalidArgument):
		PT1000.with_correction(0.0)
	with pytest.raises(InvalidArgument):
		PT1000.with_correction(float('nan'))
	with pytest.raises(InvalidArgument):
		PT1000.with_correction(float('inf'))

	trimmed = PT100.with_correction(0.98)
	assert trimmed.correction_factor == 0.98
	assert trimmed.reference_resistor == 430.0
	assert PT100.correction_factor == 1.0


def test_session_options_validation():
	with pytest.raises(InvalidArgument):
		SessionOptions(settle_delay_us=-1)
	with pytest.raises(InvalidArgument):
		SessionOptions(bias_delay_us=float('nan'))
	with pytest.raises(InvalidArgument):
		SessionOptions(settle_delay_us=float('inf'))
	with pytest.raises(InvalidArgument):
		SessionOptions(spi_mode=4)
	with pytest.raises(InvalidArgument):
		SessionOptions(clock_speed_hz=0)


def test_session_rejects_device_index():
	with pytest.raises(InvalidArgument):
		DeviceSession(2, spi=FakeSPI())


def test_session_configures_bus():
	fake = FakeSPI(regs=rtd_regs(8000))
	options = SessionOptions(spi_mode=3, clock_speed_hz=500000)
	with DeviceSession(0, options=options, spi=fake) as session:
		reading = session.read()
		assert isinstance(reading, Temperature)

	assert fake.mode == 3
	assert fake.speed == 500000
	assert fake.closed


def test_sessions_are_independent():
	first = FakeSPI(regs=rtd_regs(8123))
	second = FakeSPI(regs=rtd_regs(8123))
	session0 = DeviceSession(0, spi=first)
	session1 = DeviceSession(1, spi=second)

	assert session0.read() == session1.read()
	assert session0.sensor is not session1.sensor

	# a fault on CE1 does not leak into CE0
	second.regs = [0x00, 0xFF, 0xFF, 0, 0, 0, 0, 0x84]
	assert isinstance(session1.read(), Fault)
	assert isinstance(session0.read(), Temperature)
	assert first.reads_of(0x07) == []


def test_sessions_in_parallel_threads():
	sessions = [DeviceSession(cs, spi=FakeSPI(regs=rtd_regs(9000))) for cs in (0, 1)]
	results = {}

	def worker(session):
		results[session.device] = [session.read() for _ in range(20)]

	threads = [threading.Thread(target=worker, args=(s,)) for s in sessions]
	for t in threads:
		t.start()
	for t in threads:
		t.join()

	assert results[0] == results[1]
	# 4 frames per cycle, never interleaved
	for session in sessions:
		assert len(session.spi.frames) == 80


def test_session_fault_thresholds_and_clear():
	fake = FakeSPI(regs=rtd_regs(8000, config=0xC8))
	session = DeviceSession(1, spi=fake)
	session.write_fault_thresholds(0x6000, 0x1000)
	assert session.read_fault_thresholds() == (0x6000, 0x1000)

	session.clear_faults()
	assert fake.regs[0] == 0xC2
	assert session.read_config().to_byte() == 0xC0


def test_session_last_frame():
	fake = FakeSPI(regs=rtd_regs(8000))
	session = DeviceSession(0, spi=fake)
	assert session.last_frame == b''

	session.read()
	assert session.last_frame == bytes([0x00, 0x3E, 0x80])
	assert session.last_frame == fake.frames[-1]
