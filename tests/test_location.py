import pytest

from flyby.gps import location

GGA_FIX = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47"
GGA_WEST = "$GPGGA,092750.000,5321.6802,N,00630.3372,W,1,8,1.03,61.7,M,55.2,M,,*76"
GGA_NO_FIX = "$GPGGA,123519,,,,,0,00,,,M,,M,,*6B"
RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"


def test_parse_gga_fix():
    fix = location.parse_nmea(GGA_FIX + "\r\n")

    assert fix['latitude'] == pytest.approx(48.1173)
    assert fix['longitude'] == pytest.approx(11.516667, abs=1e-6)
    assert fix['altitude'] == pytest.approx(545.4)
    assert fix['satellites'] == 8


def test_parse_western_longitude_is_negative():
    fix = location.parse_nmea(GGA_WEST)

    assert fix['longitude'] == pytest.approx(-6.50562, abs=1e-5)
    assert fix['latitude'] == pytest.approx(53.361337, abs=1e-5)


@pytest.mark.parametrize("sentence", [GGA_NO_FIX, RMC, GGA_FIX[1:], "", "garbage", "$GPGGA,not,valid"])
def test_parse_without_fix_returns_none(sentence):
    assert location.parse_nmea(sentence) is None


class FakeSerial:
    def __init__(self, lines):
        self.lines = [line.encode() for line in lines]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def readline(self):
        return self.lines.pop(0) if self.lines else b""


def test_read_gps_fix_skips_until_fix(monkeypatch):
    opened = {}

    def fake_serial(port, baud, timeout):
        opened['args'] = (port, baud)
        return FakeSerial([RMC + "\r\n", GGA_NO_FIX + "\r\n", GGA_FIX + "\r\n"])

    monkeypatch.setattr(location.serial, "Serial", fake_serial)

    fix = location.read_gps_fix("/dev/ttyTEST", 4800, timeout=5)

    assert opened['args'] == ("/dev/ttyTEST", 4800)
    assert fix['latitude'] == pytest.approx(48.1173)


def test_read_gps_fix_serial_error(monkeypatch):
    def broken_serial(port, baud, timeout):
        raise location.serial.SerialException("no such device")

    monkeypatch.setattr(location.serial, "Serial", broken_serial)

    assert location.read_gps_fix("/dev/ttyNONE", timeout=1) is None


def test_qth_round_trip(tmp_path):
    qth_file = tmp_path / "flyby.qth"
    fix = {'latitude': 48.1173, 'longitude': 11.5167, 'altitude': 545.4}

    assert location.write_qth(fix, "LA1K", qth_file)
    assert qth_file.read_text() == "LA1K\n 48.1173\n -11.5167\n 545\n"

    qth = location.read_qth(qth_file)
    assert qth == {'callsign': 'LA1K', 'latitude': 48.1173, 'longitude': 11.5167, 'altitude': 545.0}


def test_qth_default_location(xdg):
    assert location.default_qth_file() == xdg.config_home / "flyby" / "flyby.qth"


def test_read_missing_or_malformed_qth(tmp_path):
    assert location.read_qth(tmp_path / "missing.qth") is None

    bad = tmp_path / "bad.qth"
    bad.write_text("LA1K\nnorth\n")
    assert location.read_qth(bad) is None
