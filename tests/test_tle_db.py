import logging

from flyby.satellites.tle_db import SatelliteIdentity, TleDatabase, parse_tle_text

ISS_TLE = """ISS (ZARYA)
1 25544U 98067A   24001.50000000  .00016717  00000-0  10270-3 0  9005
2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.50377579 12345
"""

AO7_TLE = """
AO-07
1 07530U 74089B   24001.00000000 -.00000036  00000-0 -29542-4 0  9993
2 07530 101.9920 120.1234 0012345 100.0000 260.0000 12.53690123 12345
"""

BARE_TLE = """1 43017U 17073E   24001.00000000  .00000080  00000-0  15563-4 0  9995
2 43017  97.7000 300.0000 0011000  90.0000 270.0000 14.82000000 12345
"""


def test_three_line_sets():
    identities = parse_tle_text(ISS_TLE + AO7_TLE)

    assert identities == [SatelliteIdentity(25544, "ISS (ZARYA)"), SatelliteIdentity(7530, "AO-07")]


def test_two_line_set_uses_number_as_name():
    assert parse_tle_text(BARE_TLE) == [SatelliteIdentity(43017, "43017")]


def test_invalid_catalog_number_is_skipped(caplog):
    broken = ISS_TLE.replace("1 25544U", "1 2X544U")

    with caplog.at_level(logging.WARNING, logger="flyby.satellites.tle_db"):
        identities = parse_tle_text(broken + AO7_TLE)

    assert [identity.satellite_number for identity in identities] == [7530]
    assert "invalid catalog number" in caplog.text


def test_from_files_keeps_file_order_and_skips_missing(tmp_path):
    first = tmp_path / "amateur.tle"
    first.write_text(ISS_TLE)
    second = tmp_path / "cubesat.tle"
    second.write_text(AO7_TLE + BARE_TLE)

    tle_db = TleDatabase.from_files([first, tmp_path / "missing.tle", second])

    assert [identity.satellite_number for identity in tle_db] == [25544, 7530, 43017]
    assert len(tle_db) == 3
    assert tle_db[1].name == "AO-07"


def test_index_of_prefers_first_duplicate():
    tle_db = TleDatabase([
        SatelliteIdentity(11111, "SAT-A"),
        SatelliteIdentity(22222, "SAT-B"),
        SatelliteIdentity(11111, "SAT-A again"),
    ])

    assert tle_db.index_of(11111) == 0
    assert tle_db.index_of(22222) == 1
    assert tle_db.index_of(33333) is None
