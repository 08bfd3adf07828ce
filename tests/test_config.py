import configparser
from pathlib import Path

from flyby.common import config


def test_read_config_creates_defaults(xdg):
    conf = config.read_config()

    config_file = xdg.config_home / "flyby" / "config.ini"
    assert config_file.exists()
    assert conf['max_transponders'] == '0'
    assert conf['log_level'] == 'INFO'


def test_read_existing_config(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\ntle_files = ~/a.tle, /data/b.tle\nmax_transponders = 12\n")

    conf = config.read_config(config_file)

    assert config.get_tle_files(conf) == [Path("~/a.tle").expanduser(), Path("/data/b.tle")]
    assert config.get_int(conf, 'max_transponders') == 12
    assert conf['gps_serial_baud'] == '9600'


def test_get_int_falls_back_on_bad_value(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[DEFAULT]\nmax_transponders = many\n")

    conf = config.read_config(config_file)

    assert config.get_int(conf, 'max_transponders', 0) == 0


def test_update_config(tmp_path):
    config_file = tmp_path / "config.ini"
    config.read_config(config_file)

    config.update_config({'callsign': 'LA1K'}, config_file=config_file)
    config.update_config({'port': '/dev/ttyACM0'}, section='GPS', config_file=config_file)

    parser = configparser.ConfigParser()
    parser.read(config_file)
    assert parser['DEFAULT']['callsign'] == 'LA1K'
    assert parser['GPS']['port'] == '/dev/ttyACM0'
    assert config.read_config(config_file)['callsign'] == 'LA1K'
