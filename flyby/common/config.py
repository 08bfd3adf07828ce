# flyby/common/config.py
#!/usr/bin/env python3
# Common configuration management module

import logging
import configparser
from pathlib import Path

from . import paths

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.ini"

DEFAULT_CONFIG = {
    'tle_files': '',            # comma-separated TLE files
    'max_transponders': '0',    # per satellite, 0 = unlimited
    'log_level': 'INFO',
    'log_file': '',             # empty = console only
    'gps_serial_port': '/dev/ttyUSB0',
    'gps_serial_baud': '9600',
    'gps_timeout': '30',        # seconds
    'callsign': 'QTH',
}


def config_dir(env=None):
    """Directory holding config.ini and the QTH file"""
    return paths.config_home(env) / paths.APP_DIR


def default_config_file(env=None):
    return config_dir(env) / CONFIG_FILENAME


def ensure_directories(dirs=None, env=None):
    """
    Ensure all necessary directories exist

    Args:
        dirs (list): Optional list of additional directories to create
        env (Mapping): Optional environment used to resolve the config directory
    """
    config_dir(env).mkdir(parents=True, exist_ok=True)

    if dirs:
        for directory in dirs:
            Path(directory).mkdir(parents=True, exist_ok=True)


def read_config(config_file=None):
    """
    Read configuration from config file, writing the defaults on first use

    Args:
        config_file (Path): Optional custom config file path

    Returns:
        configparser.SectionProxy: DEFAULT section of the configuration
    """
    config_file = Path(config_file) if config_file else default_config_file()
    config = configparser.ConfigParser()
    config['DEFAULT'] = DEFAULT_CONFIG

    if not config_file.exists():
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w') as configfile:
                config.write(configfile)
            logger.info(f"Created default configuration at {config_file}")
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_file}: {e}")
    else:
        config.read(config_file)

    return config['DEFAULT']


def update_config(config_data, section='DEFAULT', config_file=None):
    """
    Update configuration file with new settings

    Args:
        config_data (dict): Configuration values to update
        section (str): Configuration section to update
        config_file (Path): Optional custom config file path
    """
    config_file = Path(config_file) if config_file else default_config_file()
    full_config = configparser.ConfigParser()

    if config_file.exists():
        full_config.read(config_file)

    if section != 'DEFAULT' and section not in full_config:
        full_config[section] = {}

    for key, value in config_data.items():
        full_config[section][key] = str(value)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, 'w') as configfile:
        full_config.write(configfile)

    logger.info(f"Updated configuration at {config_file}")


def get_tle_files(conf):
    """
    TLE files listed in the configuration

    Args:
        conf (Mapping): Configuration section

    Returns:
        list: Paths, in the configured order
    """
    raw = conf.get('tle_files', '')
    return [Path(item.strip()).expanduser() for item in raw.split(',') if item.strip()]


def get_int(conf, key, default=0):
    """Integer option, falling back to default on a malformed value"""
    try:
        return int(conf.get(key, default))
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer for '{key}' in configuration, using {default}")
        return default
