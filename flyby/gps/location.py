# flyby/gps/location.py
#!/usr/bin/env python3
# Observer (QTH) location: QTH file and GPS receiver fixes

import time
import logging
import datetime
from pathlib import Path

import serial
import pynmea2

from ..common import config

logger = logging.getLogger(__name__)

QTH_FILENAME = "flyby.qth"


def default_qth_file(env=None):
    return config.config_dir(env) / QTH_FILENAME


def parse_nmea(nmea_string):
    """
    Parse an NMEA sentence into a location

    Args:
        nmea_string (str): NMEA sentence

    Returns:
        dict: latitude, longitude (degrees, east positive), altitude (m),
            satellites and timestamp, or None unless this is a GGA sentence
            with a valid fix
    """
    nmea_string = nmea_string.strip()
    if not nmea_string.startswith('$'):
        return None

    try:
        msg = pynmea2.parse(nmea_string)
    except pynmea2.ParseError as e:
        logger.debug(f"Ignoring unparsable NMEA sentence: {e}")
        return None

    if not isinstance(msg, pynmea2.GGA):
        return None
    if not msg.gps_qual or not msg.lat or not msg.lon:
        return None

    return {
        'latitude': msg.latitude,
        'longitude': msg.longitude,
        'altitude': float(msg.altitude) if msg.altitude else 0.0,
        'satellites': int(msg.num_sats) if msg.num_sats else 0,
        'timestamp': str(datetime.datetime.now()),
    }


def read_gps_fix(port, baud=9600, timeout=30):
    """
    Read NMEA data from a serial GPS until the first valid fix

    Args:
        port (str): Serial port, e.g. /dev/ttyUSB0
        baud (int): Baud rate
        timeout (float): Seconds to wait for a fix

    Returns:
        dict: Location as returned by parse_nmea, or None on timeout or error
    """
    deadline = time.monotonic() + float(timeout)
    try:
        with serial.Serial(port, int(baud), timeout=1) as ser:
            logger.info(f"Connected to serial GPS on {port} at {baud} baud")
            while time.monotonic() < deadline:
                data = ser.readline().decode('utf-8', errors='ignore')
                location = parse_nmea(data)
                if location:
                    logger.info(f"GPS fix: {location['latitude']:.5f}, {location['longitude']:.5f}")
                    return location
    except serial.SerialException as e:
        logger.error(f"Serial error on {port}: {e}")
        return None

    logger.warning(f"No GPS fix from {port} within {timeout} seconds")
    return None


def write_qth(location, callsign, qth_file=None):
    """
    Write a QTH file

    Longitude is stored west-positive, as in predict-style QTH files.

    Args:
        location (dict): latitude, longitude (east positive) and altitude
        callsign (str): Station name on the first line
        qth_file (Path): Optional QTH file, defaults to the config directory

    Returns:
        bool: True if written, False otherwise
    """
    qth_file = Path(qth_file) if qth_file else default_qth_file()
    try:
        qth_file.parent.mkdir(parents=True, exist_ok=True)
        with open(qth_file, 'w') as f:
            f.write(f"{callsign}\n")
            f.write(f" {location['latitude']:g}\n")
            f.write(f" {-location['longitude']:g}\n")
            f.write(f" {int(round(location.get('altitude', 0.0)))}\n")
    except OSError as e:
        logger.error(f"Error writing QTH file {qth_file}: {e}")
        return False

    logger.info(f"QTH saved to {qth_file}")
    return True


def read_qth(qth_file=None):
    """
    Read a QTH file

    Args:
        qth_file (Path): Optional QTH file, defaults to the config directory

    Returns:
        dict: callsign, latitude, longitude (east positive) and altitude,
            or None if the file is missing or malformed
    """
    qth_file = Path(qth_file) if qth_file else default_qth_file()
    try:
        with open(qth_file, 'r') as f:
            lines = [line.strip() for line in f.readlines()]
        return {
            'callsign': lines[0],
            'latitude': float(lines[1]),
            'longitude': -float(lines[2]),
            'altitude': float(lines[3]),
        }
    except OSError as e:
        logger.error(f"Error reading QTH file {qth_file}: {e}")
    except (IndexError, ValueError) as e:
        logger.error(f"Malformed QTH file {qth_file}: {e}")
    return None
