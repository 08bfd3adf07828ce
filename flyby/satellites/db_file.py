# flyby/satellites/db_file.py
#!/usr/bin/env python3
# Reading and writing the flyby.db transponder file format
#
# One block per satellite:
#
#   <name, ignored on read>
#   <catalog number>
#   No | <alat>, <alon>
#   [<name> | No
#    <uplink start>, <uplink end>
#    <downlink start>, <downlink end>
#    No | <day of week>
#    No | <phase start>, <phase end>
#   ]...
#   end (or a blank line)
#
# and a final "end" line.

import os
import re
import stat
import logging
import tempfile
from pathlib import Path

from .transponders import Provenance, SatDbEntry, Transponder

logger = logging.getLogger(__name__)

ABSENT = "No"
END = "end"

_FLOAT = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_INT = re.compile(r"\s*([-+]?\d+)")


class DatabaseWriteError(OSError):
    """Raised when a transponder database file cannot be written"""


class _LineReader:
    """Sequential line access with positions for warnings"""

    def __init__(self, filename, lines):
        self.filename = filename
        self.lines = lines
        self.lineno = 0

    def next(self):
        """Next line without its newline, or None at end of input"""
        if self.lineno >= len(self.lines):
            self.lineno += 1
            return None
        line = self.lines[self.lineno]
        self.lineno += 1
        return line

    def warn(self, message):
        logger.warning(f"{self.filename}:{self.lineno}: {message}")


def _is_absent(line):
    if line is None:
        return True
    stripped = line.strip()
    return stripped == ABSENT or stripped.startswith(ABSENT + " ")


def _is_terminator(line):
    return line is None or line.strip() == "" or line.strip() == END


def check_transponder_name(name):
    """
    Check that a transponder name reads back unchanged after a write.

    Args:
        name (str): Transponder name, without surrounding whitespace

    Raises:
        ValueError: If the name spans lines or would be read as a sentinel
    """
    if len(name.splitlines()) > 1:
        raise ValueError(f"Transponder name {name!r} contains a line break")
    if name and (_is_absent(name) or name == END):
        raise ValueError(f"Transponder name {name!r} is reserved in the database format")


def _scan(pattern, text, cast, reader, what):
    match = pattern.match(text or "")
    if match is None:
        reader.warn(f"malformed {what} {text!r}, using 0")
        return cast(0)
    return cast(match.group(1))


def _scan_pair(line, cast, reader, what):
    pattern = _INT if cast is int else _FLOAT
    first, _, second = (line or "").partition(",")
    return (_scan(pattern, first, cast, reader, what),
            _scan(pattern, second, cast, reader, what))


def _read_transponder(name_line, reader):
    transponder = Transponder()
    if not _is_absent(name_line):
        transponder.name = name_line.strip()

    transponder.uplink_start, transponder.uplink_end = _scan_pair(
        reader.next(), float, reader, "uplink range")
    transponder.downlink_start, transponder.downlink_end = _scan_pair(
        reader.next(), float, reader, "downlink range")

    line = reader.next()
    if not _is_absent(line):
        transponder.dayofweek = _scan(_INT, line, int, reader, "day of week")

    line = reader.next()
    if not _is_absent(line):
        transponder.phase_start, transponder.phase_end = _scan_pair(
            line, int, reader, "phase range")

    return transponder


def _read_block(reader, max_transponders):
    """Read the rest of a satellite block after its name line"""
    satellite_number = _scan(_INT, reader.next(), int, reader, "catalog number")
    entry = SatDbEntry(satellite_number=satellite_number)

    line = reader.next()
    if not _is_absent(line):
        entry.set_squint(*_scan_pair(line, float, reader, "attitude"))

    dropped = 0
    line = reader.next()
    while not _is_terminator(line):
        transponder = _read_transponder(line, reader)
        if transponder.defined:
            if max_transponders and entry.num_transponders >= max_transponders:
                dropped += 1
            else:
                entry.transponders.append(transponder)
        line = reader.next()

    if dropped:
        reader.warn(f"satellite {satellite_number} has more than {max_transponders} "
                    f"transponders, {dropped} not loaded")
    return entry


def read_db_file(db_file, tle_db, location=Provenance.NONE, max_transponders=0):
    """
    Read transponder database entries matching the satellites of a TLE database.

    Blocks whose catalog number is not in the TLE database are read in full
    and discarded, so the following blocks stay in sync. Malformed numeric
    fields become 0 and are reported as warnings. Transponders with neither
    uplink nor downlink defined are not stored.

    Args:
        db_file (Path): .db file
        tle_db (TleDatabase): Previously read TLE database
        location (Provenance): Provenance stamped on every returned entry
        max_transponders (int): Per-satellite limit, 0 for no limit

    Returns:
        dict: {TLE index: SatDbEntry}, or None if the file could not be read
    """
    try:
        with open(db_file, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.debug(f"Transponder database {db_file} not available: {e}")
        return None

    reader = _LineReader(db_file, lines)
    entries = {}

    line = reader.next()
    while not _is_terminator(line):
        entry = _read_block(reader, max_transponders)
        index = tle_db.index_of(entry.satellite_number)
        if index is None:
            logger.debug(f"{db_file}: satellite {entry.satellite_number} not in TLE database, skipped")
        else:
            entry.location = location
            entries[index] = entry
        line = reader.next()

    logger.info(f"Read {len(entries)} transponder entries from {db_file}")
    return entries


def _format_float(value):
    return repr(float(value))


def _block_lines(identity, entry):
    name = identity.name.strip()
    if not name or name == END:
        name = str(identity.satellite_number)
    lines = [name, str(identity.satellite_number)]

    if entry.squintflag:
        lines.append(f"{_format_float(entry.alat)}, {_format_float(entry.alon)}")
    else:
        lines.append(ABSENT)

    for transponder in entry.transponders:
        if not transponder.defined:
            continue
        tname = " ".join(transponder.name.splitlines()).strip()
        lines.append(tname if tname and tname != END else ABSENT)
        lines.append(f"{_format_float(transponder.uplink_start)}, "
                     f"{_format_float(transponder.uplink_end)}")
        lines.append(f"{_format_float(transponder.downlink_start)}, "
                     f"{_format_float(transponder.downlink_end)}")
        lines.append(str(transponder.dayofweek) if transponder.dayofweek else ABSENT)
        if transponder.phase_start or transponder.phase_end:
            lines.append(f"{transponder.phase_start}, {transponder.phase_end}")
        else:
            lines.append(ABSENT)

    lines.append(END)
    return lines


def _file_mode(filename):
    """Mode of an existing file, else the umask default for a new one"""
    try:
        return stat.S_IMODE(os.stat(filename).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_db_file(filename, tle_db, entries, should_write):
    """
    Write selected transponder database entries to file.

    Every entry marked in should_write is written, empty or not, so that an
    empty entry can shadow one from a lower precedence file. The file is
    replaced atomically.

    Args:
        filename (Path): Target file
        tle_db (TleDatabase): Source of satellite names and numbers
        entries (list): SatDbEntry objects, index-aligned with tle_db
        should_write (list): Booleans, index-aligned with tle_db

    Returns:
        int: Number of entries written

    Raises:
        DatabaseWriteError: If the file could not be written
    """
    filename = Path(filename)
    lines = []
    written = 0
    for index, identity in enumerate(tle_db):
        if not should_write[index]:
            continue
        lines.extend(_block_lines(identity, entries[index]))
        written += 1
    lines.append(END)

    tmp_name = None
    try:
        filename.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=filename.parent, prefix=f".{filename.name}.",
                                        suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        # mkstemp creates the file 0600
        os.chmod(tmp_name, _file_mode(filename))
        os.replace(tmp_name, filename)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DatabaseWriteError(f"Could not write transponder database {filename}: {e}") from e

    logger.info(f"Wrote {written} transponder entries to {filename}")
    return written
