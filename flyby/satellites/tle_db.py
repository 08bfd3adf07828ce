# flyby/satellites/tle_db.py
#!/usr/bin/env python3
# Satellite identities read from TLE files

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SatelliteIdentity:
    satellite_number: int
    name: str


def _catalog_number(line1):
    # columns 3-7 of TLE line 1
    return int(line1[2:7])


def parse_tle_text(raw):
    """
    Parse TLE text into satellite identities.

    Accepts 3-line sets (name, line 1, line 2) as well as bare 2-line sets,
    in which case the catalog number doubles as the name. Blank lines are
    ignored.

    Args:
        raw (str): TLE file contents

    Returns:
        list: SatelliteIdentity objects in file order
    """
    lines = [ln.rstrip() for ln in raw.splitlines() if ln.strip() != ""]
    identities = []
    i = 0
    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            name, line1, step = None, lines[i], 2
        elif (i + 2 < len(lines) and lines[i + 1].startswith("1 ")
              and lines[i + 2].startswith("2 ")):
            name, line1, step = lines[i].strip(), lines[i + 1], 3
        else:
            logger.warning(f"Skipping unexpected TLE line: {lines[i]!r}")
            i += 1
            continue

        try:
            number = _catalog_number(line1)
        except ValueError:
            logger.warning(f"Skipping TLE with invalid catalog number: {line1!r}")
        else:
            identities.append(SatelliteIdentity(number, name or str(number)))
        i += step

    return identities


class TleDatabase:
    """Ordered, index-stable list of satellite identities"""

    def __init__(self, identities=()):
        self.identities = list(identities)
        self._first_index = {}
        for index, identity in enumerate(self.identities):
            self._first_index.setdefault(identity.satellite_number, index)

    def __len__(self):
        return len(self.identities)

    def __iter__(self):
        return iter(self.identities)

    def __getitem__(self, index):
        return self.identities[index]

    def index_of(self, satellite_number):
        """
        Index of a satellite number. Duplicates resolve to the earliest entry.

        Returns:
            int: Index, or None if the satellite is not in the database
        """
        return self._first_index.get(satellite_number)

    @classmethod
    def from_files(cls, tle_files):
        """
        Read identities from a list of TLE files, in order

        Args:
            tle_files (list): TLE file paths

        Returns:
            TleDatabase: Combined database. Unreadable files are skipped.
        """
        identities = []
        for tle_file in tle_files:
            tle_file = Path(tle_file)
            try:
                text = tle_file.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.error(f"Error reading TLE file {tle_file}: {e}")
                continue
            parsed = parse_tle_text(text)
            logger.info(f"Loaded {len(parsed)} satellites from {tle_file}")
            identities.extend(parsed)
        return cls(identities)
