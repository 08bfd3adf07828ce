# flyby/satellites/transponders.py
#!/usr/bin/env python3
# Transponder database entries, provenance flags and entry comparisons

import enum
import copy
from dataclasses import dataclass, field


class Provenance(enum.Flag):
    """Where a database entry's content came from"""

    NONE = 0
    PRIMARY = enum.auto()   # writable user database (XDG_DATA_HOME)
    SHARED = enum.auto()    # read-only system database (XDG_DATA_DIRS)
    DIRTY = enum.auto()     # edited this session, to be written to PRIMARY

    def describe(self):
        """Human readable member list, e.g. 'PRIMARY|SHARED'"""
        names = [member.name for member in Provenance if member and member in self]
        return "|".join(names) or "none"


@dataclass
class Transponder:
    """One radio transponder of a satellite. Frequencies in MHz."""

    name: str = ""
    uplink_start: float = 0.0
    uplink_end: float = 0.0
    downlink_start: float = 0.0
    downlink_end: float = 0.0
    dayofweek: int = 0
    phase_start: int = 0
    phase_end: int = 0

    @property
    def defined(self):
        return self.uplink_start != 0.0 or self.downlink_start != 0.0


@dataclass(eq=False)
class SatDbEntry:
    """
    Transponder database entry for a single satellite

    Attitude latitude/longitude are only meaningful when squintflag is set;
    otherwise they are kept at 0.0 so that comparisons stay exact.
    """

    satellite_number: int = 0
    squintflag: bool = False
    alat: float = 0.0
    alon: float = 0.0
    transponders: list = field(default_factory=list)
    location: Provenance = Provenance.NONE

    def __post_init__(self):
        self.normalize()

    @property
    def num_transponders(self):
        return len(self.transponders)

    def normalize(self):
        """Reset stale attitude values, strip names and drop undefined transponders"""
        if not self.squintflag:
            self.alat = 0.0
            self.alon = 0.0
        self.transponders = [t for t in self.transponders if t.defined]
        for transponder in self.transponders:
            transponder.name = transponder.name.strip()
        return self

    def set_squint(self, alat, alon):
        self.squintflag = True
        self.alat = float(alat)
        self.alon = float(alon)

    def clear_squint(self):
        self.squintflag = False
        self.alat = 0.0
        self.alon = 0.0

    def copy(self):
        """Independent copy, including the transponder list"""
        return copy.deepcopy(self)

    def __repr__(self):
        return (f"SatDbEntry(satellite_number={self.satellite_number}, "
                f"squint={self.squintflag}, transponders={self.num_transponders}, "
                f"location={self.location})")


def entries_equal(entry_1, entry_2):
    """
    Check whether two satellite database entries have the same content.

    Floats are compared exactly; the values come from parsed text and are
    never the result of arithmetic. Provenance and satellite number are not
    part of the content.

    Args:
        entry_1 (SatDbEntry): Entry 1
        entry_2 (SatDbEntry): Entry 2

    Returns:
        bool: True if all content fields match
    """
    if entry_1.squintflag != entry_2.squintflag:
        return False
    if entry_1.alat != entry_2.alat or entry_1.alon != entry_2.alon:
        return False
    if entry_1.num_transponders != entry_2.num_transponders:
        return False
    return all(t1 == t2 for t1, t2 in zip(entry_1.transponders, entry_2.transponders))


def entry_is_empty(entry):
    """
    Check whether an entry is empty: no squint angle and no defined transponder.

    Args:
        entry (SatDbEntry): Entry to check

    Returns:
        bool: True if empty
    """
    if entry.squintflag:
        return False
    return not any(t.defined for t in entry.transponders)
