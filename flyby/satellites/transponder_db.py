# flyby/satellites/transponder_db.py
#!/usr/bin/env python3
# Transponder database merged from the XDG search paths

import logging

from ..common import paths
from .db_file import check_transponder_name, read_db_file, write_db_file
from .transponders import Provenance, SatDbEntry, entries_equal, entry_is_empty

logger = logging.getLogger(__name__)


def _empty_entries(tle_db):
    return [SatDbEntry(satellite_number=identity.satellite_number) for identity in tle_db]


def merge_sources(tle_db, results):
    """
    Merge parsed database files into one list of entries.

    Content is replaced per satellite, never per field: an entry from a
    higher precedence file shadows the whole entry below it. Provenance
    accumulates every tier that defined the satellite.

    Args:
        tle_db (TleDatabase): TLE database defining the index space
        results (list): (Provenance, {index: SatDbEntry} or None) tuples,
            lowest precedence first. None marks an unavailable source.

    Returns:
        tuple: (entries, loaded) where entries is index-aligned with tle_db
            and loaded tells whether any source matched any satellite
    """
    entries = _empty_entries(tle_db)
    loaded = False

    for tier, parsed in results:
        if parsed is None:
            continue
        for index, entry in parsed.items():
            expected = tle_db[index].satellite_number
            if entry.satellite_number != expected:
                logger.error(f"Transponder entry for satellite {entry.satellite_number} "
                             f"does not match TLE index {index} ({expected}), ignored")
                continue
            merged = entry.copy()
            merged.location = entries[index].location | tier
            entries[index] = merged
            loaded = True

    return entries, loaded


class TransponderDatabase:
    """
    Transponder database, each entry index corresponding to the same index
    in the TLE database.
    """

    def __init__(self, tle_db, search_paths=None, max_transponders=0):
        self.tle_db = tle_db
        self.search_paths = search_paths or paths.resolve_db_paths()
        self.max_transponders = max_transponders
        self.entries = _empty_entries(tle_db)
        self.loaded = False

    def __len__(self):
        return len(self.entries)

    @classmethod
    def from_search_paths(cls, tle_db, search_paths=None, max_transponders=0):
        """
        Read the transponder database from the primary and shared locations.

        Entries defined in the primary location take precedence over the
        shared locations; among shared locations the first listed wins.

        Args:
            tle_db (TleDatabase): TLE database for which entries are matched
            search_paths (SearchPaths): Optional search paths, XDG defaults otherwise
            max_transponders (int): Per-satellite transponder limit, 0 for none

        Returns:
            TransponderDatabase: Merged database
        """
        db = cls(tle_db, search_paths, max_transponders)
        results = []
        for is_primary, db_file in db.search_paths.application_order():
            tier = Provenance.PRIMARY if is_primary else Provenance.SHARED
            results.append((tier, db._read(db_file, tier)))

        db.entries, db.loaded = merge_sources(tle_db, results)
        available = sum(1 for _, parsed in results if parsed is not None)
        logger.info(f"Transponder database loaded from {available} of {len(results)} locations")
        return db

    def _read(self, db_file, tier):
        return read_db_file(db_file, self.tle_db, tier, self.max_transponders)

    def shared_baseline(self):
        """
        Entries as defined by the shared locations alone

        Returns:
            list: SatDbEntry objects, index-aligned with the TLE database
        """
        results = [(Provenance.SHARED, self._read(db_file, Provenance.SHARED))
                   for is_primary, db_file in self.search_paths.application_order()
                   if not is_primary]
        entries, _ = merge_sources(self.tle_db, results)
        return entries

    def index_of(self, satellite_number):
        return self.tle_db.index_of(satellite_number)

    def get_entry(self, index):
        """Copy of the current entry at index (possibly empty)"""
        return self.entries[index].copy()

    def is_empty(self, index):
        return entry_is_empty(self.entries[index])

    def differs_from(self, index, entry):
        """True if entry has different content than the stored entry"""
        return not entries_equal(self.entries[index], entry)

    def set_entry(self, index, entry):
        """
        Replace the entry at index with edited content.

        Unchanged content leaves the entry and its provenance alone. Changed
        content is marked DIRTY and will be written to the primary location.

        Args:
            index (int): TLE index
            entry (SatDbEntry): New content

        Returns:
            bool: True if the entry changed

        Raises:
            ValueError: If a transponder name cannot be stored in the database file
        """
        new_entry = entry.copy().normalize()
        for transponder in new_entry.transponders:
            check_transponder_name(transponder.name)
        if entries_equal(self.entries[index], new_entry):
            return False

        new_entry.satellite_number = self.tle_db[index].satellite_number
        new_entry.location = self.entries[index].location | Provenance.DIRTY
        self.entries[index] = new_entry
        logger.debug(f"Transponder entry for satellite {new_entry.satellite_number} edited")
        return True

    def clear_entry(self, index):
        """Blank the entry at index, shadowing any shared definition"""
        return self.set_entry(index, SatDbEntry())

    def restore_default(self, index):
        """
        Restore the entry at index to its shared (system) definition.

        The restored entry is not written to the primary location, so the
        shared definition applies again on the next load.

        Returns:
            SatDbEntry: Copy of the restored entry
        """
        baseline = self.shared_baseline()[index]
        self.entries[index] = baseline
        logger.debug(f"Transponder entry for satellite {baseline.satellite_number} restored to default")
        return baseline.copy()

    def default_write_mask(self, baseline=None):
        """
        Decide which entries belong in the primary location.

        Entries loaded from the primary location or edited this session are
        written, except entries identical to the shared definition and empty
        entries that have no shared definition to shadow.

        Args:
            baseline (list): Optional shared baseline, re-read when not given

        Returns:
            list: Booleans, index-aligned with the TLE database
        """
        if baseline is None:
            baseline = self.shared_baseline()

        mask = []
        for entry, shared in zip(self.entries, baseline):
            location = entry.location
            write = bool(location & (Provenance.PRIMARY | Provenance.DIRTY))
            if write and Provenance.SHARED in location and entries_equal(entry, shared):
                write = False
            if write and entry_is_empty(entry) and Provenance.SHARED not in location:
                write = False
            mask.append(write)
        return mask

    def write(self, filename, should_write):
        """Write the entries selected by should_write to filename"""
        return write_db_file(filename, self.tle_db, self.entries, should_write)

    def write_to_default(self):
        """
        Write the user database to the primary location and update provenance.

        Returns:
            int: Number of entries written

        Raises:
            DatabaseWriteError: If the primary file could not be written
        """
        mask = self.default_write_mask()
        written = self.write(self.search_paths.primary, mask)

        for entry, was_written in zip(self.entries, mask):
            if was_written:
                entry.location = (entry.location & ~Provenance.DIRTY) | Provenance.PRIMARY
            else:
                entry.location = entry.location & ~(Provenance.PRIMARY | Provenance.DIRTY)
        return written
