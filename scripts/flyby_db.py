#!/usr/bin/env python3
# Command-line interface for the flyby transponder database

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from flyby.common import config, logging, paths
from flyby.gps import location
from flyby.satellites.db_file import DatabaseWriteError
from flyby.satellites.tle_db import TleDatabase
from flyby.satellites.transponder_db import TransponderDatabase
from flyby.satellites.transponders import Transponder

logger = None


def build_parser():
    parser = argparse.ArgumentParser(description="flyby transponder database")
    parser.add_argument("--tle", action="append", metavar="FILE",
                        help="TLE file (repeatable, defaults to tle_files in config.ini)")
    parser.add_argument("--config", metavar="FILE", help="Alternative config.ini")
    parser.add_argument("--log-level", help="Logging level (default from config.ini)")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("paths", help="Show database search paths")

    list_parser = subparsers.add_parser("list", help="List transponder entries")
    list_parser.add_argument("--all", action="store_true", help="Include satellites without entries")

    show_parser = subparsers.add_parser("show", help="Show the entry of a satellite")
    show_parser.add_argument("satellite", type=int, help="Satellite catalog number")

    squint_parser = subparsers.add_parser("squint", help="Set or clear squint attitude")
    squint_parser.add_argument("satellite", type=int, help="Satellite catalog number")
    squint_group = squint_parser.add_mutually_exclusive_group(required=True)
    squint_group.add_argument("--set", nargs=2, type=float, metavar=("ALAT", "ALON"),
                              help="Attitude latitude and longitude")
    squint_group.add_argument("--off", action="store_true", help="Disable squint angle")

    add_parser = subparsers.add_parser("add-transponder", help="Add a transponder")
    add_parser.add_argument("satellite", type=int, help="Satellite catalog number")
    add_parser.add_argument("--name", default="", help="Transponder name")
    add_parser.add_argument("--uplink", nargs=2, type=float, default=(0.0, 0.0),
                            metavar=("START", "END"), help="Uplink range in MHz")
    add_parser.add_argument("--downlink", nargs=2, type=float, default=(0.0, 0.0),
                            metavar=("START", "END"), help="Downlink range in MHz")
    add_parser.add_argument("--dayofweek", type=int, default=0, help="Day of week mask")
    add_parser.add_argument("--phase", nargs=2, type=int, default=(0, 0),
                            metavar=("START", "END"), help="Phase range")

    remove_parser = subparsers.add_parser("remove-transponder", help="Remove a transponder")
    remove_parser.add_argument("satellite", type=int, help="Satellite catalog number")
    remove_parser.add_argument("number", type=int, help="Transponder number, as shown by 'show'")

    clear_parser = subparsers.add_parser("clear", help="Remove all transponder data of a satellite")
    clear_parser.add_argument("satellite", type=int, help="Satellite catalog number")

    restore_parser = subparsers.add_parser("restore", help="Restore the system default entry")
    restore_parser.add_argument("satellite", type=int, help="Satellite catalog number")

    export_parser = subparsers.add_parser("export", help="Write entries to a file")
    export_parser.add_argument("output", help="Output .db file")
    export_parser.add_argument("satellites", type=int, nargs="*",
                               help="Catalog numbers (default: all non-empty entries)")

    qth_parser = subparsers.add_parser("qth", help="Show or update the observer location")
    qth_parser.add_argument("--from-gps", action="store_true", help="Update from a serial GPS")
    qth_parser.add_argument("--port", help="GPS serial port")
    qth_parser.add_argument("--baud", type=int, help="GPS baud rate")
    qth_parser.add_argument("--callsign", help="Station callsign")

    return parser


def print_entry(identity, entry):
    print(f"{identity.name} ({identity.satellite_number})")
    print(f"  Source: {entry.location.describe()}")
    if entry.squintflag:
        print(f"  Squint attitude: {entry.alat}, {entry.alon}")
    else:
        print("  Squint attitude: not defined")
    for number, transponder in enumerate(entry.transponders, 1):
        print(f"  {number}. {transponder.name or '(unnamed)'}")
        print(f"     Uplink:   {transponder.uplink_start:.3f} - {transponder.uplink_end:.3f} MHz")
        print(f"     Downlink: {transponder.downlink_start:.3f} - {transponder.downlink_end:.3f} MHz")
        if transponder.dayofweek:
            print(f"     Day of week: {transponder.dayofweek}")
        if transponder.phase_start or transponder.phase_end:
            print(f"     Phase: {transponder.phase_start} - {transponder.phase_end}")


def load_database(args, conf):
    tle_files = [Path(f) for f in args.tle] if args.tle else config.get_tle_files(conf)
    if not tle_files:
        logger.error("No TLE files given, use --tle or set tle_files in config.ini")
        return None

    tle_db = TleDatabase.from_files(tle_files)
    if not len(tle_db):
        logger.error("No satellites found in TLE files")
        return None

    return TransponderDatabase.from_search_paths(
        tle_db, max_transponders=config.get_int(conf, 'max_transponders', 0))


def lookup(db, satellite_number):
    index = db.index_of(satellite_number)
    if index is None:
        logger.error(f"Satellite {satellite_number} is not in the TLE database")
    return index


def save(db):
    try:
        written = db.write_to_default()
    except DatabaseWriteError as e:
        logger.error(str(e))
        return 1
    print(f"Saved {written} entries to {db.search_paths.primary}")
    return 0


def edit_entry(db, index, args):
    entry = db.get_entry(index)

    if args.command == "squint":
        if args.off:
            entry.clear_squint()
        else:
            entry.set_squint(*args.set)

    elif args.command == "add-transponder":
        transponder = Transponder(args.name, args.uplink[0], args.uplink[1],
                                  args.downlink[0], args.downlink[1], args.dayofweek,
                                  args.phase[0], args.phase[1])
        if not transponder.defined:
            logger.error("A transponder needs a non-zero uplink or downlink start frequency")
            return 1
        entry.transponders.append(transponder)

    elif args.command == "remove-transponder":
        if not 1 <= args.number <= entry.num_transponders:
            logger.error(f"Satellite {args.satellite} has no transponder {args.number}")
            return 1
        del entry.transponders[args.number - 1]

    try:
        changed = db.set_entry(index, entry)
    except ValueError as e:
        logger.error(str(e))
        return 1
    if not changed:
        print("Entry unchanged")
        return 0
    return save(db)


def run_qth(args, conf):
    if not args.from_gps:
        qth = location.read_qth()
        if not qth:
            print("No QTH defined, use --from-gps to create one")
            return 1
        print(f"{qth['callsign']}: {qth['latitude']}, {qth['longitude']}, {qth['altitude']} m")
        return 0

    port = args.port or conf.get('gps_serial_port')
    baud = args.baud or config.get_int(conf, 'gps_serial_baud', 9600)
    fix = location.read_gps_fix(port, baud, config.get_int(conf, 'gps_timeout', 30))
    if not fix:
        print("Failed to get a GPS fix")
        return 1

    callsign = args.callsign or conf.get('callsign', 'QTH')
    if not location.write_qth(fix, callsign):
        return 1
    print(f"QTH updated: {fix['latitude']:.5f}, {fix['longitude']:.5f}, {fix['altitude']:.0f} m")
    return 0


def main(argv=None):
    """Main function for the transponder database tool"""
    global logger

    parser = build_parser()
    args = parser.parse_args(argv)

    conf = config.read_config(args.config)
    logger = logging.setup_logging("flyby", conf.get('log_file') or None,
                                   args.log_level or conf.get('log_level', 'INFO'))

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "paths":
        search_paths = paths.resolve_db_paths()
        print(f"Primary (writable): {search_paths.primary}")
        for db_file in search_paths.shared:
            status = "found" if db_file.exists() else "missing"
            print(f"Shared ({status}):   {db_file}")
        return 0

    if args.command == "qth":
        return run_qth(args, conf)

    db = load_database(args, conf)
    if db is None:
        return 1

    if args.command == "list":
        for index, identity in enumerate(db.tle_db):
            entry = db.entries[index]
            if not args.all and db.is_empty(index):
                continue
            squint = "squint" if entry.squintflag else "-"
            print(f"{identity.satellite_number:>6}  {identity.name:<24} "
                  f"{entry.num_transponders:>3} transponders  {squint:<6} {entry.location.describe()}")
        return 0

    if args.command == "export":
        if args.satellites:
            mask = [False] * len(db)
            for satellite_number in args.satellites:
                index = lookup(db, satellite_number)
                if index is None:
                    return 1
                mask[index] = True
        else:
            mask = [not db.is_empty(index) for index in range(len(db))]
        try:
            written = db.write(args.output, mask)
        except DatabaseWriteError as e:
            logger.error(str(e))
            return 1
        print(f"Exported {written} entries to {args.output}")
        return 0

    index = lookup(db, args.satellite)
    if index is None:
        return 1

    if args.command == "show":
        print_entry(db.tle_db[index], db.get_entry(index))
        return 0

    if args.command == "clear":
        if not db.clear_entry(index):
            print("Entry already empty")
            return 0
        return save(db)

    if args.command == "restore":
        db.restore_default(index)
        return save(db)

    return edit_entry(db, index, args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(0)
