import argparse
import json
import sys


def _load_config(args):
    from mapty.config import load_config_or_default

    return load_config_or_default(getattr(args, "config", None))


def _open_log(config, verbose=False, load=True):
    """Open the store and load the saved workouts. Returns (conn, log, load_result)."""
    from mapty.config import get_storage_key
    from mapty.db import KeyValueStore, get_connection
    from mapty.snapshot import SnapshotError, SnapshotStore
    from mapty.workout_log import WorkoutLog

    conn = get_connection(config)
    store = SnapshotStore(KeyValueStore(conn), key=get_storage_key(config))
    log = WorkoutLog(store, verbose=verbose)
    if not load:
        return conn, log, None
    try:
        result = log.load()
    except SnapshotError as e:
        print(f"Stored workouts are unreadable: {e}")
        conn.close()
        sys.exit(1)
    return conn, log, result


def _print_load_failures(result):
    if not result.failures:
        return
    print(f"\nSkipped {result.skipped} unreadable record(s):")
    for _record, error in result.failures:
        print(f"  {error}")


def cmd_db_init(args):
    from mapty.db import init_db

    init_db(_load_config(args))


def cmd_add(args):
    from mapty.models import ValidationError
    from mapty.render import marker_label

    config = _load_config(args)
    conn, log, result = _open_log(config, verbose=args.verbose)

    extra = args.cadence if args.type == "running" else args.elevation
    try:
        workout = log.create(args.type, (args.lat, args.lng),
                             args.distance, args.duration, extra)
    except ValidationError as e:
        print(f"Inputs have to be positive numbers! ({e})")
        conn.close()
        sys.exit(1)

    print(f"Added {marker_label(workout)}  [{workout.id}]")
    _print_load_failures(result)
    conn.close()


def cmd_list(args):
    from mapty.render import format_workout

    config = _load_config(args)
    conn, log, result = _open_log(config, verbose=args.verbose)

    if not len(log):
        print("No workouts yet.")
    for workout in log.workouts:
        print(format_workout(workout))
        if args.verbose:
            print(f"  clicks: {workout.clicks}")

    _print_load_failures(result)
    conn.close()


def cmd_select(args):
    from mapty.config import get_map_zoom
    from mapty.render import map_view, marker_label
    from mapty.workout_log import WorkoutNotFound

    config = _load_config(args)
    conn, log, _result = _open_log(config, verbose=args.verbose)

    try:
        workout, coords = log.select(args.id)
    except WorkoutNotFound as e:
        print(f"{e}.")
        conn.close()
        sys.exit(1)

    print(marker_label(workout))
    print(f"Map view: {json.dumps(map_view(coords, get_map_zoom(config)))}")
    print(f"Selected {workout.clicks} time(s).")
    conn.close()


def cmd_map(args):
    from mapty.config import get_map_zoom
    from mapty.position import LocationError, current_position
    from mapty.render import map_view, marker_label, popup_options

    config = _load_config(args)
    conn, log, result = _open_log(config, verbose=args.verbose)

    try:
        position = current_position(config)
    except LocationError as e:
        print("Could not get your current location")
        if args.verbose:
            print(f"  ({e})")
    else:
        print(f"Map view: {json.dumps(map_view(position, get_map_zoom(config)))}")

    print(f"\nMarkers ({len(log)}):")
    for workout in log.workouts:
        line = f"  ({workout.lat:.4f}, {workout.lng:.4f})  {marker_label(workout)}"
        if args.verbose:
            line += f"  {json.dumps(popup_options(workout))}"
        print(line)

    _print_load_failures(result)
    conn.close()


def cmd_reset(args):
    config = _load_config(args)

    if not args.yes:
        answer = input("Delete all workouts? This cannot be undone. [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return

    # No load: a corrupt snapshot must still be erasable
    conn, log, _result = _open_log(config, load=False)
    log.reset()
    conn.close()
    print("Reset complete: all workouts removed.")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="mapty", description="Mapty — map-based workout log")
    parser.add_argument("--config", type=str, help="Path to config.yaml (default: config/config.yaml)")
    subparsers = parser.add_subparsers(dest="command")

    # db subcommand with its own subcommands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_sub = db_parser.add_subparsers(dest="db_command")
    db_init = db_sub.add_parser("init", help="Initialize the database schema")
    db_init.set_defaults(func=cmd_db_init)

    # Raw strings on purpose: coercion and validation happen in the model
    add_parser = subparsers.add_parser("add", help="Log a new workout")
    add_parser.add_argument("--type", choices=["running", "cycling"], default="running",
                            help="Workout type (default: running)")
    add_parser.add_argument("--lat", type=float, required=True, help="Latitude of the map click")
    add_parser.add_argument("--lng", type=float, required=True, help="Longitude of the map click")
    add_parser.add_argument("--distance", required=True, help="Distance in km")
    add_parser.add_argument("--duration", required=True, help="Duration in min")
    add_parser.add_argument("--cadence", help="Cadence in steps/min (running)")
    add_parser.add_argument("--elevation", help="Elevation gain in m (cycling)")
    add_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    add_parser.set_defaults(func=cmd_add)

    list_parser = subparsers.add_parser("list", help="List workouts in display order")
    list_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    list_parser.set_defaults(func=cmd_list)

    select_parser = subparsers.add_parser("select", help="Select a workout and center the map on it")
    select_parser.add_argument("id", help="Workout ID")
    select_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    select_parser.set_defaults(func=cmd_select)

    map_parser = subparsers.add_parser("map", help="Show the map view and workout markers")
    map_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    map_parser.set_defaults(func=cmd_map)

    reset_parser = subparsers.add_parser("reset", help="Delete all workouts")
    reset_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    reset_parser.set_defaults(func=cmd_reset)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)
    if args.command == "db" and not getattr(args, "db_command", None):
        db_parser.print_help()
        sys.exit(1)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
