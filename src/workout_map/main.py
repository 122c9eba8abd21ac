import argparse
import signal
from pathlib import Path

from gi.repository import GLib

from workout_map.config import APP_DIR, load_config
from workout_map.logger import setup_logger


def parse_position(value: str) -> tuple[float, float]:
    try:
        lat_s, lng_s = value.split(",")
        lat, lng = float(lat_s), float(lng_s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got {value!r}") from None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise argparse.ArgumentTypeError(f"position out of range: {value!r}")
    return lat, lng


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workout Map")
    parser.add_argument(
        "--position",
        type=parse_position,
        metavar="LAT,LNG",
        help="Start the map here instead of asking GeoClue for the current position.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Path to config.ini (default: {APP_DIR / 'config.ini'})",
    )
    parser.add_argument("--database", help="SQLAlchemy database URL, overrides the config file.")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser


def main():
    args = build_parser().parse_args()

    config = load_config(args.config)
    if args.database:
        config.database_url = args.database
    if args.log_level:
        config.log_level = args.log_level.upper()
    setup_logger(level=config.log_level, log_file=config.log_file or None)

    # Imported late so --help works without a display
    from workout_map.ui import WorkoutMapApp

    app = WorkoutMapApp(config, position=args.position)

    # Convert Unix signals to a graceful quit so do_shutdown() runs
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGINT, lambda *a: (app.quit(), False)[1])
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGTERM, lambda *a: (app.quit(), False)[1])

    app.run(None)


if __name__ == "__main__":
    main()
