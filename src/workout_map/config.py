from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

from workout_map.controller import DEFAULT_ATTRIBUTION, DEFAULT_TILE_URL, DEFAULT_ZOOM_LEVEL

APP_ID = "io.Luigi311.WorkoutMap"
APP_DIR = Path(f"~/.local/share/{APP_ID}").expanduser()


@dataclass
class AppConfig:
    app_dir: Path = APP_DIR

    # [map]
    zoom_level: int = DEFAULT_ZOOM_LEVEL
    tile_url: str = DEFAULT_TILE_URL
    attribution: str = DEFAULT_ATTRIBUTION

    # [storage]
    database_url: str = ""

    # [form]
    redisplay_delay_ms: int = 1000

    # [logging]
    log_level: str = "INFO"
    log_file: str = ""

    def __post_init__(self) -> None:
        if not self.database_url:
            self.database_url = f"sqlite:///{self.app_dir / 'workouts.db'}"

    @property
    def config_file(self) -> Path:
        return self.app_dir / "config.ini"


def load_config(config_file: Path | None = None, app_dir: Path = APP_DIR) -> AppConfig:
    """Read config.ini (missing file or keys fall back to the defaults)."""
    config_file = config_file or app_dir / "config.ini"
    cfg = ConfigParser(interpolation=None)
    if config_file.exists():
        cfg.read(config_file)

    return AppConfig(
        app_dir=app_dir,
        zoom_level=cfg.getint("map", "zoom_level", fallback=DEFAULT_ZOOM_LEVEL),
        tile_url=cfg.get("map", "tile_url", fallback=DEFAULT_TILE_URL),
        attribution=cfg.get("map", "attribution", fallback=DEFAULT_ATTRIBUTION),
        database_url=cfg.get("storage", "database_url", fallback=""),
        redisplay_delay_ms=cfg.getint("form", "redisplay_delay_ms", fallback=1000),
        log_level=cfg.get("logging", "level", fallback="INFO"),
        log_file=cfg.get("logging", "file", fallback=""),
    )


def save_config(config: AppConfig, config_file: Path | None = None) -> Path:
    config_file = config_file or config.config_file
    cfg = ConfigParser(interpolation=None)
    cfg["map"] = {
        "zoom_level": str(config.zoom_level),
        "tile_url": config.tile_url,
        "attribution": config.attribution,
    }
    cfg["storage"] = {"database_url": config.database_url}
    cfg["form"] = {"redisplay_delay_ms": str(config.redisplay_delay_ms)}
    cfg["logging"] = {"level": config.log_level, "file": config.log_file}

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with config_file.open("w") as f:
        cfg.write(f)
    return config_file
