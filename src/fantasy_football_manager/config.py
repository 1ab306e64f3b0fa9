from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from fantasy_football_manager.domain.errors import ConfigError
from fantasy_football_manager.domain.result import Err, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Iterable

_DEFAULTS: dict[str, object] = {
    "db": {
        "path": "~/.local/share/ffm/ffm.db",
    },
    "defaults": {
        "sport": "NFL",
        "season": 2024,
    },
    "unified": {
        "scoring_priority": ["PPR", "HALF", "STD"],
        "dvp_scoring_type": "PPR",
    },
}


@dataclass(frozen=True)
class AppSettings:
    db_path: str
    sport: str
    season: int
    scoring_priority: tuple[str, ...]
    dvp_scoring_type: str


def create_config(
    yaml_path: str = "ffm.yaml",
    env_prefix: str = "FFM",
    defaults: dict[str, object] | None = None,
    *,
    db_path: str | None = None,
    season: int | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.
    Environment variables use ``__`` as the separator, e.g. ``FFM__DEFAULTS__SEASON``.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]

    overrides = _build_overrides(db_path, season)
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _build_overrides(db_path: str | None, season: int | None) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if db_path is not None:
        overrides["db"] = {"path": db_path}
    if season is not None:
        overrides["defaults"] = {"season": season}
    return overrides


def _parse_priority(raw: object) -> tuple[str, ...]:
    # Env vars arrive as "PPR,HALF,STD"
    items: Iterable[object] = raw.split(",") if isinstance(raw, str) else raw  # type: ignore[assignment]
    return tuple(str(item).strip().upper() for item in items if str(item).strip())


def parse_settings(cfg: ConfigurationSet) -> Result[AppSettings, ConfigError]:
    try:
        season = int(str(cfg["defaults.season"]))
    except ValueError:
        return Err(ConfigError(message=f"defaults.season must be a year, got {cfg['defaults.season']!r}"))

    try:
        priority = _parse_priority(cfg["unified.scoring_priority"])
    except TypeError:
        priority = ()
    if not priority:
        return Err(ConfigError(message="unified.scoring_priority must list at least one scoring type"))

    return Ok(
        AppSettings(
            db_path=str(cfg["db.path"]),
            sport=str(cfg["defaults.sport"]).upper(),
            season=season,
            scoring_priority=priority,
            dvp_scoring_type=str(cfg["unified.dvp_scoring_type"]).upper(),
        )
    )


def load_settings(cfg: ConfigurationSet | None = None) -> AppSettings:
    if cfg is None:
        cfg = create_config()
    result = parse_settings(cfg)
    if isinstance(result, Err):
        raise ValueError(result.error.message)
    return result.value
