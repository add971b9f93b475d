from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.delivery import Region

"""Config loader.

Responsibilities:
- Load YAML config (packaged defaults.yml, or a user file such as config/tracker.yml)
- Validate against the packaged config_schema.json
- Apply defaults for optional keys (status markers, store path)
- Expose frozen dataclasses consumed by the pipeline

Exception lists (broker drivers, ignored fleet drivers) and region tokens live
here as data so the pipeline can be exercised against synthetic lists.
"""

_CONFIG_DIR = Path(__file__).parent
SCHEMA_PATH = _CONFIG_DIR / "config_schema.json"
DEFAULTS_PATH = _CONFIG_DIR / "defaults.yml"

DEFAULT_STORE_PATH = "./data/delivery_data.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RegionRules:
    """Token tables for both region classifier variants (upper-cased)."""
    brand_tokens: tuple[str, ...] = ("NESPRESSO",)
    city_token: str = "SP"
    depot_token: str = "PARI"
    dafiti_depot_tokens: tuple[str, ...] = ("BARUERI",)
    second_city_tokens: tuple[str, ...] = ("RJ",)
    fleet_branch_regions: dict[str, Region] = field(
        default_factory=lambda: {"SP": Region.SAO_PAULO, "RJ": Region.RIO_DE_JANEIRO}
    )


@dataclass(frozen=True)
class StatusMarkers:
    positive: str = "sucesso"
    negative: str = "sem sucesso"


@dataclass(frozen=True)
class TrackerConfig:
    broker_drivers: frozenset[str]
    ignored_fleet_drivers: tuple[str, ...]
    regions: RegionRules
    status_markers: StatusMarkers
    store_path: str = DEFAULT_STORE_PATH

    def is_broker(self, driver: str | None) -> bool:
        return bool(driver) and driver in self.broker_drivers


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: if the schema file is missing or unreadable, or the data
            fails validation (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _upper_tuple(values: list[str]) -> tuple[str, ...]:
    return tuple(v.strip().upper() for v in values)


def build_config(data: dict[str, Any]) -> TrackerConfig:
    """Validate a raw mapping and build the frozen config."""
    _validate_config_schema(data)

    raw_regions = data["route_regions"]
    regions = RegionRules(
        brand_tokens=_upper_tuple(raw_regions["brand_tokens"]),
        city_token=raw_regions["city_token"].strip().upper(),
        depot_token=raw_regions["depot_token"].strip().upper(),
        dafiti_depot_tokens=_upper_tuple(raw_regions["dafiti_depot_tokens"]),
        second_city_tokens=_upper_tuple(raw_regions["second_city_tokens"]),
        fleet_branch_regions={
            str(code).strip().upper(): Region.from_label(label)
            for code, label in data["fleet_branch_regions"].items()
        },
    )
    markers_raw = data.get("status_markers") or {}
    markers = StatusMarkers(
        positive=markers_raw.get("positive", StatusMarkers.positive).lower(),
        negative=markers_raw.get("negative", StatusMarkers.negative).lower(),
    )
    return TrackerConfig(
        broker_drivers=frozenset(data["broker_drivers"]),
        ignored_fleet_drivers=tuple(data["ignored_fleet_drivers"]),
        regions=regions,
        status_markers=markers,
        store_path=data.get("store_path", DEFAULT_STORE_PATH),
    )


def load_config(path: Path) -> TrackerConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data)


@lru_cache(maxsize=1)
def default_config() -> TrackerConfig:
    """Packaged defaults (defaults.yml), loaded once."""
    return load_config(DEFAULTS_PATH)
