# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from delivery_tracker.config.loader import TrackerConfig, build_config
from delivery_tracker.logging.init import reset_logging

BROKER = "Broker Bruno"
IGNORED = "Ignored Ivo"


@pytest.fixture(autouse=True)
def _fresh_logger():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("TRACKER_CONFIG", raising=False)
        monkeypatch.delenv("TRACKER_STORE_PATH", raising=False)
        yield p


def raw_config(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "broker_drivers": [BROKER],
        "ignored_fleet_drivers": [IGNORED],
        "route_regions": {
            "brand_tokens": ["NESPRESSO"],
            "city_token": "SP",
            "depot_token": "PARI",
            "dafiti_depot_tokens": ["BARUERI"],
            "second_city_tokens": ["RJ"],
        },
        "fleet_branch_regions": {"SP": "São Paulo", "RJ": "Rio De Janeiro"},
        "status_markers": {"positive": "sucesso", "negative": "sem sucesso"},
        "store_path": "./data/delivery_data.json",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def config() -> TrackerConfig:
    return build_config(raw_config())


@pytest.fixture()
def sample_config_yaml() -> str:
    return """broker_drivers:
  - Broker Bruno
ignored_fleet_drivers:
  - Ignored Ivo
route_regions:
  brand_tokens: [NESPRESSO]
  city_token: SP
  depot_token: PARI
  dafiti_depot_tokens: [BARUERI]
  second_city_tokens: [RJ]
fleet_branch_regions:
  SP: São Paulo
  RJ: Rio De Janeiro
status_markers:
  positive: sucesso
  negative: sem sucesso
store_path: ./data/delivery_data.json
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "tracker.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def fleet_header() -> dict[str, Any]:
    return {
        "A": "ID Carga",
        "F": "Motorista",
        "K": "Filial",
        "P": "Quantidade de Volumes",
        "Q": "Usuário Carregamento",
    }


def fleet_row(load_id: Any, driver: Any, units: Any, branch: str = "SP", user: str = "loader") -> dict[str, Any]:
    row = {"A": load_id, "F": driver, "K": branch, "P": units, "Q": user}
    return {k: v for k, v in row.items() if v is not None}


def make_excel(path: Path, rows: list[list[object]]) -> Path:
    """Write rows (no header) to the first sheet of an .xlsx file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path
