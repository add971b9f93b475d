from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from conftest import raw_config
from delivery_tracker.config.loader import DEFAULTS_PATH, SCHEMA_PATH

"""Config schema contract test."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example():
    jsonschema.validate(raw_config(), _schema())


def test_packaged_defaults_match_schema():
    defaults = yaml.safe_load(DEFAULTS_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(defaults, _schema())


def test_config_schema_missing_required_key():
    config = raw_config()
    del config["fleet_branch_regions"]
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())


def test_config_schema_incomplete_route_regions():
    config = raw_config(route_regions={"brand_tokens": ["NESPRESSO"]})
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())


def test_config_schema_rejects_empty_marker():
    config = raw_config(status_markers={"positive": "", "negative": "sem sucesso"})
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())
