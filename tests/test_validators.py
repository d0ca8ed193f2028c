"""Tests for batch configuration validation."""

import pytest

from hdockbatch.configs.logger import load_config
from hdockbatch.configs.validators import ConfigError, ConfigValidator, validate_config


@pytest.mark.unit
def test_default_config_is_valid():
    result = ConfigValidator.validate(load_config())
    assert result["valid"] is True
    assert result["errors"] == []


@pytest.mark.unit
def test_missing_required_field(batch_config):
    del batch_config["receptor"]
    result = ConfigValidator.validate(batch_config)
    assert result["valid"] is False
    assert "Missing required field: receptor" in result["errors"]


@pytest.mark.unit
@pytest.mark.parametrize("value", [0, -1, "10", True, 2.5])
def test_n_models_must_be_positive_int(batch_config, value):
    batch_config["n_models"] = value
    result = ConfigValidator.validate(batch_config)
    assert "n_models must be a positive integer" in result["errors"]


@pytest.mark.unit
def test_policy_values(batch_config):
    batch_config["on_tool_error"] = "retry"
    batch_config["resume_marker"] = "ledger"
    result = ConfigValidator.validate(batch_config)
    assert len(result["errors"]) == 2


@pytest.mark.unit
def test_extension_needs_leading_dot(batch_config):
    batch_config["ligand_extension"] = "pdb"
    with pytest.raises(ConfigError, match="ligand_extension"):
        validate_config(batch_config)


@pytest.mark.unit
def test_unknown_keys_are_warnings(batch_config):
    batch_config["threads"] = 4
    warnings = validate_config(batch_config)
    assert warnings == ["Unknown config key ignored: threads"]
