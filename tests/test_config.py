"""Tests for inventory/config.py and aws_inventory/config.py."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import NoCredentialsError

from conftest import client_error
from aws_inventory.config import (
    DEFAULT_REGION,
    AWSConfig,
    get_all_enabled_regions,
    initialize_regions,
    parse_comma_list,
)
from inventory.config import BaseConfig
from inventory.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("AWS_DEFAULT_REGION", "AWS_PROFILE", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# BaseConfig
# ---------------------------------------------------------------------------
class TestBaseConfig:
    def test_defaults(self):
        config = BaseConfig()
        assert config.output_directory == "output"
        assert config.output_format == "csv"
        assert config.max_workers == 5
        assert config.timeout is None
        assert config.validate()

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid output format 'xml'"):
            BaseConfig(output_format="xml")

    def test_invalid_workers(self):
        with pytest.raises(ValueError, match="Invalid worker count 0"):
            BaseConfig(max_workers=0)

    def test_validate_missing_directory(self, capsys):
        config = BaseConfig(output_directory="")
        assert not config.validate()
        assert "Output directory is required" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# AWSConfig
# ---------------------------------------------------------------------------
class TestAWSConfig:
    def test_default_region(self, clean_env):
        config = AWSConfig()
        assert config.regions == [DEFAULT_REGION]
        assert config.primary_region == DEFAULT_REGION

    def test_regions_from_environment(self, clean_env):
        clean_env.setenv("AWS_DEFAULT_REGION", "eu-west-1, us-west-2")
        assert AWSConfig().regions == ["eu-west-1", "us-west-2"]

    def test_explicit_regions_win(self, clean_env):
        clean_env.setenv("AWS_DEFAULT_REGION", "eu-west-1")
        assert AWSConfig(regions=["ap-south-1"]).primary_region == "ap-south-1"

    def test_credentials_from_environment(self, clean_env):
        clean_env.setenv("AWS_PROFILE", "dev")
        clean_env.setenv("AWS_ACCESS_KEY_ID", "AKIA")
        clean_env.setenv("AWS_SECRET_ACCESS_KEY", "secret")
        config = AWSConfig()
        assert config.aws_profile == "dev"
        assert config.aws_access_key_id == "AKIA"
        assert config.aws_secret_access_key == "secret"

    def test_inherits_validation(self, clean_env):
        with pytest.raises(ValueError):
            AWSConfig(output_format="yaml")


# ---------------------------------------------------------------------------
# Region helpers
# ---------------------------------------------------------------------------
class TestRegions:
    def test_parse_comma_list(self):
        assert parse_comma_list(" a, b ,,a ,c") == ["a", "b", "c"]
        assert parse_comma_list("") == []
        assert parse_comma_list(None) == []

    def test_initialize_regions_appends_global_region(self):
        assert initialize_regions(["eu-west-1", "eu-west-1"]) == ["eu-west-1", "us-east-1"]

    def test_initialize_regions_keeps_position(self):
        assert initialize_regions(["us-east-1", "eu-west-1"]) == ["us-east-1", "eu-west-1"]

    def test_get_all_enabled_regions(self):
        session = MagicMock()
        session.client.return_value.describe_regions.return_value = {
            "Regions": [
                {"RegionName": "us-west-2", "OptInStatus": "opt-in-not-required"},
                {"RegionName": "af-south-1", "OptInStatus": "not-opted-in"},
                {"RegionName": "ap-east-1", "OptInStatus": "opted-in"},
            ]
        }
        assert get_all_enabled_regions(session) == ["ap-east-1", "us-west-2"]
        session.client.assert_called_once_with("ec2", region_name="us-east-1")

    def test_get_all_enabled_regions_errors(self):
        session = MagicMock()
        session.client.return_value.describe_regions.side_effect = client_error("UnauthorizedOperation")
        with pytest.raises(ConfigurationError, match="Could not fetch enabled regions"):
            get_all_enabled_regions(session)

        session.client.return_value.describe_regions.side_effect = NoCredentialsError()
        with pytest.raises(ConfigurationError, match="credentials not found"):
            get_all_enabled_regions(session)
