"""Tests for aws_inventory/discover.py: a full run with AWS access patched out."""

import os
from unittest.mock import MagicMock, patch

import pytest

from conftest import StaticCollector
from aws_inventory import discover
from inventory.exceptions import ConfigurationError
from inventory.registry import Registry
from inventory.resource import new_resource
from main import build_parser

ACCOUNT_ARN = "arn:aws:iam::123456789012:user/dev"


def _args(tmp_path, *extra):
    return build_parser().parse_args(["--region", "r1", "--output-dir", str(tmp_path), *extra])


@pytest.fixture
def aws(monkeypatch):
    """Patch session, credential check and resolver construction."""
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    with patch.object(discover, "create_session") as session, patch.object(
        discover, "check_aws_credentials", return_value=ACCOUNT_ARN
    ) as credentials, patch.object(discover.AWSNameResolver, "from_session") as resolver:
        yield MagicMock(session=session, credentials=credentials, resolver=resolver)


def _run(tmp_path, collector, *extra):
    with patch.object(discover, "build_registry", return_value=Registry([collector])):
        return discover.main(_args(tmp_path, *extra))


class TestDiscoverMain:
    def test_successful_run_writes_reports(self, tmp_path, aws):
        collector = StaticCollector(
            "inventory",
            {"r1": [new_resource("inventory", name="item", region="r1")]},
        )
        assert _run(tmp_path, collector) == discover.EXIT_OK

        output = tmp_path / "123456789012" / "resources"
        assert os.path.exists(output / "inventory.csv")
        assert os.path.exists(output / "all.csv")
        assert not os.path.exists(output / "errors.txt")
        assert sorted(collector.calls) == ["r1", "us-east-1"]

    def test_html_index_written_on_request(self, tmp_path, aws):
        collector = StaticCollector(
            "inventory",
            {"r1": [new_resource("inventory", name="item", region="r1")]},
        )
        assert _run(tmp_path, collector, "--html") == discover.EXIT_OK

        account_dir = tmp_path / "123456789012"
        assert os.path.exists(account_dir / "index.html")
        assert os.path.exists(account_dir / "resources.zip")
        assert "resources/inventory.csv" in (account_dir / "files.json").read_text()

    def test_html_index_not_written_by_default(self, tmp_path, aws):
        collector = StaticCollector("inventory", {})
        assert _run(tmp_path, collector) == discover.EXIT_OK
        assert not os.path.exists(tmp_path / "123456789012" / "index.html")

    def test_html_index_failure_exit_code(self, tmp_path, aws):
        collector = StaticCollector("inventory", {})
        with patch.object(discover, "generate_html", side_effect=OSError("disk full")):
            assert _run(tmp_path, collector, "-H") == discover.EXIT_FAILURE

    def test_pair_failure_exit_code(self, tmp_path, aws):
        collector = StaticCollector("inventory", {"r1": RuntimeError("AccessDenied")})
        assert _run(tmp_path, collector) == discover.EXIT_FAILURE
        errors = tmp_path / "123456789012" / "resources" / "errors.txt"
        assert errors.read_text() == "ERROR inventory [r1]: AccessDenied\n"

    def test_cancelled_run_exit_code(self, tmp_path, aws):
        def cancel(ctx):
            ctx.run.cancel("stop")
            ctx.check()

        collector = StaticCollector("inventory", {"r1": cancel})
        assert _run(tmp_path, collector, "--concurrency", "1") == discover.EXIT_CANCELLED

    def test_credential_failure(self, tmp_path, aws, capsys):
        aws.credentials.side_effect = ConfigurationError("AWS credentials not found.")
        collector = StaticCollector("inventory", {})
        assert _run(tmp_path, collector) == discover.EXIT_FAILURE
        assert collector.calls == []
        assert "AWS credentials not found." in capsys.readouterr().out

    def test_all_regions(self, tmp_path, aws):
        collector = StaticCollector("inventory", {})
        with patch.object(discover, "get_all_enabled_regions", return_value=["eu-west-1"]):
            assert _run(tmp_path, collector, "--all-regions") == discover.EXIT_OK
        assert sorted(collector.calls) == ["eu-west-1", "us-east-1"]

    def test_build_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AWS_PROFILE", raising=False)
        args = _args(tmp_path, "--categories", "ec2, kms", "--format", "json", "--timeout", "30")
        config = discover.build_config(args)
        assert config.regions == ["r1"]
        assert config.categories == ["ec2", "kms"]
        assert config.output_format == "json"
        assert config.timeout == 30.0
