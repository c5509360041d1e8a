"""Tests for provisioner configuration loading and validation."""

import pytest

from stream_provisioner.config.settings import (
    CONFIG_FILENAME,
    ENV_ENDPOINT_URL,
    ProvisionerConfig,
    TimeoutConfig,
    load_config,
)


class TestFromDict:
    """Parsing configuration dictionaries."""

    def test_defaults(self):
        config = ProvisionerConfig.from_dict({}).unwrap()

        assert config.timeouts.ready_timeout == 180.0
        assert config.timeouts.poll_interval == 10.0
        assert config.accept_updating is True
        assert config.default_shard_count == 1
        assert config.aws.endpoint_url is None
        assert config.logging.format == "json"

    def test_values(self):
        config = ProvisionerConfig.from_dict({
            "timeouts": {"ready_timeout": 60, "poll_interval": 2},
            "aws": {"region": "eu-west-1", "endpoint_url": "http://localhost:4566"},
            "logging": {"level": "debug", "format": "text"},
            "default_shard_count": 4,
            "accept_updating": False,
        }).unwrap()

        assert config.timeouts == TimeoutConfig(ready_timeout=60.0, poll_interval=2.0)
        assert config.aws.region == "eu-west-1"
        assert config.aws.endpoint_url == "http://localhost:4566"
        assert config.logging.level == "debug"
        assert config.default_shard_count == 4
        assert config.accept_updating is False

    @pytest.mark.parametrize("value", ["false", "no", 0, None])
    def test_accept_updating_must_be_boolean(self, value):
        result = ProvisionerConfig.from_dict({"accept_updating": value})

        assert result.is_err()
        assert result.unwrap_err().field == "accept_updating"

    def test_quoted_accept_updating_in_yaml_is_rejected(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text('accept_updating: "false"\n')

        assert ProvisionerConfig.from_yaml(path).unwrap_err().field == "accept_updating"

    def test_bad_number(self):
        result = ProvisionerConfig.from_dict({"timeouts": {"ready_timeout": "soon"}})
        assert result.is_err()


class TestValidate:
    """Range checks on loaded values."""

    @pytest.mark.parametrize(
        "data,field",
        [
            ({"timeouts": {"ready_timeout": 0}}, "timeouts.ready_timeout"),
            ({"timeouts": {"poll_interval": -1}}, "timeouts.poll_interval"),
            ({"timeouts": {"ready_timeout": 5, "poll_interval": 10}}, "timeouts.poll_interval"),
            ({"default_shard_count": 0}, "default_shard_count"),
            ({"logging": {"format": "xml"}}, "logging.format"),
        ],
    )
    def test_rejects(self, data, field):
        config = ProvisionerConfig.from_dict(data).unwrap()
        result = config.validate()

        assert result.is_err()
        assert result.unwrap_err().field == field

    def test_accepts_defaults(self):
        assert ProvisionerConfig().validate().is_ok()


class TestFromYaml:
    """Loading YAML files."""

    def test_missing_file(self, tmp_path):
        result = ProvisionerConfig.from_yaml(tmp_path / "nope.yaml")
        assert result.unwrap_err().field == "path"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("timeouts: [unclosed\n")

        assert ProvisionerConfig.from_yaml(path).unwrap_err().field == "yaml"

    def test_non_mapping(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("- just\n- a list\n")

        assert ProvisionerConfig.from_yaml(path).is_err()

    def test_loads(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("timeouts:\n  ready_timeout: 30\n  poll_interval: 1\n")

        config = ProvisionerConfig.from_yaml(path).unwrap()
        assert config.timeouts.ready_timeout == 30.0


class TestLoadConfig:
    """Standard-location loading with environment overlay."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(ENV_ENDPOINT_URL, raising=False)
        config = load_config(tmp_path).unwrap()
        assert config.timeouts.ready_timeout == 180.0

    def test_environment_overlay(self, tmp_path, monkeypatch):
        monkeypatch.setenv(ENV_ENDPOINT_URL, "http://localhost:4566")
        monkeypatch.setenv("AWS_REGION", "ap-southeast-2")

        config = load_config(tmp_path).unwrap()

        assert config.aws.endpoint_url == "http://localhost:4566"
        assert config.aws.region == "ap-southeast-2"

    def test_file_wins_over_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(ENV_ENDPOINT_URL, "http://localhost:4566")
        (tmp_path / CONFIG_FILENAME).write_text("aws:\n  endpoint_url: http://kinesis.local\n")

        assert load_config(tmp_path).unwrap().aws.endpoint_url == "http://kinesis.local"

    def test_invalid_file_values(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("timeouts:\n  poll_interval: 0\n")
        assert load_config(tmp_path).is_err()


def test_with_overrides_keeps_unset_values():
    base = ProvisionerConfig.from_dict({"aws": {"region": "eu-west-1"}}).unwrap()

    config = base.with_overrides(ready_timeout=5.0, accept_updating=False)

    assert config.timeouts.ready_timeout == 5.0
    assert config.timeouts.poll_interval == 10.0
    assert config.aws.region == "eu-west-1"
    assert config.accept_updating is False
    assert base.timeouts.ready_timeout == 180.0
