"""Unit tests for configuration loading."""

import pytest

from iperf_site_metrics.config import Config, load_config


class TestLoadConfig:
    """Test command line, environment and YAML precedence."""

    def test_defaults(self):
        config = load_config([], environ={})

        assert config == Config()
        assert config.api == "http://localhost:4567"
        assert config.timeout == 30
        assert config.iperf_path == "iperf3"
        assert config.iperf_opts == "-t 10"
        assert config.attempts == 10
        assert config.retry_pause == 15.0
        assert config.statsd_host is None

    def test_short_flags(self):
        config = load_config(["-a", "http://sensu:4567", "-u", "admin", "-p", "pw",
                              "-t", "5", "-b", "/opt/iperf3", "-i=-t 20 -P 2"], environ={})

        assert config.api == "http://sensu:4567"
        assert config.user == "admin"
        assert config.password == "pw"
        assert config.timeout == 5
        assert config.iperf_path == "/opt/iperf3"
        assert config.iperf_opts == "-t 20 -P 2"

    def test_long_flags(self):
        config = load_config(["--api", "http://sensu:4567", "--iperf-path", "/opt/iperf3",
                              "--iperf-options=-t 5", "--attempts", "3", "--retry-pause", "0",
                              "--statsd-host", "127.0.0.1", "--statsd-port", "9125",
                              "--log-level", "info"], environ={})

        assert config.iperf_opts == "-t 5"
        assert config.attempts == 3
        assert config.retry_pause == 0.0
        assert config.statsd_host == "127.0.0.1"
        assert config.statsd_port == 9125
        assert config.log_level == "INFO"

    def test_environment(self):
        environ = {"SENSU_API_URL": "http://env:4567", "SENSU_API_TIMEOUT": "12",
                   "SENSU_API_USER": "envuser", "IPERF_OPTIONS": "-t 3"}

        config = load_config([], environ=environ)

        assert config.api == "http://env:4567"
        assert config.timeout == 12
        assert config.user == "envuser"
        assert config.iperf_opts == "-t 3"

    def test_flag_overrides_environment(self):
        config = load_config(["--timeout", "7"], environ={"SENSU_API_TIMEOUT": "12"})
        assert config.timeout == 7

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "params.yml"
        path.write_text("api: http://yaml:4567\ntimeout: 9\nattempts: 2\nretry_pause: 1.5\n")

        config = load_config(["--config", str(path)], environ={})

        assert config.api == "http://yaml:4567"
        assert config.timeout == 9
        assert config.attempts == 2
        assert config.retry_pause == 1.5

    def test_yaml_from_environment_and_precedence(self, tmp_path):
        path = tmp_path / "params.yml"
        path.write_text("api: http://yaml:4567\ntimeout: 9\nuser: yamluser\n")
        environ = {"IPERF_SITE_METRICS_CONFIG": str(path), "SENSU_API_TIMEOUT": "11"}

        config = load_config(["--user", "cliuser"], environ=environ)

        assert config.api == "http://yaml:4567"
        assert config.timeout == 11
        assert config.user == "cliuser"

    def test_yaml_unknown_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / "params.yml"
        path.write_text("api: http://yaml:4567\ncolour: blue\n")

        config = load_config(["-c", str(path)], environ={})

        assert config.api == "http://yaml:4567"
        assert "colour" in caplog.text

    def test_missing_yaml_file(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            load_config(["--config", str(tmp_path / "missing.yml")], environ={})
        assert excinfo.value.code == 2

    def test_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "params.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(SystemExit):
            load_config(["--config", str(path)], environ={})

    @pytest.mark.parametrize("argv", [
        ["--timeout", "0"],
        ["--timeout", "abc"],
        ["--attempts", "-1"],
        ["--retry-pause", "-5"],
    ])
    def test_invalid_values(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            load_config(argv, environ={})
        assert excinfo.value.code == 2

    def test_invalid_yaml_value(self, tmp_path):
        path = tmp_path / "params.yml"
        path.write_text("timeout: 0\n")

        with pytest.raises(SystemExit):
            load_config(["--config", str(path)], environ={})
