import io

import pytest

from iperf_site_metrics.config import Config
from iperf_site_metrics.topology import Host


@pytest.fixture
def config():
    return Config(api="http://sensu.example:4567", user="admin", password="secret",
                  timeout=5, retry_pause=15.0)


@pytest.fixture
def hosts():
    return [
        Host("lax-web01", "10.1.0.1", frozenset({"iperf", "base"})),
        Host("lax-web02", "10.1.0.2", frozenset({"iperf"})),
        Host("NYC-web01", "10.2.0.1", frozenset({"iperf"})),
        Host("nyc-db01", "10.2.0.2", frozenset({"base"})),
        Host("ams-web01", "10.3.0.1", frozenset({"iperf"})),
        Host("sfo-db01", "10.4.0.1", frozenset({"base"})),
    ]


@pytest.fixture
def stream():
    return io.StringIO()
