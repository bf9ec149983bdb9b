''' Measure iperf3 bandwidth from this host to one random iperf client in
every other site and print the results as metrics.
Suggested to run from Sensu or cron on every host on a regular interval.

Example:
python3 -m iperf_site_metrics --api http://sensu:4567 --user admin --password secret --iperf-options "-t 10"
'''
import enum
import logging
import sys

from datadog import initialize, statsd

from iperf_site_metrics.api import SensuApi
from iperf_site_metrics.config import load_config
from iperf_site_metrics.logging_config import configure_logging
from iperf_site_metrics.prober import IperfProber
from iperf_site_metrics.reporter import Reporter
from iperf_site_metrics.topology import SiteRoster


class Status(enum.IntEnum):
    '''Sensu check exit codes'''
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


def init_statsd(config):
    '''Set up the DogStatsD client when a host is configured, else None'''
    if not config.statsd_host:
        return None
    initialize(statsd_host=config.statsd_host, statsd_port=config.statsd_port)
    logging.info("DogStatsD forwarding to %s:%s", config.statsd_host, config.statsd_port)
    return statsd


def run(config, api=None, roster=None, prober=None, reporter=None) -> Status:
    '''
    One pass over every remote site. Failures for a single site are logged
    and skipped, the run itself always ends OK.
    '''
    if roster is None:
        api = api if api is not None else SensuApi(config)
        roster = SiteRoster(api.clients())
    prober = prober if prober is not None else IperfProber(config)
    if reporter is None:
        reporter = Reporter(roster.current_site, statsd=init_statsd(config))

    for site in roster.remote_sites():
        client = roster.client_from_site(site)
        if client is None:
            logging.debug("No iperf clients in site %s", site)
            continue

        measurement = prober.measure_with_retry(site, client.name, client.address)
        if measurement is not None:
            reporter.report(measurement)

    return Status.OK


def main(argv=None) -> int:
    config = load_config(argv)
    configure_logging(config.log_level)
    try:
        return int(run(config))
    except Exception:
        logging.exception("Unexpected error while measuring sites")
        return int(Status.UNKNOWN)


if __name__ == "__main__":
    sys.exit(main())
