''' Metric output in the Sensu InfluxDB line style, optionally mirrored to DogStatsD. '''
import logging
import sys
import time

SITE_METRIC = "iperf.site.bits_per_second"
HOST_METRIC = "iperf.host.{hostname}.tx.bits_per_second"


def format_value(value):
    # 987654321.0 -> 987654321, keep real fractions
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Reporter:

    def __init__(self, local_site, stream=None, statsd=None, clock=time.time):
        self.local_site = local_site
        self.stream = stream if stream is not None else sys.stdout
        self.statsd = statsd
        self._clock = clock

    def output(self, name, value, tags=None, timestamp=None):
        '''Write one `name value [tags] timestamp` line'''
        if timestamp is None:
            timestamp = int(self._clock())
        parts = [name, format_value(value)]
        if tags:
            parts.append(tags)
        parts.append(str(timestamp))
        self.stream.write(" ".join(parts) + "\n")
        self.stream.flush()

    def report(self, measurement):
        bps = measurement.bits_per_second
        timestamp = int(self._clock())
        host_metric = HOST_METRIC.format(hostname=measurement.hostname)

        self.output(SITE_METRIC, bps,
                    f"from_site={self.local_site},to_site={measurement.site}", timestamp)
        self.output(host_metric, bps, timestamp=timestamp)

        if self.statsd is not None:
            self.statsd.gauge(SITE_METRIC, bps,
                              tags=[f"from_site:{self.local_site}", f"to_site:{measurement.site}"])
            self.statsd.gauge(host_metric, bps)
            logging.debug("Sent gauges to DogStatsD for %s", measurement.hostname)
