''' Run iperf3 against a remote client and read the received bandwidth. '''
import json
import logging
import shlex
import subprocess
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class Measurement:
    site: str
    hostname: str
    address: str
    bits_per_second: float


def parse_iperf_output(output):
    '''
    Return end.sum_received.bits_per_second from iperf3 --json output,
    or None when the output is not JSON or the summary is missing.

    >>> parse_iperf_output('{"end": {"sum_received": {"bits_per_second": 9.5e8}}}')
    950000000.0
    >>> parse_iperf_output('{"error": "the server is busy running a test. try again later"}')
    '''
    try:
        result = json.loads(output)
    except (TypeError, ValueError):
        return None
    if not isinstance(result, dict):
        return None

    summary = result.get('end')
    if not isinstance(summary, dict):
        return None
    received = summary.get('sum_received')
    if not isinstance(received, dict):
        return None

    bps = received.get('bits_per_second')
    # bool is an int subclass
    if isinstance(bps, bool) or not isinstance(bps, (int, float)):
        return None
    return float(bps)


class IperfProber:
    '''
    Runs `iperf3 --json -c <address> <options>` once per attempt. The iperf
    server can only serve one client at a time, so a failed attempt is
    normal and gets retried after a pause.
    '''

    def __init__(self, config, sleep=None, run=None):
        self.config = config
        self._sleep = sleep if sleep is not None else time.sleep
        self._run = run if run is not None else subprocess.run

    def build_command(self, address):
        return [self.config.iperf_path, "--json", "-c", address] + shlex.split(self.config.iperf_opts or '')

    def measure_host(self, site, hostname, address):
        '''Single iperf3 run. Returns a Measurement or None on failure.'''
        cmd = self.build_command(address)
        logging.info("Testing %s (%s) in site %s: %s", hostname, address, site, " ".join(cmd))
        try:
            proc = self._run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
            output = proc.stdout or ''
        except OSError as e:
            logging.error("Unable to test %s (%s): %s", hostname, address, e)
            return None

        bps = parse_iperf_output(output)
        if bps is None:
            logging.error("Unable to test %s (%s): %s", hostname, address, output.strip())
            return None
        return Measurement(site=site, hostname=hostname, address=address, bits_per_second=bps)

    def measure_with_retry(self, site, hostname, address):
        '''
        Retry measure_host up to config.attempts times, sleeping
        config.retry_pause seconds between attempts.
        '''
        attempts = self.config.attempts
        for attempt in range(1, attempts + 1):
            measurement = self.measure_host(site, hostname, address)
            if measurement is not None:
                logging.info("Measured %s on attempt %d/%d", hostname, attempt, attempts)
                return measurement
            if attempt < attempts:
                self._sleep(self.config.retry_pause)

        logging.warning("Giving up on site %s after %d attempts against %s (%s)",
                        site, attempts, hostname, address)
        return None
