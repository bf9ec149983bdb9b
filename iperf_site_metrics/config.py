''' Command line and environment configuration for the iperf site probe.
Defaults can be loaded from a YAML file, overridden by environment
variables and then by command line flags.
'''
import argparse
import logging
import os
from dataclasses import dataclass, fields

import yaml

DEFAULTS = {
    'api': 'http://localhost:4567',
    'user': None,
    'password': None,
    'timeout': 30,
    'iperf_path': 'iperf3',
    'iperf_opts': '-t 10',
    'attempts': 10,
    'retry_pause': 15.0,
    'statsd_host': None,
    'statsd_port': 8125,
    'log_level': 'WARNING',
}

# Config field -> environment variable
ENV_VARS = {
    'api': 'SENSU_API_URL',
    'user': 'SENSU_API_USER',
    'password': 'SENSU_API_PASSWORD',
    'timeout': 'SENSU_API_TIMEOUT',
    'iperf_path': 'IPERF_PATH',
    'iperf_opts': 'IPERF_OPTIONS',
    'statsd_host': 'DD_AGENT_HOST',
    'statsd_port': 'DD_DOGSTATSD_PORT',
    'log_level': 'LOG_LEVEL',
}

CONFIG_FILE_ENV = 'IPERF_SITE_METRICS_CONFIG'


@dataclass(frozen=True)
class Config:
    api: str = DEFAULTS['api']
    user: str = None
    password: str = None
    timeout: int = DEFAULTS['timeout']
    iperf_path: str = DEFAULTS['iperf_path']
    iperf_opts: str = DEFAULTS['iperf_opts']
    attempts: int = DEFAULTS['attempts']
    retry_pause: float = DEFAULTS['retry_pause']
    statsd_host: str = None
    statsd_port: int = DEFAULTS['statsd_port']
    log_level: str = DEFAULTS['log_level']


def positive_int(value):
    '''argparse type for integers greater than zero'''
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise argparse.ArgumentTypeError(f'invalid integer value: {value!r}')
    if number <= 0:
        raise argparse.ArgumentTypeError(f'must be a positive integer: {value!r}')
    return number


def non_negative_float(value):
    '''argparse type for pauses in seconds'''
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise argparse.ArgumentTypeError(f'invalid number: {value!r}')
    if number < 0:
        raise argparse.ArgumentTypeError(f'must not be negative: {value!r}')
    return number


def load_yaml_defaults(path) -> dict:
    '''
    Read default values from a YAML file. Only keys matching Config fields are kept.
    Raises ValueError when the file can't be read or isn't a mapping.
    '''
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f'Unable to load config file {path}: {e}')
    if not isinstance(data, dict):
        raise ValueError(f'Config file {path} must contain a mapping')

    known = {f.name for f in fields(Config)}
    unknown = set(data) - known
    if unknown:
        logging.warning("Ignoring unknown keys in %s: %s", path, ", ".join(sorted(unknown)))
    return {key: value for key, value in data.items() if key in known}


def build_parser(defaults=None):
    '''
    Build the argument parser. Defaults are resolved before parsing so that
    --help shows the effective values.
    '''
    defaults = dict(DEFAULTS, **(defaults or {}))

    parser = argparse.ArgumentParser(
        prog='iperf-site-metrics',
        description='Measure iperf3 throughput from this host to one peer in every other site')
    parser.add_argument("-c", "--config", default=os.environ.get(CONFIG_FILE_ENV),
                        help="YAML file with default values")
    parser.add_argument("-a", "--api", metavar="URL", default=defaults['api'],
                        help="Sensu API URL")
    parser.add_argument("-u", "--user", metavar="USER", default=defaults['user'],
                        help="Sensu API USER")
    parser.add_argument("-p", "--password", metavar="PASSWORD", default=defaults['password'],
                        help="Sensu API PASSWORD")
    parser.add_argument("-t", "--timeout", metavar="SECONDS", type=positive_int,
                        default=defaults['timeout'],
                        help="Sensu API connection timeout in SECONDS")
    parser.add_argument("-b", "--iperf-path", metavar="BIN", dest="iperf_path",
                        default=defaults['iperf_path'], help="Path to iperf 3")
    parser.add_argument("-i", "--iperf-options", metavar="IPERF", dest="iperf_opts",
                        default=defaults['iperf_opts'],
                        help="Command-line options to run with iperf")
    parser.add_argument("--attempts", type=positive_int, default=defaults['attempts'],
                        help="Number of iperf attempts per site")
    parser.add_argument("--retry-pause", metavar="SECONDS", dest="retry_pause",
                        type=non_negative_float, default=defaults['retry_pause'],
                        help="Pause between iperf attempts")
    parser.add_argument("--statsd-host", dest="statsd_host", default=defaults['statsd_host'],
                        help="Also send gauges to this DogStatsD host")
    parser.add_argument("--statsd-port", dest="statsd_port", type=positive_int,
                        default=defaults['statsd_port'], help="DogStatsD port")
    parser.add_argument("--log-level", dest="log_level", default=defaults['log_level'],
                        help="Logging level: DEBUG, INFO, WARNING, ERROR")
    return parser


def env_defaults(environ=None) -> dict:
    environ = os.environ if environ is None else environ
    return {field: environ[var] for field, var in ENV_VARS.items() if environ.get(var)}


def load_config(argv=None, environ=None) -> Config:
    '''
    Resolve configuration: command line > environment > YAML file > built-in defaults.
    '''
    environ = os.environ if environ is None else environ

    # First pass only looks for the config file location
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("-c", "--config", default=environ.get(CONFIG_FILE_ENV))
    known, _ = pre.parse_known_args(argv)

    defaults = {}
    if known.config:
        try:
            defaults.update(load_yaml_defaults(known.config))
        except ValueError as e:
            logging.error("%s", e)
            build_parser().error(str(e))
    defaults.update(env_defaults(environ))

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    # argparse only converts string defaults, YAML values arrive as-is
    # when the flag isn't given.
    try:
        timeout = positive_int(args.timeout)
        attempts = positive_int(args.attempts)
        statsd_port = positive_int(args.statsd_port)
        retry_pause = non_negative_float(args.retry_pause)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    return Config(
        api=args.api,
        user=args.user,
        password=args.password,
        timeout=timeout,
        iperf_path=args.iperf_path,
        iperf_opts=args.iperf_opts,
        attempts=attempts,
        retry_pause=retry_pause,
        statsd_host=args.statsd_host,
        statsd_port=statsd_port,
        log_level=str(args.log_level).upper(),
    )
