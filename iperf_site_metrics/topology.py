''' Group Sensu clients by site and pick a peer in each site.
A site is the alphabetic hostname prefix before the first dash, e.g. NYC-web01 -> nyc
'''
import logging
import random
import re
import socket
from dataclasses import dataclass

# Only clients with this subscription run an iperf3 server
REQUIRED_SUBSCRIPTION = "iperf"

SITE_PATTERN = re.compile(r'^([a-z]*)-', re.IGNORECASE)


@dataclass(frozen=True)
class Host:
    name: str
    address: str
    subscriptions: frozenset = frozenset()

    @classmethod
    def from_api(cls, client):
        '''Build a Host from one entry of the Sensu /clients response'''
        return cls(name=client['name'],
                   address=client.get('address') or '',
                   subscriptions=frozenset(client.get('subscriptions') or ()))


def hostname_to_site(name) -> str:
    '''
    Site key for a hostname, lower-cased. Hostnames without an
    alphabetic prefix followed by '-' all land in the '' site.
    '''
    match = SITE_PATTERN.match(name or '')
    if match is None:
        return ''
    return match.group(1).lower()


def build_roster(hosts):
    '''Map site -> {hostname: Host}, keeping only hosts subscribed to iperf'''
    roster = {}
    for host in hosts:
        if REQUIRED_SUBSCRIPTION not in host.subscriptions:
            continue
        roster.setdefault(hostname_to_site(host.name), {})[host.name] = host
    return roster


class SiteRoster:
    '''
    Clients grouped by site, computed once per run.
    '''

    def __init__(self, hosts, local_hostname=None, rng=None):
        if local_hostname is None:
            local_hostname = socket.gethostname()
        self.local_hostname = local_hostname
        self.current_site = hostname_to_site(local_hostname)
        self.roster = build_roster(hosts)
        self._random = rng if rng is not None else random.Random()
        logging.info("Built roster: %d sites, local site %r", len(self.roster), self.current_site)

    @property
    def sites(self):
        return list(self.roster)

    def remote_sites(self):
        return [site for site in self.roster if site != self.current_site]

    def client_from_site(self, site):
        '''Random iperf client in the site, or None if it has none'''
        clients = self.roster.get(site)
        if not clients:
            return None
        return self._random.choice(list(clients.values()))
