''' Minimal Sensu API client used to look up the registered clients. '''
import logging

import requests
from requests.auth import HTTPBasicAuth

from iperf_site_metrics.topology import Host


class SensuApi:

    def __init__(self, config, session=None):
        self.config = config
        self.session = session if session is not None else requests.Session()
        self._clients = None

    def _auth(self):
        if not self.config.user:
            return None
        return HTTPBasicAuth(self.config.user, self.config.password or '')

    def api_request(self, resource):
        '''
        GET a resource from the Sensu API and return the decoded JSON body.
        Errors are logged as warnings and return None.
        '''
        url = self.config.api.rstrip('/') + resource
        try:
            response = self.session.get(url, auth=self._auth(), timeout=self.config.timeout)
            logging.info("Sensu API GET Request: %s and Response: %s", resource, response.status_code)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 404:
                logging.warning("Resource not found: %s", resource)
            elif status in (401, 403):
                logging.warning("Missing or incorrect Sensu API credentials")
            else:
                logging.warning("Request failed: %s", e)
        except requests.exceptions.Timeout:
            logging.warning("Connection timed out")
        except requests.exceptions.ConnectionError as e:
            logging.warning("Connection refused: %s", e)
        except requests.exceptions.JSONDecodeError:
            logging.warning("Sensu API returned invalid JSON")
        except requests.exceptions.RequestException as e:
            logging.warning("Request failed: %s", e)
        return None

    def clients(self):
        '''Registered clients as Host objects, fetched once'''
        if self._clients is None:
            self._clients = self._parse_clients(self.api_request("/clients"))
        return self._clients

    @staticmethod
    def _parse_clients(data):
        if not isinstance(data, list):
            if data is not None:
                logging.warning("Unexpected /clients response type: %s", type(data).__name__)
            return []

        hosts = []
        for client in data:
            if not isinstance(client, dict) or not client.get('name'):
                logging.debug("Skipping client without a name: %s", client)
                continue
            hosts.append(Host.from_api(client))
        return hosts
