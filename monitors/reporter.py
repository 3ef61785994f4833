from typing import Dict, Optional

import requests

from config import PLUGIN_ID
from .sink import MetricSink
from utils.logger import getLogger


logger = getLogger(__name__)


class SignalKReporter(MetricSink):
    """Posts Signal K delta messages to an HTTP endpoint.

    Values go out as ``{"updates": [{"$source": ..., "values": [{"path", "value"}]}]}``
    and units as ``{"updates": [{"meta": [{"path", "value": {"units": ...}}]}]}``.
    """

    def __init__(self, endpoint: str, token: Optional[str] = None, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.session()
        self.session.headers.update({
            'Content-Type': 'application/json;charset=utf-8',
            'accept': 'application/json',
            'user-agent': f'{PLUGIN_ID}/1.0',
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    def _post(self, delta: Dict):
        try:
            res = self.session.post(self.endpoint, json=delta, timeout=self.timeout)
            res.raise_for_status()
        except requests.RequestException:
            logger.exception('Failed to send delta to %s', self.endpoint)

    def publish_value(self, path, value):
        self._post({'updates': [{'$source': PLUGIN_ID, 'values': [{'path': path, 'value': value}]}]})

    def publish_metadata(self, path, unit):
        self._post({'updates': [{'meta': [{'path': path, 'value': {'units': str(unit)}}]}]})

    def close(self):
        self.session.close()
