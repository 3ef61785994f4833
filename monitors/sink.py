"""指标接收端
采样线程会并发调用 publish_value，实现必须线程安全
"""
from threading import Lock
from typing import Dict, Iterable, List

from .units import Unit
from utils.logger import getLogger


logger = getLogger(__name__)


class MetricSink:
    def publish_value(self, path: str, value: float):
        raise NotImplementedError("Subclasses must implement this method.")

    def publish_metadata(self, path: str, unit: Unit):
        raise NotImplementedError("Subclasses must implement this method.")


class LoggingSink(MetricSink):
    def publish_value(self, path, value):
        logger.info('%s = %s', path, value)

    def publish_metadata(self, path, unit):
        logger.info('%s units: %s', path, unit)


class LatestValueSink(MetricSink):
    """Keeps the most recent value per path, for the HTTP status endpoints."""

    def __init__(self):
        self._lock = Lock()
        self._values: Dict[str, float] = {}
        self._units: Dict[str, str] = {}

    def publish_value(self, path, value):
        with self._lock:
            self._values[path] = value

    def publish_metadata(self, path, unit):
        with self._lock:
            self._units[path] = str(unit)

    def snapshot(self) -> Dict[str, Dict]:
        with self._lock:
            return {
                'values': dict(self._values),
                'meta': {path: {'units': units} for path, units in self._units.items()},
            }

    def clear(self):
        with self._lock:
            self._values.clear()
            self._units.clear()


class FanoutSink(MetricSink):
    """Forwards to several sinks; one failing sink does not starve the others."""

    def __init__(self, sinks: Iterable[MetricSink]):
        self._lock = Lock()
        self._sinks = list(sinks)

    @property
    def sinks(self) -> List[MetricSink]:
        with self._lock:
            return list(self._sinks)

    def add(self, sink: MetricSink):
        """Safe to call while sampler threads are publishing."""
        with self._lock:
            self._sinks.append(sink)

    def publish_value(self, path, value):
        for sink in self.sinks:
            try:
                sink.publish_value(path, value)
            except Exception:
                logger.exception('Sink %r failed to publish %s', sink, path)

    def publish_metadata(self, path, unit):
        for sink in self.sinks:
            try:
                sink.publish_metadata(path, unit)
            except Exception:
                logger.exception('Sink %r failed to publish metadata for %s', sink, path)
