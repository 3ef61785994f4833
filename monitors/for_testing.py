"""测试用的假命令执行器与 sink"""
from threading import Lock

from .errors import LaunchError
from .executor import ProbeOutput
from .sink import MetricSink


class FakeRunner:
    """Returns canned stdout per command; a LaunchError instance is raised instead."""

    def __init__(self, outputs=None, default=None):
        self.outputs = dict(outputs or {})
        self.default = default
        self.calls = []

    def __call__(self, command, timeout=None):
        self.calls.append((command, timeout))
        out = self.outputs.get(command, self.default)
        if out is None:
            raise LaunchError(command, 'exited with status 127', 127, b'sh: 1: not found')
        if isinstance(out, Exception):
            raise out
        return ProbeOutput(command=command, stdout=out.encode(), stderr=b'', returncode=0)


class RecordingSink(MetricSink):
    def __init__(self):
        self.lock = Lock()
        self.values = []
        self.metadata = []

    def publish_value(self, path, value):
        with self.lock:
            self.values.append((path, value))

    def publish_metadata(self, path, unit):
        with self.lock:
            self.metadata.append((path, unit))
