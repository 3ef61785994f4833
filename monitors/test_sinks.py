import requests

from monitors.reporter import SignalKReporter
from monitors.sink import FanoutSink, LatestValueSink
from monitors.units import Unit


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, status_code=200, exc=None):
        self.headers = {}
        self.posts = []
        self.status_code = status_code
        self.exc = exc

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        if self.exc:
            raise self.exc
        return FakeResponse(self.status_code)

    def close(self):
        pass


def test_latest_value_sink_snapshot():
    sink = LatestValueSink()
    sink.publish_metadata("a.b", Unit.KELVIN)
    sink.publish_value("a.b", 300.0)
    sink.publish_value("a.b", 301.5)
    assert sink.snapshot() == {"values": {"a.b": 301.5}, "meta": {"a.b": {"units": "K"}}}
    sink.clear()
    assert sink.snapshot() == {"values": {}, "meta": {}}


def test_fanout_isolates_failing_sink():
    class Broken(LatestValueSink):
        def publish_value(self, path, value):
            raise RuntimeError("down")

    good = LatestValueSink()
    FanoutSink([Broken(), good]).publish_value("x", 1.0)
    assert good.snapshot()["values"] == {"x": 1.0}


def test_reporter_sends_signalk_deltas():
    session = FakeSession()
    reporter = SignalKReporter("http://localhost:3000/delta", token="t0k", session=session)
    reporter.publish_metadata("environment.rpi.cpu.temperature", Unit.KELVIN)
    reporter.publish_value("environment.rpi.cpu.temperature", 318.75)
    assert session.headers["Authorization"] == "Bearer t0k"
    assert session.posts == [
        ("http://localhost:3000/delta",
         {"updates": [{"meta": [{"path": "environment.rpi.cpu.temperature", "value": {"units": "K"}}]}]}),
        ("http://localhost:3000/delta",
         {"updates": [{"$source": "signalk-rpi-monitor",
                       "values": [{"path": "environment.rpi.cpu.temperature", "value": 318.75}]}]}),
    ]


def test_reporter_swallows_http_errors():
    reporter = SignalKReporter("http://x/delta", session=FakeSession(status_code=500))
    reporter.publish_value("a", 1.0)
    reporter = SignalKReporter("http://x/delta", session=FakeSession(exc=requests.ConnectionError("refused")))
    reporter.publish_value("a", 1.0)


def test_fanout_add_while_publishing():
    late = LatestValueSink()

    class AddingSink(LatestValueSink):
        def publish_value(self, path, value):
            fanout.add(late)
            super().publish_value(path, value)

    first = AddingSink()
    fanout = FanoutSink([first])
    fanout.publish_value("x", 1.0)
    assert late.snapshot()["values"] == {}
    fanout.publish_value("x", 2.0)
    assert late.snapshot()["values"] == {"x": 2.0}
    assert len(fanout.sinks) == 3
