from __future__ import annotations

import threading

from punch_bridge.core.exceptions import BackendError, DeviceUnavailable
from punch_bridge.employees.model import EmployeeMapping
from punch_bridge.punches.model import PunchEvent
from punch_bridge.sync.backoff import Backoff
from punch_bridge.sync.poller import Poller
from punch_bridge.sync.realtime import RealtimeListener
from punch_bridge.sync.refresher import DirectoryRefresher


class StopAfterWait(threading.Event):
    """Stop event that records the first wait and then ends the loop."""

    def __init__(self):
        super().__init__()
        self.waits: list[float] = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.set()
        return True


class FakeDevice:
    address = "10.0.0.5:4370"

    def __init__(self, punches=(), *, fail_connect=False, fail_clock=False, live=()):
        self._punches = list(punches)
        self._fail_connect = fail_connect
        self._fail_clock = fail_clock
        self._live = list(live)
        self.connected = False
        self.disconnects = 0

    def connect(self):
        if self._fail_connect:
            raise DeviceUnavailable("no route to host")
        self.connected = True

    def disconnect(self):
        self.connected = False
        self.disconnects += 1

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc):
        self.disconnect()

    def sync_time(self, *, max_drift_seconds):
        if self._fail_clock:
            raise DeviceUnavailable("clock read failed")
        return 0.0

    def fetch_batch(self):
        return list(self._punches)

    def listen(self, handler, stop_event, *, capture_timeout=10):
        for event in self._live:
            handler(event)
        stop_event.set()


def test_poll_cycle_feeds_service(make_service, sessions_repo, at):
    device = FakeDevice([PunchEvent("7", at(10, 9)), PunchEvent("7", at(10, 17))])
    poller = Poller(lambda: device, make_service(), stop_event=threading.Event())

    report = poller.run_once()

    assert report.writes == 2
    assert not device.connected
    assert len(sessions_repo.all_sessions()) == 1


def test_clock_failure_does_not_stop_the_poll(make_service, at, caplog):
    device = FakeDevice([PunchEvent("7", at(10, 9))], fail_clock=True)
    poller = Poller(lambda: device, make_service(), stop_event=threading.Event())

    assert poller.run_once().writes == 1
    assert "Clock check" in caplog.text


def test_unreachable_device_backs_off(make_service):
    stop = StopAfterWait()
    poller = Poller(
        lambda: FakeDevice(fail_connect=True),
        make_service(),
        stop_event=stop,
        interval=10,
        backoff=Backoff(initial=2, maximum=30),
    )
    poller.run()
    assert stop.waits == [2]


def test_healthy_cycle_waits_the_interval(make_service, at):
    stop = StopAfterWait()
    poller = Poller(lambda: FakeDevice([PunchEvent("7", at(10, 9))]), make_service(), stop_event=stop, interval=15)
    poller.run()
    assert stop.waits == [15]


def test_realtime_listener_handles_live_punches(make_service, sessions_repo, at):
    device = FakeDevice(live=[PunchEvent("7", at(10, 9)), PunchEvent("7", at(10, 9)), PunchEvent("7", at(10, 17))])
    service = make_service()
    listener = RealtimeListener(lambda: device, service, stop_event=threading.Event())

    listener.run()

    assert service.status()["outcomes"] == {"CREATED": 1, "DUPLICATE": 1, "CLOSED": 1}
    assert device.disconnects == 1


def test_realtime_listener_reconnects_with_backoff(make_service):
    stop = StopAfterWait()
    listener = RealtimeListener(
        lambda: FakeDevice(fail_connect=True),
        make_service(),
        stop_event=stop,
        backoff=Backoff(initial=1, maximum=60),
    )
    listener.run()
    assert stop.waits == [1]


class FailingSource:
    def list_employees(self):
        raise BackendError("odoo down")


class ListSource:
    def __init__(self, employees):
        self.employees = employees

    def list_employees(self):
        return self.employees


def test_refresher_keeps_directory_on_failure(directory):
    refresher = DirectoryRefresher(directory, FailingSource(), stop_event=threading.Event())
    assert refresher.refresh_once() is False
    assert directory.lookup("7") is not None


def test_refresher_replaces_directory(directory):
    refresher = DirectoryRefresher(
        directory, ListSource([EmployeeMapping(employee_id=12, name="Sana")]), stop_event=threading.Event()
    )
    assert refresher.refresh_once() is True
    assert directory.lookup("7") is None
    assert directory.lookup("12").name == "Sana"
