import logging

import pytest

from easeprobe.probe.trace import TraceStats, to_ms


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_to_ms():
    assert to_ms(1.5) == 1500.0
    assert to_ms(0) == 0.0


def test_new_trace_stats():
    s = TraceStats("http", "tag", "test")
    assert (s.kind, s.tag, s.name) == ("http", "tag", "test")
    assert s.total_took == 0.0


@pytest.mark.parametrize(
    "attr, call",
    [
        ("total_start_at", lambda s: s.get_conn("8080")),
        ("dns_start_at", lambda s: s.dns_start("example.com")),
        ("conn_start_at", lambda s: s.connect_start("tcp", "8080")),
        ("send_start_at", lambda s: s.wrote_header_field("key", ["value"])),
        ("tls_start_at", lambda s: s.tls_start()),
        ("transfer_start_at", lambda s: s.got_first_response_byte()),
        ("wait_start_at", lambda s: s.wrote_request()),
    ],
)
def test_trace_start(attr, call):
    clock = FakeClock(42.0)
    s = TraceStats("http", "tag", "test", clock=clock)
    assert getattr(s, attr) is None
    call(s)
    assert getattr(s, attr) == 42.0


def test_connect_start_keeps_first_time():
    clock = FakeClock(1.0)
    s = TraceStats("http", "tag", "test", clock=clock)
    s.connect_start("tcp", "a")
    clock.now = 5.0
    s.connect_start("tcp", "b")
    assert s.conn_start_at == 1.0


def test_wrote_header_field_keeps_first_time():
    clock = FakeClock(1.0)
    s = TraceStats("http", "tag", "test", clock=clock)
    s.wrote_header_field("a", ["1"])
    clock.now = 3.0
    s.wrote_header_field("b", ["2"])
    assert s.send_start_at == 1.0


def test_trace_done():
    clock = FakeClock(10.0)
    s = TraceStats("http", "tag", "test", clock=clock)
    s.conn_start_at = s.dns_start_at = s.send_start_at = 10.0
    s.tls_start_at = s.transfer_start_at = s.wait_start_at = s.total_start_at = 10.0

    clock.now = 10.25
    assert s.dns_took == 0.0
    s.dns_done(["1.2.3.4"])
    assert s.dns_took == pytest.approx(0.25)
    s.dns_done(error=OSError("dns"))
    assert s.dns_took == pytest.approx(0.25)

    assert s.conn_took == 0.0
    s.connect_done("tcp", "8080")
    assert s.conn_took == pytest.approx(0.25)
    s.connect_done("tcp", "8080", OSError("conn"))
    assert s.conn_took == pytest.approx(0.25)

    s.tls_done("example.com")
    assert s.tls_took == pytest.approx(0.25)
    s.tls_done("", RuntimeError("test error"))
    assert s.tls_took == pytest.approx(0.25)

    s.wrote_headers()
    assert s.send_took == pytest.approx(0.25)

    clock.now = 11.0
    s.got_first_response_byte()
    assert s.wait_took == pytest.approx(1.0)
    assert s.transfer_start_at == 11.0

    clock.now = 11.5
    s.put_idle_conn()
    assert s.transfer_took == pytest.approx(0.5)
    assert s.total_took == pytest.approx(1.5)
    s.put_idle_conn(RuntimeError("test error"))
    assert s.total_took == pytest.approx(1.5)

    took = s.conn_took
    s.got_conn()
    assert s.conn_took == took


def test_wrote_request_restarts_wait():
    clock = FakeClock(3.0)
    s = TraceStats("http", "tag", "test", clock=clock)
    s.wrote_request()
    clock.now = 4.0
    s.wrote_request(RuntimeError("test error"))
    assert s.wait_start_at == 4.0


def test_report_logs_table(caplog):
    s = TraceStats("http", "TRACE", "probe")
    s.dns_took = 0.001
    with caplog.at_level(logging.DEBUG, logger="easeprobe.probe.trace"):
        s.report()
    text = caplog.text
    assert "DNS\tConnect\tTLS\tSend\tWait\tTrans\tTotal" in text
    assert "[http TRACE probe] 1.00\t0.00" in text