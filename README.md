# easeprobe

Building blocks for a health-probing service. It provides probe results with
uptime statistics, status tracking, and back-off strategies for alerts. It also
includes ready-made TCP and TLS probes and a few helpers for a web front end.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## What is inside

- `easeprobe.durations`
  - `format_duration(seconds)` renders seconds as text such as `5m0s`, `1.5ms` or `1h2m3s`.
  - `parse_duration(text)` reads text such as `1h30m` or `-1.5s` back into seconds. It raises `ValueError` for invalid text.
- `easeprobe.probe.status.Status` is an `IntEnum` with the members `INIT`, `UP`, `DOWN`, `UNKNOWN` and `BAD`.
  - `title()` and `emoji()` give the display forms.
  - `encode()` writes the status as its name.
  - `Status.parse(text)` reads a name leniently and returns `UNKNOWN` for names it does not know.
  - `Status.decode(value)` reads a name strictly and raises `ValueError`.
- `easeprobe.probe.status_counter.StatusCounter` keeps a bounded history of `StatusHistory` entries. It also counts how many results in a row had the same outcome. Its methods are `append_status`, `set_max_len`, `clone`, `to_dict` and `from_dict`.
- `easeprobe.probe.notification_strategy.NotificationStrategyData` decides which failed rounds should send an alert.
  - It has the strategies `IntervalStrategy.REGULAR`, `INCREMENT` and `EXPONENTIAL`, plus a factor.
  - `max_times` limits how many alerts are sent.
  - A successful round resets the state.
  - It round-trips through `to_dict`/`from_dict` and `to_yaml`/`from_yaml`.
- `easeprobe.probe.result`
  - `Result` holds the outcome of a probe, and `Stat` holds its running statistics: totals per status, uptime and downtime.
  - `Result` methods:
    - `do_stat(seconds)` counts one round.
    - `sla_percent()` gives the share of uptime as a percentage.
    - `title()` gives a notification title, such as `Monitoring web`, `web Failure` or `web Recovery - ( 5m0s Downtime )`.
    - `debug_json()` and `debug_json_indent()` give JSON output.
    - `to_dict`/`from_dict` and `to_yaml`/`from_yaml` round-trip the result.
  - Durations are in seconds in Python. They are serialised as nanoseconds.
- `easeprobe.probe.trace.TraceStats` records the phases of an HTTP request: DNS, connect, TLS, send, wait and transfer.
  - You feed it callbacks such as `get_conn`, `dns_start` and `got_first_response_byte`.
  - `report()` logs the timings in milliseconds and returns them as a table.
- `easeprobe.probe.tcp_probe`
  - `TCPProbe` checks that a TCP connection to `host:port` can be opened.
  - `open_connection(proxy, host, timeout)` connects either directly or through a `socks5://` proxy.
  - An unusable proxy setting raises `ProxyError`.
- `easeprobe.probe.tls_probe.TLSProbe` runs a TLS handshake and checks the peer certificate's validity dates.
  - It can fail early when the certificate expires within `alert_expire_before` seconds.
  - It accepts root CAs as PEM text or from a file.
  - `insecure_skip_verify` skips chain verification, and `expire_skip_verify` skips the date checks.
  - After a successful probe, `metrics` holds the expiry timestamps.
  - `earliest_cert_expiry` and `last_chain_expiry` compute those timestamps from `cryptography` certificates.
- `easeprobe.web.access_log`
  - `AccessLog` lines and the `PlainFormatter` logging formatter.
  - `AccessLogEntry`, built from a request's parts and completed with `write(status, size, elapsed)`.
  - `new_structured_logger(logger)` sets up a logger and returns a factory of entries.
- `easeprobe.web.query` has helpers for query parameters:
  - `get_refresh_interval`
  - `get_status`
  - `get_num`, used with `to_int` and `to_float`
  - `get_str`, which escapes HTML and trims the text

## Examples

```python
from easeprobe.probe.notification_strategy import IntervalStrategy, NotificationStrategyData

alerts = NotificationStrategyData(strategy=IntervalStrategy.INCREMENT, max_times=5, factor=1)
sent = []
for round_no in range(1, 20):
    alerts.process_status(False)
    if alerts.need_to_send_notification():
        sent.append(round_no)
print(sent)  # [1, 2, 4, 7, 11]
```

```python
from easeprobe.probe.tcp_probe import TCPProbe

probe = TCPProbe(name="web", host="localhost:8080")
probe.config(timeout=5.0)
ok, message = probe.do_probe()
```

```python
from easeprobe.probe.result import Result
from easeprobe.probe.status import Status

result = Result.new("web")
result.status = Status.UP
result.do_stat(60.0)
print(result.sla_percent())  # 100.0
print(result.title())        # Monitoring web
```

## What it does not do

This is a library. It has no command to run, no web server, and no scheduler
that runs probes on an interval. It does not send notifications either.

It has no HTTP probe. `TraceStats` only records timings that you report to it.

Nothing is exported to a metrics system. The TLS probe keeps its expiry
timestamps in its `metrics` dictionary, and the rest is up to the caller.

Results are not persisted. Use `to_yaml`/`from_yaml` or `debug_json` to store
them yourself.