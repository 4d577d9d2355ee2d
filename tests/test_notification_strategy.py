import json

import pytest

from easeprobe.probe.notification_strategy import (
    IntervalStrategy,
    NotificationStrategyData,
)


def test_notification_strategy_yaml():
    strategy = NotificationStrategyData(IntervalStrategy.REGULAR, 3, 1)
    text = strategy.to_yaml()
    assert "strategy: regular" in text
    assert "max: 3" in text
    assert "next: 1" in text
    assert "failed: 0" in text
    assert "interval: 0" in text

    loaded = NotificationStrategyData.from_yaml(text)
    assert loaded.strategy == IntervalStrategy.REGULAR
    assert loaded.max_times == 3
    assert loaded.failed == 0
    assert loaded.next_round == 1
    assert loaded == strategy


def test_default_json_form():
    data = NotificationStrategyData(IntervalStrategy.REGULAR, 1, 1).to_dict()
    assert json.dumps(data, separators=(",", ":")) == (
        '{"strategy":"regular","factor":1,"max":1,"notified":0,"failed":0,"next":1,"interval":0}'
    )


def _run(strategy, factor, probe_times, notify):
    s = NotificationStrategyData(strategy, len(notify), factor)
    j = 0
    for i in range(1, probe_times + 1):
        s.process_status(False)
        send = s.need_to_send_notification()
        assert send == (notify[j] == i), f"round {i}"
        if send and j < len(notify) - 1:
            j += 1


@pytest.mark.parametrize(
    "factor, notify",
    [
        (1, [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]),
        (1, [1, 2, 3]),
        (2, [1, 3, 5, 7, 9]),
        (3, [1, 4, 7, 10, 13, 16, 19]),
    ],
)
def test_regular_strategy(factor, notify):
    _run(IntervalStrategy.REGULAR, factor, 20, notify)


@pytest.mark.parametrize(
    "factor, notify",
    [
        (1, [1, 2, 4, 7, 11, 16, 22, 29, 37, 46, 56, 67]),
        (1, [1, 2, 4, 7, 11]),
        (2, [1, 3, 7, 13, 21, 31, 43, 57, 73]),
        (3, [1, 4, 10, 19, 31, 46, 64, 85]),
    ],
)
def test_increment_strategy(factor, notify):
    _run(IntervalStrategy.INCREMENT, factor, 100, notify)


@pytest.mark.parametrize(
    "factor, notify",
    [
        (1, [1, 2, 4, 8, 16, 32, 64, 128]),
        (1, [1, 2, 4, 8, 16]),
        (2, [1, 3, 9, 27, 81, 243]),
        (3, [1, 4, 16, 64, 256]),
    ],
)
def test_exponential_strategy(factor, notify):
    _run(IntervalStrategy.EXPONENTIAL, factor, 256, notify)


def test_illegal_strategy_falls_back_to_every_round():
    s = NotificationStrategyData(IntervalStrategy.UNKNOWN, 3, 1)
    sent = []
    for _ in range(10):
        s.process_status(False)
        send = s.need_to_send_notification()
        if s.is_exceed_max_times():
            assert send is False
        else:
            assert send is True
        sent.append(send)
    assert sent.count(True) == 3


def test_reset_on_success():
    s = NotificationStrategyData(IntervalStrategy.INCREMENT, 3, 1)
    notify = [1, 2, 4, 7]

    def run():
        j = 0
        for i in range(1, 6):
            s.process_status(False)
            send = s.need_to_send_notification()
            assert send == (notify[j] == i)
            if send and j < len(notify) - 1:
                j += 1

    run()
    s.process_status(True)
    assert s.failed == 0
    assert s.next_round == 1
    run()


def test_clone_is_equal_and_independent():
    s = NotificationStrategyData(IntervalStrategy.INCREMENT, 3, 2)
    s.process_status(False)
    c = s.clone()
    assert c == s
    assert c.is_sent == s.is_sent
    c.process_status(False)
    assert c.failed == s.failed + 1


def test_decode_strategy():
    assert IntervalStrategy.decode("REGULAR") == IntervalStrategy.REGULAR
    with pytest.raises(ValueError):
        IntervalStrategy.decode("xxx")
    with pytest.raises(ValueError):
        IntervalStrategy.decode(["regular"])


def test_from_yaml_rejects_non_mapping():
    with pytest.raises(ValueError):
        NotificationStrategyData.from_yaml("- a\n- b\n")