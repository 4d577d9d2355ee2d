from easeprobe.probe.status_counter import StatusCounter, StatusHistory


def test_new_status_counter():
    length = 3
    s = StatusCounter(length)
    assert s.max_len == length
    assert s.current_status is True

    for i in range(1, length + 3):
        s.append_status(False, "failure")
        assert s.current_status is False
        assert s.status_count == min(i, length)

    for i in range(1, length + 3):
        s.append_status(True, "success")
        assert s.current_status is True
        assert s.status_count == min(i, length)

    s1 = s.clone()
    assert s1 == s

    s1.set_max_len(2)
    assert s1.max_len == 2
    assert len(s1.history) == 2
    assert len(s.history) == length


def test_history_is_bounded_and_keeps_latest():
    s = StatusCounter(2)
    s.append_status(True, "a")
    s.append_status(False, "b")
    s.append_status(True, "c")
    assert s.history == [StatusHistory(False, "b"), StatusHistory(True, "c")]


def test_set_max_len_zero_empties_history():
    s = StatusCounter(3)
    s.append_status(True, "a")
    s.append_status(True, "b")
    s.set_max_len(0)
    assert s.history == []


def test_clone_is_independent():
    s = StatusCounter(3)
    s.append_status(False, "x")
    c = s.clone()
    c.append_status(True, "y")
    assert len(s.history) == 1
    assert len(c.history) == 2


def test_to_dict_keys_and_round_trip():
    s = StatusCounter(2)
    s.append_status(False, "down")
    data = s.to_dict()
    assert list(data) == ["StatusHistory", "MaxLen", "CurrentStatus", "StatusCount"]
    assert data["StatusHistory"] == [{"Status": False, "Message": "down"}]
    assert StatusCounter.from_dict(data) == s


def test_empty_counter_dict():
    data = StatusCounter(1).to_dict()
    assert data == {"StatusHistory": [], "MaxLen": 1, "CurrentStatus": True, "StatusCount": 0}