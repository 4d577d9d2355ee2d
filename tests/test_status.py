import json

import pytest
import yaml

from easeprobe.probe.status import Status


@pytest.mark.parametrize(
    "name, status",
    [
        ("init", Status.INIT),
        ("up", Status.UP),
        ("down", Status.DOWN),
        ("unknown", Status.UNKNOWN),
        ("bad", Status.BAD),
    ],
)
def test_yaml_json_round_trip(name, status):
    assert Status.decode(yaml.safe_load(name + "\n")) == status
    assert Status.decode(json.loads(f'"{name}"')) == status
    assert json.dumps(status.encode()) == f'"{name}"'
    assert yaml.safe_load(yaml.safe_dump(status.encode())) == name


def test_decode_invalid_name():
    with pytest.raises(ValueError):
        Status.decode(yaml.safe_load("xxx"))
    with pytest.raises(ValueError):
        Status.decode(json.loads('"xxx"'))


def test_decode_invalid_types():
    with pytest.raises(ValueError):
        Status.decode(yaml.safe_load("- xxx"))
    with pytest.raises(ValueError):
        Status.decode(json.loads('{"x":"y"}'))


def test_invalid_number_is_not_a_status():
    with pytest.raises(ValueError):
        Status(10)
    with pytest.raises(ValueError):
        Status(-1)


def test_status_parse_and_emoji():
    s = Status.UP
    assert str(s) == "up"
    s = Status.parse("down")
    assert s == Status.DOWN
    assert s.emoji() == "❌"
    s = Status.parse("up")
    assert s == Status.UP
    assert s.emoji() == "✅"
    s = Status.parse("xxx")
    assert s == Status.UNKNOWN
    assert s.emoji() == "⛔️"


def test_status_decode_then_encode():
    s = Status.decode(yaml.safe_load("down"))
    assert s == Status.DOWN
    assert json.dumps(s.encode()) == '"down"'


@pytest.mark.parametrize(
    "status, title",
    [
        (Status.INIT, "Initialization"),
        (Status.UP, "Success"),
        (Status.DOWN, "Error"),
        (Status.UNKNOWN, "Unknown"),
        (Status.BAD, "Bad"),
    ],
)
def test_status_title(status, title):
    assert status.title() == title