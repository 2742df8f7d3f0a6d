import pytest

from picotimer.protocol import Command, build_url, parse_duration, parse_status


def test_command_tokens():
    assert [c.value for c in Command] == ["start", "stop", "timeout"]
    assert Command("stop") is Command.STOP


def test_build_url():
    assert build_url("192.168.10.105") == "ws://192.168.10.105:8080"
    assert build_url(" pico.local ", 9000) == "ws://pico.local:9000"


@pytest.mark.parametrize("host", ["", "   ", None])
def test_build_url_rejects_empty(host):
    with pytest.raises(ValueError):
        build_url(host)


@pytest.mark.parametrize("raw, expected", [
    ('{"running": true}', True),
    ('{"running": false, "remaining": 12}', False),
    (b'{"running": true}', True),
    ('{"remaining": 12}', None),
    ('{"running": "yes"}', None),
    ('[true]', None),
    ('null', None),
    ('not json', None),
    (b'\xff\xfe', None),
])
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


@pytest.mark.parametrize("text, expected", [
    ("30", 30.0),
    ("12.34", 12.3),
    (" 90 ", 90.0),
    (120, 120.0),
    ("0", 60.0),
    ("", 60.0),
    ("abc", 60.0),
    ("nan", 60.0),
    ("0.5", 1.0),
    ("-5", 1.0),
    ("7200", 3600.0),
    (None, 60.0),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected
