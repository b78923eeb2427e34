import pytest

from app.presentation.ws.frames import malformed, parse_frame


def test_parse_frame_splits_type_from_payload():
    assert parse_frame('{"type": "send-message", "content": "hi"}') == ('send-message', {'content': 'hi'})


@pytest.mark.parametrize('raw', ['not json', '[1, 2]', '"str"', '{"content": "hi"}', '{"type": 5}', '{"type": ""}'])
def test_parse_frame_rejects_malformed(raw):
    assert parse_frame(raw) == (None, {})


def test_malformed_error_frame():
    assert malformed() == {'type': 'error', 'event': None, 'message': 'Malformed frame'}
