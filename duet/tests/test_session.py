import pytest

from app.core.errors import SessionClosed
from app.core.services.session import ConnectionSession, SessionState


def test_new_session_is_unidentified_with_unique_handle():
    a, b = ConnectionSession(), ConnectionSession()
    assert a.state == SessionState.unidentified
    assert a.claimed_identity is None
    assert a.handle != b.handle


def test_identify_and_reannounce():
    s = ConnectionSession()
    s.identify('cavity')
    assert s.is_identified and s.claimed_identity == 'cavity'
    s.identify('cavity')
    assert s.state == SessionState.identified


def test_closed_session_cannot_identify():
    s = ConnectionSession()
    s.identify('cavity')
    s.close()
    s.close()
    assert s.is_closed
    with pytest.raises(SessionClosed):
        s.identify('cingam')
    assert s.claimed_identity == 'cavity'
