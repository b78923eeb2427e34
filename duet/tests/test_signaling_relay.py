import pytest

from app.application.use_cases.signals import SignalingRelay

ROOM = 'SILENT_SIGNAL_FOREVER_2026'


@pytest.fixture()
def relay(transport) -> SignalingRelay:
    return SignalingRelay(transport=transport, room=ROOM)


async def _join(relay, transport, *handles):
    for h in handles:
        transport.connect(h)
        await relay.on_connect(h)


@pytest.mark.asyncio
async def test_offer_reaches_only_the_other_peer(relay, transport):
    await _join(relay, transport, 'h1', 'h2')
    transport.clear()
    delivered = await relay.relay('h1', 'offer', {'sdp': 'X'})
    assert delivered == 1
    assert transport.sent == [('h2', {'sdp': 'X', 'type': 'offer', 'from': 'h1'})]


@pytest.mark.asyncio
async def test_payload_is_forwarded_verbatim(relay, transport):
    await _join(relay, transport, 'h1', 'h2')
    transport.clear()
    candidate = {'candidate': 'candidate:1 1 udp 2122260223 10.0.0.1 54321 typ host', 'sdpMid': '0', 'sdpMLineIndex': 0}
    await relay.relay('h2', 'iceCandidate', {'candidate': candidate, 'type': 'ignored', 'extra': [1, 2]})
    assert transport.inbox('h1') == [{'candidate': candidate, 'extra': [1, 2], 'type': 'iceCandidate', 'from': 'h2'}]


@pytest.mark.asyncio
async def test_relay_is_not_limited_to_two_peers(relay, transport):
    await _join(relay, transport, 'h1', 'h2', 'h3')
    transport.clear()
    assert await relay.relay('h3', 'answer', {'answer': {'type': 'answer', 'sdp': 'Y'}}) == 2
    assert [h for h, _ in transport.sent] == ['h1', 'h2']
    assert relay.peer_count() == 3


@pytest.mark.asyncio
async def test_lone_peer_relays_to_nobody(relay, transport):
    await _join(relay, transport, 'h1')
    transport.clear()
    assert await relay.relay('h1', 'offer', {'sdp': 'X'}) == 0
    assert transport.sent == []


@pytest.mark.asyncio
async def test_non_signaling_event_rejected(relay, transport):
    await _join(relay, transport, 'h1', 'h2')
    with pytest.raises(ValueError):
        await relay.relay('h1', 'heartbeat', {})


@pytest.mark.asyncio
async def test_heartbeat_ack_goes_to_sender_only(relay, transport):
    await _join(relay, transport, 'h1', 'h2')
    transport.clear()
    await relay.heartbeat('h1')
    assert transport.sent == [('h1', {'type': 'heartbeat-ack'})]


@pytest.mark.asyncio
async def test_partner_online_and_offline_notifications(relay, transport):
    await _join(relay, transport, 'h1')
    assert transport.sent == []
    await _join(relay, transport, 'h2')
    online = transport.of_type('h1', 'partnerOnline')
    assert len(online) == 1 and online[0]['peerId'] == 'h2'
    assert isinstance(online[0]['timestamp'], int)
    assert transport.inbox('h2') == []

    transport.clear()
    transport.disconnect('h2')
    await relay.on_disconnect('h2')
    offline = transport.of_type('h1', 'partnerOffline')
    assert len(offline) == 1 and offline[0]['peerId'] == 'h2'
    assert relay.peer_count() == 1
    assert [p.handle for p in relay.peers()] == ['h1']
    assert transport.members(ROOM) == {'h1'}
