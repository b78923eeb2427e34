from starlette.testclient import TestClient

from app.bootstrap.asgi import app


def test_ws_signal_relays_offer_to_partner():
    with TestClient(app) as client:
        with client.websocket_connect("/ws/signal") as first:
            with client.websocket_connect("/ws/signal") as second:
                joined = first.receive_json()
                assert joined["type"] == "partnerOnline"
                peer_id = joined["peerId"]

                status = client.get("/api/v1/signal/status").json()
                assert status["connectedPeers"] == 2

                second.send_json({"type": "offer", "sdp": "X"})
                assert first.receive_json() == {"sdp": "X", "type": "offer", "from": peer_id}

                second.send_json({"type": "heartbeat"})
                assert second.receive_json() == {"type": "heartbeat-ack"}

                second.send_bytes(b"\x00\x01")
                assert second.receive_json() == {"type": "error", "event": None, "message": "Binary frames are not supported"}

                second.send_json({"type": "join-room"})
                assert second.receive_json() == {"type": "error", "event": "join-room", "message": "Unknown event"}

            left = first.receive_json()
            assert left["type"] == "partnerOffline" and left["peerId"] == peer_id

        assert client.get("/api/v1/signal/status").json()["connectedPeers"] == 0
