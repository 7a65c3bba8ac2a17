"""
Realtime channel tests.

Verifies:
- Presence: authenticate announces user_online, disconnect announces
  user_offline, neither is echoed to the sender
- Relay: client-pushed product_updated/sale_created reach everyone else
- HTTP mutations broadcast to all connections except the one named in
  X-Socket-ID
"""

from discpos.services.realtime_service import PresenceRegistry, get_registry


def authenticate(socket, events, user_id=1, full_name="Alice"):
    socket.emit("authenticate", {"id": user_id, "full_name": full_name})
    return events(socket, "authenticated")[0]["sid"]


class TestPresenceRegistry:

    def test_announce_and_release(self):
        registry = PresenceRegistry()
        registry.announce("sid-1", {"id": 1, "full_name": "Alice"})
        registry.announce("sid-2", {"id": 1, "full_name": "Alice"})
        assert len(registry) == 2

        assert registry.release("sid-1") == {"id": 1, "full_name": "Alice"}
        assert registry.release("sid-1") is None
        assert registry.online() == [{"id": 1, "full_name": "Alice"}]


class TestPresence:

    def test_user_online_goes_to_others(self, app, socket_client, events):
        alice = socket_client()
        bob = socket_client()

        alice.emit("authenticate", {"id": 1, "full_name": "Alice"})

        received = bob.get_received()
        online = [e["args"][0] for e in received if e["name"] == "user_online"]
        assert len(online) == 1
        assert online[0]["userId"] == 1
        assert online[0]["userName"] == "Alice"
        assert online[0]["timestamp"].endswith("Z")

        assert events(alice, "user_online") == []
        assert len(get_registry()) == 1

    def test_authenticated_reply_carries_sid(self, app, socket_client, events):
        alice = socket_client()
        sid = authenticate(alice, events)
        assert get_registry().get(sid) == {"id": 1, "full_name": "Alice"}

    def test_user_offline_on_disconnect(self, app, socket_client, events):
        alice = socket_client()
        bob = socket_client()
        authenticate(alice, events)
        bob.get_received()

        alice.disconnect()

        offline = events(bob, "user_offline")
        assert len(offline) == 1
        assert offline[0]["userId"] == 1
        assert len(get_registry()) == 0

    def test_anonymous_disconnect_is_silent(self, app, socket_client, events):
        anon = socket_client()
        bob = socket_client()
        anon.disconnect()
        assert events(bob, "user_offline") == []

    def test_authenticate_without_id(self, app, socket_client, events):
        alice = socket_client()
        bob = socket_client()
        alice.emit("authenticate", {"full_name": "Alice"})

        assert events(alice, "error") == [{"error": "authenticate requires an id"}]
        assert events(bob, "user_online") == []
        assert len(get_registry()) == 0


class TestRelay:

    def test_product_updated_relayed_with_sender_name(self, app, socket_client, events):
        alice = socket_client()
        bob = socket_client()
        authenticate(alice, events)
        bob.get_received()

        alice.emit("product_updated", {"id": 3, "stock": 8})

        relayed = events(bob, "product_updated")
        assert len(relayed) == 1
        assert relayed[0]["id"] == 3
        assert relayed[0]["updatedBy"] == "Alice"
        assert "timestamp" in relayed[0]
        assert events(alice, "product_updated") == []

    def test_sale_created_relayed_with_sender_name(self, app, socket_client, events):
        alice = socket_client()
        bob = socket_client()
        authenticate(alice, events)
        bob.get_received()

        alice.emit("sale_created", {"id": 11})

        relayed = events(bob, "sale_created")
        assert relayed[0]["createdBy"] == "Alice"
        assert events(alice, "sale_created") == []

    def test_relay_from_anonymous_socket(self, app, socket_client, events):
        anon = socket_client()
        bob = socket_client()
        anon.emit("sale_created", {"id": 11})
        assert events(bob, "sale_created")[0]["createdBy"] is None


class TestHttpBroadcasts:

    def test_sale_broadcast_skips_originating_socket(self, client, superadmin, headers_for,
                                                     socket_client, events, make_product):
        product = make_product(stock=20)
        alice = socket_client()
        bob = socket_client()
        sid = authenticate(alice, events)
        bob.get_received()

        resp = client.post("/api/sales", headers=headers_for(superadmin, socket_id=sid), json={
            "customer": "Jane",
            "items": [{"product_id": product.id, "quantity": 3, "unit_price": "10.00"}],
        })
        assert resp.status_code == 200

        created = events(bob, "sale_created")
        assert len(created) == 1
        assert created[0]["sale"]["total"] == "30.00"
        assert created[0]["items"][0]["quantity"] == 3
        assert created[0]["user"] == "Alice"
        assert events(alice, "sale_created") == []

    def test_broadcast_reaches_everyone_without_header(self, client, admin_headers,
                                                       socket_client, events, make_product):
        product = make_product(stock=20)
        alice = socket_client()
        bob = socket_client()

        client.post("/api/sales", headers=admin_headers, json={
            "customer": "Jane",
            "items": [{"product_id": product.id, "quantity": 1, "unit_price": "10.00"}],
        })

        assert len(events(alice, "sale_created")) == 1
        assert len(events(bob, "sale_created")) == 1

    def test_failed_sale_is_not_broadcast(self, client, admin_headers, socket_client, events, make_product):
        product = make_product(stock=0)
        bob = socket_client()

        resp = client.post("/api/sales", headers=admin_headers, json={
            "customer": "Jane",
            "items": [{"product_id": product.id, "quantity": 1, "unit_price": "10.00"}],
        })
        assert resp.status_code == 409
        assert events(bob, "sale_created") == []

    def test_product_created_broadcast(self, client, admin_headers, socket_client, events):
        bob = socket_client()
        client.post("/api/products", headers=admin_headers, json={
            "name": "Blue Train",
            "category": "Jazz",
            "purchase_price": "6.00",
            "selling_price": "12.00",
        })

        updates = events(bob, "product_updated")
        assert len(updates) == 1
        assert updates[0]["type"] == "created"
        assert updates[0]["product"]["name"] == "Blue Train"
        assert updates[0]["user"] == "Alice"

    def test_stock_change_broadcast(self, client, superadmin, headers_for, socket_client, events, make_product):
        product = make_product(stock=20)
        alice = socket_client()
        bob = socket_client()
        sid = authenticate(alice, events)
        bob.get_received()

        client.put(f"/api/products/{product.id}/stock", json={"stock": 4},
                   headers=headers_for(superadmin, socket_id=sid))

        updates = events(bob, "product_updated")
        assert updates[0]["type"] == "stock_updated"
        assert updates[0]["product"]["stock"] == 4
        assert events(alice, "product_updated") == []
