from firebase_admin import firestore

from shop_admin.events import VARIANT_DESTRUCTIVE
from shop_admin.models import Pending, Shop, Synced
from shop_admin.sync import AdvanceOrderSync, OrderSync, ShopSync


def _shop_doc(i, code, **extra):
    return {"id": i, "shopId": code, "clientName": f"Client {code}", "status": "Active", **extra}


def _stored(db, name):
    return sorted(db.data.get(name, {}).values(), key=lambda d: d["id"])


def test_subscribe_mirrors_collection(db):
    db.seed("shops", [_shop_doc(1, "SH001"), _shop_doc(2, "SH002")])
    sync = ShopSync(db)
    assert sync.loading
    sync.subscribe()
    assert not sync.loading
    assert {s.shop_id for s in sync.records} == {"SH001", "SH002"}
    assert all(isinstance(s.handle, Synced) for s in sync.records)


def test_subscribe_is_idempotent_and_unsubscribe_stops_updates(db):
    sync = ShopSync(db)
    sync.subscribe()
    sync.subscribe()
    assert len(db.collection("shops").watches) == 1
    sync.unsubscribe()
    assert not sync.subscribed
    db.collection("shops").add(_shop_doc(1, "SH001"))
    assert sync.records == []
    sync.unsubscribe()


def test_change_listeners_receive_new_records(db):
    sync = ShopSync(db)
    seen = []
    remove = sync.on_change(seen.append)
    sync.subscribe()
    sync.create({"shopId": "SH001", "clientName": "A"})
    assert [len(batch) for batch in seen] == [0, 1]
    remove()
    sync.create({"shopId": "SH002", "clientName": "B"})
    assert len(seen) == 2


def test_create_uses_next_id_after_max(db):
    db.seed("shops", [_shop_doc(i, f"SH{i}") for i in (1, 2, 3, 5)])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.create({"shopId": "SH9", "clientName": "New", "creditScore": 500})
    created = _stored(db, "shops")[-1]
    assert created["id"] == 6
    assert created["shopId"] == "SH9"
    assert created["creditScore"] == 100
    assert {s.id for s in sync.records} == {1, 2, 3, 5, 6}


def test_create_on_empty_collection_starts_at_one(db):
    sync = OrderSync(db)
    sync.subscribe()
    assert sync.create({"shopId": "SH1", "clientName": "A", "amount": 10, "location": "Japan"})
    stored = _stored(db, "orders")
    assert stored[0]["id"] == 1
    assert stored[0]["createdAt"] is firestore.SERVER_TIMESTAMP


def test_local_state_only_changes_through_snapshots(db):
    sync = ShopSync(db)
    assert sync.refresh()
    assert sync.create({"shopId": "SH1", "clientName": "A"})
    assert sync.records == []
    sync.refresh()
    assert [s.shop_id for s in sync.records] == ["SH1"]


def test_create_many_assigns_consecutive_ids_in_one_batch(db):
    db.seed("shops", [_shop_doc(4, "SH4")])
    sync = ShopSync(db)
    sync.subscribe()
    rows = [{"shopId": f"N{i}", "clientName": f"C{i}"} for i in range(3)]
    assert sync.create_many(rows)
    assert len(db.commits) == 1
    assert [d["id"] for d in _stored(db, "shops")] == [4, 5, 6, 7]


def test_create_many_empty_is_a_no_op(db):
    sync = ShopSync(db)
    assert sync.create_many([])
    assert db.commits == []


def test_update_clamps_credit_score(db):
    db.seed("shops", [_shop_doc(1, "SH1", creditScore=50)])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.update(1, {"creditScore": 150, "status": "Bogus"})
    shop = sync.find(1)
    assert shop.credit_score == 100
    assert shop.status == "Active"


def test_update_pending_record_reports_not_found(db, bus_events):
    bus, events = bus_events
    sync = ShopSync(db, bus)
    sync.records = [Shop(7, "SH7", "Pending Co", handle=Pending())]
    assert sync.update(7, {"balance": 10}) is False
    assert sync.error == "Shop not found. Failed to update shop. Please try again."
    assert events[-1].variant == VARIANT_DESTRUCTIVE
    assert events[-1].title == "Shops Error"


def test_bulk_status_skips_unresolved_ids(db):
    db.seed("shops", [_shop_doc(1, "SH1"), _shop_doc(2, "SH2")])
    sync = ShopSync(db)
    sync.subscribe()
    sync.records.append(Shop(3, "SH3", "Local only", handle=Pending()))
    assert sync.bulk_update_status([1, 3, 99], "Inactive")
    assert [d["status"] for d in _stored(db, "shops")] == ["Inactive", "Active"]
    assert len(db.commits[-1]) == 1


def test_batch_field_updates(db):
    db.seed("shops", [_shop_doc(1, "SH1", creditScore=72), _shop_doc(2, "SH2", creditScore=65)])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.update_credit_scores({1: 82, 2: 175})
    assert sync.update_balances({"1": "1,000.5"})
    assert sync.update_tags({2: ["VIP", "VIP", "Frozen"]})
    one, two = _stored(db, "shops")
    assert (one["creditScore"], two["creditScore"]) == (82, 100)
    assert one["balance"] == 1000.5
    assert two["tags"] == ["VIP", "Frozen"]


def test_delete_and_delete_many(db):
    db.seed("shops", [_shop_doc(i, f"SH{i}") for i in (1, 2, 3)])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.delete(1)
    assert sync.delete_many([2, 3])
    assert db.data["shops"] == {}
    assert sync.records == []


def test_delete_unknown_record_fails(db, bus_events):
    bus, events = bus_events
    sync = OrderSync(db, bus)
    sync.subscribe()
    assert sync.delete(42) is False
    assert sync.error.startswith("Order not found.")
    assert events[-1].title == "Orders Error"


def test_commit_failure_is_surfaced(db, bus_events):
    bus, events = bus_events
    db.seed("shops", [_shop_doc(1, "SH1")])
    sync = ShopSync(db, bus)
    sync.subscribe()
    db.fail_on.add("commit")
    assert sync.create_many([{"shopId": "SH2", "clientName": "B"}]) is False
    assert sync.error == "Failed to import shops. Please try again."
    assert events[-1].variant == VARIANT_DESTRUCTIVE
    sync.clear_error()
    assert sync.error is None


def test_subscribe_failure_stops_loading(db):
    db.fail_on.add("on_snapshot")
    sync = OrderSync(db)
    assert sync.subscribe() is None
    assert not sync.loading
    assert sync.error == "Failed to load orders. Please try again later."


def test_advance_orders_are_keyed_by_order_id(db):
    db.seed(
        "advanceOrders",
        [
            {"id": 1, "orderId": "ADV-1", "shopId": "SH1", "requestType": "Buyer Inquiry"},
            {"id": 2, "orderId": "ADV-2", "shopId": "SH2"},
        ],
    )
    sync = AdvanceOrderSync(db)
    sync.subscribe()
    assert sync.find("ADV-2").request_type == "System Message"
    assert sync.next_id() == 3
    assert sync.delete("ADV-1")
    assert [a.order_id for a in sync.records] == ["ADV-2"]


def test_find_by_code(db):
    db.seed("shops", [_shop_doc(1, "SH1")])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.find_by_code(" SH1 ").id == 1
    assert sync.find_by_code("") is None
    assert sync.find_by_code("SH2") is None
