from shop_admin import AppState
from shop_admin.auth import AuthUser


def test_start_and_stop_manage_all_subscriptions(db):
    app = AppState.create(db, api_key="k")
    app.start()
    assert all(sync.subscribed for sync in app.syncs())
    assert all(not sync.loading for sync in app.syncs())
    app.stop()
    assert not any(sync.subscribed for sync in app.syncs())
    assert all(not db.collection(name).watches for name in ("shops", "orders", "advanceOrders"))


def test_syncs_share_the_event_bus(db):
    app = AppState.create(db, api_key="k")
    events = []
    app.bus.subscribe(events.append)
    app.shops.delete(123)
    assert events[-1].title == "Shops Error"


def test_can_write_requires_admin(db):
    app = AppState.create(db, api_key="k")
    assert not app.can_write
    app.auth.user = AuthUser("u1", "v@example.com", "viewer")
    assert not app.can_write
    app.auth.user = AuthUser("u2", "a@example.com", "admin")
    assert app.can_write
