import itertools
from datetime import datetime, timezone

import pytest

from shop_admin.events import EventBus
from shop_admin.models import Order, Shop, Synced


class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = None if data is None else dict(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return None if self._data is None else dict(self._data)


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    @property
    def _store(self):
        return self.collection.db.data.setdefault(self.collection.name, {})

    def get(self):
        self.collection.db.maybe_fail("get")
        return FakeSnapshot(self, self._store.get(self.id))

    def set(self, data, merge=False):
        self.collection.db.maybe_fail("set")
        self._set(data, merge)
        self.collection.notify()

    def update(self, patch):
        self.collection.db.maybe_fail("update")
        self._update(patch)
        self.collection.notify()

    def delete(self):
        self.collection.db.maybe_fail("delete")
        self._store.pop(self.id, None)
        self.collection.notify()

    def _set(self, data, merge=False):
        base = dict(self._store.get(self.id, {})) if merge else {}
        self._store[self.id] = {**base, **data}

    def _update(self, patch):
        if self.id not in self._store:
            raise KeyError(f"No document to update: {self.id}")
        self._store[self.id] = {**self._store[self.id], **patch}


class FakeWatch:
    def __init__(self, collection, callback):
        self.collection = collection
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        self.active = False
        if self in self.collection.watches:
            self.collection.watches.remove(self)


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name
        self.watches = []

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or self.db.new_id())

    def add(self, data):
        self.db.maybe_fail("add")
        ref = self.document()
        ref._set(data)
        self.notify()
        return datetime.now(timezone.utc), ref

    def stream(self):
        self.db.maybe_fail("stream")
        store = self.db.data.get(self.name, {})
        return [FakeSnapshot(self.document(doc_id), data) for doc_id, data in store.items()]

    def limit(self, count):
        collection = self

        class _Limited:
            def stream(self):
                return collection.stream()[:count]

        return _Limited()

    def on_snapshot(self, callback):
        self.db.maybe_fail("on_snapshot")
        watch = FakeWatch(self, callback)
        self.watches.append(watch)
        callback(self.stream(), [], None)
        return watch

    def notify(self):
        docs = self.stream()
        for watch in list(self.watches):
            watch.callback(docs, [], None)


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.ops = []

    def set(self, ref, data):
        self.ops.append(("set", ref, data))

    def update(self, ref, patch):
        self.ops.append(("update", ref, patch))

    def delete(self, ref):
        self.ops.append(("delete", ref, None))

    def commit(self):
        self.db.maybe_fail("commit")
        touched = []
        for kind, ref, data in self.ops:
            if kind == "set":
                ref._set(data)
            elif kind == "update":
                ref._update(data)
            else:
                ref._store.pop(ref.id, None)
            if ref.collection not in touched:
                touched.append(ref.collection)
        self.db.commits.append(list(self.ops))
        for collection in touched:
            collection.notify()


class FakeFirestore:
    """firestore.Client 대역: 메모리 dict에 저장하고 on_snapshot 콜백을 동기 호출."""

    def __init__(self):
        self.data = {}
        self.commits = []
        self.fail_on = set()
        self._collections = {}
        self._ids = itertools.count(1)

    def new_id(self):
        return f"doc{next(self._ids):04d}"

    def maybe_fail(self, op):
        if op in self.fail_on:
            raise RuntimeError(f"simulated {op} failure")

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    def batch(self):
        return FakeBatch(self)

    def seed(self, name, docs):
        store = self.data.setdefault(name, {})
        for doc in docs:
            store[self.new_id()] = dict(doc)


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def bus_events():
    bus = EventBus()
    events = []
    bus.subscribe(events.append)
    return bus, events


@pytest.fixture
def shops():
    return [
        Shop(1, "SH001", "John's Electronics", "Active", ["New Shop", "VIP"], 85, 15000.5, Synced("a1")),
        Shop(2, "SH002", "Mary's Boutique", "On Hold", ["With Loan", "Old Client"], 72, -2500.0, Synced("a2")),
        Shop(3, "SH003", "Tech Solutions Inc", "Active", ["VIP", "No Product"], 78, 8750.25, Synced("a3")),
        Shop(4, "SH004", "Corner Store", "Inactive", ["Frozen", "Old Client"], 65, 0.0, Synced("a4")),
        Shop(5, "SH005", "Fashion Forward", "Active", ["New Shop", "With Loan"], 70, 12300.75, Synced("a5")),
    ]


@pytest.fixture
def orders():
    def at(*args):
        return datetime(*args, tzinfo=timezone.utc)

    return [
        Order(1, "SH001", "John's Electronics", 1200.5, "United States", at(2023, 6, 15, 9, 30), Synced("o1")),
        Order(2, "SH003", "Tech Solutions Inc", 3500.0, "Canada", at(2023, 6, 18, 14, 45), Synced("o2")),
        Order(3, "SH002", "Mary's Boutique", 750.25, "United Kingdom", at(2023, 6, 20, 11, 15), Synced("o3")),
        Order(4, "SH005", "Fashion Forward", 2100.0, "France", at(2023, 6, 10, 16, 20), Synced("o4")),
    ]
