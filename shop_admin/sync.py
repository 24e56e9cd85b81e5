"""Firestore 컬렉션 미러.

Each synchronizer keeps a local copy of one collection, refreshed from
``on_snapshot`` pushes, and writes through to Firestore. Local state is never
changed optimistically: new data only arrives through the next snapshot.
Public write methods never raise; they log, store ``self.error``, emit a
destructive toast and return ``False``.
"""
import logging
from typing import Callable, Iterable

from firebase_admin import firestore

from . import config
from .errors import RecordNotFound
from .events import EventBus
from .models import (
    AdvanceOrder,
    Order,
    Shop,
    clamp_credit_score,
    doc_id_of,
    normalize_status,
    safe_float,
    safe_int,
    safe_tags,
)

logger = logging.getLogger(__name__)


class CollectionSync:
    collection_name = ""
    record_cls = None
    label = "Record"
    plural = "records"
    key_attr = "id"
    stamp_created_at = False

    def __init__(self, db, bus: EventBus | None = None):
        self.db = db
        self.bus = bus or EventBus()
        self.records = []
        self.loading = True
        self.error: str | None = None
        self._watch = None
        self._listeners: list[Callable[[list], None]] = []

    # ----------------------
    # 구독 (실시간 스냅샷)
    # ----------------------
    def subscribe(self):
        if self._watch is not None:
            return self._watch
        try:
            self._watch = self._collection().on_snapshot(self._on_snapshot)
        except Exception as e:
            self.loading = False
            self._fail(f"Failed to load {self.plural}. Please try again later.", e)
        return self._watch

    def unsubscribe(self) -> None:
        watch, self._watch = self._watch, None
        if watch is None:
            return
        try:
            watch.unsubscribe()
        except Exception:
            logger.exception("Failed to cancel %s watch", self.collection_name)

    @property
    def subscribed(self) -> bool:
        return self._watch is not None

    def on_change(self, callback: Callable[[list], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def refresh(self) -> bool:
        """한 번만 읽어서 미러를 교체합니다 (구독 전 첫 화면용)."""
        try:
            self._on_snapshot(list(self._collection().stream()))
            return True
        except Exception as e:
            self.loading = False
            return self._fail(f"Failed to load {self.plural}. Please try again later.", e)

    def _on_snapshot(self, docs, changes=None, read_time=None):
        try:
            records = [self.record_cls.from_document(d.id, d.to_dict() or {}) for d in docs]
        except Exception as e:
            self.loading = False
            self._fail(f"Failed to load {self.plural}. Please try again later.", e)
            return
        # 리스트 통째로 교체 (부분 갱신 없음)
        self.records = records
        self.loading = False
        logger.debug("%s snapshot: %d docs", self.collection_name, len(records))
        for callback in list(self._listeners):
            try:
                callback(records)
            except Exception:
                logger.exception("%s change listener failed", self.collection_name)

    # ----------------------
    # 조회 헬퍼
    # ----------------------
    def _collection(self):
        return self.db.collection(self.collection_name)

    def find(self, key):
        for rec in self.records:
            if getattr(rec, self.key_attr) == key:
                return rec
        return None

    def _resolve(self, key) -> str:
        doc_id = doc_id_of(self.find(key))
        if not doc_id:
            raise RecordNotFound(self.label, key)
        return doc_id

    def _resolve_many(self, keys: Iterable) -> list[tuple]:
        """핸들이 있는 id만 (id, doc_id)로 돌려줍니다. 없는 id는 건너뜁니다."""
        resolved = []
        for key in keys:
            doc_id = doc_id_of(self.find(key))
            if doc_id:
                resolved.append((key, doc_id))
            else:
                logger.info("Skipping %s %r: no confirmed document yet", self.label.lower(), key)
        return resolved

    def next_id(self) -> int:
        if not self.records:
            return 1
        return max(rec.id for rec in self.records) + 1

    def _fail(self, message: str, exc: Exception | None = None) -> bool:
        if isinstance(exc, RecordNotFound):
            logger.error("%s: %s", message, exc)
            message = f"{exc}. {message}"
        elif exc is not None:
            logger.exception(message)
        else:
            logger.error(message)
        self.error = message
        self.bus.error(f"{self.plural.title()} Error", message)
        return False

    def clear_error(self) -> None:
        self.error = None

    def _build_document(self, data: dict, new_id: int) -> dict:
        doc = self.record_cls.from_document(None, {**(data or {}), "id": new_id}).to_document()
        if self.stamp_created_at:
            doc["createdAt"] = firestore.SERVER_TIMESTAMP
        return doc

    # ----------------------
    # 쓰기
    # ----------------------
    def create(self, data: dict) -> bool:
        try:
            doc = self._build_document(data, self.next_id())
            self._collection().add(doc)
            logger.info("Added %s id=%s", self.label.lower(), doc["id"])
            return True
        except Exception as e:
            return self._fail(f"Failed to add {self.label.lower()}. Please try again.", e)

    def create_many(self, rows: list[dict]) -> bool:
        if not rows:
            return True
        try:
            base = self.next_id() - 1
            batch = self.db.batch()
            col = self._collection()
            for index, data in enumerate(rows):
                batch.set(col.document(), self._build_document(data, base + index + 1))
            batch.commit()
            logger.info("Added %d %s in one batch", len(rows), self.plural)
            return True
        except Exception as e:
            return self._fail(self._create_many_message(), e)

    def _create_many_message(self) -> str:
        return f"Failed to add {self.plural}. Please try again."

    def delete(self, key) -> bool:
        try:
            doc_id = self._resolve(key)
            self._collection().document(doc_id).delete()
            logger.info("Deleted %s %r", self.label.lower(), key)
            return True
        except Exception as e:
            return self._fail(f"Failed to delete {self.label.lower()}. Please try again.", e)

    def delete_many(self, keys: Iterable) -> bool:
        try:
            self._commit_batch(
                (doc_id, None) for _, doc_id in self._resolve_many(keys)
            )
            return True
        except Exception as e:
            return self._fail(f"Failed to delete selected {self.plural}. Please try again.", e)

    def _commit_batch(self, ops: Iterable[tuple]) -> int:
        """(doc_id, patch) 목록을 하나의 batch로 커밋. patch가 None이면 삭제."""
        batch = self.db.batch()
        col = self._collection()
        count = 0
        for doc_id, patch in ops:
            ref = col.document(doc_id)
            if patch is None:
                batch.delete(ref)
            else:
                batch.update(ref, patch)
            count += 1
        batch.commit()
        logger.info("Committed batch of %d writes to %s", count, self.collection_name)
        return count


class ShopSync(CollectionSync):
    collection_name = config.SHOPS_COLLECTION
    record_cls = Shop
    label = "Shop"
    plural = "shops"

    def _create_many_message(self) -> str:
        return "Failed to import shops. Please try again."

    def _build_document(self, data: dict, new_id: int) -> dict:
        doc = super()._build_document(data, new_id)
        doc["creditScore"] = clamp_credit_score(doc["creditScore"])
        return doc

    def find_by_code(self, shop_code: str) -> Shop | None:
        code = str(shop_code or "").strip()
        if not code:
            return None
        for shop in self.records:
            if shop.shop_id == code:
                return shop
        return None

    def update(self, key, partial: dict) -> bool:
        try:
            patch = dict(partial or {})
            if "creditScore" in patch:
                patch["creditScore"] = clamp_credit_score(patch["creditScore"])
            if "status" in patch:
                patch["status"] = normalize_status(patch["status"])
            if "tags" in patch:
                patch["tags"] = safe_tags(patch["tags"])
            if "balance" in patch:
                patch["balance"] = safe_float(patch["balance"])
            patch.pop("id", None)
            doc_id = self._resolve(key)
            self._collection().document(doc_id).update(patch)
            logger.info("Updated shop %r fields=%s", key, sorted(patch))
            return True
        except Exception as e:
            return self._fail("Failed to update shop. Please try again.", e)

    def bulk_update_status(self, keys: Iterable, status: str) -> bool:
        try:
            status = normalize_status(status)
            self._commit_batch(
                (doc_id, {"status": status}) for _, doc_id in self._resolve_many(keys)
            )
            return True
        except Exception as e:
            return self._fail("Failed to update status for selected shops. Please try again.", e)

    def _batch_field(self, field_name: str, values: dict, convert, message: str) -> bool:
        try:
            mapping = {safe_int(k): convert(v) for k, v in (values or {}).items()}
            self._commit_batch(
                (doc_id, {field_name: mapping[key]})
                for key, doc_id in self._resolve_many(mapping)
            )
            return True
        except Exception as e:
            return self._fail(message, e)

    def update_balances(self, balances: dict) -> bool:
        return self._batch_field(
            "balance", balances, safe_float, "Failed to update balances. Please try again."
        )

    def update_credit_scores(self, scores: dict) -> bool:
        return self._batch_field(
            "creditScore", scores, clamp_credit_score,
            "Failed to update credit scores. Please try again.",
        )

    def update_tags(self, tags: dict) -> bool:
        return self._batch_field(
            "tags", tags, safe_tags, "Failed to update tags. Please try again."
        )


class OrderSync(CollectionSync):
    collection_name = config.ORDERS_COLLECTION
    record_cls = Order
    label = "Order"
    plural = "orders"
    stamp_created_at = True


class AdvanceOrderSync(CollectionSync):
    collection_name = config.ADVANCE_ORDERS_COLLECTION
    record_cls = AdvanceOrder
    label = "Advance order"
    plural = "advance orders"
    key_attr = "order_id"
    stamp_created_at = True
