"""
Seed sample shops / orders / advance orders into Firestore.

Existing documents are left alone; a collection that already has documents
is skipped unless --force is given.

Usage:
  python scripts/seed_firestore.py --apply   # 실제 반영
  python scripts/seed_firestore.py           # 드라이런 (기본)
"""

import argparse
from datetime import datetime, timezone

from shop_admin import config
from shop_admin.firebase import init_firestore
from shop_admin.models import AdvanceOrder, Order, Shop

SAMPLE_SHOPS = [
    Shop(1, "SH001", "John's Electronics", "Active", ["New Shop", "VIP"], 85, 15000.5),
    Shop(2, "SH002", "Mary's Boutique", "On Hold", ["With Loan", "Old Client"], 72, -2500.0),
    Shop(3, "SH003", "Tech Solutions Inc", "Active", ["VIP", "No Product"], 78, 8750.25),
    Shop(4, "SH004", "Corner Store", "Inactive", ["Frozen", "Old Client"], 65, 0.0),
    Shop(5, "SH005", "Fashion Forward", "Active", ["New Shop", "With Loan"], 70, 12300.75),
]


def _at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


SAMPLE_ORDERS = [
    Order(1, "SH001", "John's Electronics", 1200.5, "United States", _at(2023, 6, 15, 9, 30)),
    Order(2, "SH003", "Tech Solutions Inc", 3500.0, "Canada", _at(2023, 6, 18, 14, 45)),
    Order(3, "SH002", "Mary's Boutique", 750.25, "United Kingdom", _at(2023, 6, 20, 11, 15)),
    Order(4, "SH005", "Fashion Forward", 2100.0, "France", _at(2023, 6, 10, 16, 20)),
]

SAMPLE_ADVANCE_ORDERS = [
    AdvanceOrder(
        1, "ADV-001234-567", "SH001", "System Message",
        "Need 100 units of wireless headphones. Delivery required by end of month.",
        _at(2024, 1, 15, 10, 30),
    ),
    AdvanceOrder(
        2, "ADV-001235-568", "SH003", "Buyer Inquiry",
        "Customer asking about bulk pricing for laptops. Need quote for 50+ units.",
        _at(2024, 1, 16, 14, 20),
    ),
    AdvanceOrder(
        3, "ADV-001236-569", "SH002", "System Message",
        "Fashion items for spring collection. Need samples first, then bulk order of 200 pieces.",
        _at(2024, 1, 17, 9, 15),
    ),
]


def seed_collection(db, collection: str, records, dry_run: bool, force: bool) -> int:
    print(f"\n[{collection}]")
    col = db.collection(collection)
    existing = len(list(col.limit(1).stream()))
    if existing and not force:
        print("  skip (collection not empty, use --force to seed anyway)")
        return 0
    if dry_run:
        for rec in records:
            print(f"  would add id={rec.id}")
        return len(records)
    batch = db.batch()
    for rec in records:
        batch.set(col.document(), rec.to_document())
    batch.commit()
    print(f"  added={len(records)}")
    return len(records)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="실제 Firestore에 반영 (기본은 드라이런)")
    parser.add_argument("--force", action="store_true", help="문서가 이미 있어도 추가")
    args = parser.parse_args()
    dry_run = not args.apply
    print(f"### DRY_RUN = {dry_run}")
    db = init_firestore()
    total = 0
    total += seed_collection(db, config.SHOPS_COLLECTION, SAMPLE_SHOPS, dry_run, args.force)
    total += seed_collection(db, config.ORDERS_COLLECTION, SAMPLE_ORDERS, dry_run, args.force)
    total += seed_collection(
        db, config.ADVANCE_ORDERS_COLLECTION, SAMPLE_ADVANCE_ORDERS, dry_run, args.force
    )
    print(f"\nDone. {total} document(s).")


if __name__ == "__main__":
    main()
