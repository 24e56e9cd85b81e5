"""
Create a Firebase Auth account and its users/{uid} role document.

If the email already exists, only the role document is written.

Usage:
  python scripts/create_user.py admin@example.com --password secret123 --role admin
  python scripts/create_user.py viewer@example.com --password secret123
"""

import argparse

from firebase_admin import auth, firestore

from shop_admin import config
from shop_admin.firebase import init_firestore
from shop_admin.models import ROLE_OPTIONS, ROLE_VIEWER


def ensure_user(email: str, password: str, display_name: str | None):
    try:
        user = auth.get_user_by_email(email)
        print(f"  existing uid={user.uid}")
        return user
    except auth.UserNotFoundError:
        pass
    user = auth.create_user(email=email, password=password, display_name=display_name)
    print(f"  created uid={user.uid}")
    return user


def write_profile(db, user, role: str) -> None:
    db.collection(config.USERS_COLLECTION).document(user.uid).set(
        {
            "email": user.email,
            "role": role,
            "displayName": user.display_name or user.email,
            "createdAt": firestore.SERVER_TIMESTAMP,
        },
        merge=True,
    )
    print(f"  {config.USERS_COLLECTION}/{user.uid} role={role}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("email")
    parser.add_argument("--password", required=True, help="6자 이상")
    parser.add_argument("--role", choices=ROLE_OPTIONS, default=ROLE_VIEWER)
    parser.add_argument("--name", default=None, help="표시 이름 (기본은 이메일)")
    args = parser.parse_args()
    if len(args.password) < 6:
        raise SystemExit("Password must be at least 6 characters.")
    db = init_firestore()
    print(f"\n[User] {args.email}")
    user = ensure_user(args.email.strip(), args.password, args.name)
    write_profile(db, user, args.role)
    print("\nDone.")


if __name__ == "__main__":
    main()
