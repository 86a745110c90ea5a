"""
One-time script to create your first admin user.
Run from the project root:

    python scripts/create_admin.py

You will be prompted for email, password, and full name.
"""

import os
import sys

# Make sure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from campaignhub.database import SessionLocal, init_db
from campaignhub.services.auth import create_user, get_user_by_email
from campaignhub.services.rbac import RoleService
from campaignhub.services.seeding import DEFAULT_ROLES


def main():
    init_db()

    db = SessionLocal()
    try:
        print("\n── CampaignHub · Create Admin User ──\n")

        email = input("Email: ").strip()
        if not email:
            print("Email cannot be empty.")
            return

        existing = get_user_by_email(db, email)
        if existing:
            print(f"User {email} already exists (role: {existing.role}).")
            return

        password = input("Password (min 8 chars): ").strip()
        if len(password) < 8:
            print("Password too short.")
            return

        full_name = input("Full name (optional): ").strip() or None

        role_names = [name for name, _, _ in DEFAULT_ROLES]
        role = input(f"Role [{' / '.join(role_names)}] (default: SUPERADMIN): ").strip()
        if role not in role_names:
            role = "SUPERADMIN"

        # Tokens carry the role name; warn if it has not been seeded yet.
        if role not in RoleService(db).names():
            print(f"Warning: role {role} does not exist yet, run scripts/seed_data.py.")

        user = create_user(db, email, password, full_name or "", role)
        print(f"\n✓ User created: {user.email} (role: {user.role}, id: {user.id})\n")

    finally:
        db.close()


if __name__ == "__main__":
    main()
