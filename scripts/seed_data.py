#!/usr/bin/env python3
"""
Seed CampaignHub with the canonical resources, actions and default roles.
Safe to re-run: existing rows are left alone.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from campaignhub.database import SessionLocal, init_db
from campaignhub.services.seeding import DEFAULT_ROLES, seed_rbac


def main():
    print("Seeding RBAC data...")
    init_db()

    session = SessionLocal()
    try:
        added = seed_rbac(session)
        print(f"Added {added['resources']} resources, {added['actions']} actions.")
        print(f"Added {added['roles']} roles.")
        print("\nDefault roles:")
        for name, description, _ in DEFAULT_ROLES:
            print(f"  {name:<11} {description}")
        print("\nSeed complete!")
    finally:
        session.close()


if __name__ == "__main__":
    main()
