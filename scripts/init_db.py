#!/usr/bin/env python3
"""
Initialize the CampaignHub database.
Creates all tables (roles, resources, actions, users).
"""

import sys
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from campaignhub.config import settings
from campaignhub.database import init_db


def main():
    print("Initializing database...")
    print(f"  DATABASE_URL: {settings.DATABASE_URL[:40]}...")
    print(f"  Environment: {settings.ENVIRONMENT}")
    print(f"  Backend: {'SQLite' if settings.is_sqlite else 'PostgreSQL'}")

    init_db()

    print("Database initialized successfully.")


if __name__ == "__main__":
    main()
