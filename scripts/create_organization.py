#!/usr/bin/env python3
"""
Script to create an organization and print its API token

The token is shown once; only its SHA-256 hash is stored.
"""

import os
import sys
import uuid
import asyncio
import secrets

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from booking_voice.api.middleware.auth import hash_token
from booking_voice.core.config import get_settings
from booking_voice.db.models import OrganizationDB
from booking_voice.db.repository import DatabaseRepository


async def create_organization(name: str) -> str:
    """Create the organization and return its plaintext token"""
    repository = DatabaseRepository.create_repository(get_settings())
    if not await repository.initialize():
        raise SystemExit("Could not connect to the database")

    token = secrets.token_urlsafe(32)
    try:
        organization = await repository.create_organization(OrganizationDB(
            id=str(uuid.uuid4()),
            name=name,
            api_token_hash=hash_token(token)
        ))
    finally:
        await repository.close()

    print(f"Organization: {organization.name} ({organization.id})")
    return token


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/create_organization.py <organization name>")
        sys.exit(1)

    token = asyncio.run(create_organization(" ".join(sys.argv[1:])))
    print(f"API token: {token}")
    print("Store this token now; it cannot be shown again.")


if __name__ == "__main__":
    main()
