#!/usr/bin/env python3
"""
Run the Booking Voice API with uvicorn

Reads ``.env`` first so SERVER_HOST, SERVER_PORT and DEBUG come from the
same settings the application uses. The call refresh sweep runs in Celery,
started separately:

    celery -A booking_voice.tasks.celery_app worker -B -Q calls,default
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from booking_voice.core.config import get_settings


def main():
    settings = get_settings()

    print(f"Booking Voice ({settings.environment}) on {settings.server_host}:{settings.server_port}")
    print(f"Bolna API: {settings.bolna_api_base_url}")
    if settings.bolna_webhook_url:
        print(f"Bolna webhook: {settings.bolna_webhook_url}")
    else:
        print("Bolna webhook: not configured, call status relies on polling")
    print(f"Database: {settings.database_type}")
    print("-" * 50)

    uvicorn.run(
        "booking_voice.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )


if __name__ == "__main__":
    main()
