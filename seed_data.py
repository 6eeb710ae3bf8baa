#!/usr/bin/env python3
"""
Seed Data Script

Creates the database tables and the initial pricing record for Gatepass.
Also prints a password hash suitable for ADMIN_PASSWORD_HASH.

Usage:
    python seed_data.py
    python seed_data.py --day-pass 249 --season-pass 799
    python seed_data.py --hash-password <password>
"""

import argparse
import asyncio
from decimal import Decimal

from gatepass.security import hash_password


async def create_seed_data(day_pass=None, season_pass=None):
    # Settings are only needed once we touch the database
    from gatepass.config import settings
    from gatepass.database import async_session_maker, create_db_and_tables, engine
    from gatepass.pricing.schemas import PriceUpdateRequest
    from gatepass.pricing.service import PricingService

    print(f"🚀 Creating seed data for {settings.EVENT_NAME}...")
    await create_db_and_tables()

    update = PriceUpdateRequest(
        day_pass=day_pass or settings.DEFAULT_DAY_PASS_PRICE,
        season_pass=season_pass or settings.DEFAULT_SEASON_PASS_PRICE,
    )
    try:
        async with async_session_maker() as db:
            prices = await PricingService(db).update_prices(update)
    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        raise
    finally:
        await engine.dispose()

    print("✅ Successfully created seed data!")
    print(f"  - Day Pass: {prices.day_pass}")
    print(f"  - Season Pass: {prices.season_pass}")


def main():
    parser = argparse.ArgumentParser(description="Seed the Gatepass database")
    parser.add_argument("--day-pass", type=Decimal, help="Day pass price (major units)")
    parser.add_argument("--season-pass", type=Decimal, help="Season pass price (major units)")
    parser.add_argument("--hash-password", metavar="PASSWORD", help="Print a hash for ADMIN_PASSWORD_HASH and exit")
    args = parser.parse_args()

    if args.hash_password:
        print(hash_password(args.hash_password))
        return

    asyncio.run(create_seed_data(args.day_pass, args.season_pass))


if __name__ == "__main__":
    main()
