"""
Database initialization script - users collection with embedded carts

Run once to create indexes:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables before settings are read
load_dotenv()

from app.core.config import Settings
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, users_collection_for
from app.db.indexes import create_indexes

logger = get_logger("scripts.init_db")


async def main():
    config = Settings()
    logger.info(f"🔌 Connecting to MongoDB: {config.MONGODB_DB_NAME}")
    client = await connect_to_mongo(config)

    try:
        users = users_collection_for(client, config)
        await create_indexes(users)

        indexes = await users.index_information()
        logger.info(f"📋 Indexes on '{config.MONGODB_COLLECTION}': {sorted(indexes)}")
    finally:
        await close_mongo_connection(client)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
