"""
app/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- Single collection: users (email-keyed, embedded cart)
- Health checks and retry logic
- Client is owned by the app (app.state), never a module global
- Collection handed to routes as a FastAPI dependency
"""

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from typing import Optional
import asyncio
from app.core.config import Settings, get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)


async def connect_to_mongo(config: Settings, max_retries: int = 3, retry_delay: float = 2) -> AsyncIOMotorClient:
    """
    Establishes connection to MongoDB with retry logic.
    Called during application startup.

    Returns:
        Connected AsyncIOMotorClient
    """
    for attempt in range(1, max_retries + 1):
        client = None
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            client = AsyncIOMotorClient(
                config.MONGODB_URL,
                maxPoolSize=50,
                minPoolSize=10,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                retryWrites=True,
                retryReads=True,
            )

            # Verify connection
            await client.admin.command("ping")

            logger.info(
                f"✅ Successfully connected to MongoDB: {config.MONGODB_DB_NAME}"
            )
            return client

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            if client is not None:
                client.close()

            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


async def close_mongo_connection(client: Optional[AsyncIOMotorClient]):
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    if client is not None:
        logger.info("Closing MongoDB connection")
        client.close()
        logger.info("MongoDB connection closed")


async def check_database_health(client: Optional[AsyncIOMotorClient]) -> bool:
    """
    Checks if the database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        if client is None:
            logger.error("MongoDB client not initialized")
            return False

        await client.admin.command("ping")
        return True

    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def users_collection_for(client: AsyncIOMotorClient, config: Settings) -> AsyncIOMotorCollection:
    """
    Returns the users collection.

    Schema:
    - email: str (unique key)
    - otp: str | None (current login code)
    - otp_expires_at: datetime | None
    - isLoggedIn: bool (display flag only)
    - cart: list[dict] (cart-line entries: id, quantity, product fields)
    - created_at: datetime
    - last_login_at: datetime
    """
    return client[config.MONGODB_DB_NAME][config.MONGODB_COLLECTION]


def get_mongo_client(request: Request) -> AsyncIOMotorClient:
    """
    Returns the client opened in the application lifespan.

    Raises:
        RuntimeError: If the database is not initialized
    """
    client = getattr(request.app.state, "mongo_client", None)
    if client is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return client


def get_users_collection(
    client: AsyncIOMotorClient = Depends(get_mongo_client),
    config: Settings = Depends(get_settings),
) -> AsyncIOMotorCollection:
    """FastAPI dependency: users collection for the current request."""
    return users_collection_for(client, config)
