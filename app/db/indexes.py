"""
app/db/indexes.py

Purpose: Database index management

- Unique index on email (one record per address)
- Index on cart entry ids for the conditional cart updates
"""

from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes(users):
    """
    Creates all necessary database indexes for the users collection.
    This function is idempotent - safe to run multiple times.

    Args:
        users: Users collection
    """
    try:
        logger.info("Creating database indexes...")

        # Unique index on email (primary identifier)
        await users.create_index("email", unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        # Multikey index on cart entry ids
        await users.create_index(
            [("email", 1), ("cart.id", 1)],
            name="email_cart_id_idx"
        )
        logger.debug("Created compound index on users.email + cart.id")

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise

