import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from debt_ledger.core.config import settings
from debt_ledger.core.logging_utils import configure_logging

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB; also the startup hook that configures logging."""
    configure_logging()
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    mongodb.client = None
    mongodb.db = None
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Orders are always read per customer, oldest first
    await mongodb.db["orders"].create_index([("customer_id", 1), ("created_at", 1)])

    await mongodb.db["debt_adjustments"].create_index("customer_id")

    # Payment transactions
    await mongodb.db["transactions"].create_index("entity_id")
    await mongodb.db["transactions"].create_index("idempotency_key", unique=True, sparse=True)
