import logging

from motor.motor_asyncio import AsyncIOMotorClient
from filegate.core.config import settings
import certifi

logger = logging.getLogger(__name__)


class Database:
    client: AsyncIOMotorClient = None
    db = None

    def connect(self):
        if not settings.MONGO_URI:
            logger.warning("MONGO_URI not set, document store disabled")
            return
        self.client = AsyncIOMotorClient(settings.MONGO_URI, tlsCAFile=certifi.where())
        self.db = self.client[settings.MONGO_DB_NAME]
        logger.info("Connected to MongoDB")

    def close(self):
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")


db = Database()


async def get_db():
    return db.db
