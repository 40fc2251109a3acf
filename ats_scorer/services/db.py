import motor.motor_asyncio
from pymongo import ASCENDING, DESCENDING

from ats_scorer.models.scoring_settings import DatabaseSettings
from ats_scorer.utils.exceptions import DatabaseError
from ats_scorer.utils.logging_config import get_logger

logger = get_logger(__name__)

RESUMES = "resumes"
JOB_DESCRIPTIONS = "job_descriptions"
SCORE_RUNS = "score_runs"


def create_client(settings: DatabaseSettings):
    """Build the motor client and database handle; no I/O happens until first use"""
    logger.info(f"Initializing MongoDB connection to database: {settings.db_name}")
    try:
        client = motor.motor_asyncio.AsyncIOMotorClient(settings.mongo_details)
    except Exception as e:
        logger.error(f"Failed to initialize MongoDB client: {e}")
        raise DatabaseError("Failed to initialize MongoDB client", operation="connect", cause=e)
    logger.info("MongoDB client initialized successfully")
    return client, client[settings.db_name]


async def _create_index(db, name: str, keys, **kwargs):
    try:
        await db[name].create_index(keys, **kwargs)
        logger.debug(f"Created index on {name}: {keys}")
    except Exception as e:
        if "already exists" in str(e).lower():
            logger.debug(f"Index on {name} {keys} already exists")
        else:
            logger.warning(f"Could not create index on {name} {keys}: {e}")


async def init_indexes(db):
    """Index initialization for collections."""
    logger.info("Starting database index initialization")

    for name in (RESUMES, JOB_DESCRIPTIONS, SCORE_RUNS):
        await _create_index(db, name, [("id", ASCENDING)], unique=True)
        await _create_index(db, name, [("user_id", ASCENDING)])

    # Listing sorts by created_at or overall with id as tie-break
    await _create_index(
        db, SCORE_RUNS, [("user_id", ASCENDING), ("created_at", DESCENDING), ("id", DESCENDING)]
    )
    await _create_index(
        db, SCORE_RUNS, [("user_id", ASCENDING), ("overall", DESCENDING), ("id", DESCENDING)]
    )

    logger.info("Database index initialization completed")
