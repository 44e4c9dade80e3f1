import os

from databases import Database

from prehrastream.config.settings import settings
from prehrastream.utils.logger import database_logger

# ===========================
# Constants
# ===========================
DATABASE_VERSION = "1.0"

# ===========================
# Database Instance
# ===========================
database = Database(settings.get_database_url())

# ===========================
# Schema Creation
# ===========================
async def create_tables(db: Database, database_type: str = settings.DATABASE_TYPE):
    await db.execute("CREATE TABLE IF NOT EXISTS db_version (id INTEGER PRIMARY KEY CHECK (id = 1), version TEXT)")
    current_version = await db.fetch_val("SELECT version FROM db_version WHERE id = 1")

    if current_version != DATABASE_VERSION:
        if database_type == "sqlite":
            await db.execute("DROP TABLE IF EXISTS content_cache")
            await db.execute("INSERT OR REPLACE INTO db_version VALUES (1, :version)", {"version": DATABASE_VERSION})
        else:
            await db.execute("DROP TABLE IF EXISTS content_cache CASCADE")
            await db.execute(
                "INSERT INTO db_version VALUES (1, :version) ON CONFLICT (id) DO UPDATE SET version = :version",
                {"version": DATABASE_VERSION}
            )

    await db.execute("CREATE TABLE IF NOT EXISTS content_cache (cache_key TEXT PRIMARY KEY, content TEXT NOT NULL, stored_at REAL NOT NULL)")

# ===========================
# Database Setup
# ===========================
async def setup_database():
    try:
        database_logger.info(f"Setup {settings.DATABASE_TYPE} database")
        if settings.DATABASE_TYPE == "sqlite":
            os.makedirs(os.path.dirname(settings.DATABASE_PATH), exist_ok=True)

        await database.connect()
        database_logger.info("Connected")

        await create_tables(database)

        if settings.DATABASE_TYPE == "sqlite":
            await database.execute("PRAGMA busy_timeout=30000")
            await database.execute("PRAGMA journal_mode=WAL")
            await database.execute("PRAGMA synchronous=NORMAL")

        database_logger.info("Setup completed")

    except Exception as e:
        database_logger.error(f"Setup failed: {type(e).__name__}")
        raise

# ===========================
# Database Teardown
# ===========================
async def teardown_database():
    try:
        await database.disconnect()
        database_logger.info("Disconnected")
    except Exception as e:
        database_logger.error(f"Failed to disconnect: {type(e).__name__}")
