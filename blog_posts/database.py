# blog_posts/database.py
import os
import logging
from typing import Optional

from blog_posts.config import USE_POSTGRES, DB_CONFIG, DATABASE_PATH
from blog_posts.models.schemas import NAME_MAX_LENGTH, TITLE_MAX_LENGTH
from blog_posts.repositories import PostRepository

logger = logging.getLogger(__name__)

if USE_POSTGRES:
    import asyncpg
    logger.info("Using PostgreSQL database with asyncpg")
else:
    import aiosqlite
    logger.info("Using SQLite database")


class BlogDatabase:
    """Owns the connection pool (or SQLite file) and the post store built on it."""

    def __init__(self, database_path: Optional[str] = None):
        self.use_postgres = USE_POSTGRES
        self.pool: Optional["asyncpg.Pool"] = None
        self.database_path = database_path or DATABASE_PATH
        self.posts = PostRepository(database_path=self.database_path)
        self._initialized = False

    async def initialize(self):
        """Initialize database connection pool and schema."""
        if self._initialized:
            return

        if self.use_postgres:
            try:
                self.pool = await asyncpg.create_pool(
                    min_size=5,
                    max_size=20,
                    **DB_CONFIG
                )
                logger.info(f"PostgreSQL connection pool created: {DB_CONFIG['host']}:{DB_CONFIG['port']}")
                self.posts.set_pool(self.pool)
                await self._initialize_postgres_schema()
            except Exception as e:
                logger.error(f"PostgreSQL pool creation failed: {e}", exc_info=True)
                raise
        else:
            await self._initialize_sqlite_schema()

        self._initialized = True

    async def _initialize_postgres_schema(self):
        """Initialize PostgreSQL database schema."""
        async with self.pool.acquire() as conn:
            await conn.execute(f'''
                CREATE TABLE IF NOT EXISTS posts (
                    id VARCHAR(32) PRIMARY KEY,
                    author_first_name VARCHAR({NAME_MAX_LENGTH}) NOT NULL,
                    author_last_name VARCHAR({NAME_MAX_LENGTH}) NOT NULL,
                    title VARCHAR({TITLE_MAX_LENGTH}) NOT NULL,
                    content TEXT NOT NULL,
                    created TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created DESC)')

        logger.info("PostgreSQL blog database schema initialized")

    async def _initialize_sqlite_schema(self):
        """Initialize SQLite database schema."""
        directory = os.path.dirname(self.database_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        async with aiosqlite.connect(self.database_path) as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS posts (
                    id TEXT PRIMARY KEY,
                    author_first_name TEXT NOT NULL,
                    author_last_name TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created TEXT NOT NULL
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created)')
            await conn.commit()

        logger.info("SQLite blog database schema initialized")

    async def drop_all(self):
        """Remove every post. Used to reset state between test cases."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM posts")
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                await conn.execute("DELETE FROM posts")
                await conn.commit()
        logger.warning("Deleted all blog posts")

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
            else:
                async with aiosqlite.connect(self.database_path) as conn:
                    await conn.execute("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def close(self):
        """Close database connection pool."""
        if self.use_postgres and self.pool:
            await self.pool.close()
            logger.info("PostgreSQL connection pool closed")
        self._initialized = False


# Singleton instance
db = BlogDatabase()
