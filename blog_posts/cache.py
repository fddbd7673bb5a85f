# blog_posts/cache.py
import redis.asyncio as redis
import json
import logging
from typing import Optional
from blog_posts.config import CACHE_ENABLED, REDIS_URL, POSTS_CACHE_TTL, POST_CACHE_TTL

logger = logging.getLogger(__name__)

# Bumped on every write. Entries are keyed by the version current when their
# read started, so a read that overlaps a write lands under a retired key.
POSTS_VERSION_KEY = "posts:version"


def posts_list_key(version: str) -> str:
    return f"posts:list:v{version}"


def post_key(post_id: str, version: str) -> str:
    return f"post:{post_id}:v{version}"


class BlogCache:
    """Read-through cache of post views. Redis errors are logged, never raised."""

    def __init__(self, redis_url: str = REDIS_URL, enabled: bool = CACHE_ENABLED):
        self.redis_client = None
        if not enabled:
            logger.info("Blog cache disabled")
            return
        try:
            self.redis_client = redis.from_url(redis_url, decode_responses=True)
            logger.info(f"Blog cache service initialized for Redis at {redis_url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.redis_client = None

    async def initialize(self):
        """Verify Redis connection on startup."""
        if self.redis_client:
            try:
                is_connected = await self.redis_client.ping()
                if is_connected:
                    logger.info("Redis connection verified successfully")
                else:
                    logger.warning("Redis connection verification failed")
            except Exception as e:
                logger.warning(f"Redis ping failed: {e}")

    async def get_version(self) -> Optional[str]:
        """Current posts version, or None when the cache can't be used."""
        if not self.redis_client:
            return None
        try:
            version = await self.redis_client.get(POSTS_VERSION_KEY)
            return str(version) if version is not None else "0"
        except Exception as e:
            logger.error(f"Redis GET error for posts version: {e}")
            return None

    async def get_posts(self, version: Optional[str]) -> Optional[list]:
        """Get cached posts list."""
        if not self.redis_client or version is None:
            return None
        try:
            data = await self.redis_client.get(posts_list_key(version))
            if data is not None:
                logger.info(f"Cache HIT for posts list (v{version})")
                return json.loads(data)
            logger.info(f"Cache MISS for posts list (v{version})")
            return None
        except Exception as e:
            logger.error(f"Redis GET error for posts list: {e}")
            return None

    async def set_posts(self, version: Optional[str], data: list, ttl: int = POSTS_CACHE_TTL):
        """Cache posts list under the version read before the database query."""
        if not self.redis_client or version is None:
            return
        try:
            await self.redis_client.setex(posts_list_key(version), ttl, json.dumps(data, default=str))
            logger.info(f"Cached posts list ({len(data)} posts, v{version}) with {ttl}s TTL")
        except Exception as e:
            logger.error(f"Redis SET error for posts list: {e}")

    async def get_post(self, post_id: str, version: Optional[str]) -> Optional[dict]:
        """Get cached single post."""
        if not self.redis_client or version is None:
            return None
        try:
            data = await self.redis_client.get(post_key(post_id, version))
            if data is not None:
                logger.info(f"Cache HIT for post ID {post_id}")
                return json.loads(data)
            logger.info(f"Cache MISS for post ID {post_id}")
            return None
        except Exception as e:
            logger.error(f"Redis GET error for post {post_id}: {e}")
            return None

    async def set_post(self, post_id: str, version: Optional[str], data: dict, ttl: int = POST_CACHE_TTL):
        """Cache single post under the version read before the database query."""
        if not self.redis_client or version is None:
            return
        try:
            await self.redis_client.setex(post_key(post_id, version), ttl, json.dumps(data, default=str))
            logger.info(f"Cached post ID {post_id} (v{version}) with {ttl}s TTL")
        except Exception as e:
            logger.error(f"Redis SET error for post {post_id}: {e}")

    async def invalidate_posts(self):
        """Retire every cached entry by bumping the posts version; old keys expire by TTL."""
        if not self.redis_client:
            return
        try:
            version = await self.redis_client.incr(POSTS_VERSION_KEY)
            logger.info(f"Invalidated post cache (now v{version})")
        except Exception as e:
            logger.error(f"Redis cache invalidation error: {e}")

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            logger.info("Redis connection closed")


# Singleton instance
cache = BlogCache()
