# blog_posts/config.py
import os
import logging

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
PORT = int(os.getenv('PORT', '8005'))

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Redis Configuration
CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'true').lower() == 'true'
REDIS_HOST = os.getenv('REDIS_HOST', 'redis-service')
REDIS_PORT = int(os.getenv('REDIS_PORT', '6379'))
REDIS_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}"
POSTS_CACHE_TTL = int(os.getenv('POSTS_CACHE_TTL', '60'))
POST_CACHE_TTL = int(os.getenv('POST_CACHE_TTL', '300'))

# Determine which DB to use
USE_POSTGRES = os.getenv('USE_POSTGRES', 'false').lower() == 'true'

if USE_POSTGRES:
    logger.info("Using PostgreSQL database for blog posts")

    # asyncpg takes an ssl flag rather than libpq's sslmode
    ssl_mode = os.getenv('POSTGRES_SSLMODE', 'disable').lower()
    ssl_enabled = ssl_mode not in ('disable', 'false', 'no', '0')

    DB_CONFIG = {
        'host': os.getenv('POSTGRES_HOST', 'postgresql-service'),
        'port': int(os.getenv('POSTGRES_PORT', '5432')),
        'database': os.getenv('POSTGRES_DB', 'blog'),
        'user': os.getenv('POSTGRES_USER', 'postgres'),
        'password': os.getenv('POSTGRES_PASSWORD', ''),
        'ssl': ssl_enabled,
    }
    DATABASE_PATH = None
else:
    logger.info("Using SQLite database for blog posts")
    DATABASE_PATH = os.getenv('BLOG_DATABASE_PATH', '/app/blog.db')
    DB_CONFIG = None

# Prometheus Metrics Configuration
REQUEST_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    10.0,
)
