"""
blog-service 테스트를 위한 pytest fixtures

각 테스트는 임시 SQLite 파일 위의 독립된 저장소를 사용하고,
10개의 게시물로 시드한 뒤 종료 시 모두 삭제합니다.
"""
import os
import sys
import random
import tempfile
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Config is read at import time, so the environment has to be in place first
_session_dir = tempfile.mkdtemp(prefix="blog-tests-")
os.environ['USE_POSTGRES'] = 'false'
os.environ['CACHE_ENABLED'] = 'false'
os.environ['ALLOWED_ORIGINS'] = 'http://localhost:3000'
os.environ['BLOG_DATABASE_PATH'] = os.path.join(_session_dir, 'blog.db')

from blog_posts.database import BlogDatabase  # noqa: E402

FIRST_NAMES = ['Ada', 'Grace', 'Alan', 'Edsger', 'Barbara', 'Donald', 'Margaret', 'Ken']
LAST_NAMES = ['Lovelace', 'Hopper', 'Turing', 'Dijkstra', 'Liskov', 'Knuth', 'Hamilton', 'Thompson']
WORDS = ['async', 'pipeline', 'notes', 'python', 'release', 'design', 'cache', 'review', 'weekly']


def generate_blog_data():
    """게시물 생성 요청 형태의 무작위 데이터"""
    return {
        'author': {
            'firstName': random.choice(FIRST_NAMES),
            'lastName': random.choice(LAST_NAMES),
        },
        'title': ' '.join(random.sample(WORDS, 3)),
        'content': ' '.join(random.choices(WORDS, k=20)) + '.',
        'created': (
            datetime.now(timezone.utc) - timedelta(days=random.randint(1, 365))
        ).isoformat(),
    }


@pytest.fixture
def temp_db_path():
    """테스트용 임시 SQLite 데이터베이스 경로"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, 'test_blog.db')


@pytest.fixture
def sample_post():
    """테스트용 게시물 데이터"""
    return {
        'title': 'Hi',
        'content': 'World',
        'author': {'firstName': 'Ada', 'lastName': 'Lovelace'},
    }


@pytest_asyncio.fixture
async def blog_db(temp_db_path):
    """격리된 저장소 (setup: 스키마 생성, teardown: 전체 삭제)"""
    database = BlogDatabase(database_path=temp_db_path)
    await database.initialize()
    yield database
    await database.drop_all()
    await database.close()


@pytest_asyncio.fixture
async def seeded_posts(blog_db):
    """10개의 게시물로 시드"""
    return await blog_db.posts.insert_many(generate_blog_data() for _ in range(10))


@pytest_asyncio.fixture
async def client(blog_db):
    """격리된 저장소를 사용하는 HTTP 클라이언트"""
    from blog_service import app, get_db

    app.dependency_overrides[get_db] = lambda: blog_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
