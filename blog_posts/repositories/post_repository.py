# blog_posts/repositories/post_repository.py
import logging
import uuid
from typing import Optional, List, Dict, Any, Iterable, Mapping, Union
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from blog_posts.errors import NotFoundError, ValidationError
from blog_posts.models.mapper import UPDATABLE_FIELDS, describe_validation_error
from blog_posts.models.schemas import PostAuthor, PostDocument, PostUpdate
from blog_posts.repositories.base import BaseRepository
from blog_posts.config import USE_POSTGRES, DATABASE_PATH

logger = logging.getLogger(__name__)

if not USE_POSTGRES:
    import aiosqlite

COLUMNS = "id, author_first_name, author_last_name, title, content, created"


def new_post_id() -> str:
    """Opaque, collision-free identifier for a new post."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostRepository(BaseRepository[PostDocument]):
    """Repository for Post entity operations."""

    def __init__(self, database_path: Optional[str] = None):
        self.use_postgres = USE_POSTGRES
        self.pool = None
        self.database_path = database_path or DATABASE_PATH

    def set_pool(self, pool: Any) -> None:
        """Set the database connection pool (for PostgreSQL)."""
        self.pool = pool

    @staticmethod
    def _to_document(row: Mapping[str, Any]) -> PostDocument:
        return PostDocument(
            id=row["id"],
            author=PostAuthor(
                first_name=row["author_first_name"],
                last_name=row["author_last_name"],
            ),
            title=row["title"],
            content=row["content"],
            created=row["created"],
        )

    @staticmethod
    def _prepare(data: Union[PostDocument, Mapping[str, Any]]) -> PostDocument:
        """Validate required fields and assign id and creation time."""
        if isinstance(data, PostDocument):
            data = data.model_dump(by_alias=True)
        try:
            doc = PostDocument.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from exc

        created = doc.created or utcnow()
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return doc.model_copy(update={
            "id": new_post_id(),
            "created": created.astimezone(timezone.utc),
        })

    def _insert_params(self, doc: PostDocument) -> tuple:
        created = doc.created if self.use_postgres else doc.created.isoformat()
        return (
            doc.id,
            doc.author.first_name,
            doc.author.last_name,
            doc.title,
            doc.content,
            created,
        )

    async def get_by_id(self, post_id: str) -> Optional[PostDocument]:
        """Fetch single post by ID."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {COLUMNS} FROM posts WHERE id = $1", post_id
                )
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                conn.row_factory = aiosqlite.Row
                cursor = await conn.execute(
                    f"SELECT {COLUMNS} FROM posts WHERE id = ?", (post_id,)
                )
                row = await cursor.fetchone()
        return self._to_document(row) if row else None

    async def get_all(self) -> List[PostDocument]:
        """Fetch every post, newest first."""
        query = f"SELECT {COLUMNS} FROM posts ORDER BY created DESC"

        if self.use_postgres:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query)
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                conn.row_factory = aiosqlite.Row
                cursor = await conn.execute(query)
                rows = await cursor.fetchall()
        return [self._to_document(row) for row in rows]

    async def create(self, data: Union[PostDocument, Mapping[str, Any]]) -> PostDocument:
        """Persist a new post; the store assigns its id and defaults ``created``."""
        doc = self._prepare(data)
        params = self._insert_params(doc)

        if self.use_postgres:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    f"INSERT INTO posts ({COLUMNS}) VALUES ($1, $2, $3, $4, $5, $6)",
                    *params
                )
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                await conn.execute(
                    f"INSERT INTO posts ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    params
                )
                await conn.commit()

        logger.info(f"Created post {doc.id}")
        return doc

    async def insert_many(
        self, items: Iterable[Union[PostDocument, Mapping[str, Any]]]
    ) -> List[PostDocument]:
        """Bulk create, used for seeding. Nothing is written if any item is invalid."""
        docs = [self._prepare(item) for item in items]
        if not docs:
            return []
        params = [self._insert_params(doc) for doc in docs]

        if self.use_postgres:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.executemany(
                        f"INSERT INTO posts ({COLUMNS}) VALUES ($1, $2, $3, $4, $5, $6)",
                        params
                    )
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                await conn.executemany(
                    f"INSERT INTO posts ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    params
                )
                await conn.commit()

        logger.info(f"Inserted {len(docs)} posts")
        return docs

    async def update(self, post_id: str, data: Dict[str, Any]) -> PostDocument:
        """Apply title/content changes; other keys are ignored."""
        changes = {key: data[key] for key in UPDATABLE_FIELDS if key in data}
        for key, value in changes.items():
            if not isinstance(value, str) or not value:
                raise ValidationError(f"Invalid `{key}`: must be a non-empty string")
        try:
            PostUpdate.model_validate(changes)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_error(exc)) from exc

        if not changes:
            existing = await self.get_by_id(post_id)
            if existing is None:
                raise NotFoundError(post_id)
            return existing

        fields = []
        params = []

        if self.use_postgres:
            for param_idx, (key, value) in enumerate(changes.items(), start=1):
                fields.append(f"{key} = ${param_idx}")
                params.append(value)
            params.append(post_id)
            query = (
                f"UPDATE posts SET {', '.join(fields)} WHERE id = ${len(params)} "
                f"RETURNING {COLUMNS}"
            )

            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        else:
            for key, value in changes.items():
                fields.append(f"{key} = ?")
                params.append(value)
            params.append(post_id)
            query = f"UPDATE posts SET {', '.join(fields)} WHERE id = ?"

            async with aiosqlite.connect(self.database_path) as conn:
                conn.row_factory = aiosqlite.Row
                cursor = await conn.execute(query, tuple(params))
                row = None
                if cursor.rowcount > 0:
                    # read back in the same transaction as the UPDATE
                    cursor = await conn.execute(
                        f"SELECT {COLUMNS} FROM posts WHERE id = ?", (post_id,)
                    )
                    row = await cursor.fetchone()
                await conn.commit()

        if row is None:
            raise NotFoundError(post_id)

        logger.info(f"Updated post {post_id}: {', '.join(changes)}")
        return self._to_document(row)

    async def delete(self, post_id: str) -> bool:
        """Delete a post. Absent ids are not an error."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM posts WHERE id = $1", post_id)
                deleted = result != "DELETE 0"
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                cursor = await conn.execute("DELETE FROM posts WHERE id = ?", (post_id,))
                await conn.commit()
                deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted post {post_id}")
        return deleted

    async def count(self) -> int:
        """Get total number of posts."""
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                count = await conn.fetchval("SELECT COUNT(*) FROM posts")
                return count or 0
        else:
            async with aiosqlite.connect(self.database_path) as conn:
                cursor = await conn.execute("SELECT COUNT(*) FROM posts")
                row = await cursor.fetchone()
                return row[0] if row else 0
