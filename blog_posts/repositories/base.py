# blog_posts/repositories/base.py
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Generic, TypeVar

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository class defining the standard CRUD interface."""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Retrieve a single entity by its ID, or None if it does not exist."""
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """Retrieve every stored entity."""
        pass

    @abstractmethod
    async def create(self, data: Any) -> T:
        """Create a new entity and return it."""
        pass

    @abstractmethod
    async def update(self, entity_id: str, data: Dict[str, Any]) -> T:
        """Update an existing entity and return the updated version."""
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete an entity. Returns True if something was removed."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count stored entities."""
        pass
