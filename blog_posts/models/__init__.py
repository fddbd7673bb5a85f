# blog_posts/models/__init__.py
from blog_posts.models.schemas import PostAuthor, PostDocument, PostCreate, PostUpdate, PostView
from blog_posts.models.mapper import to_view, from_create_request, from_update_request

__all__ = [
    "PostAuthor",
    "PostDocument",
    "PostCreate",
    "PostUpdate",
    "PostView",
    "to_view",
    "from_create_request",
    "from_update_request",
]
