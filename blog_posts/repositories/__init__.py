# blog_posts/repositories/__init__.py
from blog_posts.repositories.post_repository import PostRepository

__all__ = ["PostRepository"]
