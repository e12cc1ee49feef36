"""JSONPlaceholder connector implementation."""

from .entities import Album, Comment, Photo, Post, Task, User
from .rest.provider import JsonPlaceholderProvider

__all__ = [
    "JsonPlaceholderProvider",
    "Album",
    "Comment",
    "Photo",
    "Post",
    "Task",
    "User",
]
