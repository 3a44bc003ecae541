"""
Domain-specific API declarations.

Each module declares the interface for one external API.
To add a new domain: create domains/newdomain.py and import here.
"""

from .jsonplaceholder import Comment, JsonPlaceholderApi, Post, User

__all__ = [
    "JsonPlaceholderApi",
    "Post",
    "Comment",
    "User",
]
