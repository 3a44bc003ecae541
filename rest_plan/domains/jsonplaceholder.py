"""
JSONPlaceholder API Domain

Declared interface for the JSONPlaceholder fake REST API.
https://jsonplaceholder.typicode.com

This domain provides:
- Posts CRUD operations
- Comments retrieval
- Users retrieval
"""

from __future__ import annotations

from typing import Annotated, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..declarations import Body, PathParam, QueryParam, delete, get, header, patch, post, put
from ..models import CancellationToken, Response


class Post(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    user_id: int = Field(alias="userId")
    title: str
    body: str


class Comment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    post_id: int = Field(alias="postId")
    name: str
    email: str
    body: str


class User(BaseModel):
    id: int
    name: str
    username: str
    email: str


@header("Accept", "application/json")
class JsonPlaceholderApi(Protocol):
    """Posts, comments and users of JSONPlaceholder."""

    @get("/posts")
    async def get_posts(
        self, user_id: Annotated[int | None, QueryParam("userId")] = None
    ) -> list[Post]:
        """Get all posts. Optionally filter by userId."""
        ...

    @get("/posts/{id}")
    async def get_post(self, id: Annotated[int, PathParam()]) -> Post:
        """Get a specific post by ID."""
        ...

    @get("/posts/{id}")
    async def get_post_response(self, id: Annotated[int, PathParam()]) -> Response[Post]:
        """Get a post together with the raw HTTP response."""
        ...

    @post("/posts")
    async def create_post(self, post: Annotated[Post, Body()]) -> Post: ...

    @put("/posts/{id}")
    async def update_post(
        self, id: Annotated[int, PathParam()], post: Annotated[Post, Body()]
    ) -> Post: ...

    @patch("/posts/{id}")
    async def patch_post(
        self, id: Annotated[int, PathParam()], fields: Annotated[dict, Body()]
    ) -> Post: ...

    @delete("/posts/{id}")
    async def delete_post(
        self,
        id: Annotated[int, PathParam()],
        cancellation_token: CancellationToken = CancellationToken.none(),
    ) -> None:
        """Delete a post. Returns nothing on success."""
        ...

    @get("/comments")
    async def get_comments(self, postId: int) -> list[Comment]:
        """Get comments for a post (postId is sent as a query parameter)."""
        ...

    @get("/users/{id}")
    async def get_user(self, id: Annotated[int, PathParam()]) -> User: ...

    @get("/users/{id}")
    async def get_user_raw(self, id: Annotated[int, PathParam()]) -> httpx.Response: ...
