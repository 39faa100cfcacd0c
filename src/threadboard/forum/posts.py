"""Post creation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from threadboard.core.errors import InvalidInputError
from threadboard.forum.validation import optional_text, require_text
from threadboard.store.database import transaction
from threadboard.store.models import Post

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class PostService:
    """Writes posts. Counters on a post are owned by the vote and comment engines."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_post(
        self,
        author_id: str,
        title: str,
        *,
        url: str | None = None,
        content: str | None = None,
    ) -> Post:
        """Create a post with zeroed counters and return it.

        Raises InvalidInputError if the title is blank or neither a URL
        nor body content is given, and NotFoundError if the author does
        not exist.
        """
        require_text(title, "title")
        url = optional_text(url)
        content = optional_text(content)
        if url is None and content is None:
            msg = "A post needs a url or content"
            raise InvalidInputError(msg)

        post = Post(user_id=author_id, title=title, url=url, content=content)
        async with transaction(self._session, missing=("User", author_id)):
            self._session.add(post)
            await self._session.flush()

        logger.debug("Created post %s by %s", post.id, author_id)
        return post
