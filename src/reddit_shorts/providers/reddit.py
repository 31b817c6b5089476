"""Reddit post source using AsyncPRAW."""

from __future__ import annotations

import logging

import asyncpraw
from asyncpraw.models import Submission
from asyncprawcore.exceptions import AsyncPrawcoreException

from ..constants import REDDIT_TIMED_SORTS
from ..pipeline.base import IPostSource, Post, ProviderError

logger = logging.getLogger(__name__)


class RedditPostSource(IPostSource):
    """Fetch self posts from a subreddit listing.

    Authenticates as a script app with the account's username and password
    so the listing is read through the OAuth API.

    Usage:
        source = RedditPostSource(client_id, secret, username, password)
        posts = await source.fetch("stories", "top", "day", 25)
        await source.close()
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        user_agent: str = "reddit-shorts/0.1.0",
    ):
        """Initialize the post source.

        Args:
            client_id: Reddit app client ID.
            client_secret: Reddit app secret.
            username: Account username.
            password: Account password.
            user_agent: User agent string.
        """
        super().__init__()
        self.client_id = client_id
        self.client_secret = client_secret
        self.username = username
        self.password = password
        self.user_agent = user_agent

        self._reddit: asyncpraw.Reddit | None = None

    @classmethod
    def from_settings(cls, settings) -> "RedditPostSource":
        from ..config import REDDIT_FIELDS

        settings.require(*REDDIT_FIELDS)
        return cls(
            client_id=settings.reddit_client_id,
            client_secret=settings.reddit_secret,
            username=settings.reddit_username,
            password=settings.reddit_password,
            user_agent=settings.reddit_user_agent,
        )

    async def initialize(self) -> None:
        """Initialize the Reddit client."""
        self._reddit = asyncpraw.Reddit(
            client_id=self.client_id,
            client_secret=self.client_secret,
            username=self.username,
            password=self.password,
            user_agent=self.user_agent,
        )

    async def close(self) -> None:
        """Close the Reddit client."""
        if self._reddit:
            await self._reddit.close()
            self._reddit = None

    @staticmethod
    def _submission_to_post(submission: Submission) -> Post:
        """Convert a PRAW submission to a Post."""
        return Post(
            title=str(submission.title).strip(),
            text=str(submission.selftext or "").strip(),
        )

    async def fetch(
        self,
        subreddit: str,
        sort: str,
        time_window: str,
        limit: int,
    ) -> list[Post]:
        """Fetch self posts from a subreddit listing.

        Stickied and link posts are skipped.

        Args:
            subreddit: Subreddit name.
            sort: Listing sort (hot, new, rising, top, controversial).
            time_window: Time filter, only used by top and controversial.
            limit: Maximum posts to request.

        Returns:
            Posts in listing order.

        Raises:
            ProviderError: If Reddit cannot be reached or rejects the request.
        """
        if not self._reddit:
            await self.initialize()

        kwargs: dict = {"limit": limit}
        if sort in REDDIT_TIMED_SORTS:
            kwargs["time_filter"] = time_window

        posts: list[Post] = []
        try:
            sub = await self._reddit.subreddit(subreddit)
            listing = getattr(sub, sort)
            async for submission in listing(**kwargs):
                if submission.stickied or not submission.is_self:
                    continue
                posts.append(self._submission_to_post(submission))
        except AsyncPrawcoreException as e:
            raise ProviderError(
                f"Could not read r/{subreddit}/{sort}: {e}",
                provider="reddit",
                operation="fetch",
            ) from e

        logger.info("Fetched %d self post(s) from r/%s/%s", len(posts), subreddit, sort)
        self.log_detail(f"r/{subreddit}/{sort}: {len(posts)} self post(s)")
        return posts
