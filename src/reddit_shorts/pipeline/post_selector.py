"""Post selection by text length."""

import logging

from .base import NoEligiblePosts, Post

logger = logging.getLogger(__name__)


def filter_by_length(posts: list[Post], min_length: int, max_length: int) -> list[Post]:
    """Keep posts whose text length lies in ``[min_length, max_length]``."""
    return [post for post in posts if min_length <= len(post.text) <= max_length]


def select_posts(
    posts: list[Post],
    min_length: int,
    max_length: int,
    count: int,
    reverse: bool = False,
) -> list[Post]:
    """Pick the posts to narrate.

    Args:
        posts: Posts in listing order.
        min_length: Shortest accepted text, inclusive.
        max_length: Longest accepted text, inclusive.
        count: Number of posts to return.
        reverse: Walk the listing from the end instead of the start.

    Returns:
        Exactly ``count`` posts.

    Raises:
        NoEligiblePosts: If fewer than ``count`` posts pass the filter.
    """
    eligible = filter_by_length(posts, min_length, max_length)
    logger.debug(
        "%d of %d posts within %d-%d characters",
        len(eligible), len(posts), min_length, max_length,
    )

    if reverse:
        eligible.reverse()

    if len(eligible) < count:
        raise NoEligiblePosts(found=len(eligible), required=count)

    return eligible[:count]
