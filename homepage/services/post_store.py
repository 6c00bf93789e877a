"""
Post store reader.

Maps an identifier token from the URL to a JSON file under the posts
directory and decodes it. There is no index of valid posts: a post exists
exactly when its file opens.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from homepage.core.errors import PostDecodeError, PostNotFoundError
from homepage.models.blog_post import BlogPost

logger = logging.getLogger(__name__)

POST_FILE_PREFIX = "post"
POST_FILE_SUFFIX = ".json"

_INTEGER_TOKEN = re.compile(r"-?\d+")


def resolve_post_path(posts_dir: Path, token: str) -> Path:
    """
    Build the file path for a post identifier token.

    The token is used verbatim, so a crafted token can point outside
    posts_dir. Any sanitizing belongs here and nowhere else.
    """
    return posts_dir / f"{POST_FILE_PREFIX}{token}{POST_FILE_SUFFIX}"


def parse_post_number(token: str) -> Optional[int]:
    """Return the token as an int, or None if it is not an integer literal."""
    if _INTEGER_TOKEN.fullmatch(token):
        return int(token)
    return None


class PostStore:
    """Reads post records from a flat directory of JSON files."""

    def __init__(self, posts_dir: Path | str):
        self.posts_dir = Path(posts_dir)

    def load(self, token: str) -> BlogPost:
        """
        Open and decode the post for a token.

        Raises:
            PostNotFoundError: The file could not be opened
            PostDecodeError: The contents are not a valid post record
        """
        path = resolve_post_path(self.posts_dir, token)
        try:
            handle = open(path, "rb")
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte in the token
            raise PostNotFoundError(str(e)) from e

        with handle:
            try:
                return BlogPost.model_validate_json(handle.read())
            except ValidationError as e:
                logger.warning("Failed to decode post %s: %s", path, e)
                raise PostDecodeError(str(e)) from e
