"""
Blog Post Model

One post record per JSON file (db/post<N>.json). Records are decoded fresh
for every request and never cached.

Usage:
    from homepage.models.blog_post import BlogPost, PostView

    post = BlogPost.model_validate_json(raw_bytes)
    view = PostView.from_post(post, number=5)
    view.last, view.next  # 4, 6
"""

from dataclasses import dataclass
from typing import Any, List

from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# Post bodies are embedded in the page without escaping. Everything that
# bypasses escaping goes through trust_post_markup(); switching it to
# markupsafe.escape makes rendered bodies safe by default.
UntrustedMarkup = Markup


def trust_post_markup(text: str) -> UntrustedMarkup:
    return Markup(text)


class BlogPost(BaseModel):
    """
    Decoded post record.

    Attributes:
        title: Display title
        number: Advisory number stored in the file; the URL number wins
        timestamp: Opaque display string, never parsed
        main: Paragraphs, in order
    """

    model_config = ConfigDict(extra="ignore", strict=True, frozen=True)

    title: str = ""
    number: int = 0
    timestamp: str = ""
    main: List[str] = Field(default_factory=list)

    @field_validator("title", "number", "timestamp", "main", mode="before")
    @classmethod
    def _null_is_zero_value(cls, value: Any, info: ValidationInfo) -> Any:
        # null decodes to the field's zero value
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


@dataclass(frozen=True)
class PostView:
    """Template-facing view of a post with its derived fields."""

    title: str
    number: int
    last: int
    next: int
    timestamp: str
    main: tuple[str, ...]
    parsed_main: UntrustedMarkup

    @classmethod
    def from_post(cls, post: BlogPost, number: int) -> "PostView":
        # no bounds checking: post 0 links back to -1
        return cls(
            title=post.title,
            number=number,
            last=number - 1,
            next=number + 1,
            timestamp=post.timestamp,
            main=tuple(post.main),
            parsed_main=trust_post_markup(" ".join(post.main)),
        )


__all__ = ["BlogPost", "PostView", "UntrustedMarkup", "trust_post_markup"]
