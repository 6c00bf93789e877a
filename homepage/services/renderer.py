"""
Blog post renderer.

The template is parsed once, at startup, into a PostRenderer that the app
holds for its whole life. Rendering never touches the filesystem.
"""

import logging
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from homepage.core.errors import RenderError, TemplateLoadError
from homepage.models.blog_post import BlogPost, PostView

logger = logging.getLogger(__name__)


def load_template(template_path: Path | str) -> Template:
    """
    Parse the blog template.

    Raises:
        TemplateLoadError: The file is missing or is not a valid template
    """
    path = Path(template_path)
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        autoescape=select_autoescape(["html", "htm", "xml"]),
        undefined=StrictUndefined,
        auto_reload=False,
    )
    try:
        return env.get_template(path.name)
    except TemplateNotFound as e:
        raise TemplateLoadError(f"template not found: {path}") from e
    except (TemplateError, UnicodeDecodeError) as e:
        raise TemplateLoadError(f"template {path} failed to parse: {e}") from e


class PostRenderer:
    """Renders decoded posts into the preloaded template."""

    def __init__(self, template: Template):
        self._template = template

    @classmethod
    def from_path(cls, template_path: Path | str) -> "PostRenderer":
        return cls(load_template(template_path))

    @property
    def template_name(self) -> str | None:
        return self._template.name

    def render(self, post: BlogPost, number: int) -> str:
        """
        Render one post as a complete HTML page.

        Args:
            post: Decoded post record
            number: Post number taken from the URL

        Raises:
            RenderError: Template execution failed
        """
        view = PostView.from_post(post, number)
        try:
            return self._template.render(post=view)
        except TemplateError as e:
            raise RenderError(str(e)) from e
