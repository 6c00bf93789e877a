"""Blog post pages rendered from JSON records."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from homepage.api.deps import get_post_store, get_renderer
from homepage.services.post_store import PostStore, parse_post_number
from homepage.services.renderer import PostRenderer

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/blog/post{number}", response_class=HTMLResponse)
def get_blog_post(
    number: str,
    store: PostStore = Depends(get_post_store),
    renderer: PostRenderer = Depends(get_renderer),
) -> HTMLResponse:
    """
    Render a single blog post.

    The number comes from the URL. A non-numeric identifier still resolves
    to a file, and then the record's own number field is used.
    """
    post = store.load(number)

    post_number = parse_post_number(number)
    if post_number is None:
        post_number = post.number

    page = renderer.render(post, post_number)
    logger.info("Blog %d served.", post_number)
    return HTMLResponse(content=page)
