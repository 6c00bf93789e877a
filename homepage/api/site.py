"""Fixed site endpoints: favicon and the teapot."""
import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse, Response

from homepage.api.deps import get_settings
from homepage.core.config import Settings

router = APIRouter()
logger = logging.getLogger(__name__)

TEAPOT_STATUS = 418

TEAPOT_HTML = (
    "<html><h1><a href='https://datatracker.ietf.org/doc/html/rfc2324/'>HTCPTP</h1>"
    "<img src='https://external-content.duckduckgo.com/iu/?u=https%3A%2F%2Ftaooftea.com"
    "%2Fwp-content%2Fuploads%2F2015%2F12%2Fyixing-dark-brown-small.jpg&f=1&nofb=1' "
    "alt='Im a teapot'></a><html>"
)

# Every method brews tea
TEAPOT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.get("/favicon.ico")
def favicon(settings: Settings = Depends(get_settings)) -> Response:
    path = Path(settings.FAVICON_PATH)
    if not path.is_file():
        return PlainTextResponse("404 page not found\n", status_code=404)
    return FileResponse(path, media_type="image/x-icon")


@router.api_route("/teapot", methods=TEAPOT_METHODS, response_class=HTMLResponse)
def teapot() -> HTMLResponse:
    logger.info("Tea Served.")
    return HTMLResponse(content=TEAPOT_HTML, status_code=TEAPOT_STATUS)
