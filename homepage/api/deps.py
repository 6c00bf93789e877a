from fastapi import Request

from homepage.core.config import Settings
from homepage.services.post_store import PostStore
from homepage.services.renderer import PostRenderer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_post_store(request: Request) -> PostStore:
    return request.app.state.post_store


def get_renderer(request: Request) -> PostRenderer:
    """Renderer built once in create_app; read-only for the app's lifetime."""
    return request.app.state.renderer
