"""Access control: the authentication gate, request context and the ownership gate."""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs

from fastapi import Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

import config
import crud
import models
from auth import decode_session_cookie, resolve_session_user
from database import SessionLocal, get_db
from errors import NotFound, RedirectRequired
from logging_config import get_logger

logger = get_logger("access")

PUBLIC_PATHS = ("/login", "/register")
PUBLIC_PREFIXES = ("/static/",)


@dataclass(frozen=True)
class RequestContext:
    """Per-request authentication state handed to route handlers."""
    session_id: Optional[str] = None
    user: Optional[models.User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def load_request_context(request: Request) -> RequestContext:
    """Resolve the session cookie of a request to a RequestContext"""
    session_id = decode_session_cookie(request.cookies.get(config.SESSION_COOKIE_NAME))
    if not session_id:
        return RequestContext()
    db = SessionLocal()
    try:
        user = resolve_session_user(db, session_id)
    finally:
        db.close()
    if user is None:
        return RequestContext()
    return RequestContext(session_id=session_id, user=user)


async def authentication_gate(request: Request, call_next):
    """HTTP middleware redirecting anonymous requests to the login page"""
    context = load_request_context(request)
    request.state.context = context
    if not context.is_authenticated and not is_public_path(request.url.path):
        logger.debug("Anonymous request to %s redirected to /login", request.url.path)
        return RedirectResponse("/login", status_code=status.HTTP_302_FOUND)
    return await call_next(request)


def get_request_context(request: Request) -> RequestContext:
    return getattr(request.state, "context", None) or RequestContext()


def get_current_user(context: RequestContext = Depends(get_request_context)) -> models.User:
    """Return the logged-in user or send the browser to the login page"""
    if context.user is None:
        raise RedirectRequired("/login")
    return context.user


def get_owned_post(post_id: str,
                   current_user: models.User = Depends(get_current_user),
                   db: Session = Depends(get_db)) -> models.Post:
    """Load the post named in the path, requiring the current user to be its author.

    Non-authors are redirected to the blog index; the loaded post is handed
    to the route so it is fetched only once.
    """
    post = crud.get_post_by_id(db, crud.parse_post_id(post_id))
    if not post:
        raise NotFound("Post not found")
    if post.author_id != current_user.id:
        logger.warning("User %s denied access to post %s", current_user.username, post.id)
        raise RedirectRequired("/blog")
    return post


class MethodOverrideMiddleware:
    """Let HTML forms issue PUT/DELETE through a ``_method`` query parameter on POST."""

    allowed_methods = ("PUT", "PATCH", "DELETE")

    def __init__(self, app, field: str = "_method"):
        self.app = app
        self.field = field

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["method"] == "POST":
            query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
            override = (query.get(self.field) or [""])[0].upper()
            if override in self.allowed_methods:
                scope = dict(scope, method=override)
        await self.app(scope, receive, send)
