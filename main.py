"""Main application module."""
import html
from datetime import datetime
from pathlib import Path
from typing import Optional
# 2. Third-party imports
from fastapi import Depends, FastAPI, Form, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import crud
import models
from access import (MethodOverrideMiddleware, RequestContext, authentication_gate,
                    get_current_user, get_owned_post, get_request_context)
from auth import clear_session_cookie, create_session, destroy_session, set_session_cookie, verify_password
from database import engine, get_db
from errors import AppError, BadRequest, NotFound, RedirectRequired, Unauthorized, ValidationError
from festivals import PAN_INDIA, festival_detail, group_festivals_by_month
from logging_config import setup_logging

logger = setup_logging()

FRONTEND_DIR = Path(__file__).resolve().parent / "frontend"
PAGES_DIR = FRONTEND_DIR / "pages"

MAHARASHTRA_STATE_ID = "INMH"
MIN_PASSWORD_LENGTH = 6
MAX_USERNAME_LENGTH = 50
MAX_TITLE_LENGTH = 200

# pydantic error types meaning a field was left out or blank
REQUIRED_ERROR_TYPES = {"missing", "string_type", "string_too_short"}

ERROR_REDIRECT_LINK = "/states/maharashtra"
ERROR_REDIRECT_TEXT = "Explore Maharashtra"

app = FastAPI(title="Indian Legacy")
models.Base.metadata.create_all(bind=engine)
app.mount("/static", StaticFiles(directory=FRONTEND_DIR / "static"), name="static")
app.middleware("http")(authentication_gate)
app.add_middleware(MethodOverrideMiddleware)


class AuthorOut(BaseModel):
    """Public view of a post author"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class PostOut(BaseModel):
    """Schema for a blog post as shown to readers"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author: AuthorOut
    created_at: datetime
    updated_at: datetime


class PostIn(BaseModel):
    """Validated title and content of a submitted post"""
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str = Field(min_length=1)


class RegistrationIn(BaseModel):
    """Account fields checked before a user is stored"""
    username: str = Field(min_length=1, max_length=MAX_USERNAME_LENGTH)
    password: str


class StateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    state_id: str
    name: str
    capital: Optional[str] = None
    description: Optional[str] = None


def current_user_out(context: RequestContext):
    return AuthorOut.model_validate(context.user) if context.user else None


def page(context: RequestContext, **data):
    """Page data handed to the presentation layer, with the logged-in user"""
    return {"current_user": current_user_out(context), **data}


def render_page(name: str) -> HTMLResponse:
    """Serve a static HTML page from the frontend pages directory"""
    with open(PAGES_DIR / name, "r", encoding="utf-8") as f:
        return HTMLResponse(content=f.read())


def render_error(status_code: int, message: str) -> HTMLResponse:
    body = (
        "<!DOCTYPE html>\n<html>\n<head><title>Error</title></head>\n<body>\n"
        f"<h1>Error {status_code}</h1>\n"
        f"<p class=\"error-message\">{html.escape(message)}</p>\n"
        f"<a href=\"{ERROR_REDIRECT_LINK}\">{ERROR_REDIRECT_TEXT}</a>\n"
        "</body>\n</html>\n"
    )
    return HTMLResponse(content=body, status_code=status_code)


def expand_bracket_keys(fields) -> dict:
    """Turn form keys such as ``post[title]`` into nested dictionaries"""
    result: dict = {}
    for key, value in fields:
        if "[" in key and key.endswith("]"):
            outer, inner = key[:-1].split("[", 1)
            nested = result.setdefault(outer, {})
            if isinstance(nested, dict):
                nested[inner] = value
        else:
            result[key] = value
    return result


async def read_payload(request: Request) -> dict:
    """Read a JSON or form request body into a dictionary"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise BadRequest("Invalid post data") from None
        return payload if isinstance(payload, dict) else {}
    form = await request.form()
    return expand_bracket_keys(form.multi_items())


def describe_errors(errors) -> str:
    """Join pydantic error entries into one readable line"""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def validate_model(model, data: dict, required_message: str):
    """Validate data against a pydantic model.

    Missing or blank fields raise BadRequest with required_message; any other
    constraint violation raises ValidationError.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        if any(error["type"] in REQUIRED_ERROR_TYPES for error in exc.errors()):
            raise BadRequest(required_message) from None
        raise ValidationError(describe_errors(exc.errors())) from None


def validate_post_payload(payload: dict) -> PostIn:
    post = payload.get("post")
    if not post or not isinstance(post, dict):
        raise BadRequest("Invalid post data")
    return validate_model(PostIn, post, "Title and content are required")


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@app.exception_handler(RedirectRequired)
async def redirect_required_handler(request: Request, exc: RedirectRequired):
    return redirect(exc.location)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
    return render_error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return await app_error_handler(request, ValidationError(describe_errors(exc.errors())))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    return await app_error_handler(request, ValidationError(str(exc.orig)))


@app.exception_handler(DataError)
async def data_error_handler(request: Request, exc: DataError):
    return await app_error_handler(request, ValidationError(str(exc.orig)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return await app_error_handler(request, NotFound())
    return await app_error_handler(request, AppError(str(exc.detail), status_code=exc.status_code))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return render_error(status.HTTP_500_INTERNAL_SERVER_ERROR, AppError.default_message)


@app.get("/", response_class=HTMLResponse)
async def read_index():
    """Serve the home page"""
    return render_page("index.html")


@app.get("/map-nav", response_class=HTMLResponse)
async def read_map():
    """Serve the interactive state map"""
    return render_page("map.html")


@app.get("/blog")
async def read_blog(db: Session = Depends(get_db),
                    context: RequestContext = Depends(get_request_context)):
    """List every post with its author, newest first"""
    posts = crud.list_posts(db)
    return page(context, posts=[PostOut.model_validate(post) for post in posts])


@app.get("/blog/new")
async def new_post_form(context: RequestContext = Depends(get_request_context),
                        current_user: models.User = Depends(get_current_user)):
    """Data for an empty post form"""
    return page(context, post=None)


@app.post("/blog")
async def create_post(request: Request,
                      db: Session = Depends(get_db),
                      current_user: models.User = Depends(get_current_user)):
    """Create a post authored by the logged-in user"""
    post_in = validate_post_payload(await read_payload(request))
    db_post = crud.create_post(db, current_user, post_in.title, post_in.content)
    logger.info("Post %s created by %s", db_post.id, current_user.username)
    return redirect(f"/blog/{db_post.id}")


@app.get("/blog/{post_id}")
async def read_post(post_id: str,
                    db: Session = Depends(get_db),
                    context: RequestContext = Depends(get_request_context)):
    """Retrieve a single post by its ID"""
    post = crud.get_post_by_id(db, crud.parse_post_id(post_id))
    if not post:
        raise NotFound("Post not found")
    return page(context, post=PostOut.model_validate(post))


@app.get("/blog/{post_id}/edit")
async def edit_post_form(post: models.Post = Depends(get_owned_post),
                         context: RequestContext = Depends(get_request_context)):
    """Data for the edit form of a post owned by the logged-in user"""
    return page(context, post=PostOut.model_validate(post))


@app.put("/blog/{post_id}")
async def update_post(request: Request,
                      post: models.Post = Depends(get_owned_post),
                      db: Session = Depends(get_db)):
    """Replace the title and content of a post. Only its author may do this"""
    post_in = validate_post_payload(await read_payload(request))
    crud.update_post(db, post, post_in.title, post_in.content)
    logger.info("Post %s updated", post.id)
    return redirect(f"/blog/{post.id}")


@app.delete("/blog/{post_id}")
async def delete_post(post: models.Post = Depends(get_owned_post),
                      db: Session = Depends(get_db)):
    """Delete a post. Only its author may do this"""
    post_id = post.id
    crud.delete_post(db, post)
    logger.info("Post %s deleted", post_id)
    return redirect("/blog")


@app.get("/login")
async def login_form(context: RequestContext = Depends(get_request_context)):
    """Serve the login form, or send logged-in users home"""
    if context.is_authenticated:
        return redirect("/")
    return render_page("login.html")


@app.post("/login")
async def login(username: Optional[str] = Form(None),
                password: Optional[str] = Form(None),
                db: Session = Depends(get_db),
                context: RequestContext = Depends(get_request_context)):
    """Authenticate a user using username and password"""
    if not username or not password:
        raise BadRequest("Username and password are required")
    user = crud.get_user_by_username(db, username)
    # Same message for unknown user and wrong password.
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", username)
        raise Unauthorized("Invalid username or password")

    response = redirect("/")
    destroy_session(db, context.session_id)
    set_session_cookie(response, create_session(db, user))
    return response


@app.get("/register")
async def register_form():
    """Serve the registration form"""
    return render_page("register.html")


@app.post("/register")
async def register(username: Optional[str] = Form(None),
                   password: Optional[str] = Form(None),
                   confirm_password: Optional[str] = Form(None, alias="confirmPassword"),
                   db: Session = Depends(get_db),
                   context: RequestContext = Depends(get_request_context)):
    """Create an account and log it in"""
    if not username or not password or not confirm_password:
        raise BadRequest("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if password != confirm_password:
        raise BadRequest("Passwords do not match")
    account = validate_model(RegistrationIn, {"username": username, "password": password},
                             "All fields are required")
    if crud.get_user_by_username(db, account.username):
        raise BadRequest("Username already exists")

    user = crud.create_new_user(db, username=account.username, password=account.password)
    logger.info("User %s registered", user.username)
    response = redirect("/")
    destroy_session(db, context.session_id)
    set_session_cookie(response, create_session(db, user))
    return response


@app.get("/logout")
async def logout(db: Session = Depends(get_db),
                 context: RequestContext = Depends(get_request_context)):
    """Log out the current user by destroying the session and its cookie"""
    destroy_session(db, context.session_id)
    response = redirect("/login")
    clear_session_cookie(response)
    return response


@app.get("/festivals")
async def festival_calendar(db: Session = Depends(get_db),
                            context: RequestContext = Depends(get_request_context)):
    """Nationwide festival calendar for the configured year, grouped by month"""
    festivals = crud.get_festivals(db, config.FESTIVAL_YEAR)
    return page(context, year=config.FESTIVAL_YEAR, festivals=group_festivals_by_month(festivals))


@app.get("/states/maharashtra")
async def read_maharashtra(db: Session = Depends(get_db),
                           context: RequestContext = Depends(get_request_context)):
    state = crud.get_state_by_state_id(db, MAHARASHTRA_STATE_ID)
    if not state:
        raise NotFound("State data not found")
    return page(context, state=StateOut.model_validate(state))


@app.get("/states/maharashtra/calendar")
async def maharashtra_calendar(db: Session = Depends(get_db),
                               context: RequestContext = Depends(get_request_context)):
    """Festivals celebrated in Maharashtra, including pan-Indian ones, grouped by month"""
    festivals = crud.get_festivals(db, config.FESTIVAL_YEAR, regions=["Maharashtra", PAN_INDIA])
    return page(context,
                year=config.FESTIVAL_YEAR,
                festivals=group_festivals_by_month(festivals, entry=festival_detail))


@app.get("/states/maharashtra/heritage", response_class=HTMLResponse)
async def read_heritage():
    return render_page("heritage.html")


@app.get("/states/maharashtra/heritage/rajgad", response_class=HTMLResponse)
async def read_rajgad():
    return render_page("rajgad-3d.html")


@app.get("/states/maharashtra/heritage/daulatabad", response_class=HTMLResponse)
async def read_daulatabad():
    return render_page("daulatabad-3d.html")


@app.get("/states/maharashtra/cuisine", response_class=HTMLResponse)
async def read_cuisine():
    return render_page("cuisine.html")


@app.get("/states/maharashtra/cuisine/thali", response_class=HTMLResponse)
async def read_thali():
    return render_page("thali-3d.html")


@app.get("/states/maharashtra/cuisine/vada-pav", response_class=HTMLResponse)
async def read_vada_pav():
    return render_page("vada-pav-3d.html")


@app.get("/states/{state}")
async def read_state(state: str):
    """Only Maharashtra is available; every other state gets a friendly 404"""
    raise NotFound(
        f"Information about {state} will be available soon. "
        "For now, you can explore Maharashtra state."
    )
