# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialsphere.auth.session import COOKIE_NAME, SessionClaims, TokenService
from socialsphere.auth.users import (
    authenticate,
    find_user_by_email,
    get_user,
    register_user,
    set_profile_picture,
)
from socialsphere.config import Settings, load_settings
from socialsphere.core.models import UserRecord
from socialsphere.errors import (
    NoFileProvided,
    NotFound,
    PayloadTooLarge,
    SocialSphereError,
    Unauthenticated,
    UnsupportedMediaType,
)
from socialsphere.infra.document_store import DocumentStore
from socialsphere.permissions import cookie_settings, load_session_from_request, require_session
from socialsphere.services.post_service import (
    create_post,
    get_post,
    list_posts_for_user,
    toggle_like,
    update_post_content,
)
from socialsphere.services.upload_service import UploadIntake

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Room for multipart boundaries and part headers on top of the file itself.
MULTIPART_OVERHEAD_BYTES = 64 * 1024

router = APIRouter()


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the current session."""
    base_ctx = {"current_session": getattr(request.state, "session", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _store(request: Request) -> DocumentStore:
    return request.app.state.store


def _start_session(request: Request, resp: RedirectResponse, user: UserRecord) -> RedirectResponse:
    tokens: TokenService = request.app.state.tokens
    token = tokens.issue(SessionClaims(email=user.email, userid=user.id))
    resp.set_cookie(COOKIE_NAME, token, **cookie_settings(request.app.state.settings))
    return resp


# ------------------ Routes ------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return _render(request, "index.html")


@router.post("/register")
def register_post(
    request: Request,
    username: str = Form(...),
    name: str = Form(...),
    email: str = Form(...),
    age: int = Form(...),
    password: str = Form(...),
):
    user = register_user(
        _store(request),
        username=username,
        name=name,
        email=email,
        age=age,
        password=password,
    )
    return _start_session(request, RedirectResponse(url="/profile", status_code=303), user)


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request):
    return _render(request, "login.html")


@router.post("/login")
def login_post(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
):
    user = authenticate(_store(request), email, password)
    return _start_session(request, RedirectResponse(url="/profile", status_code=303), user)


@router.get("/profile", response_class=HTMLResponse)
def profile(request: Request, session: SessionClaims = Depends(require_session)):
    store = _store(request)
    user = get_user(store, session.userid)
    posts = list_posts_for_user(store, user.id)
    return _render(request, "profile.html", {"user": user, "posts": posts, "userid": session.userid})


@router.post("/post")
def post_create(
    request: Request,
    content: str = Form(""),
    session: SessionClaims = Depends(require_session),
):
    store = _store(request)
    user = find_user_by_email(store, session.email)
    if not user:
        raise NotFound("User not found")
    create_post(store, user, content)
    return RedirectResponse(url="/profile", status_code=303)


@router.get("/like/{post_id}")
def like(request: Request, post_id: str, session: SessionClaims = Depends(require_session)):
    toggle_like(_store(request), post_id, session.userid)
    return RedirectResponse(url="/profile", status_code=303)


@router.get("/edit/{post_id}", response_class=HTMLResponse)
def edit_get(request: Request, post_id: str, session: SessionClaims = Depends(require_session)):
    post = get_post(_store(request), post_id)
    return _render(request, "edit.html", {"post": post})


@router.post("/update/{post_id}")
def update_post(
    request: Request,
    post_id: str,
    content: str = Form(""),
    session: SessionClaims = Depends(require_session),
):
    update_post_content(_store(request), post_id, content)
    return RedirectResponse(url="/profile", status_code=303)


@router.get("/logout")
def logout(request: Request):
    resp = RedirectResponse(url="/login", status_code=303)
    resp.delete_cookie(COOKIE_NAME, path="/")
    return resp


@router.get("/profile/upload", response_class=HTMLResponse)
def upload_get(request: Request, session: SessionClaims = Depends(require_session)):
    return _render(request, "upload_profile.html", {"user": session})


@router.post("/upload")
def upload_post(
    request: Request,
    image: UploadFile | None = File(None),
    session: SessionClaims = Depends(require_session),
):
    intake: UploadIntake = request.app.state.uploads
    try:
        stored = intake.store(image)
    except (NoFileProvided, UnsupportedMediaType, PayloadTooLarge) as exc:
        logger.warning("Upload rejected for user %s: %s", session.userid, exc.message)
        raise

    try:
        set_profile_picture(_store(request), session.userid, stored.filename)
    except NotFound:
        stored.path.unlink(missing_ok=True)
        raise
    return RedirectResponse(url="/profile", status_code=303)


# ------------------ Error handling ------------------


async def _domain_error_handler(request: Request, exc: SocialSphereError):
    if exc.status_code is None:
        resp = RedirectResponse(url="/login", status_code=303)
        if isinstance(exc, Unauthenticated) and request.cookies.get(COOKIE_NAME):
            resp.delete_cookie(COOKIE_NAME, path="/")
        return resp
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _render(request, "not_found.html", status_code=404)
    return await http_exception_handler(request, exc)


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _render(request, "error.html", status_code=500)


# ------------------ Factory ------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="SocialSphere")
    app.state.settings = settings
    app.state.store = DocumentStore(settings.db_path)
    app.state.tokens = TokenService(
        settings.secret_key,
        salt=settings.session_salt,
        max_age=settings.session_max_age,
    )
    app.state.uploads = UploadIntake(settings.upload_dir, max_bytes=settings.max_upload_bytes)

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    app.mount("/uploads", StaticFiles(directory=str(settings.upload_dir)), name="uploads")

    # Registered first so it runs inside _auth_middleware and sees the session.
    @app.middleware("http")
    async def _upload_size_guard(request: Request, call_next):
        # Anonymous uploads fall through so require_session redirects to /login.
        if request.method == "POST" and request.url.path == "/upload" and request.state.session:
            length = request.headers.get("content-length", "")
            if length.isdigit() and int(length) > settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES:
                logger.warning("Upload rejected before parsing: Content-Length %s", length)
                return PlainTextResponse(PayloadTooLarge.message, status_code=413)
        return await call_next(request)

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        request.state.session = load_session_from_request(request, app.state.tokens)
        return await call_next(request)

    app.include_router(router)
    app.add_exception_handler(SocialSphereError, _domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    return app
