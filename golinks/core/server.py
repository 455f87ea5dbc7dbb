"""FastAPI service exposing go-links list, form, and launch endpoints."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Iterator, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .controller import LinkController
from .errors import ConfigError, GoLinksError, LaunchError, NotFoundError, ValidationError
from .schemas import (
    IconOut,
    LinkEntryOut,
    LinkFormValues,
    OpenRequest,
    OpenResponse,
    ReloadResponse,
    Toast,
    UpdateLinkRequest,
)
from .search import LinkEntry
from ..icons.resolver import resolve_icon
from ..storage.config_store import ConfigStore

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ValidationError, 400),
    (ConfigError, 422),
    (LaunchError, 502),
)


class ToastCollector:
    """Routes toasts to the request that emitted them; toasts raised outside a
    request (watcher reloads) are only logged."""

    def __init__(self) -> None:
        self._current: ContextVar[Optional[List[Toast]]] = ContextVar("request_toasts", default=None)

    def __call__(self, toast: Toast) -> None:
        logger.info("%s: %s", toast.title, toast.message)
        toasts = self._current.get()
        if toasts is not None:
            toasts.append(toast)

    @contextlib.contextmanager
    def capture(self) -> Iterator[List[Toast]]:
        toasts: List[Toast] = []
        token = self._current.set(toasts)
        try:
            yield toasts
        finally:
            self._current.reset(token)


def create_app(controller: Optional[LinkController] = None, watch: bool = True) -> FastAPI:
    settings = get_settings()
    collector = ToastCollector()
    if controller is None:
        controller = LinkController(ConfigStore(settings.config_file), notify=collector)
    else:
        controller.notify = collector

    @asynccontextmanager
    async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
        await controller.reload()
        watcher_task = None
        if watch:
            watcher = controller.watcher(settings.watch_debounce, settings.watch_rename_delay)
            watcher_task = asyncio.create_task(watcher.run(poll_interval=settings.watch_poll_interval))
        try:
            yield
        finally:
            if watcher_task is not None:
                watcher_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watcher_task

    app = FastAPI(title="Go Links", lifespan=app_lifespan)
    app.state.controller = controller
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GoLinksError)
    async def golinks_error(_: Request, exc: GoLinksError) -> JSONResponse:
        status = next((code for kind, code in STATUS_BY_ERROR if isinstance(exc, kind)), 500)
        return JSONResponse(status_code=status, content={"title": exc.title, "detail": exc.message})

    def get_controller() -> LinkController:
        return controller

    def require_config(ctl: LinkController = Depends(get_controller)) -> LinkController:
        if ctl.config is None:
            raise HTTPException(status_code=422, detail=ctl.error or "Configuration not loaded")
        return ctl

    def entry_out(ctl: LinkController, entry: LinkEntry) -> LinkEntryOut:
        icon = ctl.icon_for(entry)
        return LinkEntryOut(
            group_name=entry.group_name,
            group_title=entry.group_title,
            link=entry.link,
            icon=IconOut(kind=icon.kind, source=icon.source),
            action_title=ctl.action_title(entry),
            accessories=ctl.accessories(entry),
        )

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/v1/links", response_model=List[LinkEntryOut])
    async def list_links(q: str = "", ctl: LinkController = Depends(require_config)) -> List[LinkEntryOut]:
        return [entry_out(ctl, entry) for entry in ctl.search(q)]

    @app.post("/v1/links", response_model=Toast, status_code=201)
    async def create_link(values: LinkFormValues, ctl: LinkController = Depends(get_controller)) -> Toast:
        toast = await ctl.submit(values, mode="create")
        return toast

    @app.put("/v1/links/{group_name}", response_model=Toast)
    async def update_link(
        group_name: str,
        request: UpdateLinkRequest,
        ctl: LinkController = Depends(get_controller),
    ) -> Toast:
        toast = await ctl.submit(
            request,
            mode="edit",
            original_group=group_name,
            original_url=request.original_url,
        )
        return toast

    @app.post("/v1/open", response_model=OpenResponse)
    async def open_link(request: OpenRequest, ctl: LinkController = Depends(require_config)) -> OpenResponse:
        entry = ctl.find_entry(request.group_name, request.url)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No link {request.url} in group {request.group_name}")
        with collector.capture() as toasts:
            outcome = await ctl.open_entry(entry)
        return OpenResponse(status=outcome.status, strategy=outcome.strategy, toasts=toasts)

    @app.post("/v1/reload", response_model=ReloadResponse)
    async def reload_config(ctl: LinkController = Depends(get_controller)) -> ReloadResponse:
        config = await ctl.reload()
        if config is None:
            return ReloadResponse(status="error", error=ctl.error)
        return ReloadResponse(status="ok", links=config.link_count)

    @app.get("/v1/icon", response_model=IconOut)
    async def icon(spec: str = "") -> IconOut:
        descriptor = resolve_icon(spec)
        return IconOut(kind=descriptor.kind, source=descriptor.source)

    return app


def run() -> None:
    """Run the FastAPI application with Uvicorn."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.debug else (settings.log_level or "INFO").upper())
    uvicorn.run(
        "golinks.core.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
