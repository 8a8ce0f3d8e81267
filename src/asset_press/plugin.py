"""FastAPI integration: lifecycle hooks, request middleware and the bundle endpoint."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import override

from fastapi import APIRouter, FastAPI, HTTPException, Response
from starlette.middleware import Middleware
from starlette.types import ASGIApp, Receive, Scope, Send

from asset_press.config import PressConfig
from asset_press.kinds import AssetKind
from asset_press.press import Press, PressRequest

logger = logging.getLogger(__name__)

STATE_KEY = "press"
CACHE_CONTROL = "public, max-age=31536000, immutable"

_SIGNATURE_RE = re.compile(r"[0-9a-f]{40}")


class Plugin:
	"""Base class for application plugins. Override any hook."""

	priority: int = 0

	def routers(self) -> list[APIRouter]:
		return []

	def middleware(self) -> list[Middleware]:
		return []

	def on_startup(self, app: FastAPI) -> None: ...

	def on_shutdown(self, app: FastAPI) -> None: ...


class PressMiddleware:
	"""Gives every HTTP request its own `PressRequest`.

	The request is reachable as `request.state.press`. A successful request
	persists its bundle file lists; an uncaught exception trips the request's
	error gate and is re-raised untouched.
	"""

	def __init__(self, app: ASGIApp, press: Press) -> None:
		self.app = app
		self.press = press

	async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
		if scope["type"] != "http":
			await self.app(scope, receive, send)
			return

		request = self.press.begin_request()
		scope.setdefault("state", {})[STATE_KEY] = request
		try:
			await self.app(scope, receive, send)
		except Exception as exc:
			self.press.report_error(request, exc)
			raise
		if not request.has_error_occurred():
			self.press.end_request(request)


def get_press_request(state: object) -> PressRequest:
	"""Fetch the `PressRequest` from a Starlette `request.state`."""
	request = getattr(state, STATE_KEY, None)
	if not isinstance(request, PressRequest):
		raise RuntimeError("No press request in scope. Is PressMiddleware installed?")
	return request


def create_router(press: Press, url_prefix: str | None = None) -> APIRouter:
	router = APIRouter(prefix=press.config.url_prefix if url_prefix is None else url_prefix)

	@router.get("/{segment}/{filename}")
	def serve_bundle(segment: str, filename: str) -> Response:  # pyright: ignore[reportUnusedFunction]
		try:
			kind = AssetKind.from_segment(segment)
		except ValueError:
			raise HTTPException(status_code=404) from None
		extension = kind.info.extension
		signature = filename.removesuffix(extension)
		if signature == filename or not _SIGNATURE_RE.fullmatch(signature):
			raise HTTPException(status_code=404)
		bundle = press.bundle(kind, signature)
		if bundle is None:
			raise HTTPException(status_code=404)
		return Response(
			content=bundle.payload,
			media_type=kind.info.media_type,
			headers={"Cache-Control": CACHE_CONTROL, "ETag": f'"{signature}"'},
		)

	return router


class PressPlugin(Plugin):
	"""Wires a `Press` runtime into a FastAPI app.

	The bundle endpoint is mounted once, so `url_prefix` keeps the value it
	had when the plugin was created even if a later startup reloads config.
	"""

	press: Press
	url_prefix: str
	_load_config: Callable[[], PressConfig] | None
	_pending: PressConfig | None

	def __init__(
		self,
		press: Press | None = None,
		*,
		load_config: Callable[[], PressConfig] | None = None,
	) -> None:
		self._pending = None
		if press is None:
			load_config = load_config or PressConfig.from_env
			self._pending = load_config()
			press = Press(self._pending)
		self.press = press
		self.url_prefix = press.config.url_prefix
		self._load_config = load_config

	@override
	def routers(self) -> list[APIRouter]:
		return [create_router(self.press, self.url_prefix)]

	@override
	def middleware(self) -> list[Middleware]:
		return [Middleware(PressMiddleware, press=self.press)]

	@override
	def on_startup(self, app: FastAPI) -> None:
		config = self._next_config()
		if config is not None and config.url_prefix != self.url_prefix:
			logger.warning(
				"Ignoring url_prefix %s from reloaded config, bundles stay mounted at %s",
				config.url_prefix,
				self.url_prefix,
			)
			config = config.with_overrides(url_prefix=self.url_prefix)
		self.press.init(config)

	def install(self, app: FastAPI) -> None:
		install_plugins(app, [self])

	def _next_config(self) -> PressConfig | None:
		# The config loaded to build `press` serves the first startup.
		if self._pending is not None:
			config, self._pending = self._pending, None
			return config
		if self._load_config is None:
			return None
		return self._load_config()


def install_plugins(app: FastAPI, plugins: Sequence[Plugin]) -> None:
	"""Register middleware and routers of `plugins`, highest priority first."""
	for plugin in sorted(plugins, key=lambda p: p.priority, reverse=True):
		for middleware in plugin.middleware():
			app.add_middleware(middleware.cls, *middleware.args, **middleware.kwargs)
		for router in plugin.routers():
			app.include_router(router)


def plugins_lifespan(
	*plugins: Plugin,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
	ordered = sorted(plugins, key=lambda p: p.priority, reverse=True)

	@asynccontextmanager
	async def lifespan(app: FastAPI) -> AsyncIterator[None]:
		for plugin in ordered:
			plugin.on_startup(app)
		try:
			yield
		finally:
			for plugin in ordered:
				try:
					plugin.on_shutdown(app)
				except Exception:
					logger.exception("Error during plugin.on_shutdown()")

	return lifespan
