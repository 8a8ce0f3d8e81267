"""Process-wide press runtime and the per-request template API.

`Press` owns the shared pieces (configuration, caches, bundle builders) and
is initialised once per startup. Each request gets its own `PressRequest`,
passed explicitly to the code that renders the page:

	press = Press(PressConfig.from_env())
	press.init()
	request = press.begin_request()
	head = request.add_css("app/**.css") + request.compressed_css_tag()
	press.end_request(request)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from asset_press.cache import (
	CacheBackend,
	CompressionCache,
	FileCacheBackend,
	MemoryCacheBackend,
)
from asset_press.compressor import AssetCompressor, Bundle, BundleBuilder
from asset_press.config import PressConfig
from asset_press.errors import AssetNotFoundError
from asset_press.gate import RequestGate
from asset_press.kinds import AssetKind
from asset_press.minify import DEFAULT_MINIFIERS, Minifier
from asset_press.resolver import PathResolver

logger = logging.getLogger(__name__)


class Press:
	config: PressConfig
	backend: CacheBackend
	resolver: PathResolver
	caches: dict[AssetKind, CompressionCache]
	builders: dict[AssetKind, BundleBuilder]
	_minifiers: dict[AssetKind, Minifier]
	_backend_override: CacheBackend | None

	def __init__(
		self,
		config: PressConfig | None = None,
		*,
		backend: CacheBackend | None = None,
		minifiers: Mapping[AssetKind, Minifier] | None = None,
	) -> None:
		self._minifiers = {**DEFAULT_MINIFIERS, **(minifiers or {})}
		self._backend_override = backend
		self._configure(config or PressConfig())

	def _configure(self, config: PressConfig) -> None:
		self.config = config
		if self._backend_override is not None:
			self.backend = self._backend_override
		elif config.cache_dir is not None:
			self.backend = FileCacheBackend(config.cache_dir)
		else:
			self.backend = MemoryCacheBackend()
		self.resolver = PathResolver(config.app_root)
		self.caches = {kind: CompressionCache(kind, self.backend) for kind in AssetKind}
		self.builders = {
			kind: BundleBuilder(
				kind,
				config,
				self.resolver,
				self.caches[kind],
				self._minifiers[kind],
			)
			for kind in AssetKind
		}

	def init(self, config: PressConfig | None = None) -> None:
		"""(Re)load configuration and drop every cached bundle."""
		if config is not None:
			self._configure(config)
		self.clear()
		logger.info(
			"Asset compression %s (app root: %s)",
			"enabled" if self.config.enabled else "disabled",
			self.config.app_root,
		)

	def clear(self) -> None:
		for cache in self.caches.values():
			cache.clear()

	def begin_request(self) -> "PressRequest":
		return PressRequest(self)

	def end_request(self, request: "PressRequest") -> None:
		for compressor in request.compressors.values():
			compressor.save_file_list()

	def report_error(self, request: "PressRequest", exc: BaseException | None = None) -> None:
		request.gate.report_error(exc)

	def bundle(self, kind: AssetKind, signature: str) -> Bundle | None:
		"""Compressed output for `signature`, regenerated if only its file list survives."""
		builder = self.builders[kind]
		entry = builder.cache.lookup(signature)
		if entry is not None:
			return Bundle(
				kind=kind,
				ordered_paths=entry.source_paths,
				signature=signature,
				payload=entry.payload,
			)
		return builder.regenerate(signature)


class PressRequest:
	"""Template-facing asset API for one request. Never shared."""

	press: Press
	gate: RequestGate
	compressors: dict[AssetKind, AssetCompressor]

	def __init__(self, press: Press) -> None:
		self.press = press
		self.gate = RequestGate(press.config)
		self.compressors = {
			kind: AssetCompressor(press.builders[kind], self.gate) for kind in AssetKind
		}

	@property
	def js(self) -> AssetCompressor:
		return self.compressors[AssetKind.SCRIPT]

	@property
	def css(self) -> AssetCompressor:
		return self.compressors[AssetKind.STYLESHEET]

	def enabled(self) -> bool:
		return self.gate.enabled()

	def has_error_occurred(self) -> bool:
		return self.gate.error_occurred

	def perform_compression(self) -> bool:
		return self.gate.perform_compression()

	def report_error(self, exc: BaseException | None = None) -> None:
		self.gate.report_error(exc)

	def add_js(self, pattern: str, compress: bool = True) -> str:
		return self.js.add(pattern, compress)

	def add_css(self, pattern: str, compress: bool = True) -> str:
		return self.css.add(pattern, compress)

	def add_untouched_js(self, pattern: str) -> str:
		return self.js.add_untouched(pattern)

	def add_untouched_css(self, pattern: str) -> str:
		return self.css.add_untouched(pattern)

	def compressed_js_url(self) -> str | None:
		return self._compressed_url(self.js)

	def compressed_css_url(self) -> str | None:
		return self._compressed_url(self.css)

	def compressed_single_js_url(self, path: str) -> str:
		return self._compressed_single_url(self.js, path)

	def compressed_single_css_url(self, path: str) -> str:
		return self._compressed_single_url(self.css, path)

	def compressed_js_tag(self) -> str:
		return self._compressed_tag(self.js)

	def compressed_css_tag(self) -> str:
		return self._compressed_tag(self.css)

	def untouched_js_fallback(self) -> str:
		return self.js.untouched_fallback()

	def untouched_css_fallback(self) -> str:
		return self.css.untouched_fallback()

	def _compressed_url(self, compressor: AssetCompressor) -> str | None:
		# None while the gate is closed. Files already announced by `add_*()`
		# then have to come from `compressed_*_tag()` or `untouched_*_fallback()`.
		if not self.perform_compression():
			return None
		return compressor.compressed_url()

	def _compressed_single_url(self, compressor: AssetCompressor, path: str) -> str:
		if self.perform_compression():
			return compressor.compressed_single_file_url(path)
		if not compressor.builder.exists(path):
			raise AssetNotFoundError(compressor.kind, path)
		return compressor.builder.untouched_url(path)

	def _compressed_tag(self, compressor: AssetCompressor) -> str:
		if not self.perform_compression():
			# The error flag was raised after some files were announced for
			# bundling; serve those files as they are.
			return compressor.untouched_fallback()
		url = compressor.compressed_url()
		if url is None:
			return ""
		return compressor.builder.tag(url)
