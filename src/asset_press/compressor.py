from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from asset_press.cache import CompressionCache
from asset_press.config import PressConfig
from asset_press.errors import (
	AssetNotFoundError,
	CompressionFailure,
	DuplicateAssetError,
)
from asset_press.gate import RequestGate
from asset_press.guard import DuplicateGuard
from asset_press.kinds import AssetKind, AssetReference
from asset_press.minify import Minifier
from asset_press.resolver import PathResolver
from asset_press.signature import compute_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Bundle:
	kind: AssetKind
	ordered_paths: tuple[str, ...]
	signature: str
	payload: bytes


def script_tag(src: str) -> str:
	return (
		f'<script src="{src}" type="text/javascript" language="javascript" '
		+ 'charset="utf-8"></script>\n'
	)


def link_tag(src: str, html_compatible: bool) -> str:
	closing = "" if html_compatible else "</link>"
	return f'<link href="{src}" rel="stylesheet" type="text/css" charset="utf-8">{closing}\n'


def render_tag(kind: AssetKind, src: str, html_compatible: bool) -> str:
	if kind is AssetKind.SCRIPT:
		return script_tag(src)
	return link_tag(src, html_compatible)


class BundleBuilder:
	"""Process-wide builder of compressed bundles for one kind.

	Shared by every request; all mutable state lives in the cache.
	"""

	kind: AssetKind
	config: PressConfig
	resolver: PathResolver
	cache: CompressionCache
	minifier: Minifier

	def __init__(
		self,
		kind: AssetKind,
		config: PressConfig,
		resolver: PathResolver,
		cache: CompressionCache,
		minifier: Minifier,
	) -> None:
		self.kind = kind
		self.config = config
		self.resolver = resolver
		self.cache = cache
		self.minifier = minifier

	@property
	def source_dir(self) -> str:
		return self.config.source_dir(self.kind)

	def exists(self, path: str) -> bool:
		return self.resolver.exists(path, self.source_dir)

	def read_sources(self, paths: Sequence[str]) -> list[tuple[str, bytes]]:
		sources: list[tuple[str, bytes]] = []
		for path in paths:
			location = self.resolver.locate(path, self.source_dir)
			if location is None:
				raise AssetNotFoundError(self.kind, path)
			try:
				sources.append((path, location.read_bytes()))
			except FileNotFoundError:
				raise AssetNotFoundError(self.kind, path) from None
		return sources

	def build(self, paths: Sequence[str]) -> Bundle:
		"""Return the bundle for `paths`, compressing only on a cache miss."""
		sources = self.read_sources(paths)
		signature = compute_signature(sources)
		entry = self.cache.lookup(signature)
		if entry is None:
			payload = self._compress(sources)
			entry = self.cache.store(signature, payload, paths)
		return Bundle(
			kind=self.kind,
			ordered_paths=tuple(paths),
			signature=signature,
			payload=entry.payload,
		)

	def regenerate(self, signature: str) -> Bundle | None:
		"""Rebuild a bundle from its persisted file list.

		Returns None when the file list is unknown, or when the sources have
		changed since and no longer produce `signature`.
		"""
		paths = self.cache.file_list(signature)
		if paths is None:
			return None
		try:
			bundle = self.build(paths)
		except AssetNotFoundError:
			logger.warning(
				"Cannot regenerate %s bundle %s: source missing", self.kind.value, signature
			)
			return None
		if bundle.signature != signature:
			logger.info(
				"Sources of %s bundle %s changed since it was produced",
				self.kind.value,
				signature,
			)
			return None
		return bundle

	def url_for(self, signature: str) -> str:
		info = self.kind.info
		return f"{self.config.url_prefix}/{info.url_segment}/{signature}{info.extension}"

	def untouched_url(self, path: str) -> str:
		return self.source_dir + path

	def tag(self, src: str) -> str:
		return render_tag(self.kind, src, self.config.html_compatible)

	def _compress(self, sources: list[tuple[str, bytes]]) -> bytes:
		paths = [path for path, _ in sources]
		try:
			return self.minifier([content for _, content in sources])
		except Exception as exc:
			logger.exception("Minifier failed for %s bundle %s", self.kind.value, paths)
			raise CompressionFailure(self.kind, paths, exc) from exc


class AssetCompressor:
	"""Ordered assets of one kind added during a single request."""

	builder: BundleBuilder
	guard: DuplicateGuard
	gate: RequestGate
	references: list[AssetReference]
	_bundle: Bundle | None
	_deferred: list[str]

	def __init__(self, builder: BundleBuilder, gate: RequestGate) -> None:
		self.builder = builder
		self.guard = DuplicateGuard(builder.kind)
		self.gate = gate
		self.references = []
		self._bundle = None
		self._deferred = []

	@property
	def kind(self) -> AssetKind:
		return self.builder.kind

	@property
	def src_dir(self) -> str:
		return self.builder.source_dir

	@property
	def signature(self) -> str | None:
		"""Signature of the bundle produced by `compressed_url()`, if any."""
		return self._bundle.signature if self._bundle is not None else None

	def add_untouched(self, pattern: str) -> str:
		result = ""
		for path in self._resolve(pattern):
			self._register(path)
			result += self.builder.tag(self.builder.untouched_url(path))
		return result

	def add(self, pattern: str, compress: bool = True) -> str:
		result = ""
		for path in self._resolve(pattern):
			self._register(path)
			self.references.append(AssetReference(path, self.kind, compress))
			if compress and self.gate.perform_compression():
				self._deferred.append(path)
				result += self.file_signature(path)
			else:
				result += self.builder.tag(self.builder.untouched_url(path))
		return result

	def file_signature(self, path: str) -> str:
		return f"<!-- press-{self.kind.info.url_segment}: {path} -->\n"

	def bundle_paths(self) -> list[str]:
		return [ref.path for ref in self.references if ref.compress]

	def untouched_fallback(self) -> str:
		"""Untouched tags for files announced by `add()` but never bundled."""
		return "".join(
			self.builder.tag(self.builder.untouched_url(path)) for path in self._deferred
		)

	def compressed_single_file_url(self, path: str) -> str:
		if not self.builder.exists(path):
			raise AssetNotFoundError(self.kind, path)
		bundle = self.builder.build([path])
		return self.builder.url_for(bundle.signature)

	def compressed_url(self) -> str | None:
		paths = self.bundle_paths()
		if not paths:
			return None
		bundle = self.builder.build(paths)
		self._bundle = bundle
		return self.builder.url_for(bundle.signature)

	def save_file_list(self) -> None:
		if self._bundle is None:
			return
		self.builder.cache.save_file_list(self._bundle.signature, self._bundle.ordered_paths)

	def _resolve(self, pattern: str) -> list[str]:
		paths = self.builder.resolver.resolve(pattern, self.src_dir)
		if not paths:
			raise AssetNotFoundError(self.kind, pattern)
		return paths

	def _register(self, path: str) -> None:
		if not self.builder.exists(path):
			raise AssetNotFoundError(self.kind, path)
		result = self.guard.mark_included(path)
		if isinstance(result, DuplicateAssetError):
			raise result
