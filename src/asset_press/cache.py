"""Process-wide store of compressed output, keyed by bundle signature.

Entries are write-once: a signature fully determines its payload, so a
second writer racing on the same signature would store identical bytes and
the first stored entry is kept.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import override

from asset_press.kinds import AssetKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheEntry:
	signature: str
	payload: bytes
	source_paths: tuple[str, ...]


class CacheBackend(ABC):
	@abstractmethod
	def get(self, kind: AssetKind, signature: str) -> CacheEntry | None: ...

	@abstractmethod
	def put_if_absent(self, kind: AssetKind, entry: CacheEntry) -> CacheEntry: ...

	@abstractmethod
	def get_file_list(self, kind: AssetKind, signature: str) -> tuple[str, ...] | None: ...

	@abstractmethod
	def put_file_list_if_absent(
		self, kind: AssetKind, signature: str, paths: tuple[str, ...]
	) -> None: ...

	@abstractmethod
	def clear(self, kind: AssetKind) -> None: ...


class MemoryCacheBackend(CacheBackend):
	def __init__(self) -> None:
		self._entries: dict[tuple[AssetKind, str], CacheEntry] = {}
		self._file_lists: dict[tuple[AssetKind, str], tuple[str, ...]] = {}
		self._lock = threading.Lock()

	@override
	def get(self, kind: AssetKind, signature: str) -> CacheEntry | None:
		return self._entries.get((kind, signature))

	@override
	def put_if_absent(self, kind: AssetKind, entry: CacheEntry) -> CacheEntry:
		with self._lock:
			stored = self._entries.setdefault((kind, entry.signature), entry)
			self._file_lists.setdefault((kind, entry.signature), entry.source_paths)
		return stored

	@override
	def get_file_list(self, kind: AssetKind, signature: str) -> tuple[str, ...] | None:
		return self._file_lists.get((kind, signature))

	@override
	def put_file_list_if_absent(
		self, kind: AssetKind, signature: str, paths: tuple[str, ...]
	) -> None:
		with self._lock:
			self._file_lists.setdefault((kind, signature), paths)

	@override
	def clear(self, kind: AssetKind) -> None:
		with self._lock:
			for store in (self._entries, self._file_lists):
				for key in [key for key in store if key[0] is kind]:
					del store[key]


class FileCacheBackend(CacheBackend):
	"""Stores payloads as `<root>/<js|css>/<signature><ext>`.

	The source list of each bundle lives next to it in `<signature>.json` so
	another worker can regenerate a bundle it never compressed itself.
	"""

	root: Path

	def __init__(self, root: Path) -> None:
		self.root = root

	def _dir(self, kind: AssetKind) -> Path:
		return self.root / kind.info.url_segment

	def _payload_path(self, kind: AssetKind, signature: str) -> Path:
		return self._dir(kind) / f"{signature}{kind.info.extension}"

	def _sources_path(self, kind: AssetKind, signature: str) -> Path:
		return self._dir(kind) / f"{signature}.json"

	@override
	def get(self, kind: AssetKind, signature: str) -> CacheEntry | None:
		path = self._payload_path(kind, signature)
		try:
			payload = path.read_bytes()
		except FileNotFoundError:
			return None
		sources = self.get_file_list(kind, signature) or ()
		return CacheEntry(signature=signature, payload=payload, source_paths=sources)

	@override
	def put_if_absent(self, kind: AssetKind, entry: CacheEntry) -> CacheEntry:
		self.put_file_list_if_absent(kind, entry.signature, entry.source_paths)
		path = self._payload_path(kind, entry.signature)
		if not path.exists():
			_atomic_write(path, entry.payload)
			return entry
		return self.get(kind, entry.signature) or entry

	@override
	def get_file_list(self, kind: AssetKind, signature: str) -> tuple[str, ...] | None:
		path = self._sources_path(kind, signature)
		try:
			data = json.loads(path.read_text(encoding="utf-8"))
		except FileNotFoundError:
			return None
		return tuple(data["sources"])

	@override
	def put_file_list_if_absent(
		self, kind: AssetKind, signature: str, paths: tuple[str, ...]
	) -> None:
		path = self._sources_path(kind, signature)
		if path.exists():
			return
		encoded = json.dumps({"signature": signature, "sources": list(paths)}, indent=2)
		_atomic_write(path, encoded.encode("utf-8"))

	@override
	def clear(self, kind: AssetKind) -> None:
		shutil.rmtree(self._dir(kind), ignore_errors=True)


def _atomic_write(path: Path, data: bytes) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
	try:
		with os.fdopen(fd, "wb") as handle:
			handle.write(data)
		os.replace(tmp_name, path)
	except BaseException:
		Path(tmp_name).unlink(missing_ok=True)
		raise


class CompressionCache:
	"""Compressed output for one asset kind."""

	kind: AssetKind
	backend: CacheBackend

	def __init__(self, kind: AssetKind, backend: CacheBackend | None = None) -> None:
		self.kind = kind
		self.backend = backend if backend is not None else MemoryCacheBackend()

	def lookup(self, signature: str) -> CacheEntry | None:
		entry = self.backend.get(self.kind, signature)
		logger.debug(
			"%s cache %s for %s", self.kind.value, "hit" if entry else "miss", signature
		)
		return entry

	def store(
		self, signature: str, payload: bytes, source_paths: Sequence[str]
	) -> CacheEntry:
		entry = CacheEntry(
			signature=signature, payload=payload, source_paths=tuple(source_paths)
		)
		stored = self.backend.put_if_absent(self.kind, entry)
		logger.debug(
			"Stored %s bundle %s (%d bytes, %d source(s))",
			self.kind.value,
			signature,
			len(stored.payload),
			len(stored.source_paths),
		)
		return stored

	def save_file_list(self, signature: str, source_paths: Sequence[str]) -> None:
		self.backend.put_file_list_if_absent(self.kind, signature, tuple(source_paths))

	def file_list(self, signature: str) -> tuple[str, ...] | None:
		return self.backend.get_file_list(self.kind, signature)

	def clear(self) -> None:
		self.backend.clear(self.kind)
		logger.info("Cleared %s compression cache", self.kind.value)
