"""Expansion of glob-like asset patterns into concrete source paths.

Only a whole trailing segment is treated as a wildcard:

	resolve("my-app/*.js", root)   # => ["my-app/a.js", "my-app/b.js"]
	resolve("my-app/**.js", root)  # => same, plus files in subdirectories
	resolve("my-app/foo.css", root)  # => ["my-app/foo.css"], no filesystem access

Partial filenames such as `foo*.js` are not globs and are returned unchanged.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path

logger = logging.getLogger(__name__)

GLOB_PATTERN = re.compile(r"(?:.*/)?(\*\*?)\.(\w+)")


def collation_key(path: str) -> tuple[str, tuple[bool, ...], str]:
	"""Locale-independent sort key.

	Accents and case are ignored first, lowercase sorts before uppercase on
	ties, and raw code points break any remaining tie.
	"""
	decomposed = unicodedata.normalize("NFKD", path)
	primary = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
	return (primary, tuple(c.isupper() for c in path), path)


def is_glob(pattern: str) -> bool:
	return GLOB_PATTERN.fullmatch(pattern) is not None


def is_within(location: Path, root: Path) -> bool:
	"""True when `location` does not escape `root` once links and `..` are resolved."""
	return location.resolve().is_relative_to(root.resolve())


def resolve(pattern: str, root: Path) -> list[str]:
	"""Expand `pattern` against the source directory `root`.

	Returned paths are `/`-separated and relative to `root`. A wildcard that
	points at a missing directory, or outside `root`, expands to an empty list.
	"""
	match = GLOB_PATTERN.fullmatch(pattern)
	if match is None:
		return [pattern]

	stars, extension = match.group(1), match.group(2)
	recursive = len(stars) == 2
	prefix = pattern[: match.start(1)].lstrip("/")
	directory = root / prefix if prefix else root
	if not is_within(directory, root):
		logger.warning("Pattern %s points outside %s", pattern, root)
		return []

	found = _list_files(directory, extension, recursive)
	resolved = [path.relative_to(root).as_posix() for path in found if is_within(path, root)]
	resolved.sort(key=collation_key)
	logger.debug("Resolved %s to %d file(s) under %s", pattern, len(resolved), root)
	return resolved


def _list_files(directory: Path, extension: str, recursive: bool) -> list[Path]:
	if not directory.is_dir():
		return []
	suffix = f".{extension}"
	candidates = directory.rglob("*") if recursive else directory.iterdir()
	return [path for path in candidates if path.is_file() and path.name.endswith(suffix)]


class PathResolver:
	"""Resolves patterns relative to URL-style source dirs under an app root."""

	app_root: Path

	def __init__(self, app_root: Path) -> None:
		self.app_root = app_root

	def root_for(self, source_dir: str) -> Path:
		return self.app_root / source_dir.strip("/")

	def resolve(self, pattern: str, source_dir: str) -> list[str]:
		return resolve(pattern, self.root_for(source_dir))

	def locate(self, path: str, source_dir: str) -> Path | None:
		"""Absolute location of `path`, or None if it lies outside `source_dir`."""
		root = self.root_for(source_dir)
		location = root / path.lstrip("/")
		if not is_within(location, root):
			return None
		return location

	def exists(self, path: str, source_dir: str) -> bool:
		location = self.locate(path, source_dir)
		return location is not None and location.is_file()
