from __future__ import annotations

from collections.abc import Sequence

from asset_press.kinds import AssetKind


class PressError(Exception):
	"""Base class for asset-press failures."""


class AssetNotFoundError(PressError):
	"""A referenced source file does not exist on disk."""

	kind: AssetKind
	path: str

	def __init__(self, kind: AssetKind, path: str) -> None:
		self.kind = kind
		self.path = path
		super().__init__(f"{kind.info.file_type} file '{path}' does not exist")


class DuplicateAssetError(PressError):
	"""The same asset was included twice for one kind in a single request."""

	kind: AssetKind
	path: str
	tag_name: str

	def __init__(self, kind: AssetKind, path: str, tag_name: str) -> None:
		self.kind = kind
		self.path = path
		self.tag_name = tag_name
		super().__init__(
			f"Attempt to add the same {kind.info.file_type} file '{path}' twice. "
			+ f"Check the {tag_name} tags in your templates."
		)


class CompressionFailure(PressError):
	"""The minifier raised while compressing a bundle."""

	kind: AssetKind
	paths: tuple[str, ...]

	def __init__(self, kind: AssetKind, paths: Sequence[str], cause: BaseException) -> None:
		self.kind = kind
		self.paths = tuple(paths)
		super().__init__(
			f"Failed to compress {kind.info.file_type} bundle "
			+ f"({', '.join(self.paths) or 'empty'}): {cause}"
		)
