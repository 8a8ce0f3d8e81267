from __future__ import annotations

from asset_press.errors import DuplicateAssetError
from asset_press.kinds import AssetKind


class Included:
	path: str

	def __init__(self, path: str) -> None:
		self.path = path

	def __repr__(self) -> str:
		return f"Included({self.path!r})"


IncludeResult = Included | DuplicateAssetError


class DuplicateGuard:
	"""Paths already included for one kind during the current request.

	Duplicates are reported as a `DuplicateAssetError` value; the caller
	decides to raise it.
	"""

	__slots__: tuple[str, ...] = ("kind", "_seen")
	kind: AssetKind
	_seen: set[str]

	def __init__(self, kind: AssetKind) -> None:
		self.kind = kind
		self._seen = set()

	def mark_included(self, path: str) -> IncludeResult:
		if path in self._seen:
			return DuplicateAssetError(self.kind, path, self.kind.info.tag_name)
		self._seen.add(path)
		return Included(path)

	def __contains__(self, path: object) -> bool:
		return path in self._seen

	def __len__(self) -> int:
		return len(self._seen)
