from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AssetKind(str, Enum):
	SCRIPT = "script"
	STYLESHEET = "stylesheet"

	@property
	def info(self) -> "KindInfo":
		return _KIND_INFO[self]

	@classmethod
	def from_segment(cls, segment: str) -> "AssetKind":
		"""Look up a kind by its URL segment (`js` / `css`) or its value."""
		for kind, info in _KIND_INFO.items():
			if segment in (info.url_segment, kind.value):
				return kind
		raise ValueError(f"Unknown asset kind '{segment}'")


@dataclass(frozen=True, slots=True)
class KindInfo:
	file_type: str
	tag_name: str
	extension: str
	url_segment: str
	media_type: str


_KIND_INFO: dict[AssetKind, KindInfo] = {
	AssetKind.SCRIPT: KindInfo(
		file_type="JavaScript",
		tag_name="#{press.script}",
		extension=".js",
		url_segment="js",
		media_type="text/javascript; charset=utf-8",
	),
	AssetKind.STYLESHEET: KindInfo(
		file_type="CSS",
		tag_name="#{press.stylesheet}",
		extension=".css",
		url_segment="css",
		media_type="text/css; charset=utf-8",
	),
}


@dataclass(frozen=True, slots=True)
class AssetReference:
	"""A source file added by a template. Identity is `(kind, path)`."""

	path: str
	kind: AssetKind
	compress: bool = True
