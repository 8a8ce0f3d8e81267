from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

import rcssmin
import rjsmin

from asset_press.kinds import AssetKind

Minifier = Callable[[Sequence[bytes]], bytes]


def _decode(source: bytes) -> str:
	return source.decode("utf-8-sig")


def minify_js(sources: Sequence[bytes]) -> bytes:
	# Sources are minified one at a time, never as a single concatenation.
	parts = [rjsmin.jsmin(_decode(source)).strip() for source in sources]
	return "\n".join(part for part in parts if part).encode("utf-8")


def minify_css(sources: Sequence[bytes]) -> bytes:
	parts = [rcssmin.cssmin(_decode(source)).strip() for source in sources]
	return "\n".join(part for part in parts if part).encode("utf-8")


DEFAULT_MINIFIERS: Mapping[AssetKind, Minifier] = {
	AssetKind.SCRIPT: minify_js,
	AssetKind.STYLESHEET: minify_css,
}
