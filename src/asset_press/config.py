from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from asset_press.env import env
from asset_press.kinds import AssetKind

DEFAULT_SOURCE_DIRS: dict[AssetKind, str] = {
	AssetKind.SCRIPT: "/public/javascripts/",
	AssetKind.STYLESHEET: "/public/stylesheets/",
}


def _default_source_dirs() -> dict[AssetKind, str]:
	return dict(DEFAULT_SOURCE_DIRS)


@dataclass(frozen=True, slots=True)
class PressConfig:
	"""Process-wide configuration, read once per startup.

	- enabled: compress at all; when false every asset is emitted untouched
	- app_root: directory the source dirs are relative to
	- source_dirs: URL-style source directory per kind, also used as the
	  public URL prefix of untouched files
	- html_compatible: emit `<link ...>` without the closing `</link>`
	- url_prefix: where the compressed output endpoint is mounted
	- cache_dir: persist compressed output on disk; in memory when None
	"""

	enabled: bool = True
	app_root: Path = field(default_factory=Path.cwd)
	source_dirs: dict[AssetKind, str] = field(default_factory=_default_source_dirs)
	html_compatible: bool = False
	url_prefix: str = "/press"
	cache_dir: Path | None = None

	def __post_init__(self) -> None:
		missing = [kind.value for kind in AssetKind if kind not in self.source_dirs]
		if missing:
			raise ValueError(f"Missing source directory for: {', '.join(missing)}")

	def source_dir(self, kind: AssetKind) -> str:
		return self.source_dirs[kind]

	def source_root(self, kind: AssetKind) -> Path:
		"""Absolute directory holding the sources of `kind`."""
		return self.app_root / self.source_dirs[kind].strip("/")

	def with_overrides(self, **overrides: Any) -> "PressConfig":
		return replace(self, **overrides)

	@classmethod
	def from_env(cls, **overrides: Any) -> "PressConfig":
		"""Build a config from `ASSET_PRESS_*` variables; keyword args win."""
		values: dict[str, Any] = {}
		if env.press_enabled is not None:
			values["enabled"] = env.press_enabled
		if env.press_app_root:
			values["app_root"] = Path(env.press_app_root)
		source_dirs = _default_source_dirs()
		if env.press_js_source_dir:
			source_dirs[AssetKind.SCRIPT] = env.press_js_source_dir
		if env.press_css_source_dir:
			source_dirs[AssetKind.STYLESHEET] = env.press_css_source_dir
		values["source_dirs"] = source_dirs
		if env.press_html_compatible is not None:
			values["html_compatible"] = env.press_html_compatible
		if env.press_url_prefix:
			values["url_prefix"] = env.press_url_prefix.rstrip("/")
		if env.press_cache_dir:
			values["cache_dir"] = Path(env.press_cache_dir)
		values.update(overrides)
		return cls(**values)
