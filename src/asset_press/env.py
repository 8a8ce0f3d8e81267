"""Environment variables read by asset-press.

Values are read from `os.environ` on every access so that the CLI can set
them before the application is imported.
"""

from __future__ import annotations

import os

ENV_PRESS_ENABLED = "ASSET_PRESS_ENABLED"
ENV_PRESS_APP_ROOT = "ASSET_PRESS_APP_ROOT"
ENV_PRESS_JS_SOURCE_DIR = "ASSET_PRESS_JS_SOURCE_DIR"
ENV_PRESS_CSS_SOURCE_DIR = "ASSET_PRESS_CSS_SOURCE_DIR"
ENV_PRESS_HTML_COMPATIBLE = "ASSET_PRESS_HTML_COMPATIBLE"
ENV_PRESS_URL_PREFIX = "ASSET_PRESS_URL_PREFIX"
ENV_PRESS_CACHE_DIR = "ASSET_PRESS_CACHE_DIR"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
	lowered = value.strip().lower()
	if lowered in _TRUTHY:
		return True
	if lowered in _FALSY:
		return False
	raise ValueError(f"Invalid boolean value for {name}: {value!r}")


class EnvVars:
	def _get(self, key: str) -> str | None:
		return os.environ.get(key)

	def _set(self, key: str, value: str | None) -> None:
		if value is None:
			os.environ.pop(key, None)
		else:
			os.environ[key] = value

	def _get_bool(self, key: str) -> bool | None:
		value = self._get(key)
		if value is None:
			return None
		return _parse_bool(key, value)

	def _set_bool(self, key: str, value: bool | None) -> None:
		self._set(key, None if value is None else ("1" if value else "0"))

	@property
	def press_enabled(self) -> bool | None:
		return self._get_bool(ENV_PRESS_ENABLED)

	@press_enabled.setter
	def press_enabled(self, value: bool | None) -> None:
		self._set_bool(ENV_PRESS_ENABLED, value)

	@property
	def press_app_root(self) -> str | None:
		return self._get(ENV_PRESS_APP_ROOT)

	@press_app_root.setter
	def press_app_root(self, value: str | None) -> None:
		self._set(ENV_PRESS_APP_ROOT, value)

	@property
	def press_js_source_dir(self) -> str | None:
		return self._get(ENV_PRESS_JS_SOURCE_DIR)

	@press_js_source_dir.setter
	def press_js_source_dir(self, value: str | None) -> None:
		self._set(ENV_PRESS_JS_SOURCE_DIR, value)

	@property
	def press_css_source_dir(self) -> str | None:
		return self._get(ENV_PRESS_CSS_SOURCE_DIR)

	@press_css_source_dir.setter
	def press_css_source_dir(self, value: str | None) -> None:
		self._set(ENV_PRESS_CSS_SOURCE_DIR, value)

	@property
	def press_html_compatible(self) -> bool | None:
		return self._get_bool(ENV_PRESS_HTML_COMPATIBLE)

	@press_html_compatible.setter
	def press_html_compatible(self, value: bool | None) -> None:
		self._set_bool(ENV_PRESS_HTML_COMPATIBLE, value)

	@property
	def press_url_prefix(self) -> str | None:
		return self._get(ENV_PRESS_URL_PREFIX)

	@press_url_prefix.setter
	def press_url_prefix(self, value: str | None) -> None:
		self._set(ENV_PRESS_URL_PREFIX, value)

	@property
	def press_cache_dir(self) -> str | None:
		return self._get(ENV_PRESS_CACHE_DIR)

	@press_cache_dir.setter
	def press_cache_dir(self, value: str | None) -> None:
		self._set(ENV_PRESS_CACHE_DIR, value)


env = EnvVars()
