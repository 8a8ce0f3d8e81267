from __future__ import annotations

import logging

from asset_press.config import PressConfig

logger = logging.getLogger(__name__)


class RequestGate:
	"""Decides whether compression runs for one request.

	Once an error is reported, compression is bypassed for the rest of that
	request so a partial bundle is never cached. Other requests are not
	affected.
	"""

	__slots__: tuple[str, ...] = ("_config", "error_occurred")
	_config: PressConfig
	error_occurred: bool

	def __init__(self, config: PressConfig) -> None:
		self._config = config
		self.error_occurred = False

	def enabled(self) -> bool:
		return self._config.enabled

	def report_error(self, exc: BaseException | None = None) -> None:
		if not self.error_occurred and exc is not None:
			logger.warning("Disabling compression for this request after %r", exc)
		self.error_occurred = True

	def perform_compression(self) -> bool:
		return self.enabled() and not self.error_occurred
