from collections.abc import Sequence
from pathlib import Path

import pytest
from asset_press.config import PressConfig
from asset_press.kinds import AssetKind
from asset_press.press import Press

JS_SOURCES = {
	"app/a.js": "var a = 1;\n",
	"app/b.js": "var b = 2;\n",
	"app/styles.css": "body { color: red; }\n",
	"app/nested/d.js": "var d = 4;\n",
	"app/nested/deeper/e.js": "var e = 5;\n",
	"lib/jquery.js": "var $ = function () {};\n",
}

CSS_SOURCES = {
	"app/main.css": "body { color: red; }\n",
	"app/theme.css": "h1 { margin: 0 auto; }\n",
	"app/a.js": "var a = 1;\n",
}


class RecordingMinifier:
	"""Joins sources verbatim and remembers every call."""

	def __init__(self) -> None:
		self.calls: list[list[bytes]] = []

	def __call__(self, sources: Sequence[bytes]) -> bytes:
		self.calls.append(list(sources))
		return b"\n".join(source.strip() for source in sources)


def _write_tree(root: Path, files: dict[str, str]) -> None:
	for rel, content in files.items():
		path = root / rel
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(content)


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
	root = tmp_path / "app"
	_write_tree(root / "public" / "javascripts", JS_SOURCES)
	_write_tree(root / "public" / "stylesheets", CSS_SOURCES)
	return root


@pytest.fixture
def config(app_root: Path) -> PressConfig:
	return PressConfig(app_root=app_root)


@pytest.fixture
def js_minifier() -> RecordingMinifier:
	return RecordingMinifier()


@pytest.fixture
def css_minifier() -> RecordingMinifier:
	return RecordingMinifier()


@pytest.fixture
def press(
	config: PressConfig, js_minifier: RecordingMinifier, css_minifier: RecordingMinifier
) -> Press:
	press = Press(
		config,
		minifiers={AssetKind.SCRIPT: js_minifier, AssetKind.STYLESHEET: css_minifier},
	)
	press.init()
	return press
