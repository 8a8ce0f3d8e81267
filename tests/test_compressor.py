from collections.abc import Sequence
from pathlib import Path

import pytest
from asset_press.config import PressConfig
from asset_press.errors import AssetNotFoundError, CompressionFailure, DuplicateAssetError
from asset_press.kinds import AssetKind
from asset_press.press import Press
from asset_press.signature import compute_signature

from conftest import RecordingMinifier

JS_DIR = "/public/javascripts/"
CSS_DIR = "/public/stylesheets/"


def _signature(app_root: Path, source_dir: str, paths: Sequence[str]) -> str:
	root = app_root / source_dir.strip("/")
	return compute_signature((path, (root / path).read_bytes()) for path in paths)


def test_add_returns_marker_per_resolved_file(press: Press):
	request = press.begin_request()
	assert request.add_js("app/*.js") == (
		"<!-- press-js: app/a.js -->\n<!-- press-js: app/b.js -->\n"
	)
	assert [ref.path for ref in request.js.references] == ["app/a.js", "app/b.js"]


def test_add_untouched_emits_tags_in_resolution_order(press: Press):
	request = press.begin_request()
	assert request.add_untouched_js("app/*.js") == (
		'<script src="/public/javascripts/app/a.js" type="text/javascript" '
		+ 'language="javascript" charset="utf-8"></script>\n'
		+ '<script src="/public/javascripts/app/b.js" type="text/javascript" '
		+ 'language="javascript" charset="utf-8"></script>\n'
	)
	assert request.js.references == []


def test_link_tag_closing_depends_on_html_compatible(app_root: Path):
	strict = Press(PressConfig(app_root=app_root)).begin_request()
	assert strict.add_untouched_css("app/main.css") == (
		'<link href="/public/stylesheets/app/main.css" rel="stylesheet" '
		+ 'type="text/css" charset="utf-8"></link>\n'
	)
	compatible = Press(PressConfig(app_root=app_root, html_compatible=True)).begin_request()
	assert compatible.add_untouched_css("app/main.css") == (
		'<link href="/public/stylesheets/app/main.css" rel="stylesheet" '
		+ 'type="text/css" charset="utf-8">\n'
	)


def test_duplicate_in_same_kind_raises(press: Press):
	request = press.begin_request()
	request.add_js("app/a.js")
	with pytest.raises(DuplicateAssetError) as info:
		request.add_untouched_js("app/a.js")
	assert info.value.kind is AssetKind.SCRIPT
	assert info.value.path == "app/a.js"


def test_glob_overlapping_earlier_add_raises(press: Press):
	request = press.begin_request()
	request.add_js("app/b.js")
	with pytest.raises(DuplicateAssetError):
		request.add_js("app/*.js")


def test_same_path_in_both_kinds_is_allowed(press: Press):
	request = press.begin_request()
	request.add_js("app/a.js")
	request.add_css("app/a.js")


def test_new_request_resets_duplicates(press: Press):
	press.begin_request().add_js("app/a.js")
	press.begin_request().add_js("app/a.js")


def test_missing_file_raises(press: Press):
	request = press.begin_request()
	with pytest.raises(AssetNotFoundError) as info:
		request.add_js("app/missing.js")
	assert info.value.path == "app/missing.js"
	with pytest.raises(AssetNotFoundError):
		request.add_untouched_css("app/missing.css")


def test_empty_glob_raises_naming_the_pattern(press: Press):
	request = press.begin_request()
	with pytest.raises(AssetNotFoundError) as info:
		request.add_js("empty/*.js")
	assert info.value.path == "empty/*.js"


def test_absolute_path_is_looked_up_under_source_dir(press: Press, tmp_path: Path):
	secret = tmp_path / "secret.txt"
	secret.write_text("DB_PASSWORD=hunter2\n")
	request = press.begin_request()
	with pytest.raises(AssetNotFoundError):
		request.add_js(str(secret))
	with pytest.raises(AssetNotFoundError):
		request.add_untouched_js(str(secret))
	with pytest.raises(AssetNotFoundError):
		request.compressed_single_js_url(str(secret))
	assert request.compressed_js_url() is None


def test_parent_segments_cannot_leave_source_dir(press: Press):
	request = press.begin_request()
	with pytest.raises(AssetNotFoundError):
		request.add_js("../stylesheets/app/*.css")
	with pytest.raises(AssetNotFoundError):
		request.add_js("../stylesheets/app/main.css")
	with pytest.raises(AssetNotFoundError):
		request.compressed_single_js_url("../stylesheets/app/main.css")
	with pytest.raises(AssetNotFoundError):
		press.builders[AssetKind.SCRIPT].read_sources(["../stylesheets/app/main.css"])
	assert request.compressed_js_url() is None


def test_compressed_url_embeds_content_signature(press: Press, app_root: Path):
	request = press.begin_request()
	request.add_js("app/*.js")
	url = request.compressed_js_url()
	expected = _signature(app_root, JS_DIR, ["app/a.js", "app/b.js"])
	assert url == f"/press/js/{expected}.js"
	assert request.js.signature == expected


def test_signature_is_stable_across_restarts(config: PressConfig, app_root: Path):
	urls: list[str | None] = []
	for _ in range(2):
		press = Press(config, minifiers={AssetKind.SCRIPT: RecordingMinifier()})
		press.init()
		request = press.begin_request()
		request.add_js("lib/jquery.js")
		request.add_js("app/**.js")
		urls.append(request.compressed_js_url())
	assert urls[0] is not None
	assert urls[0] == urls[1]


def test_signature_depends_on_order_and_content(press: Press, app_root: Path):
	first = press.begin_request()
	first.add_js("app/a.js")
	first.add_js("app/b.js")
	second = press.begin_request()
	second.add_js("app/b.js")
	second.add_js("app/a.js")
	forward = first.compressed_js_url()
	backward = second.compressed_js_url()
	assert forward != backward

	(app_root / "public" / "javascripts" / "app" / "a.js").write_text("var a = 10;\n")
	third = press.begin_request()
	third.add_js("app/a.js")
	third.add_js("app/b.js")
	assert third.compressed_js_url() != forward


def test_cache_hit_skips_minifier(press: Press, js_minifier: RecordingMinifier):
	for _ in range(3):
		request = press.begin_request()
		request.add_js("app/*.js")
		request.compressed_js_url()
	assert len(js_minifier.calls) == 1
	assert js_minifier.calls[0] == [b"var a = 1;\n", b"var b = 2;\n"]


def test_clear_forces_recompression(press: Press, js_minifier: RecordingMinifier):
	request = press.begin_request()
	request.add_js("app/a.js")
	url = request.compressed_js_url()
	signature = request.js.signature
	assert signature is not None
	assert press.caches[AssetKind.SCRIPT].lookup(signature) is not None

	press.clear()
	assert press.caches[AssetKind.SCRIPT].lookup(signature) is None

	request = press.begin_request()
	request.add_js("app/a.js")
	assert request.compressed_js_url() == url
	assert len(js_minifier.calls) == 2
	assert press.caches[AssetKind.SCRIPT].lookup(signature) is not None


def test_uncompressed_files_are_excluded_from_bundle(
	press: Press, js_minifier: RecordingMinifier, app_root: Path
):
	request = press.begin_request()
	assert request.add_js("lib/jquery.js", compress=False).startswith(
		'<script src="/public/javascripts/lib/jquery.js"'
	)
	request.add_js("app/a.js")
	url = request.compressed_js_url()
	assert url == f"/press/js/{_signature(app_root, JS_DIR, ['app/a.js'])}.js"
	assert js_minifier.calls == [[b"var a = 1;\n"]]
	with pytest.raises(DuplicateAssetError):
		request.add_untouched_js("lib/jquery.js")


def test_nothing_to_bundle(press: Press):
	request = press.begin_request()
	request.add_js("app/a.js", compress=False)
	assert request.compressed_js_url() is None
	assert request.compressed_js_tag() == ""


def test_compressed_tag(press: Press, app_root: Path):
	request = press.begin_request()
	request.add_css("app/*.css")
	signature = _signature(app_root, CSS_DIR, ["app/main.css", "app/theme.css"])
	assert request.compressed_css_tag() == (
		f'<link href="/press/css/{signature}.css" rel="stylesheet" '
		+ 'type="text/css" charset="utf-8"></link>\n'
	)


def test_single_file_url_is_separate_from_bundle(
	press: Press, js_minifier: RecordingMinifier, app_root: Path
):
	request = press.begin_request()
	url = request.compressed_single_js_url("lib/jquery.js")
	signature = _signature(app_root, JS_DIR, ["lib/jquery.js"])
	assert url == f"/press/js/{signature}.js"
	assert request.js.references == []
	assert request.compressed_js_url() is None
	# not registered with the duplicate guard either
	request.add_js("lib/jquery.js")
	entry = press.caches[AssetKind.SCRIPT].lookup(signature)
	assert entry is not None
	assert entry.source_paths == ("lib/jquery.js",)
	assert len(js_minifier.calls) == 1


def test_single_file_url_requires_existing_file(press: Press):
	request = press.begin_request()
	with pytest.raises(AssetNotFoundError):
		request.compressed_single_css_url("app/missing.css")


def test_save_file_list_records_bundle_sources(press: Press):
	request = press.begin_request()
	request.add_css("app/theme.css")
	request.add_css("app/main.css")
	request.compressed_css_url()
	press.end_request(request)
	press.end_request(request)
	signature = request.css.signature
	assert signature is not None
	cache = press.caches[AssetKind.STYLESHEET]
	assert cache.file_list(signature) == ("app/theme.css", "app/main.css")


def test_save_file_list_without_bundle_is_noop(press: Press):
	request = press.begin_request()
	request.add_css("app/main.css")
	press.end_request(request)
	assert request.css.signature is None


def test_minifier_failure_is_wrapped(config: PressConfig):
	def broken(sources: Sequence[bytes]) -> bytes:
		raise ValueError("unterminated string")

	press = Press(config, minifiers={AssetKind.SCRIPT: broken})
	press.init()
	request = press.begin_request()
	request.add_js("app/a.js")
	with pytest.raises(CompressionFailure) as info:
		request.compressed_js_url()
	assert info.value.paths == ("app/a.js",)
	assert isinstance(info.value.__cause__, ValueError)
	assert press.caches[AssetKind.SCRIPT].lookup(
		compute_signature([("app/a.js", b"var a = 1;\n")])
	) is None


def test_default_minifiers_shrink_output(config: PressConfig):
	press = Press(config)
	press.init()
	request = press.begin_request()
	request.add_js("app/*.js")
	request.add_css("app/*.css")
	request.compressed_js_url()
	request.compressed_css_url()
	js = press.bundle(AssetKind.SCRIPT, request.js.signature or "")
	css = press.bundle(AssetKind.STYLESHEET, request.css.signature or "")
	assert js is not None and js.payload == b"var a=1;\nvar b=2;"
	assert css is not None
	assert css.payload.startswith(b"body{color:red")
	assert b"\nh1{margin:0 auto" in css.payload
