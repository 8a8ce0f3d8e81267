"""
Command-line interface for asset-press.
Resolve patterns, build bundles ahead of time and clear the on-disk cache.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from asset_press.config import PressConfig
from asset_press.errors import PressError
from asset_press.kinds import AssetKind
from asset_press.press import Press

cli = typer.Typer(
	name="asset-press",
	help="asset-press - bundle and compress JavaScript and CSS sources",
	no_args_is_help=True,
)
console = Console()


def _kind(value: str) -> AssetKind:
	try:
		return AssetKind.from_segment(value)
	except ValueError:
		raise typer.BadParameter("expected 'js' or 'css'") from None


def _load_config(app_root: Path | None, cache_dir: Path | None) -> PressConfig:
	overrides: dict[str, object] = {}
	if app_root is not None:
		overrides["app_root"] = app_root
	if cache_dir is not None:
		overrides["cache_dir"] = cache_dir
	return PressConfig.from_env(**overrides)


@cli.command("resolve")
def resolve(
	pattern: str = typer.Argument(..., help="Asset pattern, e.g. 'app/**.js'"),
	kind: str = typer.Option("js", "--kind", "-k", help="js or css"),
	app_root: Path | None = typer.Option(None, "--app-root", help="Application root"),
) -> None:
	"""Print the files a pattern expands to, in bundle order."""
	config = _load_config(app_root, None)
	asset_kind = _kind(kind)
	press = Press(config)
	paths = press.resolver.resolve(pattern, config.source_dir(asset_kind))
	for path in paths:
		console.print(path)


@cli.command("bundle")
def bundle(
	patterns: list[str] = typer.Argument(..., help="Asset patterns, in order"),
	kind: str = typer.Option("js", "--kind", "-k", help="js or css"),
	app_root: Path | None = typer.Option(None, "--app-root", help="Application root"),
	cache_dir: Path | None = typer.Option(
		None, "--cache-dir", help="Persist the bundle in this cache directory"
	),
	output: Path | None = typer.Option(
		None, "--output", "-o", help="Also write the compressed bundle here"
	),
) -> None:
	"""Compress the given patterns into one bundle and report its signature."""
	config = _load_config(app_root, cache_dir)
	asset_kind = _kind(kind)
	press = Press(config)
	request = press.begin_request()
	compressor = request.compressors[asset_kind]
	try:
		for pattern in patterns:
			compressor.add(pattern)
		url = compressor.compressed_url()
	except PressError as exc:
		console.print(f"[red]{exc}[/red]")
		raise typer.Exit(1) from None
	if url is None or compressor.signature is None:
		console.print("[yellow]Nothing to bundle[/yellow]")
		raise typer.Exit(1)
	press.end_request(request)

	built = press.bundle(asset_kind, compressor.signature)
	if built is None:
		raise typer.Exit(1)

	table = Table(show_header=False, box=None)
	table.add_row("Signature", built.signature)
	table.add_row("URL", url)
	table.add_row("Sources", str(len(built.ordered_paths)))
	table.add_row("Size", f"{len(built.payload)} bytes")
	console.print(table)
	if output is not None:
		output.parent.mkdir(parents=True, exist_ok=True)
		output.write_bytes(built.payload)
		console.print(f"Wrote {output}")


@cli.command("clear-cache")
def clear_cache(
	cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Cache directory"),
) -> None:
	"""Remove every compressed bundle from the on-disk cache."""
	config = _load_config(None, cache_dir)
	if config.cache_dir is None:
		console.print("[yellow]No cache directory configured[/yellow]")
		raise typer.Exit(1)
	Press(config).clear()
	console.print(f"Cleared {config.cache_dir}")


def main() -> None:
	cli()


if __name__ == "__main__":
	main()
