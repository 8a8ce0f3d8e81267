# Public API. Exported symbols use the redundant alias form `from x import X as X`
# so static analyzers treat them as re-exports, and each import targets the
# module where the symbol is defined.

from asset_press.cache import (
	CacheBackend as CacheBackend,
)
from asset_press.cache import (
	CacheEntry as CacheEntry,
)
from asset_press.cache import (
	CompressionCache as CompressionCache,
)
from asset_press.cache import (
	FileCacheBackend as FileCacheBackend,
)
from asset_press.cache import (
	MemoryCacheBackend as MemoryCacheBackend,
)
from asset_press.compressor import (
	AssetCompressor as AssetCompressor,
)
from asset_press.compressor import (
	Bundle as Bundle,
)
from asset_press.compressor import (
	BundleBuilder as BundleBuilder,
)
from asset_press.config import (
	PressConfig as PressConfig,
)
from asset_press.errors import (
	AssetNotFoundError as AssetNotFoundError,
)
from asset_press.errors import (
	CompressionFailure as CompressionFailure,
)
from asset_press.errors import (
	DuplicateAssetError as DuplicateAssetError,
)
from asset_press.errors import (
	PressError as PressError,
)
from asset_press.gate import (
	RequestGate as RequestGate,
)
from asset_press.guard import (
	DuplicateGuard as DuplicateGuard,
)
from asset_press.guard import (
	Included as Included,
)
from asset_press.kinds import (
	AssetKind as AssetKind,
)
from asset_press.kinds import (
	AssetReference as AssetReference,
)
from asset_press.minify import (
	Minifier as Minifier,
)
from asset_press.plugin import (
	Plugin as Plugin,
)
from asset_press.plugin import (
	PressMiddleware as PressMiddleware,
)
from asset_press.plugin import (
	PressPlugin as PressPlugin,
)
from asset_press.plugin import (
	get_press_request as get_press_request,
)
from asset_press.plugin import (
	install_plugins as install_plugins,
)
from asset_press.plugin import (
	plugins_lifespan as plugins_lifespan,
)
from asset_press.press import (
	Press as Press,
)
from asset_press.press import (
	PressRequest as PressRequest,
)
from asset_press.resolver import (
	PathResolver as PathResolver,
)
from asset_press.resolver import (
	resolve as resolve,
)
from asset_press.signature import (
	compute_signature as compute_signature,
)

__version__ = "0.1.0"
