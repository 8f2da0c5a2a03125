"""High-level exports for the harvest workflows."""

from .aggregator import RunAggregator, run_date_key
from .errors import HarvestError, MalformedPageError, NetworkError
from .fingerprint import fingerprint
from .harvest_utils import HarvestConfig, load_config_from_env, validate_config
from .harvester import CategoryHarvester
from .pagination import resolve_total_pages
from .record_parser import DEFAULT_SELECTORS, Selectors, load_document, parse_quotes
from .records import CategoryResult, QuoteRecord, Snapshot
from .sampling import select_pages
from .snapshot_writer import JsonSnapshotWriter, load_snapshot
from .transport import AiohttpTransport, RequestPacer, build_page_url

__all__ = [
    "AiohttpTransport",
    "CategoryHarvester",
    "CategoryResult",
    "DEFAULT_SELECTORS",
    "HarvestConfig",
    "HarvestError",
    "JsonSnapshotWriter",
    "MalformedPageError",
    "NetworkError",
    "QuoteRecord",
    "RequestPacer",
    "RunAggregator",
    "Selectors",
    "Snapshot",
    "build_page_url",
    "fingerprint",
    "load_config_from_env",
    "load_document",
    "load_snapshot",
    "parse_quotes",
    "resolve_total_pages",
    "run_date_key",
    "select_pages",
    "validate_config",
]
