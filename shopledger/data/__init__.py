"""Sheet loading, normalization, and the in-memory snapshot store."""
from .loader import SheetClient, SheetFetchError, load_sources
from .store import DataStore, Snapshot, ViewState
from .schemas import FilterState, ShopLedger
from .normalize import normalize_date, normalize_shop_name, parse_number
