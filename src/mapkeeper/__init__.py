"""Public API surface for mapkeeper."""

__version__ = "1.0.0"

from mapkeeper.config import config_from_env, load_config
from mapkeeper.contracts.config import MapKeeperConfig
from mapkeeper.contracts.exceptions import (
    ConfigError,
    MapAccessDeniedError,
    MapKeeperError,
    MapNotFoundError,
    StorageError,
    TreeValidationError,
)
from mapkeeper.contracts.map import (
    ClientMap,
    ClientMapOptions,
    ClientNode,
    ClientNodeBasics,
    CreateMapRequest,
    DeleteMapRequest,
    MapRecord,
    MapSnapshot,
    NodeRecord,
    PrivateClientMap,
)
from mapkeeper.contracts.outcome import MapDeleteOutcome, MapDeleteStatus, NodeOutcome, NodeStatus
from mapkeeper.engine import (
    ClientViewExporter,
    MapSynchronizer,
    OutdatedMapSweeper,
    calculate_deleted_at,
    order_replace_batch,
    resolve_deleted_at,
)
from mapkeeper.sdk import MapKeeper
from mapkeeper.store import Database, MapStore, NodeStore

__all__ = [
    "ClientMap",
    "ClientMapOptions",
    "ClientNode",
    "ClientNodeBasics",
    "ClientViewExporter",
    "ConfigError",
    "CreateMapRequest",
    "Database",
    "DeleteMapRequest",
    "MapAccessDeniedError",
    "MapDeleteOutcome",
    "MapDeleteStatus",
    "MapKeeper",
    "MapKeeperConfig",
    "MapKeeperError",
    "MapNotFoundError",
    "MapRecord",
    "MapSnapshot",
    "MapStore",
    "MapSynchronizer",
    "NodeOutcome",
    "NodeRecord",
    "NodeStatus",
    "NodeStore",
    "OutdatedMapSweeper",
    "PrivateClientMap",
    "StorageError",
    "TreeValidationError",
    "__version__",
    "calculate_deleted_at",
    "config_from_env",
    "load_config",
    "order_replace_batch",
    "resolve_deleted_at",
]
