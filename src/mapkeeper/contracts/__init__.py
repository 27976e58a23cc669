"""Public contracts for mapkeeper."""

from mapkeeper.contracts.config import DEFAULT_DATABASE_URL, MapKeeperConfig
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
    Coordinates,
    CreateMapRequest,
    DeleteMapRequest,
    MapRecord,
    MapSnapshot,
    NodeColors,
    NodeFont,
    NodeImage,
    NodeLink,
    NodeRecord,
    PrivateClientMap,
)
from mapkeeper.contracts.outcome import MapDeleteOutcome, MapDeleteStatus, NodeOutcome, NodeStatus

__all__ = [
    "DEFAULT_DATABASE_URL",
    "ClientMap",
    "ClientMapOptions",
    "ClientNode",
    "ClientNodeBasics",
    "ConfigError",
    "Coordinates",
    "CreateMapRequest",
    "DeleteMapRequest",
    "MapAccessDeniedError",
    "MapDeleteOutcome",
    "MapDeleteStatus",
    "MapKeeperConfig",
    "MapKeeperError",
    "MapNotFoundError",
    "MapRecord",
    "MapSnapshot",
    "NodeColors",
    "NodeFont",
    "NodeImage",
    "NodeLink",
    "NodeOutcome",
    "NodeRecord",
    "NodeStatus",
    "PrivateClientMap",
    "StorageError",
    "TreeValidationError",
]
