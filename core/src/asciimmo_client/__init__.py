from asciimmo_client.config import ClientConfig, load_client_config
from asciimmo_client.errors import (
    AuthError,
    ClientError,
    FetchError,
    TransportError,
    ValidationError,
)
from asciimmo_client.home import ClientPaths, ensure_client_layout, resolve_client_home
from asciimmo_client.session import Session, SessionManager
from asciimmo_client.storage import FileStore, MemoryStore, SessionStore
from asciimmo_client.world import WorldClient

__version__ = "0.1.0"

__all__ = [
    "AuthError",
    "ClientConfig",
    "ClientError",
    "ClientPaths",
    "FetchError",
    "FileStore",
    "MemoryStore",
    "Session",
    "SessionManager",
    "SessionStore",
    "TransportError",
    "ValidationError",
    "WorldClient",
    "__version__",
    "ensure_client_layout",
    "load_client_config",
    "resolve_client_home",
]
