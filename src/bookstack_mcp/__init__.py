"""bookstack_mcp package exports."""

__version__ = "0.1.0"

from .client import (  # noqa: E402
    BookStackClient,
    BookStackClientError,
    BookStackHTTPError,
    BookStackParseError,
    EmptyExportError,
    RetryConfig,
    WriteDisabledError,
)
from .config import BookStackConfig, ConfigError, load_env_config  # noqa: E402
from .enrichment import Enricher  # noqa: E402
from .errors import describe_error  # noqa: E402
from .registry import discover_tool_modules, register_discovered_tools  # noqa: E402
from .server import main as run_server  # noqa: E402

__all__ = [
    "__version__",
    # Client
    "BookStackClient",
    "RetryConfig",
    # Config
    "BookStackConfig",
    "ConfigError",
    "load_env_config",
    # Exceptions
    "BookStackClientError",
    "BookStackHTTPError",
    "BookStackParseError",
    "EmptyExportError",
    "WriteDisabledError",
    "describe_error",
    # Enrichment
    "Enricher",
    # Server utilities
    "run_server",
    "discover_tool_modules",
    "register_discovered_tools",
]
