"""mobilemaker – build a Capacitor Android shell from a single app-config.json"""

__version__ = "0.1.0"

from .builders import AndroidBuilder, BuildError, BuildOptions, BuildResult
from .config import (
    AppConfig,
    ConfigError,
    ProjectPaths,
    load_app_config,
    sync_capacitor_config,
)
from .manifest import ManifestError, inject_permissions, inject_permissions_file
from .plugins import PluginPlan, plan_plugins
from .sdk import resolve_sdk_path, write_local_properties

__all__ = [
    "__version__",
    "AndroidBuilder",
    "AppConfig",
    "BuildError",
    "BuildOptions",
    "BuildResult",
    "ConfigError",
    "ManifestError",
    "PluginPlan",
    "ProjectPaths",
    "inject_permissions",
    "inject_permissions_file",
    "load_app_config",
    "plan_plugins",
    "resolve_sdk_path",
    "sync_capacitor_config",
    "write_local_properties",
]
