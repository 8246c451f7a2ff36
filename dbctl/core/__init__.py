# dbctl/core/__init__.py

from .config import DbctlConfig, ReservedPort, load_config
from .compose import ComposeConfig, DEFINITION_FILENAMES, find_definition_file
from .runtime import ComposeRuntime, ContainerRuntime
from .ports import ConflictRecord, PortConflictResolver, RunningContainer

# Import exception classes for convenience
from .exceptions import (
    DbctlError,
    ConfigError,
    ComposeFileNotFound,
    ComposeParseError,
    RuntimeQueryError,
    ContainerNotFound,
    ResolutionError
)
