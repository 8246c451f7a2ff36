"""
Compose file discovery and parsing.
"""
import yaml
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .exceptions import ComposeFileNotFound, ComposeParseError

logger = logging.getLogger('dbctl.compose')

# Probed top to bottom, first existing file wins
DEFINITION_FILENAMES = (
    'docker-compose.yaml',
    'docker-compose.yml',
    'compose.yaml',
    'compose.yml',
)


def find_definition_file(directory: Optional[Union[str, Path]]) -> Optional[Path]:
    """
    Return the first compose file found in ``directory``.

    Missing or unreadable directories yield ``None``.
    """
    if not directory:
        return None
    directory = Path(directory)
    if not directory.is_dir():
        return None
    for filename in DEFINITION_FILENAMES:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


class ComposeConfig:
    """Manages compose file parsing and configuration."""

    def __init__(self, project_dir: Union[str, Path], compose_file: Optional[Union[str, Path]] = None):
        """
        Initialize compose configuration.

        Args:
            project_dir: Directory searched for a compose file.
            compose_file: Explicit compose file, skips the search.
        """
        self.project_dir = Path(project_dir)
        self.path = self._locate(compose_file)
        self.project_dir = self.path.parent
        self.raw_config = self._load_compose_file()
        self.project_name = self.raw_config.get('name') or self.project_dir.name
        self.services: Dict[str, dict] = {}
        self._parse_config()

    def _locate(self, compose_file) -> Path:
        if compose_file:
            path = Path(compose_file)
            if not path.is_file():
                raise ComposeFileNotFound(path.parent)
            return path.resolve()

        path = find_definition_file(self.project_dir)
        if path is None:
            raise ComposeFileNotFound(self.project_dir)
        return path.resolve()

    def _load_compose_file(self) -> dict:
        """Load and parse compose file."""
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ComposeFileNotFound(self.project_dir)
        except yaml.YAMLError as e:
            raise ComposeParseError(f"Failed to parse compose file: {e}")

        if not isinstance(data, dict):
            raise ComposeParseError(f"Compose file {self.path} is not a mapping")
        return data

    def _parse_config(self):
        """Parse compose configuration."""
        services_config = self.raw_config.get('services')
        if not isinstance(services_config, dict) or not services_config:
            raise ComposeParseError(f"Compose file {self.path} defines no services")

        for name, config in services_config.items():
            config = config or {}
            self.services[name] = {
                'image': config.get('image', ''),
                'container_name': config.get('container_name', ''),
                'ports': [str(p) for p in config.get('ports', [])],
                'config': config
            }

        logger.debug(f"Parsed {len(self.services)} services from {self.path}")
