#!/usr/bin/env python3
"""
Pytest configuration and fixtures for the dbctl tests.

The ``FakeRuntime`` here stands in for docker/podman so that nothing
in the test suite needs a container daemon.
"""

import sys
import pytest
from pathlib import Path
from typing import Dict, List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dbctl.core.config import DbctlConfig, ReservedPort
from dbctl.core.exceptions import ContainerNotFound, RuntimeQueryError
from dbctl.core.runtime import ContainerRuntime


COMPOSE_YAML = """
name: dbctl
services:
  postgres:
    image: postgres:16
    ports:
      - "${DB_PORT:-15432}:5432"
  pgadmin:
    image: dpage/pgadmin4:latest
    ports:
      - "${ADMIN_PORT:-15433}:80"
"""


class FakeRuntime(ContainerRuntime):
    """In-memory container runtime that records every call."""

    def __init__(self):
        self.publishing: Dict[int, List[str]] = {}
        self.project_dirs: Dict[str, Path] = {}
        self.calls: List[tuple] = []
        self.fail_query = False
        self.fail_down = False
        self.fail_stop = False
        self.missing = set()
        self.ps_result: List[dict] = []

    def list_containers_publishing(self, port: int) -> List[str]:
        self.calls.append(('list', port))
        if self.fail_query:
            raise RuntimeQueryError(['docker', 'ps'], 'Cannot connect to the Docker daemon')
        return list(self.publishing.get(port, []))

    def get_project_directory(self, name: str) -> Optional[Path]:
        self.calls.append(('project_dir', name))
        return self.project_dirs.get(name)

    def stop_container(self, name: str) -> None:
        self.calls.append(('stop', name))
        if name in self.missing:
            raise ContainerNotFound(['docker', 'stop', name], f'No such container: {name}')
        if self.fail_stop:
            raise RuntimeQueryError(['docker', 'stop', name], 'permission denied')

    def bring_project_down(self, definition_file: Path) -> None:
        self.calls.append(('down', Path(definition_file)))
        if self.fail_down:
            raise RuntimeQueryError(['docker', 'compose', 'down'], 'down failed')

    def compose_up(self, definition_file: Path) -> None:
        self.calls.append(('compose_up', Path(definition_file)))

    def compose_down(self, definition_file: Path, volumes: bool = False) -> None:
        self.calls.append(('compose_down', Path(definition_file), volumes))

    def compose_ps(self, definition_file: Path) -> List[dict]:
        self.calls.append(('compose_ps', Path(definition_file)))
        return self.ps_result

    def called(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def fake_runtime():
    """A fresh fake runtime with no containers."""
    return FakeRuntime()


@pytest.fixture
def reserved_ports():
    """Default reserved ports in configuration order."""
    return DbctlConfig().reserved_ports


@pytest.fixture
def db_port():
    return ReservedPort(15432, 'database')


@pytest.fixture
def project_dir(tmp_path):
    """Directory holding the managed project's compose file."""
    directory = tmp_path / 'project'
    directory.mkdir()
    (directory / 'docker-compose.yml').write_text(COMPOSE_YAML)
    return directory


@pytest.fixture
def foreign_project(tmp_path):
    """Another compose project that may hold our ports."""
    directory = tmp_path / 'other-project'
    directory.mkdir()
    return directory
