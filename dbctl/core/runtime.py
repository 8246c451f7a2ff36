"""
Container runtime access.

``ContainerRuntime`` is the interface the port conflict resolver talks to;
``ComposeRuntime`` implements it by shelling out to ``docker`` or ``podman``.
"""
import os
import json
import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .exceptions import ContainerNotFound, RuntimeQueryError

logger = logging.getLogger('dbctl.runtime')

WORKING_DIR_LABEL = 'com.docker.compose.project.working_dir'

_NOT_FOUND_MARKERS = (
    'no such container',
    'no such object',
    'no container with name or id',
)


class ContainerRuntime:
    """Queries and commands the port conflict resolver needs."""

    def list_containers_publishing(self, port: int) -> List[str]:
        """Names of running containers publishing ``port`` on the host."""
        raise NotImplementedError

    def get_project_directory(self, name: str) -> Optional[Path]:
        """Working directory the orchestration tool recorded for ``name``."""
        raise NotImplementedError

    def stop_container(self, name: str) -> None:
        raise NotImplementedError

    def bring_project_down(self, definition_file: Path) -> None:
        raise NotImplementedError


class ComposeRuntime(ContainerRuntime):
    """Runs the container runtime CLI as a subprocess."""

    def __init__(self, binary: str = 'docker', env: Optional[Dict[str, str]] = None):
        self.binary = binary
        self.env = dict(env or {})

    def run_command(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """Run ``<binary> args...`` and return the completed process.

        Raises:
            ContainerNotFound: If the runtime reports a missing container.
            RuntimeQueryError: If the binary is missing or exits nonzero.
        """
        cmd = [self.binary, *args]
        env_dict = os.environ.copy()
        env_dict.update(self.env)

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=env_dict
            )
        except (FileNotFoundError, PermissionError) as e:
            raise RuntimeQueryError(cmd, str(e))

        if process.returncode != 0:
            stderr = process.stderr or ''
            logger.debug(f"Command exited {process.returncode}: {stderr.strip()}")
            if any(marker in stderr.lower() for marker in _NOT_FOUND_MARKERS):
                raise ContainerNotFound(cmd, stderr, process.returncode)
            raise RuntimeQueryError(cmd, stderr, process.returncode)

        return process

    def list_containers_publishing(self, port: int) -> List[str]:
        result = self.run_command(['ps', '--filter', f'publish={port}', '--format', '{{.Names}}'])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_project_directory(self, name: str) -> Optional[Path]:
        try:
            result = self.run_command(['inspect', '--format', '{{json .Config.Labels}}', name])
        except ContainerNotFound:
            logger.debug(f"Container {name} disappeared before inspection")
            return None

        try:
            labels = json.loads(result.stdout.strip() or 'null')
        except json.JSONDecodeError as e:
            raise RuntimeQueryError(
                [self.binary, 'inspect', name],
                f"Malformed label output: {e}"
            )

        working_dir = (labels or {}).get(WORKING_DIR_LABEL)
        return Path(working_dir) if working_dir else None

    def stop_container(self, name: str) -> None:
        self.run_command(['stop', name])
        logger.info(f"Stopped container {name}")

    def bring_project_down(self, definition_file: Path) -> None:
        self.compose_down(definition_file)

    # Compose lifecycle for the managed project

    def compose_up(self, definition_file: Path) -> None:
        self.run_command(['compose', '-f', str(definition_file), 'up', '-d'])
        logger.info(f"Started project {definition_file}")

    def compose_down(self, definition_file: Path, volumes: bool = False) -> None:
        args = ['compose', '-f', str(definition_file), 'down']
        if volumes:
            args.extend(['-v', '--remove-orphans'])
        self.run_command(args)
        logger.info(f"Brought down project {definition_file}")

    def compose_ps(self, definition_file: Path) -> List[dict]:
        """Containers of the project, as reported by ``compose ps``."""
        result = self.run_command(['compose', '-f', str(definition_file), 'ps', '--format', 'json'])
        output = result.stdout.strip()
        if not output:
            return []

        try:
            # Older releases print one array, newer ones one object per line
            if output.startswith('['):
                containers = json.loads(output)
            else:
                containers = [json.loads(line) for line in output.splitlines() if line.strip()]
        except json.JSONDecodeError as e:
            raise RuntimeQueryError(
                [self.binary, 'compose', 'ps'],
                f"Error parsing container status: {e}"
            )

        if isinstance(containers, dict):
            containers = [containers]
        return containers
