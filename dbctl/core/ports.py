"""
Port conflict detection and resolution.

A conflict is a reserved port that a container outside the managed
project already publishes on the host. Each scan queries the runtime
afresh; nothing is cached between calls.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

from .compose import find_definition_file
from .config import ReservedPort
from .exceptions import ContainerNotFound, ResolutionError, RuntimeQueryError
from .runtime import ContainerRuntime

logger = logging.getLogger('dbctl.ports')


@dataclass(frozen=True)
class RunningContainer:
    """Snapshot of a container as the runtime reported it."""
    name: str
    published_ports: FrozenSet[int] = field(default_factory=frozenset)
    project_dir: Optional[Path] = None


@dataclass(frozen=True)
class ConflictRecord:
    """A reserved port held by a foreign container."""
    port: ReservedPort
    container: RunningContainer

    @property
    def definition_file(self) -> Optional[Path]:
        return find_definition_file(self.container.project_dir)


class PortConflictResolver:
    """Finds and frees reserved ports held by other containers."""

    def __init__(self, runtime: ContainerRuntime, project_dir: Optional[Path] = None,
                 runtime_binary: str = 'docker'):
        """
        Args:
            runtime: Runtime used for all queries and remediation.
            project_dir: Directory of the managed project. Containers that
                belong to it are never reported as conflicts.
            runtime_binary: Command name used in remediation hints.
        """
        self.runtime = runtime
        self.project_dir = Path(project_dir).resolve() if project_dir else None
        self.runtime_binary = runtime_binary

    def _is_own_container(self, project_dir: Optional[Path]) -> bool:
        if project_dir is None or self.project_dir is None:
            return False
        return Path(project_dir).resolve() == self.project_dir

    def scan(self, reserved_ports: Iterable[ReservedPort]) -> List[ConflictRecord]:
        """
        Check each reserved port against the running containers.

        Ports are checked in the order given and at most one record is
        returned per port.

        Raises:
            RuntimeQueryError: If a runtime query fails.
        """
        conflicts = []
        for port in reserved_ports:
            for name in self.runtime.list_containers_publishing(port.number):
                project_dir = self.runtime.get_project_directory(name)
                if self._is_own_container(project_dir):
                    logger.debug(f"Port {port.number} is held by our own container {name}")
                    continue

                container = RunningContainer(
                    name=name,
                    published_ports=frozenset({port.number}),
                    project_dir=project_dir
                )
                logger.info(f"Port {port} is in use by container {name}")
                conflicts.append(ConflictRecord(port, container))
                break

        return conflicts

    def describe(self, record: ConflictRecord) -> str:
        """Remediation hint for a conflict."""
        definition_file = record.definition_file
        header = (f"Port {record.port.number} ({record.port.role}) is in use "
                  f"by container '{record.container.name}'.")
        if definition_file is not None:
            return (f"{header} Bring its project down with: "
                    f"{self.runtime_binary} compose -f {definition_file} down")
        return (f"{header} Stop it with: "
                f"{self.runtime_binary} stop {record.container.name}")

    def resolve(self, record: ConflictRecord) -> None:
        """
        Free the port held by ``record.container``.

        Tries a project-scoped shutdown first, then a direct stop. A
        container that no longer exists counts as resolved.

        Raises:
            ResolutionError: If neither attempt freed the port.
        """
        errors: List[Exception] = []
        definition_file = record.definition_file

        if definition_file is not None:
            try:
                self.runtime.bring_project_down(definition_file)
                logger.info(f"Brought down {definition_file} to free port {record.port.number}")
                return
            except RuntimeQueryError as e:
                logger.warning(f"Project shutdown via {definition_file} failed: {e}")
                errors.append(e)

        try:
            self.runtime.stop_container(record.container.name)
        except ContainerNotFound:
            logger.info(f"Container {record.container.name} is already gone")
            return
        except RuntimeQueryError as e:
            logger.error(f"Stopping {record.container.name} failed: {e}")
            errors.append(e)
            raise ResolutionError(record, errors)

        logger.info(f"Stopped {record.container.name} to free port {record.port.number}")
