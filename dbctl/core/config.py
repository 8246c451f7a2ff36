"""
Configuration loading for dbctl.

Settings come from the process environment layered over an optional
``.env`` file. They are resolved once, at startup, into an immutable
``DbctlConfig`` that is handed to everything else explicitly.
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from dotenv import dotenv_values

from .exceptions import ConfigError

logger = logging.getLogger('dbctl.config')

DEFAULT_DB_PORT = 15432
DEFAULT_ADMIN_PORT = 15433
DEFAULT_LOG_DIR = Path.home() / '.dbctl' / 'logs'

ROLE_DATABASE = 'database'
ROLE_ADMIN_UI = 'admin-ui'


@dataclass(frozen=True)
class ReservedPort:
    """A host port one of our own services binds."""
    number: int
    role: str

    def __str__(self) -> str:
        return f"{self.number} ({self.role})"


@dataclass(frozen=True)
class DbctlConfig:
    """Resolved settings for a single dbctl invocation."""
    db_port: int = DEFAULT_DB_PORT
    admin_port: int = DEFAULT_ADMIN_PORT
    host: str = 'localhost'
    db_user: str = 'postgres'
    db_password: str = 'postgres'
    db_name: str = 'postgres'
    admin_email: str = 'admin@example.com'
    admin_password: str = 'admin'
    runtime: str = 'docker'
    project_dir: Path = Path('.')
    compose_file: Optional[Path] = None
    log_dir: Path = DEFAULT_LOG_DIR

    @property
    def reserved_ports(self) -> Tuple[ReservedPort, ...]:
        """Reserved ports in the order they are checked."""
        return (
            ReservedPort(self.db_port, ROLE_DATABASE),
            ReservedPort(self.admin_port, ROLE_ADMIN_UI),
        )

    @property
    def database_url(self) -> str:
        return (f"postgresql://{self.db_user}:{self.db_password}"
                f"@{self.host}:{self.db_port}/{self.db_name}")

    @property
    def admin_url(self) -> str:
        return f"http://{self.host}:{self.admin_port}"

    def compose_env(self) -> Dict[str, str]:
        """Variables the compose file interpolates."""
        return {
            'DB_PORT': str(self.db_port),
            'ADMIN_PORT': str(self.admin_port),
            'POSTGRES_USER': self.db_user,
            'POSTGRES_PASSWORD': self.db_password,
            'POSTGRES_DB': self.db_name,
            'PGADMIN_DEFAULT_EMAIL': self.admin_email,
            'PGADMIN_DEFAULT_PASSWORD': self.admin_password,
        }


def _parse_port(name: str, value: Optional[str], default: int) -> int:
    if value is None or value == '':
        return default
    try:
        port = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if not 1 <= port <= 65535:
        raise ConfigError(f"{name} must be between 1 and 65535, got {port}")
    return port


def load_config(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Union[str, Path]] = None
) -> DbctlConfig:
    """
    Build the configuration from the environment.

    Args:
        env: Environment mapping, defaults to ``os.environ``.
        env_file: Optional ``.env`` file. When omitted, ``.env`` in the
            current directory is used if it exists.

    Returns:
        The resolved configuration.

    Raises:
        ConfigError: If a setting is invalid.
    """
    if env is None:
        env = os.environ

    if env_file is None and Path('.env').is_file():
        env_file = Path('.env')

    values: Dict[str, str] = {}
    if env_file is not None:
        env_path = Path(env_file)
        if not env_path.is_file():
            raise ConfigError(f"Environment file not found: {env_path}")
        values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
        logger.debug(f"Loaded {len(values)} values from {env_path}")

    # Real environment wins over .env
    values.update(env)

    db_port = _parse_port('DBCTL_DB_PORT', values.get('DBCTL_DB_PORT'), DEFAULT_DB_PORT)
    admin_port = _parse_port('DBCTL_ADMIN_PORT', values.get('DBCTL_ADMIN_PORT'), DEFAULT_ADMIN_PORT)
    if db_port == admin_port:
        raise ConfigError(f"Database and admin UI cannot share port {db_port}")

    compose_file = values.get('DBCTL_COMPOSE_FILE')
    defaults = DbctlConfig()

    config = DbctlConfig(
        db_port=db_port,
        admin_port=admin_port,
        host=values.get('DBCTL_HOST') or defaults.host,
        db_user=values.get('DBCTL_DB_USER') or defaults.db_user,
        db_password=values.get('DBCTL_DB_PASSWORD') or defaults.db_password,
        db_name=values.get('DBCTL_DB_NAME') or defaults.db_name,
        admin_email=values.get('DBCTL_ADMIN_EMAIL') or defaults.admin_email,
        admin_password=values.get('DBCTL_ADMIN_PASSWORD') or defaults.admin_password,
        runtime=values.get('DBCTL_RUNTIME') or defaults.runtime,
        project_dir=Path(values.get('DBCTL_PROJECT_DIR') or Path.cwd()).resolve(),
        compose_file=Path(compose_file).resolve() if compose_file else None,
        log_dir=Path(values.get('DBCTL_LOG_DIR') or DEFAULT_LOG_DIR),
    )
    logger.debug(f"Reserved ports: {', '.join(str(p) for p in config.reserved_ports)}")
    return config
