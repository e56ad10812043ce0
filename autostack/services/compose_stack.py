"""
Docker Compose stack for Mautic + n8n behind Traefik.

Generates docker-compose.yml and its .env secrets file in the stack
directory, then drives `docker compose` there:

    stack = ComposeStack(Path("mautic-n8n-stack"))
    stack.write(settings)
    stack.up()

Credentials live only in .env and are referenced from the compose file as
${VAR}, so re-running the installer keeps the existing database password.
"""
import os
import secrets
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from autostack.core.logger import get_logger
from autostack.models.stack import StackSettings
from autostack.services.commands import CommandRunner

logger = get_logger(__name__)

COMPOSE_FILENAME = "docker-compose.yml"
ENV_FILENAME = ".env"
CERT_RESOLVER = "myresolver"

MAUTIC_DB_NAME = "mautic"
MAUTIC_DB_USER = "mautic"
N8N_ADMIN_USER = "admin"


@dataclass
class StackSecrets:
    """Passwords written to the stack's .env file."""

    mysql_root_password: str
    mysql_password: str
    n8n_basic_auth_password: str

    ENV_KEYS = {
        'mysql_root_password': 'MYSQL_ROOT_PASSWORD',
        'mysql_password': 'MYSQL_PASSWORD',
        'n8n_basic_auth_password': 'N8N_BASIC_AUTH_PASSWORD',
    }

    @classmethod
    def generate(cls) -> "StackSecrets":
        return cls(
            mysql_root_password=secrets.token_urlsafe(24),
            mysql_password=secrets.token_urlsafe(24),
            n8n_basic_auth_password=secrets.token_urlsafe(18),
        )

    @classmethod
    def load_or_create(cls, env_file: Path) -> "StackSecrets":
        """Reuse passwords from an existing .env, generating any that are missing."""
        existing = read_env_file(env_file) if env_file.exists() else {}
        generated = asdict(cls.generate())
        values = {
            attr: existing.get(key) or generated[attr]
            for attr, key in cls.ENV_KEYS.items()
        }
        loaded = cls(**values)
        if existing and all(existing.get(key) for key in cls.ENV_KEYS.values()):
            logger.debug(f"Reusing credentials from {env_file}")
        else:
            loaded.save(env_file)
        return loaded

    def to_env(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in self.ENV_KEYS.items()}

    def save(self, env_file: Path) -> None:
        env_file.parent.mkdir(parents=True, exist_ok=True)
        content = "\n".join(f"{key}={value}" for key, value in self.to_env().items())
        env_file.write_text(content + "\n")
        os.chmod(env_file, 0o600)
        logger.debug(f"Wrote credentials to {env_file}")


def read_env_file(env_file: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines, skipping blanks and comments."""
    values = {}
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        values[key.strip()] = value.strip()
    return values


def _router_labels(name: str, host: str) -> list:
    return [
        "traefik.enable=true",
        f"traefik.http.routers.{name}.rule=Host(`{host}`)",
        f"traefik.http.routers.{name}.entrypoints=websecure",
        f"traefik.http.routers.{name}.tls.certresolver={CERT_RESOLVER}",
    ]


def build_compose(settings: StackSettings) -> Dict[str, Any]:
    """Build the compose document for the given stack settings."""
    return {
        'services': {
            'traefik': {
                'image': 'traefik:v2.10',
                'command': [
                    "--api.insecure=true",
                    "--providers.docker=true",
                    "--entrypoints.web.address=:80",
                    "--entrypoints.websecure.address=:443",
                    f"--certificatesresolvers.{CERT_RESOLVER}.acme.tlschallenge=true",
                    f"--certificatesresolvers.{CERT_RESOLVER}.acme.email={settings.email}",
                    f"--certificatesresolvers.{CERT_RESOLVER}.acme.storage=/letsencrypt/acme.json",
                ],
                'ports': ["80:80", "443:443"],
                'volumes': [
                    "/var/run/docker.sock:/var/run/docker.sock:ro",
                    "./letsencrypt:/letsencrypt",
                ],
                'restart': 'unless-stopped',
            },
            'mautic': {
                'image': 'mautic/mautic:v5',
                'labels': _router_labels('mautic', settings.mautic_host),
                'environment': {
                    'MAUTIC_DB_HOST': 'db',
                    'MAUTIC_DB_NAME': MAUTIC_DB_NAME,
                    'MAUTIC_DB_USER': MAUTIC_DB_USER,
                    'MAUTIC_DB_PASSWORD': '${MYSQL_PASSWORD}',
                },
                'depends_on': ['db'],
                'restart': 'unless-stopped',
            },
            'db': {
                'image': 'mysql:5.7',
                'environment': {
                    'MYSQL_ROOT_PASSWORD': '${MYSQL_ROOT_PASSWORD}',
                    'MYSQL_DATABASE': MAUTIC_DB_NAME,
                    'MYSQL_USER': MAUTIC_DB_USER,
                    'MYSQL_PASSWORD': '${MYSQL_PASSWORD}',
                },
                'volumes': ["db_data:/var/lib/mysql"],
                'restart': 'unless-stopped',
            },
            'n8n': {
                'image': 'n8nio/n8n',
                'labels': _router_labels('n8n', settings.n8n_host),
                'environment': {
                    'DB_TYPE': 'sqlite',
                    'N8N_BASIC_AUTH_ACTIVE': 'true',
                    'N8N_BASIC_AUTH_USER': N8N_ADMIN_USER,
                    'N8N_BASIC_AUTH_PASSWORD': '${N8N_BASIC_AUTH_PASSWORD}',
                },
                'volumes': ["n8n_data:/home/node/.n8n"],
                'restart': 'unless-stopped',
            },
            'qdrant': {
                'image': 'qdrant/qdrant',
                'restart': 'unless-stopped',
            },
            'gotenberg': {
                'image': 'gotenberg/gotenberg:7',
                'restart': 'unless-stopped',
            },
            'rabbitmq': {
                'image': 'rabbitmq:3-management',
                'ports': ["15672:15672", "5672:5672"],
                'restart': 'unless-stopped',
            },
        },
        'volumes': {
            'db_data': None,
            'n8n_data': None,
        },
    }


class ComposeStack:
    """Writes and runs the stack's compose project.

    Files are always written; in mock mode only the docker commands are
    skipped.
    """

    def __init__(self, project_dir: Path, mock: bool = False, runner: Optional[CommandRunner] = None):
        self.project_dir = Path(project_dir)
        self.mock = mock
        self.runner = runner or CommandRunner(mock=mock)

    @property
    def compose_file(self) -> Path:
        return self.project_dir / COMPOSE_FILENAME

    @property
    def env_file(self) -> Path:
        return self.project_dir / ENV_FILENAME

    def write(self, settings: StackSettings) -> StackSecrets:
        """Write docker-compose.yml, .env and the letsencrypt directory.

        Returns:
            Credentials referenced by the compose file
        """
        self.project_dir.mkdir(parents=True, exist_ok=True)
        (self.project_dir / "letsencrypt").mkdir(exist_ok=True)

        stack_secrets = StackSecrets.load_or_create(self.env_file)

        compose_yaml = yaml.dump(
            build_compose(settings),
            default_flow_style=False,
            sort_keys=False,
        )
        self.compose_file.write_text(compose_yaml)

        logger.info(f"✓ Wrote {self.compose_file}")
        return stack_secrets

    def up(self) -> None:
        """Start all services in the background."""
        logger.info("Launching Docker stack...")
        self.runner.run(["docker", "compose", "up", "-d"], cwd=str(self.project_dir))
        logger.info("✓ Stack started")

    def down(self, volumes: bool = False) -> None:
        """Stop the stack, optionally removing its named volumes."""
        cmd = ["docker", "compose", "down"]
        if volumes:
            cmd.append("-v")
        cmd.append("--remove-orphans")
        self.runner.run(cmd, cwd=str(self.project_dir))
        logger.info("✓ Stack stopped")
