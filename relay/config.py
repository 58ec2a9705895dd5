"""Carrega as rotas (slug -> webhook) do arquivo YAML de configuração.

Formato:

    hooks:
      - slug: infra
        hook: https://discord.com/api/webhooks/123/abc
      - slug: team
        type: slack
        hook: https://hooks.slack.com/services/T000/B000/XXXX
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from .constants import CONFIG_PATH

logger = logging.getLogger(__name__)

DISCORD_HOOK_RE = re.compile(r"^https://discord(?:app)?\.com/api/webhooks/[0-9]+/([a-zA-Z0-9_-]+)")
SLACK_HOOK_RE = re.compile(r"^https://hooks\.slack\.com/services/([A-Za-z0-9_/-]+)")

ROUTE_TYPES = ("discord", "slack")


@dataclass(frozen=True)
class Route:
    slug: str
    hook: str
    type: str = "discord"


@dataclass
class RelayConfig:
    routes: Dict[str, Route] = field(default_factory=dict)
    secrets: List[str] = field(default_factory=list)


def extract_secret(hook: str, route_type: str = "discord") -> Optional[str]:
    """Parte secreta da URL do webhook (mascarada nos logs)."""
    pattern = SLACK_HOOK_RE if route_type == "slack" else DISCORD_HOOK_RE
    match = pattern.match(hook or "")
    return match.group(1) if match else None


def parse_config(data) -> RelayConfig:
    config = RelayConfig()
    if not isinstance(data, dict) or not isinstance(data.get("hooks"), list):
        logger.warning("Configuration has no 'hooks' list, no routes loaded")
        return config

    for entry in data["hooks"]:
        if not isinstance(entry, dict):
            logger.warning("Ignoring malformed hook entry: %r", entry)
            continue
        slug = entry.get("slug")
        hook = entry.get("hook")
        route_type = str(entry.get("type") or "discord").lower()

        if route_type not in ROUTE_TYPES:
            logger.warning("Unknown hook type '%s' for slug = %s", route_type, slug)
            continue
        if not slug:
            logger.warning("Hook entry without slug ignored")
            continue

        secret = extract_secret(hook, route_type) if isinstance(hook, str) else None
        if secret is None:
            logger.warning("Not a valid %s web hook for slug = %s", route_type, slug)
            continue

        config.routes[str(slug)] = Route(slug=str(slug), hook=hook, type=route_type)
        config.secrets.append(secret)

    return config


def load_config(path: str = CONFIG_PATH) -> RelayConfig:
    """Lê o YAML; arquivo ausente ou inválido resulta em configuração vazia."""
    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp)
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to read configuration file: %s", exc)
        return RelayConfig()
    return parse_config(data)

