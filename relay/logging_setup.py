"""Logging estruturado (JSON) via structlog.

Os módulos do relay continuam usando `logging.getLogger(__name__)`; o
handler instalado no root logger renderiza esses registros pela cadeia de
processors do structlog, que inclui o mascaramento dos tokens de webhook.
"""

import logging
import sys
from typing import Any, Iterable, List

import structlog

from .constants import LOG_LEVEL

MASK = "*****"


class MaskSecrets:
    """Processor que mascara tokens de webhook em todos os campos texto do evento."""

    def __init__(self, secrets: Iterable[str] = ()):
        # tokens mais longos primeiro para não mascarar só um prefixo
        self.secrets: List[str] = sorted({s for s in secrets if s}, key=len, reverse=True)

    def mask(self, text: str) -> str:
        for secret in self.secrets:
            text = text.replace(secret, MASK)
        return text

    def __call__(self, logger: Any, method_name: str, event_dict: dict) -> dict:
        if not self.secrets:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                event_dict[key] = self.mask(value)
        return event_dict


def _shared_processors() -> List[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]


def build_formatter(secrets: Iterable[str] = ()) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            MaskSecrets(secrets),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
    )


def configure_logging(secrets: Iterable[str] = (), level: str = LOG_LEVEL) -> logging.Handler:
    structlog.configure(
        processors=_shared_processors() + [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(secrets))

    root = logging.getLogger()
    # Evita handlers duplicados quando create_app é chamado mais de uma vez
    for existing in list(root.handlers):
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return handler
