from dataclasses import dataclass, field
from typing import Any, Dict

from .constants import MESSAGE_PARAMS


@dataclass
class HookContext:
    """Dados de uma requisição /hook/<slug> repassados ao handler."""

    hook: str
    body: Any
    query: Dict[str, str] = field(default_factory=dict)
    message_params: Dict[str, int] = field(default_factory=lambda: dict(MESSAGE_PARAMS))

    @property
    def alerts(self):
        if isinstance(self.body, dict) and isinstance(self.body.get("alerts"), list):
            return self.body["alerts"]
        return None
