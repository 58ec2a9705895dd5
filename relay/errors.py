"""Exceções do relay.

Os erros de construção de blocos são guardas de programação: o handler que
os recebe registra o erro e descarta apenas o alerta afetado.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base para todos os erros do relay."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ----- Block Kit -----


class BlockKitError(RelayError, ValueError):
    """Violação do schema de blocos rich_text."""


class NotAnArrayError(BlockKitError):
    def __init__(self, value: Any, name: str = "elements") -> None:
        super().__init__(
            f"{name} should be an array, given {type(value).__name__}",
            details={"name": name},
        )


class InvalidStyleKeyError(BlockKitError):
    def __init__(self, key: Any, allowed) -> None:
        super().__init__(
            f'style allow only "{",".join(allowed)}" key, given: {key}',
            details={"key": key},
        )


class InvalidStyleValueError(BlockKitError):
    def __init__(self, key: str, value: Any) -> None:
        super().__init__(
            f"style.{key} should be boolean or unset, given {value!r}",
            details={"key": key},
        )


class InvalidNumberError(BlockKitError):
    def __init__(self, name: str, value: Any) -> None:
        super().__init__(
            f"{name} should be a number, given {value!r}",
            details={"name": name},
        )


class InvalidListStyleError(BlockKitError):
    def __init__(self, style: Any) -> None:
        super().__init__(
            f"style should be 'bullet' or 'ordered', given '{style}'",
            details={"style": style},
        )
