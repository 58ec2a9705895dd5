"""Construtores do Block Kit do Slack (blocos simples e rich_text).

Cada construtor valida os próprios argumentos na hora da construção e
levanta uma subclasse de BlockKitError quando algo viola o schema.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from .errors import (
    BlockKitError,
    InvalidListStyleError,
    InvalidNumberError,
    InvalidStyleKeyError,
    InvalidStyleValueError,
    NotAnArrayError,
)

MAX_TEXT_LENGTH = 3000
MAX_HEADER_LENGTH = 150

LIST_STYLES = ("bullet", "ordered")


class TextStyle(str, Enum):
    """Vocabulário fechado de estilos de texto (ordem = ordem de serialização)."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKE = "strike"
    CODE = "code"


STYLE_KEYS = tuple(s.value for s in TextStyle)

StyleSet = FrozenSet[TextStyle]
EMPTY_STYLE: StyleSet = frozenset()


def style_dict(styles: Iterable[TextStyle]) -> Optional[Dict[str, bool]]:
    """Converte um StyleSet no objeto `style` do wire format (None se vazio)."""
    present = set(styles)
    if not present:
        return None
    return {s.value: True for s in TextStyle if s in present}


def _ensure_array(elements: Any, name: str = "elements") -> List[Any]:
    if not isinstance(elements, (list, tuple)):
        raise NotAnArrayError(elements, name)
    return list(elements)


def validate_text_style(style: Any) -> None:
    if not isinstance(style, Mapping):
        raise BlockKitError(f"style should be an object, given {type(style).__name__}")
    for key, value in style.items():
        if key not in STYLE_KEYS:
            raise InvalidStyleKeyError(key, STYLE_KEYS)
        if not isinstance(value, bool):
            raise InvalidStyleValueError(key, value)


def validate_number(value: Any, name: str) -> None:
    # bool é subclasse de int, mas não é um número válido aqui
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidNumberError(name, value)


# ---------- Blocos simples (mrkdwn / plain_text) ----------


def section(text: str) -> Dict[str, Any]:
    return {
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": text[:MAX_TEXT_LENGTH],
        },
    }


def header(text: str) -> Dict[str, Any]:
    return {
        "type": "header",
        "text": {
            "type": "plain_text",
            "text": text[:MAX_HEADER_LENGTH],
        },
    }


def divider() -> Dict[str, Any]:
    return {"type": "divider"}


# ---------- rich_text ----------


def rich(elements: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "rich_text",
        "elements": _ensure_array(elements),
    }


def rich_section(elements: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "rich_text_section",
        "elements": _ensure_array(elements),
    }


def rich_text(text: str, style: Optional[Mapping[str, bool]] = None) -> Dict[str, Any]:
    block: Dict[str, Any] = {
        "type": "text",
        "text": text,
    }
    if style:
        validate_text_style(style)
        block["style"] = dict(style)
    return block


def rich_link(url: str, text: str, style: Optional[Mapping[str, bool]] = None) -> Dict[str, Any]:
    block: Dict[str, Any] = {
        "type": "link",
        "url": url,
        "text": text,
    }
    if style:
        validate_text_style(style)
        block["style"] = dict(style)
    return block


def rich_list(
    elements: Sequence[Dict[str, Any]],
    style: Optional[str] = None,
    indent: Any = None,
    offset: Any = None,
    border: Any = None,
) -> Dict[str, Any]:
    elements = _ensure_array(elements)
    style = "bullet" if style is None else style
    if style not in LIST_STYLES:
        raise InvalidListStyleError(style)
    indent = 0 if indent is None else indent
    offset = 0 if offset is None else offset
    border = 0 if border is None else border
    validate_number(indent, "indent")
    validate_number(offset, "offset")
    validate_number(border, "border")

    return {
        "type": "rich_text_list",
        "style": style,
        "indent": indent,
        "offset": offset,
        "border": border,
        "elements": elements,
    }


def rich_preformatted(elements: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "rich_text_preformatted",
        "elements": _ensure_array(elements),
    }


def rich_quote(elements: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "rich_text_quote",
        "elements": _ensure_array(elements),
    }


def simple_list(elements: Sequence[str]) -> Dict[str, Any]:
    elements = _ensure_array(elements)
    if not all(isinstance(item, str) for item in elements):
        raise BlockKitError("each element should be a string")
    return rich([rich_list([rich_section([rich_text(text)]) for text in elements])])
