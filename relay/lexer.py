"""Adaptador mistune -> Token.

Usa o parser AST do mistune 3 (renderer=None) e converte os dicts produzidos
para a árvore fechada de `relay.tokens`. Textos adjacentes (inclusive quebras
suaves) são fundidos em um único token, de modo que um parágrafo com quebras
de linha simples continua sendo um único texto com os '\n' literais.

O mistune entrega o conteúdo de code spans literal; aqui ele é escapado
(escape_html) para que todo token codespan carregue texto HTML escapado.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import mistune

from .constants import MARKDOWN_MAX_DEPTH
from .tokens import Token, TokenKind, escape_html

logger = logging.getLogger(__name__)

_markdown = mistune.create_markdown(renderer=None, plugins=["strikethrough"])

_INLINE_KINDS = {
    "strong": TokenKind.STRONG,
    "emphasis": TokenKind.EM,
    "strikethrough": TokenKind.DEL,
}

_BLOCK_CONTAINERS = {
    "paragraph": TokenKind.PARAGRAPH,
    "block_text": TokenKind.PARAGRAPH,
    "block_quote": TokenKind.BLOCKQUOTE,
    "list_item": TokenKind.LISTITEM,
}


def lex(markdown: str, max_depth: int = MARKDOWN_MAX_DEPTH) -> List[Token]:
    """Converte texto markdown na lista de tokens de nível superior."""
    raw_tokens = _markdown(markdown or "")
    return _convert_all(raw_tokens, 0, max_depth)


def _flatten_raw(tok: Dict[str, Any]) -> str:
    parts = []
    stack = [tok]
    while stack:
        node = stack.pop()
        children = node.get("children")
        if children:
            stack.extend(reversed(children))
        elif node.get("type") == "softbreak":
            parts.append("\n")
        else:
            parts.append(node.get("raw", ""))
    return "".join(parts)


def _attrs(tok: Dict[str, Any]) -> Dict[str, Any]:
    return tok.get("attrs") or {}


def _merge_text(tokens: Iterable[Token]) -> List[Token]:
    merged: List[Token] = []
    for tok in tokens:
        if tok.kind is TokenKind.TEXT and not tok.text:
            continue
        if tok.kind is TokenKind.TEXT and merged and merged[-1].kind is TokenKind.TEXT:
            merged[-1] = Token(TokenKind.TEXT, text=merged[-1].text + tok.text)
        else:
            merged.append(tok)
    return merged


def _convert_all(raw_tokens: Optional[Iterable[Dict[str, Any]]], depth: int, max_depth: int) -> List[Token]:
    converted = []
    for raw in raw_tokens or []:
        tok = _convert(raw, depth, max_depth)
        if tok is not None:
            converted.append(tok)
    return _merge_text(converted)


def _convert(tok: Dict[str, Any], depth: int, max_depth: int) -> Optional[Token]:
    kind = tok.get("type")

    if depth > max_depth and tok.get("children"):
        logger.debug("Markdown nesting above %s levels, flattening '%s' to text", max_depth, kind)
        return Token(TokenKind.TEXT, text=_flatten_raw(tok))

    if kind == "text":
        raw = tok.get("raw", "")
        # o mistune gera textos vazios ao redor de ênfases aninhadas
        return Token(TokenKind.TEXT, text=raw) if raw else None
    if kind == "softbreak":
        return Token(TokenKind.TEXT, text="\n")
    if kind == "linebreak":
        return Token(TokenKind.BR)
    if kind == "inline_html":
        return Token(TokenKind.HTML, text=tok.get("raw", ""))
    if kind == "codespan":
        return Token(TokenKind.CODESPAN, text=escape_html(tok.get("raw", "")))
    if kind in _INLINE_KINDS:
        return Token(_INLINE_KINDS[kind], children=tuple(_convert_all(tok.get("children"), depth + 1, max_depth)))
    if kind in ("link", "image"):
        attrs = _attrs(tok)
        children = tuple(_convert_all(tok.get("children"), depth + 1, max_depth))
        return Token(
            TokenKind.LINK if kind == "link" else TokenKind.IMAGE,
            text=_flatten_raw(tok),
            children=children if kind == "link" else (),
            href=attrs.get("url", ""),
            title=attrs.get("title"),
        )
    if kind == "heading":
        return Token(
            TokenKind.HEADING,
            children=tuple(_convert_all(tok.get("children"), depth + 1, max_depth)),
            level=int(_attrs(tok).get("level", 1)),
        )
    if kind in _BLOCK_CONTAINERS:
        return Token(_BLOCK_CONTAINERS[kind], children=tuple(_convert_all(tok.get("children"), depth + 1, max_depth)))
    if kind == "block_code":
        code = tok.get("raw", "")
        if code.endswith("\n"):
            code = code[:-1]
        return Token(TokenKind.CODE, text=code)
    if kind == "list":
        return Token(
            TokenKind.LIST,
            children=tuple(_convert_all(tok.get("children"), depth + 1, max_depth)),
            ordered=bool(_attrs(tok).get("ordered")),
        )

    # blank_line, thematic_break, block_html, ... não têm representação
    return None
