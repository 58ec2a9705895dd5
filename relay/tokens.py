"""Árvore de tokens markdown consumida pelo compilador rich_text."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class TokenKind(str, Enum):
    TEXT = "text"
    ESCAPE = "escape"
    STRONG = "strong"
    EM = "em"
    DEL = "del"
    CODESPAN = "codespan"
    LINK = "link"
    IMAGE = "image"
    BR = "br"
    HTML = "html"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LISTITEM = "listitem"


CONTAINER_KINDS = frozenset({
    TokenKind.STRONG,
    TokenKind.EM,
    TokenKind.DEL,
    TokenKind.LINK,
    TokenKind.IMAGE,
    TokenKind.HEADING,
    TokenKind.PARAGRAPH,
    TokenKind.BLOCKQUOTE,
    TokenKind.LIST,
    TokenKind.LISTITEM,
})


@dataclass(frozen=True)
class Token:
    """
    Nó da árvore. Campos usados por tipo:
      text/escape/html/code -> text literal
      codespan -> text com HTML escapado (&amp; &lt; &gt; &quot; &#39;)
      link  -> href, title, text (texto de exibição) e children
      image -> href, title, text (alt)
      heading -> level, children
      list -> ordered, children (listitem)
    """

    kind: TokenKind
    text: str = ""
    children: Tuple["Token", ...] = ()
    href: Optional[str] = None
    title: Optional[str] = None
    ordered: bool = False
    level: int = 0


_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(text: str) -> str:
    # '&' primeiro para não escapar as entidades recém-geradas
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def unescape_html(text: str) -> str:
    # '&amp;' por último para não decodificar duas vezes
    for char, entity in reversed(_HTML_ESCAPES):
        text = text.replace(entity, char)
    return text


_MARKERS = {
    TokenKind.STRONG: "**",
    TokenKind.EM: "_",
    TokenKind.DEL: "~~",
}


def markdown_source(token: Token) -> str:
    """Reconstrói o markdown inline do token (usado nos fields do Discord)."""
    kind = token.kind
    if kind in _MARKERS:
        marker = _MARKERS[kind]
        return marker + "".join(markdown_source(c) for c in token.children) + marker
    if kind is TokenKind.CODESPAN:
        return f"`{unescape_html(token.text)}`"
    if kind is TokenKind.LINK:
        return f"[{token.text}]({token.href})"
    if kind is TokenKind.IMAGE:
        return f"![{token.text}]({token.href})"
    if kind is TokenKind.BR:
        return "\n"
    if token.children:
        return "".join(markdown_source(c) for c in token.children)
    return token.text


def plain_text(token: Token) -> str:
    """Texto visível do token, achatado sem recursão (seguro para árvores profundas)."""
    parts = []
    stack = [token]
    while stack:
        node = stack.pop()
        if node.kind in (TokenKind.LINK, TokenKind.IMAGE) and not node.children:
            parts.append(node.text)
        elif node.children:
            stack.extend(reversed(node.children))
        elif node.kind is TokenKind.CODESPAN:
            parts.append(unescape_html(node.text))
        elif node.kind is not TokenKind.BR:
            parts.append(node.text)
    return "".join(parts)
