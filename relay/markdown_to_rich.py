"""Compilador markdown -> bloco rich_text do Slack.

Fluxo: texto -> tokens (lexer) -> blocos por token de nível superior
(dispatch) -> documento rich_text. Estilos inline são acumulados por união
enquanto o compilador desce pelos nós aninhados.
"""

import logging
from typing import Any, Dict, List

from . import block_kit
from .block_kit import EMPTY_STYLE, StyleSet, TextStyle, style_dict
from .constants import MARKDOWN_MAX_DEPTH
from .lexer import lex
from .tokens import Token, TokenKind, plain_text, unescape_html

logger = logging.getLogger(__name__)

Run = Dict[str, Any]
Block = Dict[str, Any]

STYLE_MAP = {
    TokenKind.STRONG: TextStyle.BOLD,
    TokenKind.EM: TextStyle.ITALIC,
    TokenKind.DEL: TextStyle.STRIKE,
    TokenKind.CODESPAN: TextStyle.CODE,
}

# Containers de bloco que aparecem no corpo de itens de lista
_TRANSPARENT_KINDS = (
    TokenKind.PARAGRAPH,
    TokenKind.LISTITEM,
    TokenKind.HEADING,
    TokenKind.BLOCKQUOTE,
)


def compile_inline(token: Token, styles: StyleSet = EMPTY_STYLE, depth: int = 0) -> List[Run]:
    """Transforma um token inline em uma sequência plana de runs (text/link)."""
    kind = token.kind
    flag = STYLE_MAP.get(kind)
    new_styles = styles | {flag} if flag else styles

    if depth > MARKDOWN_MAX_DEPTH:
        logger.debug("Inline nesting above %s levels, emitting '%s' as plain text", MARKDOWN_MAX_DEPTH, kind.value)
        flattened = plain_text(token)
        return [block_kit.rich_text(flattened, style_dict(new_styles))] if flattened else []

    if kind in (TokenKind.TEXT, TokenKind.ESCAPE):
        # texto vazio não gera run
        if not token.text:
            return []
        return [block_kit.rich_text(token.text, style_dict(styles))]
    if kind is TokenKind.CODESPAN:
        return [block_kit.rich_text(unescape_html(token.text), style_dict(new_styles))]
    if kind is TokenKind.LINK:
        return [block_kit.rich_link(token.href or "", token.text, style_dict(styles))]
    if kind in STYLE_MAP or kind in _TRANSPARENT_KINDS:
        runs: List[Run] = []
        for child in token.children:
            runs.extend(compile_inline(child, new_styles, depth + 1))
        return runs

    # image fora de heading, br, html, code, list...
    return []


def _compile_runs(tokens, depth: int = 0) -> List[Run]:
    runs: List[Run] = []
    for tok in tokens:
        runs.extend(compile_inline(tok, EMPTY_STYLE, depth))
    return runs


def heading_text(token: Token) -> str:
    """Texto plano de um heading: image vira título (ou alt), HTML fica literal."""
    parts = []
    stack = [token]
    while stack:
        node = stack.pop()
        kind = node.kind
        if kind is TokenKind.IMAGE:
            parts.append(node.title or node.text)
        elif kind is TokenKind.LINK:
            parts.append(node.text)
        elif kind is TokenKind.CODESPAN:
            parts.append(unescape_html(node.text))
        elif kind in (TokenKind.TEXT, TokenKind.ESCAPE, TokenKind.HTML):
            parts.append(node.text)
        else:
            stack.extend(reversed(node.children))
    return "".join(parts)


def translate_heading(token: Token) -> List[Block]:
    text = heading_text(token)
    return [block_kit.rich_section([block_kit.rich_text(text, {"bold": True})])]


def translate_paragraph(token: Token) -> List[Block]:
    return [block_kit.rich_section(_compile_runs(token.children))]


def translate_code(token: Token) -> List[Block]:
    return [block_kit.rich_preformatted([block_kit.rich_text(token.text)])]


def translate_blockquote(token: Token) -> List[Block]:
    runs: List[Run] = []
    for child in token.children:
        if child.kind is TokenKind.PARAGRAPH:
            runs.extend(_compile_runs(child.children))
    return [block_kit.rich_quote(runs)]


def _partition(children):
    lists, other = [], []
    for child in children:
        if child.kind is TokenKind.LIST:
            lists.append(child)
        else:
            other.append(child)
    return lists, other


def _flattened_list(token: Token, indent: int) -> List[Block]:
    # Lista além do teto de aninhamento: cada item vira texto plano.
    # Markdown lexado não chega aqui (o lexer achata antes); vale para
    # árvores de tokens montadas diretamente.
    texts = [plain_text(item) for item in token.children]
    items = [block_kit.rich_section([block_kit.rich_text(text)]) for text in texts if text]
    if not items:
        return []
    style = "ordered" if token.ordered else "bullet"
    return [block_kit.rich_list(items, style, indent)]


def compile_list(token: Token, indent: int = 0) -> List[Block]:
    """
    Compila uma lista em blocos irmãos. Sublistas nunca ficam dentro de
    `elements`: o acumulador da lista atual é descarregado (flush) e a
    sublista é emitida logo em seguida com indent + 1.
    """
    if indent >= MARKDOWN_MAX_DEPTH:
        return _flattened_list(token, indent)

    style = "ordered" if token.ordered else "bullet"
    result: List[Block] = []
    current_items: List[Block] = []

    def flush():
        if current_items:
            result.append(block_kit.rich_list(list(current_items), style, indent))
            current_items.clear()

    for item in token.children:
        lists, other = _partition(item.children)

        if other:
            current_items.append(block_kit.rich_section(_compile_runs(other)))

        if lists:
            flush()
            for nested in lists:
                result.extend(compile_list(nested, indent + 1))

    flush()
    return result


def dispatch(token: Token) -> List[Block]:
    kind = token.kind
    if kind is TokenKind.HEADING:
        return translate_heading(token)
    if kind is TokenKind.PARAGRAPH:
        return translate_paragraph(token)
    if kind is TokenKind.CODE:
        return translate_code(token)
    if kind is TokenKind.BLOCKQUOTE:
        return translate_blockquote(token)
    if kind is TokenKind.LIST:
        return compile_list(token)
    return []


def compile_document(tokens) -> Block:
    elements: List[Block] = []
    for token in tokens:
        elements.extend(dispatch(token))
    return block_kit.rich(elements)


def markdown_to_rich(markdown: str) -> Block:
    return compile_document(lex(markdown))
