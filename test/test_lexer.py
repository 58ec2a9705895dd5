#!/usr/bin/env python3
import unittest

from relay.lexer import lex
from relay.tokens import Token, TokenKind, escape_html, markdown_source, plain_text, unescape_html


class TestLexer(unittest.TestCase):
    def test_paragraph_softbreaks_are_merged(self):
        tokens = lex("line 1\nline 2")
        self.assertEqual(tokens, [
            Token(TokenKind.PARAGRAPH, children=(Token(TokenKind.TEXT, text="line 1\nline 2"),)),
        ])

    def test_heading_level(self):
        (heading,) = lex("### Title")
        self.assertIs(heading.kind, TokenKind.HEADING)
        self.assertEqual(heading.level, 3)

    def test_code_block_trailing_newline_removed(self):
        (code,) = lex("```python\nprint(1)\n```")
        self.assertEqual(code, Token(TokenKind.CODE, text="print(1)"))

    def test_ordered_list(self):
        (lst,) = lex("1) a\n2) b")
        self.assertIs(lst.kind, TokenKind.LIST)
        self.assertTrue(lst.ordered)
        self.assertEqual([item.kind for item in lst.children], [TokenKind.LISTITEM, TokenKind.LISTITEM])

    def test_link_and_image_attributes(self):
        (paragraph,) = lex('[**go**](https://e.com) ![pic](https://e.com/i.png "T")')
        link, _, image = paragraph.children
        self.assertEqual((link.kind, link.text, link.href), (TokenKind.LINK, "go", "https://e.com"))
        self.assertEqual(link.children[0].kind, TokenKind.STRONG)
        self.assertEqual((image.kind, image.text, image.title), (TokenKind.IMAGE, "pic", "T"))
        self.assertEqual(image.children, ())

    def test_thematic_break_is_dropped(self):
        self.assertEqual(lex("---"), [])

    def test_empty_input(self):
        self.assertEqual(lex(""), [])
        self.assertEqual(lex(None), [])

    def test_nested_emphasis_has_no_empty_text(self):
        (paragraph,) = lex("**_x_**")
        self.assertEqual(paragraph.children, (
            Token(TokenKind.STRONG, children=(
                Token(TokenKind.EM, children=(Token(TokenKind.TEXT, text="x"),)),
            )),
        ))

    def test_codespan_text_is_html_escaped(self):
        (paragraph,) = lex("`a<b & &lt;`")
        self.assertEqual(paragraph.children, (Token(TokenKind.CODESPAN, text="a&lt;b &amp; &amp;lt;"),))

    def test_subtree_past_ceiling_becomes_text(self):
        (paragraph,) = lex("**_deep_ text**", max_depth=1)
        strong = paragraph.children[0]
        self.assertIs(strong.kind, TokenKind.STRONG)
        # '_deep_' passou do teto e foi achatado; fundido com o texto seguinte
        self.assertEqual(strong.children, (Token(TokenKind.TEXT, text="deep text"),))


class TestTokenHelpers(unittest.TestCase):
    def test_markdown_source_rebuilds_inline_markers(self):
        (lst,) = lex("- **a** _b_ ~~c~~ `d` [e](https://e.com)")
        self.assertEqual(markdown_source(lst.children[0]), "**a** _b_ ~~c~~ `d` [e](https://e.com)")

    def test_markdown_source_keeps_codespan_literal(self):
        (lst,) = lex("- run `a<b && c`")
        self.assertEqual(markdown_source(lst.children[0]), "run `a<b && c`")

    def test_escape_roundtrip(self):
        literal = "x &lt;br&gt; <a href=\"'\"> &"
        self.assertEqual(unescape_html(escape_html(literal)), literal)

    def test_plain_text_is_iterative(self):
        token = Token(TokenKind.TEXT, text="x")
        for _ in range(5000):
            token = Token(TokenKind.STRONG, children=(token,))
        self.assertEqual(plain_text(token), "x")

    def test_plain_text_uses_link_text_without_children(self):
        token = Token(TokenKind.PARAGRAPH, children=(
            Token(TokenKind.TEXT, text="a "),
            Token(TokenKind.IMAGE, text="alt", href="x"),
            Token(TokenKind.BR),
        ))
        self.assertEqual(plain_text(token), "a alt")


if __name__ == '__main__':
    unittest.main()
