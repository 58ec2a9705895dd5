import logging
import re
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

SPECIAL_MENTIONS = {"@here", "@channel", "@everyone"}

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_LINK_RE = re.compile(r"\[([^\[\]]+)\]\(([^)]+)\)")
_RICH_TOKEN_RE = re.compile(r"(\*\*[^*]+\*\*|\[[^\]]+\]\([^)]+\))")
_FULL_LINK_RE = re.compile(r"^\[([^\]]+)\]\(([^)]+)\)$")
_ANGLE_RE = re.compile(r"^<[^>]+>$")


def convert_markdown_to_slack(text):
    """Conversão leve via regex: **bold** -> *bold*, [texto](url) -> <url|texto>."""
    if not text:
        return ""
    text = _BOLD_RE.sub(r"*\1*", text)
    return _LINK_RE.sub(r"<\2|\1>", text)


def format_slack_mention(mention) -> Optional[str]:
    trimmed = str(mention or "").strip()
    if not trimmed:
        return None
    if trimmed in SPECIAL_MENTIONS:
        return trimmed
    if _ANGLE_RE.match(trimmed):
        return trimmed
    return f"<@{trimmed}>"


def get_slack_mentions(labels) -> List[str]:
    raw_mentions = (labels or {}).get("slack_mentions")
    if not raw_mentions:
        return []
    mentions = [format_slack_mention(m) for m in raw_mentions.split(",")]
    # dict.fromkeys mantém a ordem e remove duplicados
    return list(dict.fromkeys(m for m in mentions if m))


def parse_rich_text_elements(text) -> List[Dict]:
    content = str(text or "")
    if not content:
        return [{"type": "text", "text": ""}]

    elements = []
    last_index = 0
    for match in _RICH_TOKEN_RE.finditer(content):
        if match.start() > last_index:
            elements.append({"type": "text", "text": content[last_index:match.start()]})

        token = match.group(0)
        if token.startswith("**"):
            elements.append({"type": "text", "text": token[2:-2], "style": {"bold": True}})
        else:
            link_match = _FULL_LINK_RE.match(token)
            if link_match:
                elements.append({"type": "link", "url": link_match.group(2), "text": link_match.group(1)})
            else:
                elements.append({"type": "text", "text": token})
        last_index = match.end()

    if last_index < len(content):
        elements.append({"type": "text", "text": content[last_index:]})

    return elements or [{"type": "text", "text": ""}]


def build_rich_text_cell(text):
    return {
        "type": "rich_text",
        "elements": [
            {
                "type": "rich_text_section",
                "elements": parse_rich_text_elements(text),
            }
        ],
    }


def build_table_block(rows):
    return {
        "type": "table",
        "rows": [
            {
                "type": "table_row",
                "cells": [
                    {"type": "raw_text", "text": str(index + 1)},
                    {"type": "raw_text", "text": row.get("field_name") or ""},
                    build_rich_text_cell(row.get("field_value") or ""),
                ],
            }
            for index, row in enumerate(rows)
        ],
    }


def build_section_block(text):
    if not text:
        return None
    return {
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": text,
        },
    }


def build_context_block(footer_text=None, footer_icon_url=None):
    if not footer_text and not footer_icon_url:
        return None

    elements = []
    if footer_icon_url:
        elements.append({
            "type": "image",
            "image_url": footer_icon_url,
            "alt_text": "footer icon",
        })
    if footer_text:
        elements.append({
            "type": "mrkdwn",
            "text": convert_markdown_to_slack(footer_text),
        })

    return {
        "type": "context",
        "elements": elements,
    }


def _describe(message_context):
    if not message_context:
        return ""
    return (
        f" [message {message_context['message_index'] + 1}/{message_context['total_messages']},"
        f" blocks={message_context['blocks_count']}, alerts={message_context['alerts_count']}]"
    )


def log_slack_response(response: requests.Response, message_context=None):
    logger.debug("Slack response: %s %s%s", response.status_code, response.text[:500], _describe(message_context))


def log_slack_error(err: Exception, message_context=None):
    details = ""
    response = getattr(err, "response", None)
    if response is not None:
        details = f"; Status: {response.status_code}; Body: {response.text[:1000]}"
    logger.error("Slack webhook error: %s%s%s", err, details, _describe(message_context))
