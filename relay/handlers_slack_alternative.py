"""Handler Slack alternativo.

Agrupa alertas por status, monta tabelas (field_name/field_value) em blocos de
até `max_table_rows` linhas e junta os alertas simples em mensagens de até
`max_embeds_length` unidades / 50 blocos. Resolvidos são enviados primeiro.
"""

import json
import logging

import requests

from .constants import MAX_SLACK_BLOCKS
from .services import post_webhook
from .slack_helpers import (
    build_context_block,
    build_section_block,
    build_table_block,
    convert_markdown_to_slack,
    get_slack_mentions,
    log_slack_error,
    log_slack_response,
)

logger = logging.getLogger(__name__)


def group_by(items, key):
    groups = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def _coalesce(value, fallback):
    return fallback if value is None else value


def build_title(alert, is_resolved):
    annotations = (alert or {}).get("annotations")
    if not annotations:
        return ""
    if is_resolved:
        return _coalesce(annotations.get("resolved_summary"), annotations.get("summary"))
    return annotations.get("summary")


def build_description(alert, is_resolved):
    annotations = (alert or {}).get("annotations")
    if not annotations:
        return ""
    if is_resolved:
        return _coalesce(annotations.get("resolved_description"), annotations.get("description"))
    return annotations.get("description")


def format_title(title, url, is_resolved):
    if not title:
        return ""
    converted = convert_markdown_to_slack(title)
    if not is_resolved and url:
        return f"<{url}|{converted}>"
    return converted


def _table_units(by_status, first, is_resolved, max_rows, emoji_prefix, url, footer_block):
    units = []
    base_title = build_title(first, is_resolved)
    descr_seed = build_description(first, is_resolved)
    for start in range(0, len(by_status), max_rows):
        chunk = by_status[start:start + max_rows]
        if base_title:
            full_title = f"{emoji_prefix}{len(chunk)} {base_title}".strip()
        else:
            full_title = f"{emoji_prefix}{len(chunk)}".strip()

        blocks = []
        title_block = build_section_block(format_title(full_title, url, is_resolved))
        if title_block:
            blocks.append(title_block)
        descr_block = build_section_block(convert_markdown_to_slack(descr_seed or ""))
        if descr_block:
            blocks.append(descr_block)

        mentions = list(dict.fromkeys(
            m for alert in chunk for m in get_slack_mentions(alert.get("labels") or {})
        ))
        if mentions:
            blocks.append(build_section_block(" ".join(mentions)))

        rows = [
            {
                "field_name": (alert.get("annotations") or {}).get("field_name") or "",
                "field_value": (alert.get("annotations") or {}).get("field_value") or "",
            }
            for alert in chunk
        ]
        blocks.append(build_table_block(rows))
        if footer_block:
            blocks.append(footer_block)

        units.append({"type": "table", "status": first.get("status"), "blocks": blocks})
    return units


def _plain_units(by_status, first, is_resolved, emoji_prefix, url, footer_block):
    units = []
    for alert in by_status:
        title_text = f"{emoji_prefix}{build_title(alert, is_resolved) or ''}".strip()
        blocks = []
        title_block = build_section_block(format_title(title_text, url, is_resolved))
        if title_block:
            blocks.append(title_block)
        descr_block = build_section_block(convert_markdown_to_slack(build_description(alert, is_resolved)))
        if descr_block:
            blocks.append(descr_block)
        if footer_block:
            blocks.append(footer_block)

        units.append({
            "type": "plain",
            "status": first.get("status"),
            "blocks": blocks,
            "mentions": get_slack_mentions(alert.get("labels") or {}),
        })
    return units


def build_units(alerts, max_rows):
    units = []
    for by_status in group_by(alerts, lambda a: a.get("status")).values():
        first = by_status[0]
        annotations = first.get("annotations")
        if not annotations:
            continue

        is_resolved = first.get("status") == "resolved"
        if not (build_title(first, is_resolved) or build_description(first, is_resolved)):
            continue

        emoji_prefix = f"{annotations['emoji']} " if annotations.get("emoji") else ""
        url = "" if is_resolved else (annotations.get("url") or "")
        footer_block = build_context_block(
            annotations.get("footer_text") or "",
            annotations.get("footer_icon_url") or "",
        )

        if annotations.get("field_name") and annotations.get("field_value"):
            units.extend(_table_units(by_status, first, is_resolved, max_rows, emoji_prefix, url, footer_block))
        else:
            units.extend(_plain_units(by_status, first, is_resolved, emoji_prefix, url, footer_block))

    # resolvidos primeiro; sort estável mantém a ordem dentro de cada status
    units.sort(key=lambda u: 0 if u["status"] == "resolved" else 1)
    return units


def pack_units(units, max_units):
    messages = []
    current = None

    def flush():
        if current is None:
            return
        if current["mentions"]:
            current["blocks"].append(build_section_block(" ".join(current["mentions"])))
        messages.append({"blocks": current["blocks"]})

    for unit in units:
        if unit["type"] == "table":
            flush()
            current = None
            messages.append({"blocks": unit["blocks"]})
            continue

        if current is None:
            current = {"blocks": [], "mentions": {}, "units": 0}

        next_mentions = dict(current["mentions"], **dict.fromkeys(unit["mentions"]))
        mention_block_count = 1 if next_mentions else 0
        if (
            current["units"] >= max_units
            or len(current["blocks"]) + len(unit["blocks"]) + mention_block_count > MAX_SLACK_BLOCKS
        ):
            flush()
            current = {"blocks": [], "mentions": {}, "units": 0}

        current["blocks"].extend(unit["blocks"])
        current["mentions"].update(dict.fromkeys(unit["mentions"]))
        current["units"] += 1

    flush()
    return messages


def handle_hook(ctx):
    alerts = ctx.alerts
    if alerts is None:
        logger.error("Unexpected request from Alertmanager: %s", json.dumps(ctx.body, default=str))
        return 400

    alerts_count = len(alerts)
    logger.info("Received %s alert(s) from Alertmanager", alerts_count)

    units = build_units(alerts, ctx.message_params["max_table_rows"])
    if not units:
        logger.warning("No data to write to Slack blocks")
        return 400

    messages = pack_units(units, ctx.message_params["max_embeds_length"])

    for index, message in enumerate(messages):
        message_context = {
            "message_index": index,
            "total_messages": len(messages),
            "blocks_count": len(message["blocks"]),
            "alerts_count": alerts_count,
        }
        try:
            response = post_webhook(ctx.hook, {"text": "", "blocks": message["blocks"]})
            log_slack_response(response, message_context)
        except requests.RequestException as err:
            log_slack_error(err, message_context)

    logger.info("%s message(s) sent from %s unit(s), %s alert(s)", len(messages), len(units), alerts_count)
    return 200
