"""Handler Discord padrão: uma mensagem (um embed) por alerta."""

import json
import logging
import re

import requests

from .constants import DISCORD_COLORS, MAX_FIELD_CHARS
from .lexer import lex
from .services import describe_request_error, post_webhook
from .tokens import TokenKind, markdown_source

logger = logging.getLogger(__name__)


def get_mentions(alert):
    mentions = (alert.get("labels") or {}).get("mentions")
    if not mentions:
        return []
    cleaned = re.sub(r"\s", "", mentions)
    return [f"<@{m}>" for m in cleaned.split(",") if m]


def validate_fields_list(items, max_fields):
    if not items:
        raise ValueError("Fields list is empty")
    if len(items) > max_fields:
        raise ValueError("Too many fields")
    for value in items:
        if len(value) > MAX_FIELD_CHARS:
            raise ValueError("Too many characters in a field")


def get_fields(alert, max_fields=25):
    """Extrai fields inline da primeira lista markdown de `annotations.inline_fields`."""
    fields_markdown = (alert.get("annotations") or {}).get("inline_fields")
    if not fields_markdown:
        return []

    try:
        fields_list = next((t for t in lex(fields_markdown) if t.kind is TokenKind.LIST), None)
        items = [markdown_source(item) for item in fields_list.children] if fields_list else []
        validate_fields_list(items, max_fields)
    except ValueError:
        logger.exception("Invalid inline_fields for alert %s", (alert.get("labels") or {}).get("alertname"))
        return []

    return [{"name": "", "value": value.strip(), "inline": True} for value in items]


def build_embed(alert):
    annotations = alert.get("annotations") or {}
    return {
        "title": annotations.get("summary"),
        "description": annotations.get("description"),
        "color": DISCORD_COLORS.get(alert.get("status"), DISCORD_COLORS["default"]),
    }


def build_alert_message(alert, max_fields=25):
    """Retorna (embed, mentions) ou None quando o alerta não tem conteúdo."""
    annotations = alert.get("annotations") or {}
    if not annotations.get("summary") and not annotations.get("description"):
        return None

    embed = build_embed(alert)
    fields = get_fields(alert, max_fields)
    if fields:
        embed["fields"] = fields
    return embed, get_mentions(alert)


def send_messages(ctx, messages):
    """Envia as mensagens; qualquer falha resulta em status 500."""
    status = 200
    for body in messages:
        try:
            post_webhook(ctx.hook, body, params=ctx.query)
        except requests.RequestException as err:
            status = 500
            logger.error('Request error in "%s": %s', __name__, describe_request_error(err))
    return status


def handle_hook(ctx):
    alerts = ctx.alerts
    if alerts is None:
        logger.error("Unexpected request from Alertmanager: %s", json.dumps(ctx.body, default=str))
        return 400

    messages = []
    for index, alert in enumerate(alerts):
        try:
            built = build_alert_message(alert, ctx.message_params["max_fields_length"])
            if built is None:
                continue
            embed, mentions = built
            body = {"embeds": [embed]}
            if mentions:
                body["allowed_mentions"] = {"parse": ["users", "roles"]}
                body["content"] = " ".join(mentions)
            messages.append(body)
        except Exception:
            logger.exception("Skip alert with index %s", index)

    if not messages:
        logger.warning(
            "Nothing to send, all alerts has been filtered out. Received data: %s",
            json.dumps(alerts, default=str),
        )
        return 400

    status = send_messages(ctx, messages)
    logger.info("%s objects have been sent", len(messages))
    return status
