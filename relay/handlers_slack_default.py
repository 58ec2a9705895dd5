"""Handler Slack padrão: uma mensagem por alerta com o markdown compilado em rich_text."""

import json
import logging

import requests

from . import block_kit
from .markdown_to_rich import markdown_to_rich
from .services import post_webhook
from .slack_helpers import build_context_block, get_slack_mentions, log_slack_error, log_slack_response

logger = logging.getLogger(__name__)


def build_alert_blocks(alert):
    annotations = alert.get("annotations") or {}
    description = annotations.get("description")
    summary = annotations.get("summary")
    if not summary and not description:
        return None

    mentions = " ".join(get_slack_mentions(alert.get("labels") or {}))
    all_markdown = "\n".join(
        part for part in (summary, description, annotations.get("inline_fields")) if part
    )
    footer_block = build_context_block(annotations.get("footer_text"), annotations.get("footer_icon_url"))

    blocks = []
    if mentions:
        blocks.append(block_kit.section(mentions))
    blocks.append(markdown_to_rich(all_markdown))
    if footer_block:
        blocks.append(footer_block)
    return blocks


def handle_hook(ctx):
    alerts = ctx.alerts
    if alerts is None:
        logger.error("Unexpected request from Alertmanager: %s", json.dumps(ctx.body, default=str))
        return 400

    objects_to_send = []
    for index, alert in enumerate(alerts):
        try:
            blocks = build_alert_blocks(alert)
        except Exception as err:
            # BlockKitError e afins: descarta apenas este alerta
            logger.exception("Skip alert with index %s: %s", index, err)
            continue
        if blocks is None:
            logger.warning("Skip alert with index %s: empty 'summary' and 'description'", index)
            continue
        objects_to_send.append({"text": "", "blocks": blocks})

    if not objects_to_send:
        logger.warning(
            "Nothing to send, all alerts has been filtered out. Received data: %s",
            json.dumps(alerts, default=str),
        )
        return 400

    sent = 0
    for body in objects_to_send:
        try:
            response = post_webhook(ctx.hook, body)
            log_slack_response(response)
            sent += 1
        except requests.RequestException as err:
            log_slack_error(err)

    logger.info("%s/%s/%s objects have been sent", sent, len(objects_to_send), len(alerts))
    return 200
