"""Handler Discord alternativo: agrupa até `max_embeds_length` embeds por mensagem."""

import json
import logging

from .handlers_default import build_alert_message, send_messages

logger = logging.getLogger(__name__)


def pack_messages(built, max_embeds):
    messages = []
    for start in range(0, len(built), max_embeds):
        chunk = built[start:start + max_embeds]
        body = {"embeds": [embed for embed, _ in chunk]}
        mentions = list(dict.fromkeys(m for _, alert_mentions in chunk for m in alert_mentions))
        if mentions:
            body["allowed_mentions"] = {"parse": ["users", "roles"]}
            body["content"] = " ".join(mentions)
        messages.append(body)
    return messages


def handle_hook(ctx):
    alerts = ctx.alerts
    if alerts is None:
        logger.error("Unexpected request from Alertmanager: %s", json.dumps(ctx.body, default=str))
        return 400

    built = []
    for index, alert in enumerate(alerts):
        try:
            result = build_alert_message(alert, ctx.message_params["max_fields_length"])
            if result is not None:
                built.append(result)
        except Exception:
            logger.exception("Skip alert with index %s", index)

    if not built:
        logger.warning(
            "Nothing to send, all alerts has been filtered out. Received data: %s",
            json.dumps(alerts, default=str),
        )
        return 400

    messages = pack_messages(built, ctx.message_params["max_embeds_length"])
    status = send_messages(ctx, messages)
    logger.info("%s message(s) sent from %s alert(s)", len(messages), len(built))
    return status
