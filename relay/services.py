import logging

import requests

from .constants import WEBHOOK_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def post_webhook(url, payload, params=None):
    """POST do payload JSON no webhook; erros HTTP viram requests.HTTPError."""
    resp = requests.post(url, json=payload, params=params or None, timeout=WEBHOOK_TIMEOUT_SECONDS)
    logger.debug("Webhook response: %s", resp.status_code)
    if resp.status_code >= 400:
        logger.debug("Response content: %s", resp.text[:1000])
    resp.raise_for_status()
    return resp


def describe_request_error(err):
    """Resumo do erro para log (método e tamanho do corpo quando disponíveis)."""
    message = str(err)
    request = getattr(err, "request", None)
    if request is not None:
        if getattr(request, "method", None):
            message += f"; Method: {request.method}"
        body = getattr(request, "body", None)
        if body is not None:
            message += f"; Request data length: {len(body)}"
    response = getattr(err, "response", None)
    if response is not None:
        message += f"; Status: {response.status_code}"
    return message
