import logging
import time

from flask import Flask, request

from . import handlers_alternative, handlers_default, handlers_slack_alternative, handlers_slack_default
from .config import load_config
from .constants import MESSAGE_PARAMS, WORKING_MODE
from .context import HookContext
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)

HANDLERS = {
    ("discord", "default"): handlers_default.handle_hook,
    ("discord", "alternative"): handlers_alternative.handle_hook,
    ("slack", "default"): handlers_slack_default.handle_hook,
    ("slack", "alternative"): handlers_slack_alternative.handle_hook,
}


def get_handler(route, working_mode=WORKING_MODE):
    if route is None:
        return None
    mode = "alternative" if working_mode == "alternative" else "default"
    return HANDLERS.get((route.type, mode))


def create_app(config=None, working_mode=WORKING_MODE, message_params=None):
    if config is None:
        config = load_config()
    configure_logging(config.secrets)

    app = Flask(__name__)
    started_at = time.monotonic()
    params = dict(message_params or MESSAGE_PARAMS)

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok', 'uptime': time.monotonic() - started_at}, 200

    @app.route('/hook/<slug>', methods=['POST'])
    def hook(slug):
        # Aceita JSON com qualquer content-type
        data = request.get_json(force=True, silent=True)
        if data is None:
            raw = request.get_data(as_text=True)
            logger.warning("Invalid JSON body; Body length: %s; Body: %r", len(raw), raw[:1000])
            return '', 400

        route = config.routes.get(slug)
        if route is None:
            logger.warning('Slug "%s" was not found in routes', slug)
            return '', 404

        handler = get_handler(route, working_mode)
        if handler is None:
            logger.error('No handler found for slug "%s"', slug)
            return '', 500

        logger.debug("Received data for slug %s: %s", slug, data)
        ctx = HookContext(
            hook=route.hook,
            body=data,
            query=request.args.to_dict(),
            message_params=params,
        )
        try:
            status = handler(ctx)
        except Exception:
            logger.exception('Unhandled error for slug "%s"', slug)
            return '', 500
        return '', status

    logger.info("Loaded %s route(s), working mode: %s", len(config.routes), working_mode)
    return app
