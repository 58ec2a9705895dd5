#!/usr/bin/env python3
import logging
import unittest
from unittest.mock import Mock, patch

import structlog

from relay import controller
from relay.config import RelayConfig, Route

DISCORD = "https://discord.com/api/webhooks/123/abc"
SLACK = "https://hooks.slack.com/services/T000/B000/XXXX"

ALERTS = {"alerts": [{"status": "firing", "annotations": {"summary": "Down"}}]}


class TestController(unittest.TestCase):
    def setUp(self):
        config = RelayConfig(
            routes={
                "infra": Route("infra", DISCORD, "discord"),
                "team": Route("team", SLACK, "slack"),
            },
            secrets=["abc", "T000/B000/XXXX"],
        )
        self.app = controller.create_app(config=config, working_mode="default")
        self.client = self.app.test_client()
        # create_app instala o handler JSON no root logger
        self.addCleanup(self._remove_json_handlers)

    @staticmethod
    def _remove_json_handlers():
        root = logging.getLogger()
        for handler in list(root.handlers):
            if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
                root.removeHandler(handler)

    def test_health(self):
        resp = self.client.get('/health')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['status'], 'ok')
        self.assertGreaterEqual(resp.get_json()['uptime'], 0)

    def test_unknown_slug(self):
        resp = self.client.post('/hook/unknown', json=ALERTS)
        self.assertEqual(resp.status_code, 404)

    def test_invalid_json(self):
        resp = self.client.post('/hook/infra', data='{not json', content_type='text/plain')
        self.assertEqual(resp.status_code, 400)

    @patch("relay.services.requests.post")
    def test_discord_route(self, mock_post):
        mock_post.return_value = Mock(status_code=204, text="")
        resp = self.client.post('/hook/infra?thread_id=7', data='{"alerts": [{"annotations": {"summary": "Down"}}]}')

        self.assertEqual(resp.status_code, 200)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], DISCORD)
        self.assertEqual(kwargs["params"], {"thread_id": "7"})
        self.assertEqual(kwargs["json"]["embeds"][0]["title"], "Down")

    @patch("relay.services.requests.post")
    def test_slack_route(self, mock_post):
        mock_post.return_value = Mock(status_code=200, text="ok")
        resp = self.client.post('/hook/team', json=ALERTS)

        self.assertEqual(resp.status_code, 200)
        blocks = mock_post.call_args.kwargs["json"]["blocks"]
        self.assertEqual(blocks[0]["type"], "rich_text")

    def test_handler_status_is_returned(self):
        resp = self.client.post('/hook/infra', json={"foo": "bar"})
        self.assertEqual(resp.status_code, 400)

    def test_handler_exception_is_500(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        with patch.dict(controller.HANDLERS, {("discord", "default"): failing}):
            resp = self.client.post('/hook/infra', json=ALERTS)
        self.assertEqual(resp.status_code, 500)

    def test_get_handler_modes(self):
        route = Route("x", SLACK, "slack")
        self.assertIs(controller.get_handler(route, "alternative"), controller.HANDLERS[("slack", "alternative")])
        self.assertIs(controller.get_handler(route, "whatever"), controller.HANDLERS[("slack", "default")])
        self.assertIsNone(controller.get_handler(None))


if __name__ == '__main__':
    unittest.main()
