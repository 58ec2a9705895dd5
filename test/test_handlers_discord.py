#!/usr/bin/env python3
import unittest
from unittest.mock import Mock, patch

import requests

from relay import handlers_alternative, handlers_default
from relay.constants import DISCORD_COLORS
from relay.context import HookContext

HOOK = "https://discord.com/api/webhooks/123/abc"


def make_alert(index=0, status="firing", **annotations):
    annotations.setdefault("summary", f"Alert {index}")
    annotations.setdefault("description", "Something happened")
    return {"status": status, "labels": {"alertname": f"a{index}"}, "annotations": annotations}


def make_ctx(alerts, query=None, **params):
    message_params = {"max_embeds_length": 10, "max_fields_length": 25, "max_table_rows": 20}
    message_params.update(params)
    return HookContext(hook=HOOK, body={"alerts": alerts}, query=query or {}, message_params=message_params)


def ok_response():
    return Mock(status_code=200, text="")


class TestDiscordDefault(unittest.TestCase):
    @patch("relay.services.requests.post")
    def test_one_message_per_alert(self, mock_post):
        mock_post.return_value = ok_response()
        status = handlers_default.handle_hook(make_ctx([make_alert(i) for i in range(11)]))

        self.assertEqual(status, 200)
        self.assertEqual(mock_post.call_count, 11)
        body = mock_post.call_args_list[0].kwargs["json"]
        self.assertEqual(body["embeds"], [{
            "title": "Alert 0",
            "description": "Something happened",
            "color": DISCORD_COLORS["firing"],
        }])

    @patch("relay.services.requests.post")
    def test_query_is_forwarded(self, mock_post):
        mock_post.return_value = ok_response()
        handlers_default.handle_hook(make_ctx([make_alert()], query={"thread_id": "42"}))
        self.assertEqual(mock_post.call_args.kwargs["params"], {"thread_id": "42"})

    @patch("relay.services.requests.post")
    def test_mentions(self, mock_post):
        mock_post.return_value = ok_response()
        alert = make_alert()
        alert["labels"]["mentions"] = "111, 222"
        handlers_default.handle_hook(make_ctx([alert]))

        body = mock_post.call_args.kwargs["json"]
        self.assertEqual(body["content"], "<@111> <@222>")
        self.assertEqual(body["allowed_mentions"], {"parse": ["users", "roles"]})

    @patch("relay.services.requests.post")
    def test_inline_fields(self, mock_post):
        mock_post.return_value = ok_response()
        alert = make_alert(inline_fields="- **cpu**: 95%\n- host `db-1`")
        handlers_default.handle_hook(make_ctx([alert]))

        fields = mock_post.call_args.kwargs["json"]["embeds"][0]["fields"]
        self.assertEqual(fields, [
            {"name": "", "value": "**cpu**: 95%", "inline": True},
            {"name": "", "value": "host `db-1`", "inline": True},
        ])

    def test_too_many_fields_are_dropped(self):
        alert = make_alert(inline_fields="- a\n- b\n- c")
        self.assertEqual(handlers_default.get_fields(alert, max_fields=2), [])

    def test_resolved_color(self):
        embed, _ = handlers_default.build_alert_message(make_alert(status="resolved"))
        self.assertEqual(embed["color"], DISCORD_COLORS["resolved"])

    def test_invalid_body(self):
        ctx = HookContext(hook=HOOK, body={"foo": "bar"})
        self.assertEqual(handlers_default.handle_hook(ctx), 400)

    @patch("relay.services.requests.post")
    def test_all_alerts_filtered(self, mock_post):
        alert = {"status": "firing", "annotations": {}}
        self.assertEqual(handlers_default.handle_hook(make_ctx([alert])), 400)
        mock_post.assert_not_called()

    @patch("relay.services.requests.post")
    def test_request_error_is_500(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        self.assertEqual(handlers_default.handle_hook(make_ctx([make_alert()])), 500)


class TestDiscordAlternative(unittest.TestCase):
    @patch("relay.services.requests.post")
    def test_embeds_are_packed(self, mock_post):
        mock_post.return_value = ok_response()
        status = handlers_alternative.handle_hook(make_ctx([make_alert(i) for i in range(11)]))

        self.assertEqual(status, 200)
        self.assertEqual(mock_post.call_count, 2)
        sizes = [len(call.kwargs["json"]["embeds"]) for call in mock_post.call_args_list]
        self.assertEqual(sizes, [10, 1])

    def test_pack_messages_merges_mentions(self):
        built = [({"title": "a"}, ["<@1>"]), ({"title": "b"}, ["<@1>", "<@2>"]), ({"title": "c"}, [])]
        messages = handlers_alternative.pack_messages(built, 2)
        self.assertEqual(len(messages), 2)
        self.assertEqual(messages[0]["content"], "<@1> <@2>")
        self.assertNotIn("content", messages[1])

    @patch("relay.services.requests.post")
    def test_http_error_is_500(self, mock_post):
        response = Mock(status_code=429, text="rate limited", request=None)
        response.raise_for_status.side_effect = requests.HTTPError("429", response=response)
        mock_post.return_value = response
        self.assertEqual(handlers_alternative.handle_hook(make_ctx([make_alert()])), 500)


if __name__ == '__main__':
    unittest.main()
