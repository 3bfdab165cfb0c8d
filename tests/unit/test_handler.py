"""Unit tests for the Lambda request handler."""

import json
from unittest.mock import patch

import pytest
from neo_chat.app.errors import UpstreamUnavailable
from neo_chat.app.main import process
from neo_chat.chat_handler import lambda_handler


def _body(response):
    return json.loads(response["body"])


@pytest.fixture
def patched_assistant(fake_assistant):
    with patch("neo_chat.app.main.get_assistant", return_value=fake_assistant):
        yield fake_assistant


class TestSuccess:
    def test_returns_reply(self, patched_assistant, make_event, sample_messages):
        response = lambda_handler(make_event({"messages": sample_messages}), None)

        assert response["statusCode"] == 200
        assert _body(response) == {"response": "Hello Nick, here is your press release."}
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        assert response["headers"]["Content-Type"] == "application/json"

    def test_only_last_message_is_submitted(self, patched_assistant, make_event, sample_messages):
        process(make_event({"messages": sample_messages}))

        assert [content for _, content in patched_assistant.messages] == [
            "A marketing chatbot called Neo."
        ]
        assert patched_assistant.runs == [("thread_1", "asst_test")]

    def test_polls_until_completed(self, make_assistant, make_event, sample_messages):
        assistant = make_assistant(statuses=("queued", "in_progress", "in_progress", "completed"))
        with patch("neo_chat.app.main.get_assistant", return_value=assistant):
            response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 200
        assert assistant.polls == 4

    def test_legacy_prompt_body(self, patched_assistant, make_event):
        response = process(make_event({"prompt": "Write a product blurb"}))

        assert response["statusCode"] == 200
        assert patched_assistant.messages == [("thread_1", "Write a product blurb")]

    def test_bytes_body(self, patched_assistant, make_event, sample_messages):
        event = make_event(json.dumps({"messages": sample_messages}).encode("utf-8"))

        assert process(event)["statusCode"] == 200

    def test_two_identical_requests_create_two_threads(
        self, patched_assistant, make_event, sample_messages
    ):
        process(make_event({"messages": sample_messages}))
        process(make_event({"messages": sample_messages}))

        assert patched_assistant.threads == ["thread_1", "thread_2"]


class TestValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {"messages": []},
            {},
            {"messages": "hello"},
            {"messages": [{"role": "user"}]},
            {"messages": [{"role": "robot", "content": "hi"}]},
            {"messages": [{"role": "user", "content": "   "}]},
            [{"role": "user", "content": "hi"}],
            "not json",
            "",
        ],
    )
    def test_bad_request_never_runs_the_assistant(self, make_event, body):
        with patch("neo_chat.app.main.run_assistant") as run_assistant:
            response = process(make_event(body))

        assert response["statusCode"] == 400
        assert _body(response)["error"] == "Bad Request"
        assert _body(response)["details"]
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        run_assistant.assert_not_called()

    def test_missing_messages_details(self, make_event):
        response = process(make_event({"messages": []}))

        assert _body(response) == {
            "error": "Bad Request",
            "details": "Messages array is required and must not be empty",
        }


class TestErrors:
    def test_failed_run_returns_500_with_reason(self, make_assistant, make_event, sample_messages):
        assistant = make_assistant(statuses=("queued", "failed"), error_message="Quota exceeded")
        with patch("neo_chat.app.main.get_assistant", return_value=assistant):
            response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 500
        assert _body(response) == {
            "error": "Internal server error",
            "details": "Assistant run failed: Quota exceeded",
        }
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_missing_assistant_id(self, chat_env, make_event, sample_messages):
        chat_env.delenv("ASSISTANT_ID")
        with patch("neo_chat.app.main.get_assistant") as get_assistant:
            response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 500
        assert _body(response)["details"] == "ASSISTANT_ID environment variable is not set"
        get_assistant.assert_not_called()

    def test_upstream_unavailable(self, fake_assistant, make_event, sample_messages):
        with patch.object(
            fake_assistant,
            "create_thread",
            side_effect=UpstreamUnavailable("OpenAI thread creation failed: Connection error."),
        ):
            with patch("neo_chat.app.main.get_assistant", return_value=fake_assistant):
                response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 500
        assert _body(response)["details"] == "OpenAI thread creation failed: Connection error."

    def test_run_timeout(self, chat_env, make_assistant, make_event, sample_messages):
        chat_env.setenv("RUN_MAX_WAIT_SECONDS", "0.01")
        assistant = make_assistant(statuses=("in_progress",))
        with patch("neo_chat.app.main.get_assistant", return_value=assistant):
            response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 500
        assert "did not complete within" in _body(response)["details"]

    def test_unexpected_exception(self, make_event, sample_messages):
        with patch("neo_chat.app.main.get_assistant", side_effect=RuntimeError("boom")):
            response = process(make_event({"messages": sample_messages}))

        assert response["statusCode"] == 500
        assert _body(response) == {"error": "Internal server error", "details": "boom"}


class TestPreflight:
    def test_http_api_options(self, make_event):
        with patch("neo_chat.app.main.run_assistant") as run_assistant:
            response = process(make_event("", method="OPTIONS"))

        assert response["statusCode"] == 200
        assert response["body"] == ""
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        assert "POST" in response["headers"]["Access-Control-Allow-Methods"]
        run_assistant.assert_not_called()

    def test_null_request_context_still_gets_cors_response(self):
        response = lambda_handler({"requestContext": None, "body": None}, None)

        assert response["statusCode"] == 400
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_rest_api_options(self):
        response = process({"httpMethod": "OPTIONS", "body": None})

        assert response["statusCode"] == 200
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
