"""End-to-end tests for SubtitleTranslator with a scripted HTTP session."""
import json
from unittest.mock import patch

import pytest

from core.progress import StatusEvent
from core.translator import SubtitleTranslator
from tests.helpers import deepseek_body, gemini_body, make_response
from utils.exceptions import (EmptyResponseError, FatalHTTPError,
                              RetriesExhaustedError)


def batch_from_payload(payload):
    """The JSON array of texts appended to the prompt."""
    if "contents" in payload:
        prompt = payload["contents"][0]["parts"][0]["text"]
    else:
        prompt = payload["messages"][0]["content"]
    return json.loads(prompt.rsplit("\n\n", 1)[1])


def echo_reply(prefix="VI:", body=gemini_body):
    """Session.post side effect that answers every text with ``prefix + text``."""

    def _post(url, headers=None, json=None, timeout=None):
        texts = batch_from_payload(json)
        reply = _dumps([prefix + text for text in texts])
        return make_response(200, body(reply))

    return _post


def _dumps(value):
    return json.dumps(value, ensure_ascii=False)


def dialogue(text):
    return f"Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,{text}"


class TestTranslateFile:
    def test_translates_dialogue_and_keeps_everything_else(
        self, make_config, session, sample_file, sample_lines, tmp_path
    ):
        reply = _dumps(["Xin chào thế giới", "{\\i1}Bạn khỏe không?{\\i0}[BR]Khỏe, cảm ơn."])
        session.post.return_value = make_response(200, gemini_body(reply))
        output = tmp_path / "out" / "episode01.VI.ass"

        with SubtitleTranslator(make_config(), session=session) as translator:
            translator.translate_file(sample_file, output)

        lines = output.read_text(encoding="utf-8").split("\n")[:-1]
        assert len(lines) == len(sample_lines)
        assert lines[-1] == (
            "Dialogue: 0,0:00:04.00,0:00:06.00,Default,,0,0,0,,"
            "{\\i1}Bạn khỏe không?{\\i0}\\NKhỏe, cảm ơn."
        )
        assert lines[-3] == "Dialogue: 0,0:00:01.00,0:00:03.00,Default,,0,0,0,,Xin chào thế giới"
        for original, written in zip(sample_lines, lines):
            if not original.startswith("Dialogue:"):
                assert written == original

    def test_line_breaks_are_sent_as_placeholder(self, make_config, session, sample_file, tmp_path):
        session.post.side_effect = echo_reply()
        output = tmp_path / "episode01.VI.ass"

        SubtitleTranslator(make_config(), session=session).translate_file(sample_file, output)

        sent = batch_from_payload(session.post.call_args.kwargs["json"])
        assert sent == ["Hello world", "{\\i1}How are you?{\\i0}[BR]Fine, thanks."]
        assert output.read_text(encoding="utf-8").split("\n")[-2].endswith(
            ",,VI:{\\i1}How are you?{\\i0}\\NFine, thanks."
        )

    def test_empty_document(self, make_config, session, tmp_path):
        source = tmp_path / "empty.ass"
        source.write_text("[Script Info]\nTitle: Empty\n", encoding="utf-8")
        output = tmp_path / "empty.VI.ass"
        progress = []

        translator = SubtitleTranslator(make_config(), progress_callback=progress.append, session=session)
        translator.translate_file(source, output)

        session.post.assert_not_called()
        assert output.read_text(encoding="utf-8") == "[Script Info]\nTitle: Empty\n"
        assert progress == [100]

    def test_fatal_http_error_propagates(self, make_config, session, sample_file, tmp_path):
        session.post.return_value = make_response(404, "model not found")
        output = tmp_path / "episode01.VI.ass"

        with pytest.raises(FatalHTTPError):
            SubtitleTranslator(make_config(), session=session).translate_file(sample_file, output)
        assert not output.exists()

    @patch("utils.transport.time.sleep")
    def test_exhausted_retries_propagate(self, mock_sleep, make_config, session, sample_file, tmp_path):
        session.post.return_value = make_response(503, "overloaded")

        with pytest.raises(RetriesExhaustedError):
            SubtitleTranslator(make_config(max_attempts=2), session=session).translate_file(
                sample_file, tmp_path / "out.ass"
            )
        assert session.post.call_count == 2

    def test_empty_reply_is_an_error(self, make_config, session, sample_file, tmp_path):
        session.post.return_value = make_response(200, gemini_body(""))

        with pytest.raises(EmptyResponseError):
            SubtitleTranslator(make_config(), session=session).translate_file(
                sample_file, tmp_path / "out.ass"
            )


class TestBatchReconciliation:
    def test_short_reply_is_padded_with_marker(self, make_config, session):
        session.post.return_value = make_response(200, gemini_body(_dumps(["Một", "Hai"])))
        events = []
        translator = SubtitleTranslator(make_config(), status_callback=events.append, session=session)

        result = translator.translate_lines([dialogue("One"), dialogue("Two"), dialogue("Three")])

        assert result == [dialogue("Một"), dialogue("Hai"), dialogue("[TRANSLATION FAILED]")]
        warnings = [e.message for e in events if e.level == "warning"]
        assert "Warning: translated line count does not match (2 != 3)" in warnings
        assert "Added 1 placeholder lines for failed translations" in warnings

    def test_long_reply_is_truncated(self, make_config, session):
        session.post.return_value = make_response(200, gemini_body(_dumps(["Một", "Hai", "Ba"])))
        events = []
        translator = SubtitleTranslator(make_config(), status_callback=events.append, session=session)

        result = translator.translate_lines([dialogue("One"), dialogue("Two")])

        assert result == [dialogue("Một"), dialogue("Hai")]
        assert "Truncated to 2 lines" in [e.message for e in events]

    def test_unparseable_reply_marks_whole_batch(self, make_config, session):
        body = "```\n" + "\n".join(f"Line number {i} here" for i in range(10)) + "\n```"
        session.post.return_value = make_response(200, gemini_body(body))
        translator = SubtitleTranslator(make_config(), status_callback=lambda e: None, session=session)

        result = translator.translate_lines([dialogue("One"), dialogue("Two")])

        assert result == [dialogue("[TRANSLATION FAILED]")] * 2

    def test_custom_error_marker(self, make_config, session):
        session.post.return_value = make_response(200, gemini_body(_dumps(["Một"])))
        translator = SubtitleTranslator(
            make_config(error_marker="???"), status_callback=lambda e: None, session=session
        )

        assert translator.translate_batch(["One", "Two"]) == ["Một", "???"]


class TestBatchingAndProgress:
    def test_one_request_per_batch_in_order(self, make_config, session):
        session.post.side_effect = echo_reply()
        lines = [dialogue(f"Line {i}") for i in range(5)]

        result = SubtitleTranslator(make_config(batch_size=2), session=session).translate_lines(lines)

        assert session.post.call_count == 3
        sent = [batch_from_payload(c.kwargs["json"]) for c in session.post.call_args_list]
        assert sent == [["Line 0", "Line 1"], ["Line 2", "Line 3"], ["Line 4"]]
        assert result == [dialogue(f"VI:Line {i}") for i in range(5)]

    def test_progress_is_monotonic_and_ends_at_100(self, make_config, session):
        session.post.side_effect = echo_reply()
        progress = []
        translator = SubtitleTranslator(
            make_config(batch_size=1), progress_callback=progress.append, session=session
        )

        translator.translate_lines([dialogue("a"), "Comment: x", dialogue("b"), dialogue("c")])

        assert progress == [33, 66, 100]
        assert progress == sorted(progress)

    def test_status_events_describe_the_run(self, make_config, session):
        session.post.side_effect = echo_reply()
        events = []
        translator = SubtitleTranslator(
            make_config(batch_size=1), status_callback=events.append, session=session
        )

        translator.translate_lines([dialogue("a"), dialogue("b")])

        messages = [e.message for e in events]
        assert all(isinstance(e, StatusEvent) for e in events)
        assert "Found 2 dialogue lines to translate" in messages
        assert "Split into 2 batches" in messages
        assert "Translating batch 2/2..." in messages

    def test_failing_callbacks_do_not_stop_translation(self, make_config, session):
        session.post.side_effect = echo_reply()

        def broken(_):
            raise RuntimeError("listener crashed")

        translator = SubtitleTranslator(
            make_config(), progress_callback=broken, status_callback=broken, session=session
        )

        assert translator.translate_lines([dialogue("a")]) == [dialogue("VI:a")]


class TestProviders:
    def test_deepseek_uses_bearer_auth(self, make_config, session):
        session.post.side_effect = echo_reply(body=deepseek_body)

        result = SubtitleTranslator(make_config(provider="DeepSeek"), session=session).translate_lines(
            [dialogue("Hello")]
        )

        call = session.post.call_args
        assert call.args[0] == "https://api.deepseek.com/v1/chat/completions"
        assert call.kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert call.kwargs["json"]["model"] == "deepseek-chat"
        assert call.kwargs["json"]["top_p"] == 0.9
        assert result == [dialogue("VI:Hello")]

    def test_gemini_key_in_url(self, make_config, session):
        session.post.side_effect = echo_reply()

        SubtitleTranslator(make_config(), session=session).translate_lines([dialogue("Hello")])

        url = session.post.call_args.args[0]
        assert url.endswith("models/gemini-2.0-flash:generateContent?key=test-key")

    def test_custom_prompt_replaces_instruction(self, make_config, session, tmp_path):
        prompt_file = tmp_path / "prompt.txt"
        prompt_file.write_text("Dịch sang tiếng Việt.", encoding="utf-8")
        session.post.side_effect = echo_reply()

        translator = SubtitleTranslator(
            make_config(custom_prompt_path=str(prompt_file)), session=session
        )
        translator.translate_lines([dialogue("Hello")])

        prompt = session.post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert prompt == 'Dịch sang tiếng Việt.\n\n["Hello"]'


def test_owned_session_is_closed(make_config):
    with patch("core.translator.requests.Session") as session_cls:
        with SubtitleTranslator(make_config()):
            pass
    session_cls.return_value.close.assert_called_once()


def test_borrowed_session_is_left_open(make_config, session):
    with SubtitleTranslator(make_config(), session=session):
        pass
    session.close.assert_not_called()
