"""Canned provider replies shared by the tests."""
import json
from unittest.mock import MagicMock


def make_response(status_code=200, body=""):
    """A stand-in for requests.Response with just what the transport reads."""
    response = MagicMock()
    response.status_code = status_code
    response.text = body
    return response


def gemini_body(text):
    return json.dumps(
        {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
    )


def deepseek_body(text):
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": text}}]})
