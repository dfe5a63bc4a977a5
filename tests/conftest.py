"""Pytest configuration and shared fixtures for the subtitle translator tests."""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Make the top-level packages importable without installing the project
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import SubtitleTranslatorConfig, TranslationConfig  # noqa: E402
from utils.transport import RetryPolicy  # noqa: E402

SAMPLE_ASS = """[Script Info]
Title: Sample
ScriptType: v4.00+

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, Bold, Italic
Style: Default,Arial,20,&H00FFFFFF,0,0

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Dialogue: 0,0:00:01.00,0:00:03.00,Default,,0,0,0,,Hello world
Comment: 0,0:00:02.00,0:00:03.00,Default,,0,0,0,,Not translated
Dialogue: 0,0:00:04.00,0:00:06.00,Default,,0,0,0,,{\\i1}How are you?{\\i0}\\NFine, thanks.
"""


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_lines():
    return SAMPLE_ASS.split("\n")[:-1]


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "episode01.ass"
    path.write_text(SAMPLE_ASS, encoding="utf-8")
    return path


@pytest.fixture
def make_config():
    """Factory for configs with fast retries."""

    def _make(provider="Gemini", batch_size=89, max_attempts=3, **overrides):
        fields = dict(
            provider=provider,
            api_key="test-key",
            model_name="gemini-2.0-flash" if provider == "Gemini" else "deepseek-chat",
            batch_size=batch_size,
        )
        fields.update(overrides)
        translation = TranslationConfig(**fields)
        return SubtitleTranslatorConfig(
            translation=translation,
            retry=RetryPolicy(max_attempts=max_attempts, base_delay=0.01, delay_ceiling=0.05),
        )

    return _make


@pytest.fixture
def session():
    """A requests.Session stand-in whose post() is scripted per test."""
    return MagicMock()
