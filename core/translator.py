from pathlib import Path
from typing import List, Optional, Sequence, Union

import requests

from core.batching import chunk_texts, fit_to_batch
from core.config import SubtitleTranslatorConfig
from core.progress import ProgressCallback, ProgressReporter, StatusCallback
from core.prompts import load_prompt_template
from core.response_parsing import NamedStrategy, build_parse_strategies
from core.services.translation import call_translation_api_batch
from core.subtitles import (classify_lines, decode_line_breaks,
                            encode_line_breaks, extract_dialogue_text,
                            merge_translated_lines, read_subtitle_lines,
                            replace_dialogue_text, write_subtitle_lines)
from utils.endpoints import get_provider
from utils.transport import RetryingTransport


class SubtitleTranslator:
    """
    Translates the dialogue of .ass documents batch by batch.

    One instance owns one HTTP session, reused for every request it makes.
    Batches and documents are processed strictly one after another.
    """

    def __init__(
        self,
        config: SubtitleTranslatorConfig,
        progress_callback: Optional[ProgressCallback] = None,
        status_callback: Optional[StatusCallback] = None,
        session: Optional[requests.Session] = None,
        strategies: Optional[Sequence[NamedStrategy]] = None,
    ):
        self.config = config
        self.provider = get_provider(config.translation.provider)
        self.reporter = ProgressReporter(
            progress_callback, status_callback, verbose=config.verbose
        )
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.transport = RetryingTransport(
            self.session,
            config.retry,
            timeout=config.translation.timeout,
            status_callback=lambda level, message: self.reporter.status(message, level),
            debug=config.verbose,
        )
        self.instruction = load_prompt_template(config.translation)
        self.strategies = (
            list(strategies) if strategies is not None
            else build_parse_strategies(config.parsing)
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def translate_batch(self, texts: Sequence[str]) -> List[str]:
        """
        Translates one batch and always returns exactly ``len(texts)`` strings.

        Missing translations are padded with the configured error marker and
        extra ones are dropped, each with a warning.
        """
        translation_cfg = self.config.translation
        placeholder = translation_cfg.line_break_placeholder
        encoded = [encode_line_breaks(text, placeholder) for text in texts]

        translations = call_translation_api_batch(
            encoded,
            self.config,
            self.provider,
            self.transport,
            self.instruction,
            reporter=self.reporter,
            strategies=self.strategies,
        )

        expected = len(texts)
        if len(translations) != expected:
            self.reporter.warning(
                f"Warning: translated line count does not match "
                f"({len(translations)} != {expected})"
            )
            if len(translations) < expected:
                self.reporter.warning(
                    f"Added {expected - len(translations)} placeholder lines for failed translations"
                )
            else:
                self.reporter.warning(f"Truncated to {expected} lines")
            translations = fit_to_batch(translations, expected, translation_cfg.error_marker)

        return [decode_line_breaks(text, placeholder) for text in translations]

    def translate_lines(self, lines: Sequence[str]) -> List[str]:
        """
        Translates every dialogue line of a document given as raw lines.

        Returns:
            List[str]: The document with translated dialogue text; every other
                       line and every other dialogue field is unchanged.
        """
        self.reporter.reset()
        classified = classify_lines(lines)
        self.reporter.status(
            f"Found {len(classified.dialogue_lines)} dialogue lines to translate"
        )

        batches = chunk_texts(
            classified.dialogue_lines, self.config.translation.batch_size
        )
        self.reporter.status(f"Split into {len(batches)} batches")

        translated_dialogues: List[str] = []
        for batch_number, batch in enumerate(batches, start=1):
            self.reporter.status(f"Translating batch {batch_number}/{len(batches)}...")
            texts = [extract_dialogue_text(line) for line in batch]
            translations = self.translate_batch(texts)
            translated_dialogues.extend(
                replace_dialogue_text(line, text)
                for line, text in zip(batch, translations)
            )
            self.reporter.progress(batch_number * 100 // len(batches))

        if not batches:
            self.reporter.progress(100)

        return merge_translated_lines(
            lines, classified.dialogue_indices, translated_dialogues
        )

    def translate_file(
        self, input_path: Union[str, Path], output_path: Union[str, Path]
    ) -> Path:
        """
        Reads, translates and writes one subtitle file.

        Raises:
            TranslationError: On transport failure, unreadable or empty replies.
            OSError: If the file cannot be read or written.
        """
        output_cfg = self.config.output
        output_path = Path(output_path)

        self.reporter.status("Reading subtitle file...")
        lines = read_subtitle_lines(input_path, encoding=output_cfg.input_encoding)
        translated = self.translate_lines(lines)

        self.reporter.status("Saving translated subtitle file...")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        write_subtitle_lines(output_path, translated, encoding=output_cfg.output_encoding)
        self.reporter.status("Subtitle translation complete!")
        return output_path
