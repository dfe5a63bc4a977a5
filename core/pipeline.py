import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

import requests

from core.config import SubtitleTranslatorConfig
from core.progress import StatusCallback
from core.translator import SubtitleTranslator
from utils.logging import log_message


def output_path_for(
    input_path: Union[str, Path],
    config: SubtitleTranslatorConfig,
    output_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """``<output_dir or input dir>/<stem>.<language code>.ass``"""
    input_path = Path(input_path)
    filename = config.output.filename_pattern.format(
        stem=input_path.stem, language_code=config.translation.language_code
    )
    target_dir = Path(output_dir) if output_dir else input_path.parent
    return target_dir / filename


def batch_translate_files(
    input_paths: Sequence[Union[str, Path]],
    config: SubtitleTranslatorConfig,
    output_dir: Optional[Union[str, Path]] = None,
    progress_callback: Optional[Callable[[float, str], None]] = None,
    status_callback: Optional[StatusCallback] = None,
    document_progress_callback: Optional[Callable[[int], None]] = None,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """
    Translate several subtitle files one after another.

    Args:
        input_paths (Sequence[str or Path]): Subtitle files to translate.
        config (SubtitleTranslatorConfig): Configuration object containing all settings.
        output_dir (str or Path, optional): Directory for translated files.
                                            If None, each file is written next to its source.
        progress_callback (callable, optional): Called with overall progress (0.0-1.0, message).
        status_callback (callable, optional): Receives per-document StatusEvents.
        document_progress_callback (callable, optional): Percent (0-100) within the current file.
        session (requests.Session, optional): HTTP session to reuse instead of a new one.

    Returns:
        dict: Processing results with keys:
            - "success_count": Number of successfully translated files
            - "error_count": Number of files that failed
            - "errors": Dictionary mapping input paths to error messages
            - "outputs": Dictionary mapping input paths to written output paths
    """
    results: Dict[str, Any] = {
        "success_count": 0,
        "error_count": 0,
        "errors": {},
        "outputs": {},
    }
    total_files = len(input_paths)
    if total_files == 0:
        log_message("No subtitle files to translate", always_print=True)
        return results

    if output_dir:
        Path(output_dir).mkdir(parents=True, exist_ok=True)

    start_batch_time = time.time()
    log_message(f"Starting batch translation: {total_files} files", always_print=True)
    if progress_callback:
        progress_callback(0.0, f"Starting translation of {total_files} files...")

    with SubtitleTranslator(
        config,
        progress_callback=document_progress_callback,
        status_callback=status_callback,
        session=session,
    ) as translator:
        for i, input_path in enumerate(input_paths):
            input_path = Path(input_path)
            display_name = input_path.name
            result_key = str(input_path)
            output_path = output_path_for(input_path, config, output_dir)
            log_message(
                f"Translating {i + 1}/{total_files}: {display_name}", always_print=True
            )
            try:
                translator.translate_file(input_path, output_path)
                results["success_count"] += 1
                results["outputs"][result_key] = str(output_path)
                log_message(f"Completed: {display_name}", always_print=True)
            except Exception as e:
                log_message(f"Error translating {display_name}: {str(e)}", always_print=True)
                results["error_count"] += 1
                results["errors"][result_key] = str(e)

            if progress_callback:
                progress_callback(
                    (i + 1) / total_files,
                    f"Progress: {results['success_count']}/{total_files} files",
                )

    total_batch_time = time.time() - start_batch_time
    log_message(
        f"Batch complete: {results['success_count']}/{total_files} files in "
        f"{total_batch_time:.2f}s",
        always_print=True,
    )
    if results["error_count"] > 0:
        log_message(f"Failed: {results['error_count']} files", always_print=True)
        for filename, error_msg in results["errors"].items():
            log_message(f"  - {filename}: {error_msg}", always_print=True)

    return results
