import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from utils.exceptions import (FatalHTTPError, RetriesExhaustedError,
                              TransientTransportError, ValidationError)
from utils.logging import log_message

# Statuses the upstream APIs return while overloaded or throttling
RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})

ERROR_TEXT_LIMIT = 500

# Gemini passes the API key as a query parameter, and requests echoes URLs in errors
_URL_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s'\"]+")

StatusCallback = Callable[[str, str], None]


def redact_api_key(text: str) -> str:
    """Masks ``key=...`` query parameters in ``text``."""
    return _URL_KEY_PATTERN.sub(r"\1***", text)


@dataclass(frozen=True)
class RetryPolicy:
    """How patiently a request is retried.

    The delay grows linearly with the attempt number and is capped at
    ``delay_ceiling``; it is not exponential.
    """

    max_attempts: int = 100
    base_delay: float = 2.0
    delay_ceiling: float = 60.0

    def delay_for(self, attempt_index: int) -> float:
        """Seconds to wait after the failed attempt ``attempt_index`` (0-based)."""
        return min((attempt_index + 1) * self.base_delay, self.delay_ceiling)


class RetryingTransport:
    """
    Posts JSON payloads through a shared ``requests.Session`` with bounded retries.

    Network errors and 429/500/503 responses are retried according to the
    ``RetryPolicy``; any other non-2xx status aborts immediately.
    """

    def __init__(
        self,
        session: requests.Session,
        policy: RetryPolicy,
        timeout: float = 120,
        status_callback: Optional[StatusCallback] = None,
        debug: bool = False,
    ):
        if policy.max_attempts < 1:
            raise ValidationError("Retry policy needs at least one attempt")
        self.session = session
        self.policy = policy
        self.timeout = timeout
        self.status_callback = status_callback
        self.debug = debug

    def _notify(self, level: str, message: str) -> None:
        if self.status_callback:
            self.status_callback(level, message)
        else:
            log_message(message, verbose=self.debug, always_print=level != "info")

    def _attempt(
        self, url: str, headers: Dict[str, str], payload: Dict[str, Any]
    ) -> str:
        """One POST. Returns the body on 2xx, raises a transport error otherwise."""
        try:
            response = self.session.post(
                url, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransientTransportError(
                redact_api_key(f"Network error: {type(e).__name__}: {e}")
            ) from e

        if 200 <= response.status_code < 300:
            return response.text

        error_text = (response.text or "")[:ERROR_TEXT_LIMIT]
        message = f"HTTP {response.status_code}: {error_text}"
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise TransientTransportError(
                message, status_code=response.status_code, response_text=error_text
            )
        raise FatalHTTPError(
            message, status_code=response.status_code, response_text=error_text
        )

    def send(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        label: str = "API",
    ) -> str:
        """
        Sends the request until it succeeds or the policy gives up.

        Args:
            url (str): Endpoint URL.
            headers (Dict[str, str]): Request headers.
            payload (Dict[str, Any]): JSON body.
            label (str): Name used in status messages (never the URL, which may hold a key).

        Returns:
            str: Raw response body of the first 2xx response.

        Raises:
            FatalHTTPError: On a non-retryable HTTP status.
            RetriesExhaustedError: When every attempt failed with a retryable error.
        """
        max_attempts = self.policy.max_attempts
        last_error: Optional[TransientTransportError] = None

        for attempt in range(max_attempts):
            if attempt > 0:
                self._notify("info", f"Retry attempt {attempt + 1}/{max_attempts}...")
            log_message(
                f"{label} request (attempt {attempt + 1}/{max_attempts})",
                verbose=self.debug,
            )
            try:
                return self._attempt(url, headers, payload)
            except FatalHTTPError as e:
                self._notify("error", f"{label} error: {e}")
                raise
            except TransientTransportError as e:
                last_error = e
                if attempt >= max_attempts - 1:
                    break
                delay = self.policy.delay_for(attempt)
                kind = "Network error" if e.status_code is None else f"{label} error {e.status_code}"
                self._notify(
                    "warning",
                    f"{kind}, retrying in {delay:g} seconds... "
                    f"(attempt {attempt + 1}/{max_attempts})",
                )
                time.sleep(delay)

        self._notify(
            "error", f"{label} failed after {max_attempts} attempts: {last_error}"
        )
        raise RetriesExhaustedError(
            f"Failed to get response from {label} after {max_attempts} attempts: {last_error}",
            attempts=max_attempts,
            last_error=last_error,
        )
