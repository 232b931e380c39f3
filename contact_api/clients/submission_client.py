"""
Async client for the contact endpoint.

Mirrors what the site's contact form does in the browser: validate
locally, post once, retry transient failures with exponential backoff and
jitter, and clear the form on success. The retry loop is driven by
tenacity with an injectable ``sleep`` so it runs without wall-clock waits
under test.
"""

from asyncio import CancelledError, Task, TimerHandle, create_task, get_running_loop
from asyncio import sleep as asyncio_sleep
from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import dataclass, fields
from enum import StrEnum
from logging import getLogger
from typing import Any, Self

from httpx import AsyncClient, Response, TransportError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from contact_api.configs import CONTACT_PATH, file_logger
from contact_api.utils.validation import validate_field, validate_form

logger = file_logger(getLogger(__name__))

RETRYABLE_STATUSES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

RetryObserver = Callable[[int, "SubmissionError"], None]
SuccessObserver = Callable[[dict[str, Any]], None]
ErrorObserver = Callable[["SubmissionError"], None]


class SubmissionState(StrEnum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class SubmissionError(Exception):
    """A submission that did not succeed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RetryableSubmissionError(SubmissionError):
    """Network failure, timeout, or a 408/429/5xx answer."""


class TerminalSubmissionError(SubmissionError):
    """Any other failure; only an explicit ``retry()`` sends it again."""


class SubmissionInProgressError(SubmissionError):
    """Raised by ``submit`` while another submission is still in flight."""

    def __init__(self) -> None:
        super().__init__("A submission is already in progress")


@dataclass
class ContactForm:
    """Field values of one contact form instance."""

    name: str = ""
    email: str = ""
    message: str = ""
    project_type: str = ""
    budget: str = ""
    honeypot: str = ""

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "projectType": self.project_type,
            "budget": self.budget,
            "message": self.message,
            "honeypot": self.honeypot,
        }

    def clear(self) -> None:
        for field in fields(self):
            setattr(self, field.name, "")


def classify_response(response: Response) -> dict[str, Any]:
    """
    Turn an endpoint response into its JSON payload or a typed error.

    Raises:
        RetryableSubmissionError: 408, 429 or a retryable 5xx.
        TerminalSubmissionError: Any other non-2xx, or a non-JSON body.
    """
    if not response.is_success:
        error_cls = (
            RetryableSubmissionError
            if response.status_code in RETRYABLE_STATUSES
            else TerminalSubmissionError
        )
        message = f"HTTP {response.status_code}"
        with suppress(ValueError, AttributeError):
            message = response.json().get("error") or message
        raise error_cls(message, response.status_code)

    if "application/json" not in response.headers.get("content-type", ""):
        mssg = "Response is not JSON"
        raise TerminalSubmissionError(mssg, response.status_code)

    try:
        data = response.json()
    except ValueError as error:
        mssg = "Malformed JSON response"
        raise TerminalSubmissionError(mssg, response.status_code) from error

    return data if isinstance(data, dict) else {"data": data}


class SubmissionClient:
    """
    Submission state machine: ``idle -> submitting -> success | failed``.

    Only one submission is in flight per client; a ``FAILED`` client goes
    back to ``SUBMITTING`` through ``retry()``. Cancelling an in-flight
    submission returns the client to ``IDLE`` without counting it as a
    success or a failure.
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = CONTACT_PATH,
        http_client: AsyncClient | None = None,
        max_retries: int = 2,
        base_delay: float = 2.0,
        jitter: float = 1.0,
        timeout: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio_sleep,
        on_retry: RetryObserver | None = None,
        on_success: SuccessObserver | None = None,
        on_error: ErrorObserver | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Origin of the contact API.
            path: Path of the contact endpoint.
            http_client: Shared ``httpx.AsyncClient``; one is created (and
                owned) when omitted.
            max_retries: Automatic retries after the first attempt.
            base_delay: Seconds before the first retry; doubled per retry.
            jitter: Upper bound of the random seconds added to each delay.
            timeout: Seconds before a request is abandoned.
            sleep: Awaitable sleep used between attempts.
            on_retry: Called with ``(attempt, error)`` before each retry.
            on_success: Called with the response payload.
            on_error: Called with the final error.
        """
        self.url = f"{base_url.rstrip('/')}{path}"
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.jitter = jitter
        self.timeout = timeout
        self._sleep = sleep
        self._owns_client = http_client is None
        self._http = http_client or AsyncClient(timeout=timeout)
        self.on_retry = on_retry
        self.on_success = on_success
        self.on_error = on_error

        self.state = SubmissionState.IDLE
        self.retry_count = 0
        self.field_errors: dict[str, str] = {}
        self.last_error: SubmissionError | None = None
        self.result: dict[str, Any] | None = None
        self._form: ContactForm | None = None
        self._task: Task[dict[str, Any]] | None = None
        self._cancel_requested = False

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.cancel()
        if self._owns_client:
            await self._http.aclose()

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def submit(self, form: ContactForm) -> dict[str, Any] | None:
        """
        Validate ``form`` locally, then post it.

        Returns:
            The response payload, or None when local validation failed
            (see ``field_errors``) or the submission was cancelled.

        Raises:
            SubmissionInProgressError: Another submission is in flight.
            SubmissionError: The submission failed after all retries.
        """
        if self.in_flight:
            raise SubmissionInProgressError

        self.field_errors = validate_form(
            {"name": form.name, "email": form.email, "message": form.message},
        )
        if self.field_errors:
            self.state = SubmissionState.IDLE
            return None

        self._form = form
        return await self._start()

    async def retry(self) -> dict[str, Any] | None:
        """Send the last failed form again, starting from attempt zero."""
        if self.in_flight:
            raise SubmissionInProgressError
        if self._form is None:
            mssg = "Nothing to retry"
            raise SubmissionError(mssg)
        return await self._start()

    def cancel(self) -> bool:
        """Abort the in-flight submission. Returns False if there was none."""
        if not self.in_flight or self._task is None:
            return False
        self._cancel_requested = True
        self._task.cancel()
        return True

    async def _start(self) -> dict[str, Any] | None:
        form = self._form
        if form is None:
            return None

        self.state = SubmissionState.SUBMITTING
        self.retry_count = 0
        self.last_error = None
        self._cancel_requested = False
        self._task = create_task(self._send_with_retries(form.to_payload()))

        try:
            data = await self._task
        except CancelledError:
            if not self._cancel_requested:
                raise
            logger.info("Contact submission cancelled")
            self.state = SubmissionState.IDLE
            return None
        except SubmissionError as error:
            self.state = SubmissionState.FAILED
            self.last_error = error
            logger.warning(f"Contact submission failed: {error.message}")
            if self.on_error:
                self.on_error(error)
            raise
        finally:
            self._task = None

        self.state = SubmissionState.SUCCESS
        self.result = data
        # A cleared form is never sent again
        self._form = None
        form.clear()
        if self.on_success:
            self.on_success(data)
        return data

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        self.retry_count = retry_state.attempt_number

        logger.warning(
            "Retry %d/%d for contact submission after %.2fs delay. Error: %s",
            retry_state.attempt_number,
            self.max_retries,
            delay,
            error,
        )
        if self.on_retry and isinstance(error, SubmissionError):
            self.on_retry(retry_state.attempt_number, error)

    async def _send_with_retries(self, payload: dict[str, str]) -> dict[str, Any]:
        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay) + wait_random(0, self.jitter),
            retry=retry_if_exception_type(RetryableSubmissionError),
            before_sleep=self._before_sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._post(payload)

        # reraise=True means the loop above either returns or raises
        mssg = "Retry loop exited without a result"
        raise SubmissionError(mssg)

    async def _post(self, payload: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self._http.post(self.url, json=payload, timeout=self.timeout)
        except TransportError as error:
            raise RetryableSubmissionError(str(error) or type(error).__name__) from error
        return classify_response(response)


class LiveValidator:
    """
    Debounced per-field validation while the user types.

    Each ``update`` cancels the pending check for that field and schedules
    a new one ``delay`` seconds later on the running loop.
    """

    def __init__(
        self,
        delay: float = 0.3,
        on_result: Callable[[str, str | None], None] | None = None,
    ) -> None:
        self.delay = delay
        self.on_result = on_result
        self.errors: dict[str, str] = {}
        self._pending: dict[str, TimerHandle] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def update(self, field: str, value: str) -> None:
        if handle := self._pending.pop(field, None):
            handle.cancel()
        self._pending[field] = get_running_loop().call_later(
            self.delay,
            self._validate,
            field,
            value,
        )

    def _validate(self, field: str, value: str) -> None:
        self._pending.pop(field, None)
        error = validate_field(field, value)
        if error:
            self.errors[field] = error
        else:
            self.errors.pop(field, None)
        if self.on_result:
            self.on_result(field, error)

    def cancel(self) -> None:
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
