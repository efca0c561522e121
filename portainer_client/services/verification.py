"""Polling verification for asynchronously created Portainer resources."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from ..constants import DEFAULT_POLL_INTERVAL_MS, DEFAULT_VERIFY_TIMEOUT_MS
from ..core.result import Result
from ..utils import normalize_non_negative
from .lookup import ResourceLookup

Lookup = Callable[[], Awaitable[Any]]


class VerificationPoller:
    """Poll a lookup until the resource appears or the timeout elapses.

    Attempts are strictly sequential with ``poll_interval_ms`` of sleep between
    them, independent of how long a lookup takes. The final sleep is cut short
    at the deadline, so a call never outlives ``timeout_ms`` by more than one
    in-flight lookup.
    """

    def __init__(
        self,
        lookup: ResourceLookup | None = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        logger: Any = None,
    ):
        self.lookup = lookup
        self.poll_interval_ms = poll_interval_ms
        self.logger = (logger or structlog.get_logger()).bind(component="verification_poller")

    async def verify(
        self,
        lookup: Lookup,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
        description: str = "resource",
    ) -> bool:
        """Return True as soon as ``lookup`` yields a found resource.

        A lookup counts as found when it returns a successful ``Result`` or any
        other non-None value. Lookup exceptions and failed results count as
        "not yet found". Invalid timeouts fall back to the default.
        """
        timeout_ms = normalize_non_negative(
            timeout_ms, DEFAULT_VERIFY_TIMEOUT_MS, "timeout_ms", self.logger
        )
        timeout = timeout_ms / 1000
        interval = self.poll_interval_ms / 1000
        start = time.monotonic()
        attempts = 0

        while time.monotonic() - start < timeout:
            attempts += 1
            try:
                if self._is_found(await lookup()):
                    self.logger.info(
                        "Resource verified",
                        resource=description,
                        attempts=attempts,
                        elapsed_ms=round((time.monotonic() - start) * 1000),
                    )
                    return True
            except Exception as e:
                self.logger.warning(
                    "Error during verification", resource=description, error=str(e)
                )

            remaining = timeout - (time.monotonic() - start)
            if remaining <= 0:
                break
            await asyncio.sleep(min(interval, remaining))

        self.logger.warning(
            "Verification timed out",
            resource=description,
            attempts=attempts,
            timeout_ms=timeout_ms,
        )
        return False

    async def verify_stack_created(
        self, stack_name: str, timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS
    ) -> bool:
        if not stack_name or not isinstance(stack_name, str):
            self.logger.error("Invalid stack name: must be a non-empty string")
            return False
        return await self.verify(
            lambda: self._require_lookup().find_stack_by_name(stack_name),
            timeout_ms,
            f"stack '{stack_name}'",
        )

    async def verify_container_created(
        self,
        container_name: str,
        timeout_ms: Any = DEFAULT_VERIFY_TIMEOUT_MS,
        environment_id: int | None = None,
    ) -> bool:
        """True once a container whose names match ``container_name`` is listed.

        Matching is the permissive substring match of ``find_container_by_name``,
        so an unrelated container such as ``/web-db`` already satisfies a check
        for ``web``. Callers that need the exact container should compare the
        id returned by the create call.
        """
        if not container_name or not isinstance(container_name, str):
            self.logger.error("Invalid container name: must be a non-empty string")
            return False
        return await self.verify(
            lambda: self._require_lookup().find_container_by_name(container_name, environment_id),
            timeout_ms,
            f"container '{container_name}'",
        )

    def _require_lookup(self) -> ResourceLookup:
        if self.lookup is None:
            raise RuntimeError("VerificationPoller was created without a ResourceLookup")
        return self.lookup

    @staticmethod
    def _is_found(outcome: Any) -> bool:
        if isinstance(outcome, Result):
            return outcome.ok
        return outcome is not None and outcome is not False
