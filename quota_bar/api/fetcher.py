"""
Quota fetcher invocation module.

This module defines the fetch contract with the external quota fetcher and
runs it as a subprocess that prints a JSON document keyed by provider id.
"""

import asyncio
import json
import logging
import os
import shlex
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Protocol, Tuple

from ..constants import CREDENTIAL_ENV_VARS
from ..models.provider import PROVIDER_PRIORITY, ProviderId, order_by_priority

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a fetch cycle cannot produce a usable result document."""
    pass


class FetchTransportError(FetchError):
    """The fetcher could not be run or did not complete successfully."""
    pass


class MalformedResponseError(FetchError):
    """The fetcher completed but its output is not a JSON object."""
    pass


@dataclass(frozen=True)
class FetchRequest:
    """
    Parameters of one quota fetch.

    Attributes:
        enabled_providers: Providers to query, in priority order
        use_cache: Whether the fetcher may serve cached data
        credentials: Optional secrets keyed by provider
    """
    enabled_providers: Tuple[ProviderId, ...]
    use_cache: bool = False
    credentials: Mapping[ProviderId, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "enabled_providers", order_by_priority(self.enabled_providers))


@dataclass(frozen=True)
class FetchResult:
    """Decoded fetcher document plus the raw text it was decoded from."""
    results: Dict[str, Any]
    raw_output: str


class QuotaFetcher(Protocol):
    """Anything that can fetch the provider result document."""

    async def fetch(self, request: FetchRequest) -> FetchResult:
        ...


def decode_fetch_output(text: str) -> Dict[str, Any]:
    """
    Decode fetcher output into the top-level provider mapping.

    Raises:
        MalformedResponseError: If the text is not a JSON object
    """
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"Fetcher output is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedResponseError(
            f"Fetcher output must be a JSON object, got {type(document).__name__}"
        )
    return document


def build_fetch_command(base_command: str, request: FetchRequest) -> List[str]:
    """
    Build the fetcher command line.

    Provider flags are only passed for a strict subset of providers; with all
    providers enabled the fetcher queries everything by default.
    """
    argv = shlex.split(base_command)
    if not argv:
        raise FetchTransportError("Fetcher command is empty")

    argv.append("--json")
    if request.use_cache:
        argv.append("--cached")

    if 0 < len(request.enabled_providers) < len(PROVIDER_PRIORITY):
        argv.extend(f"--{provider.value}" for provider in request.enabled_providers)
    return argv


def credential_environment(credentials: Mapping[ProviderId, str]) -> Dict[str, str]:
    """Map provider credentials to the environment variables the fetcher reads."""
    env = {}
    for provider_id, secret in credentials.items():
        if secret:
            env[CREDENTIAL_ENV_VARS[ProviderId(provider_id).value]] = secret
    return env


class SubprocessQuotaFetcher:
    """
    Runs the external fetcher command and decodes its JSON output.
    """

    def __init__(self, command: str, timeout: float = 60.0):
        """
        Initialize subprocess fetcher.

        Args:
            command: Fetcher command line (shell-style quoting allowed)
            timeout: Maximum seconds to wait for the fetcher to finish
        """
        self.command = command
        self.timeout = timeout

    async def fetch(self, request: FetchRequest) -> FetchResult:
        argv = build_fetch_command(self.command, request)
        env = dict(os.environ)
        env.update(credential_environment(request.credentials))

        logger.debug(f"Running quota fetcher: {' '.join(shlex.quote(a) for a in argv)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise FetchTransportError(f"Failed to start fetcher '{argv[0]}': {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise FetchTransportError(f"Fetcher timed out after {self.timeout:g}s") from None
        except BaseException:
            # Cancelled mid-fetch (shutdown, Ctrl+C); do not leave the fetcher running
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            message = f"Fetcher exited with status {process.returncode}"
            if detail:
                message += f": {detail[-200:]}"
            raise FetchTransportError(message)

        try:
            text = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResponseError(f"Fetcher output is not valid UTF-8: {e}") from e
        return FetchResult(results=decode_fetch_output(text), raw_output=text)
