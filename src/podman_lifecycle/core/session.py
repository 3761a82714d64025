from __future__ import annotations

import os
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from podman_lifecycle.config import API_TIMEOUT
from podman_lifecycle.core.errors import SessionConnectionError
from podman_lifecycle.utils.logger import logger

SUPPORTED_SCHEMES = ("unix", "npipe", "tcp", "http", "ssh")


def validate_endpoint(endpoint: str) -> str:
    """Check that an endpoint is a usable transport URI and return it."""
    if not endpoint or not isinstance(endpoint, str):
        raise SessionConnectionError(f"Invalid endpoint: {endpoint!r}")
    parts = urlsplit(endpoint)
    if parts.scheme not in SUPPORTED_SCHEMES:
        raise SessionConnectionError(
            f"Unsupported endpoint scheme {parts.scheme!r} in {endpoint!r}"
        )
    if parts.scheme in ("unix", "npipe"):
        if parts.netloc or not parts.path.startswith("/"):
            raise SessionConnectionError(f"Endpoint {endpoint!r} must name an absolute socket path")
    elif not parts.hostname:
        raise SessionConnectionError(f"Endpoint {endpoint!r} has no host")
    return endpoint


class Session:
    """
    A live connection to the remote management service.

    The session owns exactly one client; every component receives the
    session by reference and issues its calls through :attr:`client`.
    """

    def __init__(self, endpoint: str, client: Any) -> None:
        self._endpoint = endpoint
        self._client = client

    @classmethod
    def establish(
        cls,
        endpoint: str,
        *,
        timeout: int = API_TIMEOUT,
        max_retries: int = 1,
    ) -> "Session":
        """
        Connect to ``endpoint`` and verify the remote answers.

        Raises:
            SessionConnectionError: malformed URI, absent socket, permission
                denied or nothing listening.
        """
        validate_endpoint(endpoint)
        parts = urlsplit(endpoint)
        if parts.scheme == "unix" and not os.path.exists(parts.path):
            raise SessionConnectionError(f"Socket {parts.path} does not exist")

        logger.info(f"Connecting to {endpoint}")
        for attempt in range(max_retries):
            try:
                client = docker.DockerClient(base_url=endpoint, timeout=timeout)
                client.ping()
                logger.info(f"Session established with {endpoint}")
                return cls(endpoint, client)
            except (DockerException, RequestException, OSError) as e:
                logger.warning(f"Connection attempt {attempt + 1}/{max_retries} to {endpoint} failed: {e}")
                if attempt < max_retries - 1:
                    time.sleep(2 ** attempt)  # Exponential backoff
                else:
                    logger.error(f"Failed to connect to {endpoint} after {max_retries} attempts: {e}")
                    raise SessionConnectionError(f"Cannot connect to {endpoint}: {e}") from e
        raise SessionConnectionError(f"Cannot connect to {endpoint}: no attempts made")

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def closed(self) -> bool:
        return self._client is None

    @property
    def client(self) -> Any:
        """The underlying client. Raises once the session is closed."""
        if self._client is None:
            raise SessionConnectionError(f"Session to {self._endpoint} is closed")
        return self._client

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except (DockerException, RequestException) as e:
            raise SessionConnectionError(f"Ping to {self._endpoint} failed: {e}") from e

    def version(self) -> Dict[str, Any]:
        try:
            return self.client.version()
        except (DockerException, RequestException) as e:
            raise SessionConnectionError(f"Version query to {self._endpoint} failed: {e}") from e

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.close()
        except (DockerException, RequestException, OSError) as e:
            logger.warning(f"Error while closing session to {self._endpoint}: {e}")
        logger.info(f"Session to {self._endpoint} closed")

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Optional[Any]) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Session {self._endpoint} ({state})>"


__all__ = ["SUPPORTED_SCHEMES", "Session", "validate_endpoint"]
