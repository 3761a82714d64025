from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from docker.errors import ImageNotFound
from docker.utils import parse_repository_tag
from pydantic import BaseModel

from podman_lifecycle.core.errors import ImagePullError, translate_remote_errors
from podman_lifecycle.core.session import Session
from podman_lifecycle.utils.logger import logger


class PullPolicy(str, Enum):
    ALWAYS = "always"
    MISSING = "missing"
    NEVER = "never"


class PullOptions(BaseModel):
    policy: PullPolicy = PullPolicy.MISSING
    platform: Optional[str] = None
    auth_config: Optional[Dict[str, str]] = None


def split_reference(image_ref: str) -> Tuple[str, str]:
    """Split ``registry/name:tag`` or ``name@sha256:...`` into repository and tag."""
    repository, tag = parse_repository_tag(image_ref)
    return repository, tag or "latest"


class ImageResolver:
    """Makes sure an image is present on the remote before units are created from it."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def is_present(self, image_ref: str) -> bool:
        try:
            with translate_remote_errors(ImagePullError, f"Looking up image {image_ref}"):
                self._session.client.images.get(image_ref)
            return True
        except ImagePullError as e:
            if isinstance(e.__cause__, ImageNotFound):
                return False
            raise

    def ensure_image(self, image_ref: str, options: Optional[PullOptions] = None) -> None:
        """
        Make ``image_ref`` available on the remote service.

        Pulling an image that is already present is a successful no-op under
        the default policy. The pull blocks until the remote finishes.

        Raises:
            ImagePullError: image not found upstream, registry unreachable,
                malformed reference, or absent under ``PullPolicy.NEVER``.
        """
        options = options or PullOptions()
        if not image_ref or not image_ref.strip():
            raise ImagePullError(f"Malformed image reference: {image_ref!r}")

        if options.policy != PullPolicy.ALWAYS:
            if self.is_present(image_ref):
                logger.debug(f"Image {image_ref} already exists locally")
                return
            if options.policy == PullPolicy.NEVER:
                raise ImagePullError(f"Image {image_ref} is not present and pull policy is 'never'")

        repository, tag = split_reference(image_ref)
        kwargs: Dict[str, Any] = {}
        if options.platform:
            kwargs["platform"] = options.platform
        if options.auth_config:
            kwargs["auth_config"] = options.auth_config

        logger.info(f"Pulling image {image_ref}...")
        try:
            with translate_remote_errors(ImagePullError, f"Failed to pull image {image_ref}"):
                self._session.client.images.pull(repository, tag=tag, **kwargs)
        except ImagePullError as e:
            logger.error(str(e))
            raise
        logger.info(f"Successfully pulled image {image_ref}")

    def list_image_tags(self) -> List[str]:
        """Every repo tag known to the remote service."""
        with translate_remote_errors(ImagePullError, "Failed to list images"):
            images = self._session.client.images.list()
        names: List[str] = []
        for image in images:
            names.extend(getattr(image, "tags", None) or [])
        return names


__all__ = ["ImageResolver", "PullOptions", "PullPolicy", "split_reference"]
