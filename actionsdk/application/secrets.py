import logging
import os
from collections.abc import Mapping

from actionsdk.domain.errors import SecretNotFoundError

logger = logging.getLogger(__name__)


def get_secret(name: str, *, environ: Mapping[str, str] | None = None) -> str:
    """Return the workspace secret exposed as environment variable ``name``.

    An unset variable and an empty one are treated the same.

    Raises:
        SecretNotFoundError: If the secret is unset or empty
    """
    env = os.environ if environ is None else environ
    secret = env.get(name, "")
    if secret:
        return secret

    logger.debug(f"Secret '{name}' is not set")
    raise SecretNotFoundError(name)
