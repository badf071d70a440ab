"""
Network policy detection.

The build runs either on the default network or on a restricted network that
can only reach the alternative mirrors. The policy is fixed for the whole
build and drives both catalog and archive mirror selection.
"""

import logging
from enum import Enum
from typing import Optional

from runtimekit.core import env
from runtimekit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

NETWORK_ENV_VAR = env.NETWORK


class NetworkPolicy(Enum):
    """Reachability class of the build environment."""

    DEFAULT = "default"
    ALTERNATIVE = "alternative"


_ALIASES = {
    "": NetworkPolicy.DEFAULT,
    "default": NetworkPolicy.DEFAULT,
    "alternative": NetworkPolicy.ALTERNATIVE,
    "alt": NetworkPolicy.ALTERNATIVE,
    "cn": NetworkPolicy.ALTERNATIVE,
}


def detect_network_policy(value: Optional[str] = None) -> NetworkPolicy:
    """
    Map a configured network value to a NetworkPolicy.

    Args:
        value: Raw value from the environment or config file (None means unset)

    Returns:
        Detected policy, DEFAULT when nothing is configured

    Raises:
        ConfigurationError: If the value is not a recognized policy name

    Example:
        >>> detect_network_policy("alternative")
        <NetworkPolicy.ALTERNATIVE: 'alternative'>
    """
    key = (value or "").strip().lower()
    try:
        policy = _ALIASES[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown network policy {value!r}. "
            f"Expected one of: default, alternative"
        ) from None

    logger.debug(f"Network policy: {policy.value}")
    return policy
