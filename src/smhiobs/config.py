"""
Client configuration for smhiobs.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .exceptions import SMHIValidationError

METOBS_BASE_URL = "https://opendata-download-metobs.smhi.se"
HYDROOBS_BASE_URL = "https://opendata-download-hydroobs.smhi.se"
API_VERSION = "1.0"

# Max concurrent API calls to SMHI to avoid rate limiting
SMHI_API_CONCURRENCY = 2


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by the SMHI client and the observation pipeline."""

    metobs_base_url: str = METOBS_BASE_URL
    hydroobs_base_url: str = HYDROOBS_BASE_URL
    api_version: str = API_VERSION
    timeout: float = 30.0
    user_agent: str = "smhiobs-client/0.1.0"
    local_timezone: str = "Europe/Stockholm"
    max_concurrency: int = SMHI_API_CONCURRENCY

    def base_url_for(self, network: str) -> str:
        """Return the service root for 'meteorological' or 'hydrological'."""
        if network == "meteorological":
            return self.metobs_base_url
        if network == "hydrological":
            return self.hydroobs_base_url
        raise SMHIValidationError(
            f"Unknown network '{network}'. Use 'meteorological' or 'hydrological'",
            field="network",
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build a config from SMHIOBS_* environment variables.

        Recognised variables: SMHIOBS_METOBS_URL, SMHIOBS_HYDROOBS_URL,
        SMHIOBS_TIMEOUT, SMHIOBS_LOCAL_TZ, SMHIOBS_MAX_CONCURRENCY.
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()

        overrides = {}
        if env.get("SMHIOBS_METOBS_URL"):
            overrides["metobs_base_url"] = env["SMHIOBS_METOBS_URL"].rstrip("/")
        if env.get("SMHIOBS_HYDROOBS_URL"):
            overrides["hydroobs_base_url"] = env["SMHIOBS_HYDROOBS_URL"].rstrip("/")
        if env.get("SMHIOBS_LOCAL_TZ"):
            overrides["local_timezone"] = env["SMHIOBS_LOCAL_TZ"]

        if env.get("SMHIOBS_TIMEOUT"):
            try:
                timeout = float(env["SMHIOBS_TIMEOUT"])
            except ValueError as e:
                raise SMHIValidationError(
                    f"Invalid SMHIOBS_TIMEOUT: {env['SMHIOBS_TIMEOUT']!r}",
                    field="SMHIOBS_TIMEOUT",
                ) from e
            if timeout <= 0:
                raise SMHIValidationError(
                    "SMHIOBS_TIMEOUT must be positive", field="SMHIOBS_TIMEOUT"
                )
            overrides["timeout"] = timeout

        if env.get("SMHIOBS_MAX_CONCURRENCY"):
            try:
                concurrency = int(env["SMHIOBS_MAX_CONCURRENCY"])
            except ValueError as e:
                raise SMHIValidationError(
                    f"Invalid SMHIOBS_MAX_CONCURRENCY: {env['SMHIOBS_MAX_CONCURRENCY']!r}",
                    field="SMHIOBS_MAX_CONCURRENCY",
                ) from e
            if concurrency < 1:
                raise SMHIValidationError(
                    "SMHIOBS_MAX_CONCURRENCY must be at least 1",
                    field="SMHIOBS_MAX_CONCURRENCY",
                )
            overrides["max_concurrency"] = concurrency

        return replace(config, **overrides) if overrides else config
