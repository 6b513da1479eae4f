"""Account configuration loading.

Two sources are supported:

1. ``hubdb.toml`` -- named account profiles::

       default_account = "prod"

       [accounts.prod]
       account_id = 123456
       access_token = "pat-na1-..."
       description = "Production portal"

2. Environment variables -- ``get_environment_variable_config()`` builds a
   single-account config from a caller-supplied mapping (usually
   ``os.environ``).  ``HUBSPOT_PORTAL_ID`` plus ``HUBSPOT_ACCESS_TOKEN`` wins;
   otherwise ``HUBSPOT_PORTAL_ID`` plus ``HUBSPOT_API_KEY`` are used.
"""

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path

from hubdb_sync.config.models import AccountProfile, HubDbConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "hubdb.toml"
ENVIRONMENT_VARIABLES_ACCOUNT_NAME = "EnvironmentVariablesAccount"

HUBSPOT_ACCESS_TOKEN = "HUBSPOT_ACCESS_TOKEN"
HUBSPOT_API_KEY = "HUBSPOT_API_KEY"
HUBSPOT_PORTAL_ID = "HUBSPOT_PORTAL_ID"


def load_hubdb_config(config_path: str | Path | None = None) -> HubDbConfig:
    """Load account configuration from a TOML file.

    Args:
        config_path: Path to hubdb.toml (default: ``./hubdb.toml``).

    Returns:
        HubDbConfig with all account profiles.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If a profile is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"HubDB config not found: {config_path}\n"
            f"Create it with an [accounts.<name>] section, or pass --use-env."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    accounts = {}
    for name, account_data in data.get("accounts", {}).items():
        accounts[name] = AccountProfile(**account_data)

    return HubDbConfig(
        accounts=accounts,
        default_account=data.get("default_account"),
    )


def get_environment_variable_config(environ: Mapping[str, str]) -> HubDbConfig | None:
    """Build a single-account config from environment variables.

    Args:
        environ: Variable mapping to read (pass ``os.environ`` explicitly).

    Returns:
        HubDbConfig whose only account is ``EnvironmentVariablesAccount``,
        or ``None`` if no usable credential set is present.

    Raises:
        ValueError: If ``HUBSPOT_PORTAL_ID`` is not an integer.
    """
    access_token = environ.get(HUBSPOT_ACCESS_TOKEN)
    api_key = environ.get(HUBSPOT_API_KEY)
    portal_id = environ.get(HUBSPOT_PORTAL_ID)

    if access_token and portal_id:
        logger.debug("Using access token from environment")
        profile = AccountProfile(account_id=int(portal_id), access_token=access_token)
    elif api_key and portal_id:
        logger.debug("Using API key from environment")
        profile = AccountProfile(account_id=int(portal_id), api_key=api_key)
    else:
        logger.debug("No HubSpot credentials found in environment")
        return None

    return HubDbConfig(
        accounts={ENVIRONMENT_VARIABLES_ACCOUNT_NAME: profile},
        default_account=ENVIRONMENT_VARIABLES_ACCOUNT_NAME,
    )
