"""HubDB client factory.

Resolves which account profile to use and builds a client for it.  The
configuration and the environment mapping are passed in by the caller;
nothing here reads process-wide state on its own.

Account selection priority:
1. Explicit account name (``--account``)
2. ``{env_prefix}HUBDB_ACCOUNT`` in the supplied environment mapping
3. ``default_account`` from the config
4. Raise ``ProfileNotFoundError``
"""

import logging
from collections.abc import Mapping

from hubdb_sync.adapters.http import AsyncHubDbHttpAdapter
from hubdb_sync.config.models import AccountProfile, HubDbConfig

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no account profile is configured."""

    pass


def get_active_account_name(
    config: HubDbConfig,
    account: str | None = None,
    environ: Mapping[str, str] | None = None,
    env_prefix: str = "",
) -> str:
    """Get the active account name.

    Args:
        config: Loaded account configuration.
        account: Explicit account name, takes precedence when given.
        environ: Environment mapping to consult (e.g. ``os.environ``).
        env_prefix: Prefix for the environment lookup (e.g. ``"APP_"``
            reads ``APP_HUBDB_ACCOUNT``).

    Returns:
        Account name.

    Raises:
        ProfileNotFoundError: If no account is selected.
    """
    if account:
        return account

    env_account = (environ or {}).get(f"{env_prefix}HUBDB_ACCOUNT")
    if env_account:
        return env_account

    if config.default_account:
        return config.default_account

    available = ", ".join(config.accounts.keys()) or "(none)"
    raise ProfileNotFoundError(
        "No HubDB account configured.\n"
        f"Run: {env_prefix}HUBDB_ACCOUNT=<name> hubdb-sync <command>\n"
        f"Available accounts: {available}"
    )


def get_active_account(
    config: HubDbConfig,
    account: str | None = None,
    environ: Mapping[str, str] | None = None,
    env_prefix: str = "",
) -> tuple[str, AccountProfile]:
    """Get the active account name and profile.

    Returns:
        Tuple of (account_name, AccountProfile).

    Raises:
        ProfileNotFoundError: If no account is selected or the selected
            name is not in the config.
    """
    name = get_active_account_name(config, account, environ, env_prefix)

    if name not in config.accounts:
        available = ", ".join(config.accounts.keys()) or "(none)"
        raise ProfileNotFoundError(
            f"Account '{name}' not found in config. Available: {available}"
        )

    return name, config.accounts[name]


def get_client(profile: AccountProfile) -> AsyncHubDbHttpAdapter:
    """Build an HTTP client for an account profile.

    Example:
        >>> name, profile = get_active_account(config, environ=os.environ)
        >>> client = get_client(profile)
    """
    logger.debug(
        "Creating client for account %s (%s)", profile.account_id, profile.auth_method
    )
    if profile.access_token:
        return AsyncHubDbHttpAdapter(
            access_token=profile.access_token, base_url=profile.base_url
        )
    return AsyncHubDbHttpAdapter(api_key=profile.api_key, base_url=profile.base_url)
