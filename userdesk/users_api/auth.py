# userdesk/users_api/auth.py
# Description: Bearer token providers handed to UsersAPIClient
#
# Imports
import os
from typing import Optional, Protocol, Dict, Any
#
# 3rd-party Libraries
from loguru import logger
#
#######################################################################################################################
#
# Functions:

TOKEN_ENV_VAR = "USERDESK_API_TOKEN"


class TokenProvider(Protocol):
    def get_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    """Hands out a fixed token, e.g. one obtained from a login call."""
    def __init__(self, token: Optional[str] = None):
        self._token = token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token


class ConfigTokenProvider:
    """
    Reads the token on every call: the USERDESK_API_TOKEN environment variable
    wins, then the [auth] token key of the loaded settings.
    """
    def __init__(self, settings: Optional[Dict[str, Any]] = None, env_var: str = TOKEN_ENV_VAR):
        self._settings = settings
        self.env_var = env_var

    def get_token(self) -> Optional[str]:
        token = os.environ.get(self.env_var)
        if token:
            return token
        from ..config import get_setting
        token = get_setting("auth", "token", None, self._settings)
        if not token:
            logger.debug(f"No API token found in ${self.env_var} or [auth] config section.")
            return None
        return token


def bearer_headers(provider: Optional[TokenProvider]) -> Dict[str, str]:
    if provider is None:
        return {}
    token = provider.get_token()
    if token is None:
        logger.warning("Token provider returned no token; sending request without Authorization header.")
        return {}
    return {"Authorization": f"Bearer {token}"}

#
# End of userdesk/users_api/auth.py
########################################################################################################################
