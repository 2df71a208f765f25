# app.py
# Description: Wires configuration, the users API client and the sync controller together
#
# Imports
from typing import Optional, Dict, Any
#
# 3rd-Party Imports
import httpx
from loguru import logger
#
# Local Imports
from .config import load_settings, get_api_base_url, get_api_timeout, get_api_key
from .Logging_Config import configure_logging_from_settings
from .users_api.auth import TokenProvider, ConfigTokenProvider
from .users_api.client import UsersAPIClient
from .Users.Users_Sync import UsersSyncController
#
########################################################################################################################
#
# Functions:

def create_users_client(settings: Optional[Dict[str, Any]] = None,
                        token_provider: Optional[TokenProvider] = None,
                        transport: Optional[httpx.AsyncBaseTransport] = None) -> UsersAPIClient:
    settings = settings if settings is not None else load_settings()
    if token_provider is None:
        token_provider = ConfigTokenProvider(settings)
    client = UsersAPIClient(
        base_url=get_api_base_url(settings),
        token_provider=token_provider,
        timeout=get_api_timeout(settings),
        api_key=get_api_key(settings),
        transport=transport,
    )
    logger.debug(f"Created UsersAPIClient for {client.base_url} (timeout {client.timeout}s)")
    return client


def create_users_controller(settings: Optional[Dict[str, Any]] = None,
                            token_provider: Optional[TokenProvider] = None,
                            transport: Optional[httpx.AsyncBaseTransport] = None,
                            configure_logging: bool = False) -> UsersSyncController:
    settings = settings if settings is not None else load_settings()
    if configure_logging:
        configure_logging_from_settings(settings)
    client = create_users_client(settings, token_provider=token_provider, transport=transport)
    return UsersSyncController(client)

#
# End of app.py
########################################################################################################################
