# userdesk/__init__.py
from .app import create_users_client, create_users_controller
from .Users import UsersSyncController, filter_users

__all__ = ["create_users_client", "create_users_controller", "UsersSyncController", "filter_users"]
