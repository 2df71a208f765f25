# userdesk/users_api/exceptions.py
#
#
# Imports
from enum import Enum
from typing import Optional
#
#######################################################################################################################
#
# Functions:

class FailureReason(str, Enum):
    NETWORK_FAILURE = "network_failure"
    NON_SUCCESS_STATUS = "non_success_status"
    MALFORMED_RESPONSE = "malformed_response"
    CLIENT_ERROR = "client_error"  # request could not be built or handled locally


class UsersAPIError(Exception):
    """Base exception for users_api errors."""
    def __init__(self, reason: FailureReason, message: str, status_code: Optional[int] = None,
                 response_data: Optional[dict] = None):
        if status_code is not None:
            super().__init__(f"API Error {status_code}: {message}")
        else:
            super().__init__(message)
        self.reason = reason
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}

    @property
    def is_network_failure(self) -> bool:
        return self.reason is FailureReason.NETWORK_FAILURE


class FetchError(UsersAPIError):
    """Raised when a page of users could not be fetched."""
    pass


class MutationError(UsersAPIError):
    """Raised when an update or delete was not accepted by the remote store."""
    pass

#
# End of userdesk/users_api/exceptions.py
########################################################################################################################
