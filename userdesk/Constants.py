# Constants.py
# Description: Constants for the application
#
# Imports
#
# 3rd-Party Imports
#
# Local Imports
#
########################################################################################################################
#
# Functions:

# --- Remote API ---
DEFAULT_API_BASE_URL = "https://reqres.in/api"
DEFAULT_API_TIMEOUT_SECONDS = 30.0
FIRST_PAGE = 1

# --- Notification titles / messages ---
TITLE_SUCCESS = "Success"
TITLE_ERROR = "Error"

MSG_PAGE_LOADED = "Loaded page {page} of {total_pages}"
MSG_FETCH_FAILED = "Failed to fetch users"
MSG_USER_UPDATED = "User updated successfully"
MSG_UPDATE_FAILED = "Failed to update user"
MSG_USER_DELETED = "User deleted successfully"
MSG_DELETE_FAILED = "Failed to delete user"

#
# End of Constants.py
########################################################################################################################
