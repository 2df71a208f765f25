# Users_Filter.py
# Description: Local search over the currently loaded page of users
#
# Imports
from typing import Iterable, List
#
# Local Imports
from ..users_api.schemas import UserRecord
#
########################################################################################################################
#
# Functions:

def matches_query(record: UserRecord, query: str) -> bool:
    """True if `query` occurs, ignoring case, in the first name, last name or email."""
    if not query:
        return True
    needle = query.casefold()
    return (
        needle in record.first_name.casefold()
        or needle in record.last_name.casefold()
        or needle in record.email.casefold()
    )


def filter_users(records: Iterable[UserRecord], query: str) -> List[UserRecord]:
    """
    Returns the records matching `query`, in their original order.
    An empty query returns every record.
    """
    return [record for record in records if matches_query(record, query)]

#
# End of Users_Filter.py
########################################################################################################################
