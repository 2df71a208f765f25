# test_users_filter.py
#
# Property-based tests for the local user search.
#
# Imports
import pytest
#
# Third-Party Imports
from hypothesis import given, strategies as st
#
# Local Imports
from userdesk.users_api.schemas import UserRecord
from userdesk.Users.Users_Filter import filter_users, matches_query
#
#######################################################################################################################
#
# --- Hypothesis Strategies ---

st_name = st.text(alphabet=st.characters(categories=["L", "N"]), max_size=12)


@st.composite
def st_user(draw, user_id=st.integers(min_value=1, max_value=10_000)):
    return UserRecord(
        id=draw(user_id),
        first_name=draw(st_name),
        last_name=draw(st_name),
        email=draw(st.emails()),
    )


st_users = st.lists(st_user(), max_size=15)


def _oracle(records, query):
    q = query.casefold()
    return [
        r for r in records
        if q in r.first_name.casefold() or q in r.last_name.casefold() or q in r.email.casefold()
    ]


# --- Properties ---

class TestFilterProperties:

    @given(records=st_users, query=st.text(max_size=5))
    def test_filter_returns_matching_subsequence(self, records, query):
        assert filter_users(records, query) == _oracle(records, query)

    @given(records=st_users)
    def test_empty_query_returns_everything(self, records):
        assert filter_users(records, "") == records

    @given(records=st_users, query=st.text(alphabet="abcdemnortxyz@.", max_size=5))
    def test_filter_is_case_insensitive(self, records, query):
        assert filter_users(records, query.upper()) == filter_users(records, query.lower())

    @given(records=st_users, query=st.text(max_size=5))
    def test_filter_does_not_touch_input(self, records, query):
        before = list(records)
        filter_users(records, query)
        assert records == before


# --- Examples ---

USERS = [
    UserRecord(id=1, first_name="George", last_name="Bluth", email="george.bluth@reqres.in"),
    UserRecord(id=2, first_name="Janet", last_name="Weaver", email="janet.weaver@reqres.in"),
    UserRecord(id=3, first_name="Emma", last_name="Wong", email="emma.wong@reqres.in"),
]


@pytest.mark.parametrize("query, expected_ids", [
    ("", [1, 2, 3]),
    ("jan", [2]),
    ("WONG", [3]),
    ("w", [2, 3]),
    ("reqres", [1, 2, 3]),
    ("bluth@", [1]),
    ("zzz", []),
])
def test_filter_examples(query, expected_ids):
    assert [u.id for u in filter_users(USERS, query)] == expected_ids


def test_matches_query_checks_each_field():
    user = USERS[0]
    assert matches_query(user, "geo")
    assert matches_query(user, "BLU")
    assert matches_query(user, "@reqres")
    assert not matches_query(user, "janet")


def test_filter_of_empty_page_is_empty():
    assert filter_users([], "anything") == []
    assert filter_users((), "") == []
