# Tests/conftest.py
#
#
# Imports
import pytest
#
# Local imports
from fakes import FakeUsersStore, make_page, make_user
#
############################################################################################################################
#
# Functions:

@pytest.fixture
def three_page_store() -> FakeUsersStore:
    return FakeUsersStore({
        1: make_page(1, [make_user(1, "Ann", "Baker", "ann@x.com"),
                         make_user(2, "Bob", "Carter", "bob@x.com"),
                         make_user(3, "Cleo", "Dunn", "cleo@y.org")], total_pages=3),
        2: make_page(2, [make_user(4, "Dave", "Evans"), make_user(5, "Eve", "Ford")], total_pages=3),
        3: make_page(3, [make_user(6, "Finn", "Gray")], total_pages=3),
    })
