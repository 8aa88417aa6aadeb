import pathlib
import pytest


# ----------------------------
#  Auto-mark tests by folder
# ----------------------------

def pytest_collection_modifyitems(config, items):
    for item in items:
        p = pathlib.Path(str(item.fspath)).as_posix()
        if "/tests/unit/" in p:
            item.add_marker(pytest.mark.unit)
        elif "/tests/component/" in p:
            item.add_marker(pytest.mark.component)


# ----------------------------
#  ENV setup
# ----------------------------

@pytest.fixture(autouse=True)
def env_setup(monkeypatch):
    # ensure tests never use real account credentials
    for var in (
        "ESPUTNIK_USER",
        "ESPUTNIK_PASSWORD",
        "ESPUTNIK_BOOK_ID",
        "ESPUTNIK_BASE_URL",
        "ESPUTNIK_CONNECT_TIMEOUT_S",
    ):
        monkeypatch.delenv(var, raising=False)


# ----------------------------
#  Fake transport for facade tests
# ----------------------------

@pytest.fixture()
def fake_transport():
    from tests.helpers.fakes import FakeTransport

    return FakeTransport()


@pytest.fixture()
def client(fake_transport):
    from esputnik.adapters.esputnik_client import ESputnikClient

    return ESputnikClient("user", "secret", transport=fake_transport)
