import logging

import pytest

from kasirku.config import Settings, configure_logging, load_settings, make_store
from kasirku.store import MemoryStore, RestStore


def test_defaults_from_empty_env():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.branch_id is None


def test_values_from_env():
    settings = load_settings({
        "KASIRKU_STORE_URL": " https://db.example ",
        "KASIRKU_STORE_KEY": "secret",
        "KASIRKU_USER_ID": "u1",
        "KASIRKU_BRANCH_ID": "b1",
        "KASIRKU_TIMEOUT": "2.5",
        "KASIRKU_LOG_LEVEL": "debug",
        "KASIRKU_MONTH_LOCALE": "EN",
    })
    assert settings.store_url == "https://db.example"
    assert settings.branch_id == "b1"
    assert settings.timeout == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.month_locale == "en"


def test_blank_branch_means_no_branch():
    assert load_settings({"KASIRKU_BRANCH_ID": "  "}).branch_id is None


def test_bad_timeout():
    with pytest.raises(ValueError):
        load_settings({"KASIRKU_TIMEOUT": "soon"})


def test_make_store():
    assert isinstance(make_store(Settings()), MemoryStore)
    store = make_store(Settings(store_url="https://db.example", timeout=4))
    assert isinstance(store, RestStore)
    assert store.timeout == 4


def test_configure_logging_accepts_unknown_level():
    configure_logging("NOT_A_LEVEL")
    assert logging.getLogger("kasirku").getEffectiveLevel() <= logging.WARNING
