"""
Shared fixtures: in-memory catalog, source and store.
"""

import ibis
import pytest

from docmirror.config.settings import SyncSettings
from docmirror.core.catalog import CatalogStore
from docmirror.testing import InMemoryObjectStore, InMemoryRemoteSource


@pytest.fixture
def catalog():
    connection = ibis.duckdb.connect()
    store = CatalogStore(connection)
    store.initialize()
    yield store
    connection.disconnect()


@pytest.fixture
def source():
    return InMemoryRemoteSource("root")


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def settings():
    return SyncSettings(root_folder_id="root", max_upload_bytes=1024)
