import os
import tempfile

# settings and the module-level singletons read the environment at import time
_TMP = tempfile.mkdtemp(prefix="portfolio-tests-")
os.environ["DATA_DIR"] = os.path.join(_TMP, "data")
os.environ.pop("ADMIN_TOKEN", None)

import pytest
from fastapi.testclient import TestClient

from portfolio.main import create_app
from portfolio.persistence.store import DiskStore
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.files import FileStore
from portfolio.singletons import get_cache, get_files, get_repo, get_store


@pytest.fixture
def store(tmp_path):
    return DiskStore(tmp_path / "data")


@pytest.fixture
def repo(store):
    return InMemoryRepo(store=store)


@pytest.fixture
def files(tmp_path):
    return FileStore(tmp_path / "uploads")


@pytest.fixture
def cache():
    return ProjectionCache(ttl_s=60)


@pytest.fixture
def app(repo, files, cache, store):
    app = create_app()
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_files] = lambda: files
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_store] = lambda: store
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
