import pathlib

import pytest

from bitbucket_pr.vcs import RepositoryRef
from tests.fakes import FakeTransport


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: pathlib.Path,
) -> None:
    # Keep the developer's own credentials and config file out of the tests.
    monkeypatch.delenv("BITBUCKET_EMAIL", raising=False)
    monkeypatch.delenv("BITBUCKET_API_TOKEN", raising=False)
    monkeypatch.delenv("BB_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


@pytest.fixture
def repo() -> RepositoryRef:
    return RepositoryRef(workspace="acme", slug="widgets")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
