import tempfile
from pathlib import Path

import pytest

from demolsp.lsp.types import TextDocumentItem
from demolsp.server.session import Session

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAMPLE_TEXT = """let myVar = 10;
function myFunc() {
  console.log(myVar);
}"""


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_config(temp_dir, monkeypatch):
    cache_dir = temp_dir / "cache"
    config_dir = temp_dir / "config"
    cache_dir.mkdir()
    config_dir.mkdir()

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))

    return {"cache": cache_dir, "config": config_dir}


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def open_doc(session):
    def _open(uri: str, text: str, version: int = 1):
        return session.open_document(
            TextDocumentItem(uri=uri, language_id="javascript", version=version, text=text)
        )

    return _open


@pytest.fixture
def js_project(temp_dir):
    src = FIXTURES_DIR / "example.js"
    dst = temp_dir / "example.js"
    dst.write_text(src.read_text())
    return temp_dir
