import pytest
import tempfile
import shutil
from pathlib import Path

from synext.core.models import ExtractionConfig, FileTypeSet
from synext.host.config_store import ConfigStore, teardown_config_store


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the real settings directory."""
    monkeypatch.setenv("SYNEXT_CONFIG_DIR", str(tmp_path / "settings"))
    monkeypatch.delenv("SYNEXT_TOKEN_ENCODING", raising=False)
    monkeypatch.delenv("SYNEXT_CONFIG_FILE", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    yield
    teardown_config_store()


@pytest.fixture
def temp_workspace():
    """Create a temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_repo(temp_workspace):
    """Create a sample project structure for testing."""
    repo_root = temp_workspace / "sample_repo"
    repo_root.mkdir()

    # Create directory structure
    (repo_root / "src").mkdir()
    (repo_root / "src" / "utils").mkdir()
    (repo_root / "docs").mkdir()
    (repo_root / ".git").mkdir()
    (repo_root / "node_modules").mkdir()

    # Create files
    (repo_root / "README.md").write_text("# Sample Repository\n\nTest repository for synext")
    (repo_root / "src" / "main.ts").write_text("import { helper } from './utils/helpers';\n\nhelper();\n")
    (repo_root / "src" / "utils" / "helpers.ts").write_text("export function helper() {\n  return 42;\n}\n")
    (repo_root / "src" / "styles.css").write_text("#app { color: red; }\n")
    (repo_root / "docs" / "guide.md").write_text("# Guide\n")
    (repo_root / ".git" / "config").write_text("[core]\n    repositoryformatversion = 0")
    (repo_root / "node_modules" / "package.json").write_text('{"name": "test"}')
    (repo_root / "package-lock.json").write_text('{"lockfileVersion": 3}')

    # Create binary file
    (repo_root / "image.png").write_bytes(b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR')

    return repo_root


@pytest.fixture
def ts_config():
    return ExtractionConfig(file_types=FileTypeSet([".ts"]))


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "store" / "settings.json")
