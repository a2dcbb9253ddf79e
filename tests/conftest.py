"""Root test configuration: removes databases and staging output left in the project root"""

import shutil
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).parent.parent

# CLI commands run without --staging-dir / BLOGBLOCKS_DB_URL write here
RUNTIME_ARTIFACTS = ["blogblocks.db", "blogblocks.db-journal", "test.db", ".blogblocks"]


def _remove(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()


@pytest.fixture(scope="session", autouse=True)
def clean_runtime_artifacts():
    yield
    for name in RUNTIME_ARTIFACTS:
        _remove(PROJECT_ROOT / name)
