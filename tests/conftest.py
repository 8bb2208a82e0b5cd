import sys
from pathlib import Path

import pytest

# Ensure repo_root/src is available on sys.path before any tests import project modules
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

EXAMPLE_PROJECT = REPO_ROOT / "example_project"


def write_files(root: Path, files: dict) -> Path:
    """Create ``files`` ({relative path: content}) under ``root``."""
    for rel, content in files.items():
        f = root / rel
        f.parent.mkdir(parents=True, exist_ok=True)
        f.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def example_project() -> Path:
    return EXAMPLE_PROJECT
