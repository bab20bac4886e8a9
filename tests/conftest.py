import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import md2pptx` works without install
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def deck_dir(tmp_path):
    """Directory holding two markdown files: a.md (two slides) and b.md
    (an untitled slide followed by one titled slide)."""
    source = tmp_path / "talks"
    source.mkdir()
    (source / "a.md").write_text("# A1\n\nx\n\n## A2\n\ny", encoding="utf-8")
    (source / "b.md").write_text("untitled para\n\n# B1\n\nz", encoding="utf-8")
    return source
