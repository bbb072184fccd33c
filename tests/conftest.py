import json
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for local package imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def write_log(tmp_path):
    """Write an NDJSON log; dict entries are JSON-encoded, strings written as-is."""
    def _write(lines, name="requests.ndjson"):
        path = tmp_path / name
        text = "\n".join(x if isinstance(x, str) else json.dumps(x) for x in lines)
        path.write_text(text + "\n", encoding="utf-8")
        return path
    return _write
