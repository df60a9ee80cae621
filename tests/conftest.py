import os, asyncio, tempfile, pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import yaml

# settings are read when tara.config is first imported, so isolate paths before any test module loads
_BASE = Path(tempfile.mkdtemp(prefix="tara-tests-"))
os.environ["TARA_DB_PATH"] = str(_BASE / "tara.sqlite")
os.environ["TARA_AUDIO_DIR"] = str(_BASE / "audio")
os.environ.setdefault("TARA_TRACE_PROMPTS", "false")

from tara.models.interaction import InteractionRecord
from tara.stores.interaction_store import InteractionStore

FIXTURES = Path(__file__).parent / "fixtures"

def load_fixture(name: str):
    return yaml.safe_load((FIXTURES / name).read_text(encoding="utf-8"))

def run(coro):
    return asyncio.run(coro)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

def make_record(days_ago: float = 0, **kw) -> InteractionRecord:
    base = {
        "question": "What is force?",
        "answer": "Force is a push or a pull.",
        "language": "en",
        "subject": "physics",
        "grade": 8,
        "timestamp": NOW - timedelta(days=days_ago),
    }
    base.update(kw)
    return InteractionRecord(**base)

@pytest.fixture
def store(tmp_path):
    return InteractionStore(str(tmp_path / "interactions.sqlite"))
