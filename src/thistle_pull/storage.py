import json
from pathlib import Path
from typing import Any, Dict, Iterable, List


def save_events(events: List[Dict[str, Any]], path) -> Path:
    """Write the whole event list in one go (2-space indented JSON)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(events, indent=2, ensure_ascii=False), encoding="utf-8")
    return p


def load_events(path) -> List[Dict[str, Any]]:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def count_unique_ids(events: Iterable[Dict[str, Any]], key: str = "event_id") -> int:
    # records without the key don't count; duplicates stay in the saved file
    return len({e[key] for e in events if isinstance(e, dict) and e.get(key) is not None})
