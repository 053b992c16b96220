import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_json(path: str | Path, default: Any = None) -> Any:
    """Read a JSON document; a missing or unparsable file yields *default*."""
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except UnicodeDecodeError as e:
        logger.warning(f"Ignoring undecodable JSON in {source}: {e}")
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring unreadable JSON in {source}: {e}")
        return default


def atomic_write_json(path: str | Path, data: Any) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, indent=2, ensure_ascii=False)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
