import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Union[str, int] = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def log_step(output_dir: Optional[Union[str, Path]], step: str, payload: Dict[str, Any]) -> None:
    """Append one JSON line to ``<output_dir>/run.log``; no-op without a directory."""
    if not output_dir:
        return
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir / "run.log"
    entry = {"ts": time.time(), "step": step, "payload": payload}
    with open(log_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")
