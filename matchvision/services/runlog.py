# matchvision/services/runlog.py
import json, datetime, logging

from matchvision.config import get_settings

logger = logging.getLogger("matchvision.runlog")

def append_run_log(entry: dict) -> None:
    settings = get_settings()
    if not settings.RUN_LOG:
        return
    runs_dir = settings.runs_dir
    date = datetime.datetime.now(datetime.timezone.utc).date().isoformat()
    path = runs_dir / f"{date}.jsonl"
    # best-effort: an unwritable DATA_DIR must not fail the request
    try:
        runs_dir.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.warning("run log not written path=%s: %s", path, e)
