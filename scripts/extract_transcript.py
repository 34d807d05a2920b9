"""Extract tasks from a transcript file and print them (optionally as JSON)."""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from task_pipeline.extraction.extractor import extract_tasks
from task_pipeline.pipeline_config import ExtractionMode, PipelineConfig


def main(path: str, mode: str, today: str | None, as_json: bool) -> int:
    transcript = Path(path).read_text(encoding="utf-8")
    config = PipelineConfig(
        mode=ExtractionMode(mode),
        today=date.fromisoformat(today) if today else None,
    )
    result = extract_tasks(transcript, config=config)

    if as_json:
        payload = {
            "tasks": [asdict(t) for t in result.tasks],
            "metadata": {
                "processedAt": result.metadata.processed_at.isoformat(),
                "model": result.metadata.model,
                "fallbackUsed": result.metadata.fallback_used,
            },
        }
        print(json.dumps(payload, indent=2, default=str))
        return 0

    print(f"{len(result.tasks)} tasks ({result.metadata.model})")
    for i, task in enumerate(result.tasks, 1):
        line = f"  {i}. [{task.priority}] {task.title}"
        if task.assignee:
            line += f" (assigned to {task.assignee})"
        if task.due_date:
            line += f" -- due: {task.due_date}"
        print(line)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("path", help="Transcript text file")
    parser.add_argument("--mode", default="heuristic", choices=[m.value for m in ExtractionMode])
    parser.add_argument("--today", default=None, help="Anchor date (YYYY-MM-DD)")
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()
    sys.exit(main(args.path, args.mode, args.today, args.json))
