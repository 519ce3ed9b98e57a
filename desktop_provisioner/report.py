from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SKIPPED = "skipped-already-satisfied"
    APPLIED = "applied"
    FAILED_RECOVERABLE = "failed-recoverable"
    FAILED_FATAL = "failed-fatal"


@dataclass(frozen=True)
class ActionResult:
    action_id: str
    kind: str
    outcome: Outcome
    detail: str = ""
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome in (Outcome.FAILED_RECOVERABLE, Outcome.FAILED_FATAL)


@dataclass
class Report:
    results: List[ActionResult] = field(default_factory=list)
    halted: bool = False

    def add(self, result: ActionResult) -> ActionResult:
        self.results.append(result)
        return result

    def by_outcome(self, outcome: Outcome) -> List[ActionResult]:
        return [r for r in self.results if r.outcome == outcome]

    def outcome_of(self, action_id: str) -> Optional[Outcome]:
        for r in self.results:
            if r.action_id == action_id:
                return r.outcome
        return None

    @property
    def status(self) -> str:
        if self.halted or self.by_outcome(Outcome.FAILED_FATAL):
            return "failed"
        if self.by_outcome(Outcome.FAILED_RECOVERABLE):
            return "degraded"
        return "ok"

    @property
    def exit_code(self) -> int:
        # Recoverable failures leave a mostly-provisioned system; only fatal ones count.
        return 1 if self.status == "failed" else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "halted": self.halted,
            "counts": {o.value: len(self.by_outcome(o)) for o in Outcome},
            "results": [dict(asdict(r), outcome=r.outcome.value) for r in self.results],
        }


_MARKS = {
    Outcome.SKIPPED: "=",
    Outcome.APPLIED: "+",
    Outcome.FAILED_RECOVERABLE: "!",
    Outcome.FAILED_FATAL: "x",
}


def render_report(report: Report) -> str:
    width = max([len(r.action_id) for r in report.results] + [10])
    lines = ["Provisioning report", ""]
    for r in report.results:
        text = r.error if r.failed and r.error else r.detail
        lines.append(f" {_MARKS[r.outcome]} {r.action_id:<{width}}  {r.outcome.value:<25} {text or ''}".rstrip())
    counts = ", ".join(f"{len(report.by_outcome(o))} {o.value}" for o in Outcome)
    lines += ["", f"Status: {report.status} ({counts})"]
    if report.halted:
        lines.append("Run halted on a fatal error; later actions were not attempted.")
    return "\n".join(lines)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def save_report(path: str, report: Report) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    data = report.to_dict()
    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    logger.info("Report written to %s", str(p))
