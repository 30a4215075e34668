import sys
from dataclasses import dataclass, field
from typing import Optional, List
from connectcam.orchestrator.contracts import CycleResult

MAX_LOGS = 200


@dataclass
class StatusStore:
    state: str = "discovering"
    busy: bool = False
    device: Optional[str] = None
    interval: Optional[float] = None
    registered: Optional[bool] = None
    last_cycle: Optional[CycleResult] = None
    cycles_ok: int = 0
    cycles_failed: int = 0
    echo: bool = True   # mirror log lines to stdout/stderr
    logs: List[str] = field(default_factory=list)

    def set_busy(self, v: bool):
        self.busy = v

    def set_state(self, state: str):
        self.state = state

    def log(self, msg: str, level: str = "INFO"):
        self._append(f"[{level}] {msg}", error=level == "ERROR")

    def error(self, msg: str):
        self.log(msg, level="ERROR")

    def record_cycle(self, result: CycleResult):
        # counters are for display only, the loop never reads them
        self.last_cycle = result
        if result.ok:
            self.cycles_ok += 1
        else:
            self.cycles_failed += 1
        marker = "[OK]" if result.ok else "[FAIL]"
        self._append(f"{marker} {result.timestamp}")

    def _append(self, line: str, error: bool = False):
        self.logs.append(line)
        if len(self.logs) > MAX_LOGS:
            self.logs = self.logs[-MAX_LOGS:]
        if self.echo:
            print(line, file=sys.stderr if error else sys.stdout, flush=True)
