import json, time
from pathlib import Path

OK = "ok"
FAILED = "failed"
WARNING = "warning"
SKIPPED = "skipped"

class RunReport:
    def __init__(self, platform: str = ""):
        self.started = time.time()
        self.finished = None
        self.platform = platform
        self.steps = []
        self.reboot_required = False
        self.reboot_reason = "none"
        self.rebooted = False
        self.notes = []

    def add_step(self, label: str, status: str, rc: int | None = None):
        self.steps.append({"label": label, "status": status, "rc": rc})

    def labels(self, status: str):
        return [s["label"] for s in self.steps if s["status"] == status]

    def mark_finished(self):
        if not self.finished:
            self.finished = time.time()

    def to_dict(self):
        return {
            "started": self.started,
            "finished": self.finished,
            "platform": self.platform,
            "steps": self.steps,
            "reboot_required": self.reboot_required,
            "reboot_reason": self.reboot_reason,
            "rebooted": self.rebooted,
            "notes": self.notes
        }

    def save(self, fmt: str, path: Path):
        path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "json":
            path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        else:
            lines = []
            lines.append(f"System Update Report ({self.platform})")
            lines.append("")
            lines.append(f"Reboot required: {self.reboot_required} ({self.reboot_reason})")
            lines.append(f"Rebooted: {self.rebooted}")
            def w(label, arr):
                if arr: lines.append(f"{label}: " + ", ".join(arr))
            w("Completed", self.labels(OK))
            w("Warnings", self.labels(WARNING))
            w("Skipped", self.labels(SKIPPED))
            w("Failed", self.labels(FAILED))
            if self.notes: lines.append("Notes: " + "; ".join(self.notes))
            path.write_text("\n".join(lines), encoding="utf-8")
