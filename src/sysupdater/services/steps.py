from dataclasses import dataclass
from ..core.admin import has_command
from ..core.console import Console
from ..core.process import Process
from ..domain import reports


@dataclass
class Step:
    """
    One external command in an update sequence.

    ``requires`` names an executable; when it is missing the step is skipped
    with ``skip_msg``. Best-effort steps only warn on failure; ``quiet``
    suppresses that warning as well.
    """
    label: str
    cmd: list[str]
    done: str = ""
    best_effort: bool = False
    quiet: bool = False
    interactive: bool = False
    env: dict | None = None
    requires: str | None = None
    skip_msg: str = ""
    warning: str = ""


class StepFailed(RuntimeError):
    def __init__(self, step: Step, rc: int):
        super().__init__(f"{step.label.rstrip('.')} failed (exit code {rc})")
        self.step = step
        self.rc = rc


class PreconditionFailed(RuntimeError):
    pass


class StepRunner:
    def __init__(self, console: Console, proc: Process, report=None, has=has_command):
        self.console = console
        self.proc = proc
        self.report = report
        self.has = has

    def record(self, label: str, status: str, rc=None):
        if self.report is not None:
            self.report.add_step(label, status, rc)

    def run(self, step: Step) -> bool:
        """Run ``step``; returns False for a skipped or best-effort failure, raises StepFailed otherwise."""
        if step.requires and not self.has(step.requires):
            self.console.warn(step.skip_msg or f"{step.requires} not available, skipping")
            self.record(step.label, reports.SKIPPED)
            return False
        self.console.info(step.label)
        if step.interactive:
            rc = self.proc.run_interactive(step.cmd, env=step.env)
        else:
            rc = self.proc.run_stream(step.cmd, env=step.env)
        if rc != 0:
            if not step.best_effort:
                self.record(step.label, reports.FAILED, rc)
                raise StepFailed(step, rc)
            if not step.quiet:
                self.console.warn(step.warning or f"{step.label.rstrip('.')} did not complete (exit code {rc})")
            self.record(step.label, reports.WARNING, rc)
            return False
        if step.done:
            self.console.ok(step.done)
        self.record(step.label, reports.OK, rc)
        return True

    def run_all(self, steps):
        for step in steps:
            self.run(step)
