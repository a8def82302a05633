"""Shared fixtures: a recording fake for the process layer and a captured console."""

import io

import pytest

from sysupdater.core.console import Console
from sysupdater.domain.reports import RunReport
from sysupdater.services.steps import StepRunner
from sysupdater.services.system import SystemService


class FakeProcess:
    """
    Records every command instead of running it.

    ``results`` maps a command fragment (e.g. ``"apt upgrade"``) to the exit
    code returned for any command containing it; ``captures`` maps a fragment
    to the ``(rc, output)`` pair returned by ``run_capture``.
    """

    def __init__(self, results=None, captures=None):
        self.debug = False
        self.dry_run = False
        self.results = dict(results or {})
        self.captures = dict(captures or {})
        self.calls = []

    def _rc(self, cmd):
        line = " ".join(cmd)
        for fragment, rc in self.results.items():
            if fragment in line:
                return rc
        return 0

    def run_stream(self, cmd, env=None):
        self.calls.append(("stream", list(cmd), env))
        return self._rc(cmd)

    def run_interactive(self, cmd, env=None):
        self.calls.append(("interactive", list(cmd), env))
        return self._rc(cmd)

    def run_capture(self, cmd, env=None):
        self.calls.append(("capture", list(cmd), env))
        line = " ".join(cmd)
        for fragment, result in self.captures.items():
            if fragment in line:
                return result
        return self._rc(cmd), ""

    def lines(self, mode=None):
        return [" ".join(c) for m, c, _ in self.calls if mode is None or m == mode]

    def ran(self, fragment, mode=None):
        return any(fragment in line for line in self.lines(mode))

    def index(self, fragment):
        for i, line in enumerate(self.lines()):
            if fragment in line:
                return i
        raise AssertionError(f"{fragment!r} never ran")


class Prompts:
    """Scripted operator answers; records every question asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def __call__(self, prompt):
        self.asked.append(prompt)
        return self.answers.pop(0) if self.answers else ""


def output(console):
    return console.stream.getvalue()


@pytest.fixture
def console():
    return Console(stream=io.StringIO())


@pytest.fixture
def proc():
    return FakeProcess()


@pytest.fixture
def report():
    return RunReport("test")


@pytest.fixture
def runner(console, proc, report):
    return StepRunner(console, proc, report, has=lambda name: True)


@pytest.fixture
def fake_root(tmp_path):
    """An empty filesystem root; helpers below create OS marker files in it."""
    return tmp_path


def touch(root, path, text=""):
    p = root / str(path).lstrip("/")
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture
def system(console, proc, fake_root):
    return SystemService(console, proc, root=fake_root)
