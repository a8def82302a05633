# core/process.py
import subprocess, os, platform
from .colors import MAGENTA, DIM, RESET, GRAY

def _win_creation():
    if platform.system() != "Windows":
        return {}
    si = subprocess.STARTUPINFO()
    si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    flags = 0x08000000  # CREATE_NO_WINDOW
    return {"startupinfo": si, "creationflags": flags}

def _env(extra):
    if not extra:
        return None
    env = os.environ.copy()
    env.update(extra)
    return env

class Process:
    """Thin subprocess wrapper. Exit code 127 means the command could not be started."""

    def __init__(self, debug: bool=False, dry_run: bool=False):
        self.debug = debug
        self.dry_run = dry_run
        self._win_kwargs = _win_creation()

    def _dbg(self, cmd):
        if self.debug:
            print(f"{MAGENTA}{DIM}>>> {' '.join(map(str,cmd))}{RESET}")

    def run_stream(self, cmd: list[str], env: dict | None = None) -> int:
        self._dbg(cmd)
        if self.dry_run:
            print(f"{GRAY}[dry-run]{RESET} {' '.join(map(str,cmd))}")
            return 0
        try:
            p = subprocess.Popen(
                cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                text=True, encoding="utf-8", errors="replace",
                shell=False, env=_env(env), **self._win_kwargs
            )
        except OSError:
            return 127
        try:
            assert p.stdout is not None
            for line in p.stdout:
                s = (line or "").rstrip("\r\n")
                if s:
                    print(s)
            return p.wait()
        except KeyboardInterrupt:
            try: p.terminate()
            except OSError: pass
            raise

    def run_interactive(self, cmd: list[str], env: dict | None = None) -> int:
        """Run with the terminal attached, for tools that prompt the operator."""
        self._dbg(cmd)
        if self.dry_run:
            print(f"{GRAY}[dry-run]{RESET} {' '.join(map(str,cmd))}")
            return 0
        try:
            return subprocess.call(cmd, shell=False, env=_env(env))
        except OSError:
            return 127

    def run_capture(self, cmd: list[str], env: dict | None = None) -> tuple[int,str]:
        self._dbg(cmd)
        if self.dry_run:
            return 0, ""
        try:
            r = subprocess.run(
                cmd, capture_output=True, text=True,
                encoding="utf-8", errors="replace",
                shell=False, env=_env(env), **self._win_kwargs
            )
            return r.returncode, r.stdout or ""
        except OSError:
            return 127, ""
