import os, ctypes, sys, io
from .colors import *

class Tee(io.TextIOBase):
    def __init__(self, a, b): self.a, self.b = a, b
    def write(self, s): self.a.write(s); self.b.write(s); return len(s)
    def flush(self): self.a.flush(); self.b.flush()

class Console:
    def __init__(self, debug: bool=False, dry_run: bool=False, stream=None):
        self.debug = debug
        self.dry_run = dry_run
        self.stream = stream
        self._log_fp = None

    def _out(self):
        return self.stream if self.stream is not None else sys.stdout

    def write(self, text: str):
        out = self._out()
        out.write(text)
        out.flush()

    def line(self, text: str = ""):
        print(text, file=self._out())

    def enable_windows_ansi_utf8(self):
        if os.name != "nt":
            return
        try:
            k32 = ctypes.windll.kernel32
            hOut = k32.GetStdHandle(-11)
            mode = ctypes.c_uint32()
            if k32.GetConsoleMode(hOut, ctypes.byref(mode)):
                k32.SetConsoleMode(hOut, mode.value | 0x0004)
            k32.SetConsoleOutputCP(65001)
            k32.SetConsoleCP(65001)
        except Exception:
            pass

    def open_log(self, path):
        """Tee stdout/stderr into ``path``. Only called when the operator asks for a log file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        self._log_fp = open(path, "a", encoding="utf-8", errors="replace")
        sys.stdout = Tee(sys.stdout, self._log_fp)
        sys.stderr = Tee(sys.stderr, self._log_fp)

    def close(self):
        if not self._log_fp:
            return
        for name in ("stdout", "stderr"):
            s = getattr(sys, name)
            if isinstance(s, Tee):
                setattr(sys, name, s.a)
        try:
            self._log_fp.close()
        except OSError:
            pass
        self._log_fp = None

    def header(self, title: str):
        self.line(f"{ORANGE}{BOLD}{'='*48}{RESET}")
        self.line(f"{ORANGE}{BOLD}{title.center(48).rstrip()}{RESET}")
        self.line(f"{ORANGE}{BOLD}{'='*48}{RESET}")

    def info(self, msg): self.line(f"{CYAN}→ {msg}{RESET}")
    def ok(self, msg):   self.line(f"{GREEN}✔ {msg}{RESET}")
    def warn(self, msg): self.line(f"{YELLOW}⚠ {msg}{RESET}")
    def err(self, msg):  self.line(f"{RED}{BOLD}✘ {msg}{RESET}")
    def detail(self, msg): self.line(f"  {GRAY}{msg}{RESET}")

    def ask(self, prompt: str) -> str:
        """Read one line from the operator; EOF counts as an empty answer."""
        try:
            return input(f"{ORANGE}{BOLD}{prompt}{RESET}")
        except EOFError:
            self.line()
            return ""
