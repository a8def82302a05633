import math, os, platform, shutil
from pathlib import Path
from ..core.admin import has_command, privileged
from ..core.console import Console
from ..core.process import Process
from ..data import paths
from . import platform as plat
from .steps import Step

TEMP_WARN_C = 70
DISK_WARN_PCT = 85

def temperature_celsius(raw: str | None) -> int | None:
    try:
        return int(str(raw).strip()) // 1000
    except (TypeError, ValueError):
        return None

def usage_percent(used: int, free: int) -> int:
    """Same rounding as df: used / (used + available), rounded up."""
    total = used + free
    if total <= 0:
        return 0
    return math.ceil(used * 100 / total)

def parse_meminfo(text: str | None) -> tuple[int, int] | None:
    vals = {}
    for line in (text or "").splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] in ("MemTotal:", "MemAvailable:"):
            vals[parts[0]] = int(parts[1])
    if "MemTotal:" not in vals or "MemAvailable:" not in vals:
        return None
    avail = vals["MemAvailable:"]
    return vals["MemTotal:"] - avail, avail

def _gib(kib: int) -> str:
    return f"{kib / 1024 / 1024:.1f}G"

def _human(n: int) -> str:
    for unit in ("B", "K", "M", "G", "T"):
        if n < 1024 or unit == "T":
            return f"{n:.0f}{unit}" if unit == "B" else f"{n:.1f}{unit}"
        n /= 1024


class SystemService:
    """Read-only probes of OS state plus the reboot command itself."""

    def __init__(self, console: Console, proc: Process | None = None, root: Path | None = None):
        self.console = console
        self.proc = proc or Process(debug=console.debug, dry_run=console.dry_run)
        # tests point probes at a fake filesystem root
        self.root = root

    def _p(self, path: Path) -> Path:
        if self.root is None:
            return path
        return self.root / path.relative_to(path.anchor)

    def read_text(self, path: Path) -> str | None:
        try:
            return self._p(path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def exists(self, path: Path) -> bool:
        return self._p(path).exists()

    # ----- probes -----
    def device_model(self) -> str | None:
        s = self.read_text(paths.DEVICE_MODEL)
        return s.replace("\x00", "").strip() if s else None

    def os_description(self) -> str:
        if os.name == "nt":
            return platform.platform()
        info = plat.parse_os_release(self.read_text(paths.OS_RELEASE))
        return info.get("PRETTY_NAME") or platform.platform()

    def cpu_temperature(self) -> int | None:
        return temperature_celsius(self.read_text(paths.THERMAL_ZONE))

    def disk_usage_percent(self, mount: str = "/") -> int | None:
        try:
            du = shutil.disk_usage(str(self._p(Path(mount))))
        except OSError:
            return None
        return usage_percent(du.used, du.free)

    def reboot_marker_present(self) -> bool:
        return self.exists(paths.REBOOT_REQUIRED)

    def reboot_packages(self) -> list[str]:
        s = self.read_text(paths.REBOOT_REQUIRED_PKGS) or ""
        return [l.strip() for l in s.splitlines() if l.strip()]

    def has_pending_reboot(self) -> bool:
        rc, out = self.proc.run_capture([
            "powershell", "-NoProfile", "-WindowStyle", "Hidden", "-ExecutionPolicy", "Bypass",
            "(Get-ItemProperty 'HKLM:\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\WindowsUpdate\\Auto Update\\RebootRequired' -ErrorAction SilentlyContinue) -ne $null"
        ])
        return rc == 0 and (out or "").strip().lower() == "true"

    def firmware_marker_present(self, platform_name: str) -> bool:
        if platform_name == plat.RASPBERRY_PI:
            return self.exists(paths.FIRMWARE_BACKUP)
        if platform_name == plat.WINDOWS:
            return self.has_pending_reboot()
        return False

    def reboot_command(self, platform_name: str) -> list[str]:
        if platform_name == plat.WINDOWS:
            return ["shutdown", "/r", "/t", "0"]
        return privileged(["reboot"])

    # ----- checks -----
    def check_internet(self, host: str = "google.com") -> bool:
        self.console.info("Checking internet connectivity...")
        count = "-n" if os.name == "nt" else "-c"
        rc, _ = self.proc.run_capture(["ping", count, "1", host])
        if rc == 0:
            self.console.ok("Internet connection is active")
            return True
        self.console.err("No internet connection. Please check your network settings.")
        return False

    def check_temperature(self):
        t = self.cpu_temperature()
        if t is None:
            return
        self.console.info(f"Current CPU temperature: {t}°C")
        if t > TEMP_WARN_C:
            self.console.warn(f"High CPU temperature detected ({t}°C). Consider cooling before intensive operations.")

    def check_sd_card(self):
        self.console.info("Checking SD card health...")
        rc, out = self.proc.run_capture(["df", "/"])
        lines = (out or "").strip().splitlines()
        if rc == 0 and len(lines) > 1:
            self.console.info(f"Root filesystem: {lines[-1].split()[0]}")
        pct = self.disk_usage_percent("/")
        if pct is not None:
            self.console.info(f"Disk usage: {pct}%")
            if pct > DISK_WARN_PCT:
                self.console.warn(f"Disk usage is high ({pct}%). Consider cleaning up files or expanding filesystem.")
        self.console.ok("SD card health check completed")

    def _du(self, path: Path) -> str | None:
        rc, out = self.proc.run_capture(["du", "-sh", str(path)])
        lines = (out or "").strip().splitlines()
        # du exits 1 on unreadable subdirectories but still prints the total
        return lines[-1].split()[0] if lines else None

    def housekeeping(self, runner):
        self.console.info("Performing Raspberry Pi optimizations...")
        runner.run(Step("Updating locate database...", privileged(["updatedb"]), best_effort=True,
                        requires="updatedb", skip_msg="updatedb not available, skipping locate database"))
        size = self._du(paths.VAR_LOG)
        if size:
            self.console.info(f"Log directory size: {size}")
        if self.exists(paths.SYSLOG):
            size = self._du(paths.SYSLOG)
            if size:
                self.console.info(f"Syslog size: {size}")
        self.console.ok("Raspberry Pi optimizations completed")

    # ----- info -----
    def show_info(self, platform_name: str):
        c = self.console
        if platform_name == plat.RASPBERRY_PI:
            c.info("Raspberry Pi System Information:")
            model = self.device_model()
            if model:
                c.line(f"Model: {model}")
        else:
            c.info("System Information:")
        c.line(f"OS: {self.os_description()}")
        if os.name == "nt":
            return
        c.line(f"Kernel: {platform.release()}")
        rc, out = self.proc.run_capture(["uptime", "-p"])
        if rc == 0 and out.strip():
            c.line(f"Uptime: {out.strip()}")
        if platform_name == plat.RASPBERRY_PI:
            t = self.cpu_temperature()
            if t is not None:
                c.line(f"CPU Temperature: {t}°C")
        mem = parse_meminfo(self.read_text(paths.MEMINFO))
        if mem:
            used, avail = mem
            c.line("Memory Usage:")
            c.line(f"  RAM: {_gib(used)} used, {_gib(avail)} available ({used * 100 / (used + avail):.1f}% used)")
        try:
            du = shutil.disk_usage(str(self._p(Path("/"))))
            c.line("Disk Usage:")
            c.line(f"  Root: {_human(du.used)} used, {_human(du.free)} available ({usage_percent(du.used, du.free)}% used)")
        except OSError:
            pass
        if platform_name == plat.RASPBERRY_PI and has_command("vcgencmd"):
            rc, out = self.proc.run_capture(["vcgencmd", "get_mem", "gpu"])
            if rc == 0 and "=" in out:
                c.line(f"GPU Memory: {out.strip().split('=', 1)[1]}")
