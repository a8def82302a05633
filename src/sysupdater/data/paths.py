from pathlib import Path
import os

APP_NAME = "sysupdater"

if os.name == "nt":
    CONFIG_DIR = Path(os.getenv("LOCALAPPDATA", Path.home())) / APP_NAME
else:
    CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME
SETTINGS_PATH = CONFIG_DIR / "settings.json"

# OS state probed read-only
REBOOT_REQUIRED = Path("/var/run/reboot-required")
REBOOT_REQUIRED_PKGS = Path("/var/run/reboot-required.pkgs")
DEVICE_MODEL = Path("/proc/device-tree/model")
THERMAL_ZONE = Path("/sys/class/thermal/thermal_zone0/temp")
FIRMWARE_BACKUP = Path("/boot/kernel.img.bak")
OS_RELEASE = Path("/etc/os-release")
VAR_LOG = Path("/var/log")
SYSLOG = VAR_LOG / "syslog"
MEMINFO = Path("/proc/meminfo")
