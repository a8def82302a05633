"""Pure platform predicates. Nothing here touches the system."""

UBUNTU = "ubuntu"
RASPBERRY_PI = "raspberry-pi"
MINIMAL = "minimal"
WINDOWS = "windows"

TITLES = {
    UBUNTU: "Ubuntu System Update",
    RASPBERRY_PI: "Raspberry Pi System Update",
    MINIMAL: "System Update",
    WINDOWS: "Windows Package Update",
}

def looks_like_raspberry_pi(model: str | None) -> bool:
    return bool(model) and "Raspberry Pi" in model

def detect_platform(os_name: str, model: str | None) -> str:
    if os_name == "nt":
        return WINDOWS
    if looks_like_raspberry_pi(model):
        return RASPBERRY_PI
    return UBUNTU

def resolve_platform(requested: str, os_name: str, model: str | None) -> str:
    if requested and requested != "auto":
        return requested
    return detect_platform(os_name, model)

def parse_os_release(text: str | None) -> dict:
    out = {}
    for line in (text or "").splitlines():
        if "=" not in line or line.startswith("#"):
            continue
        k, v = line.split("=", 1)
        out[k.strip()] = v.strip().strip('"').strip("'")
    return out

def eeprom_update_available(output: str | None) -> bool:
    return "UPDATE AVAILABLE" in (output or "")

def desktop_installed(dpkg_list: str | None) -> bool:
    return "raspberrypi-ui-mods" in (dpkg_list or "")
