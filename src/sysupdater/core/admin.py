import ctypes, os, shutil

def is_admin() -> bool:
    if os.name == "nt":
        try:
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except Exception:
            return False
    return os.geteuid() == 0

def has_command(name: str) -> bool:
    return shutil.which(name) is not None

def privileged(cmd: list[str]) -> list[str]:
    """
    Prefix ``cmd`` with sudo unless we already run as root. Windows commands
    are returned unchanged.
    """
    if os.name == "nt" or is_admin():
        return list(cmd)
    return ["sudo"] + list(cmd)
