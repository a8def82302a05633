from ..core.admin import privileged
from .steps import Step

WINGET_FLAGS = ["--accept-source-agreements", "--accept-package-agreements", "--disable-interactivity"]

def apt_update() -> Step:
    return Step("Updating package lists...", privileged(["apt", "update"]), done="Package lists updated")

def apt_upgrade() -> Step:
    return Step("Upgrading installed packages...", privileged(["apt", "upgrade", "-y"]), done="Packages upgraded")

def apt_full_upgrade() -> Step:
    return Step("Performing full upgrade...", privileged(["apt", "full-upgrade", "-y"]), done="Full upgrade completed")

def apt_dist_upgrade() -> Step:
    return Step("Performing distribution upgrade...", privileged(["apt", "dist-upgrade", "-y"]),
                done="Distribution upgrade completed")

def snap_refresh() -> Step:
    return Step("Updating snap packages...", privileged(["snap", "refresh"]), done="Snap packages updated",
                requires="snap", skip_msg="Snap is not installed, skipping snap updates")

def flatpak_update() -> Step:
    # per-user installs too, so no sudo
    return Step("Updating flatpak packages...", ["flatpak", "update", "-y"], done="Flatpak packages updated",
                requires="flatpak", skip_msg="Flatpak is not installed, skipping flatpak updates")

def cleanup(purge_kernels: bool = False) -> list[Step]:
    steps = [
        Step("Cleaning up unnecessary packages...", privileged(["apt", "autoremove", "-y"])),
        Step("Cleaning package cache...", privileged(["apt", "autoclean"]),
             done="" if purge_kernels else "Package cleanup completed"),
    ]
    if purge_kernels:
        steps.append(Step("Cleaning old kernel modules...", privileged(["apt", "autoremove", "--purge", "-y"]),
                          done="Package cleanup completed"))
    return steps

def release_check() -> Step:
    # exits non-zero when no new release exists
    return Step("Checking for a new release...", privileged(["do-release-upgrade", "-c"]),
                best_effort=True, quiet=True, requires="do-release-upgrade",
                skip_msg="do-release-upgrade not found. Skipping release check.")

def ubuntu_sequence() -> list[Step]:
    return [apt_update(), apt_upgrade(), apt_dist_upgrade(), snap_refresh(), flatpak_update(), *cleanup()]

def raspberry_pi_base() -> list[Step]:
    return [apt_update(), apt_upgrade(), apt_dist_upgrade()]

def minimal_sequence() -> list[Step]:
    return [
        apt_update(), apt_full_upgrade(), apt_dist_upgrade(), release_check(),
        Step("Removing unused packages...", privileged(["apt", "autoremove", "-y"])),
        Step("Cleaning package cache...", privileged(["apt", "autoclean"]), done="Package cleanup completed"),
    ]

def windows_sequence(assume_yes: bool = False) -> list[Step]:
    upgrade = ["winget", "upgrade", "--all", "--include-unknown"] + WINGET_FLAGS
    if assume_yes:
        upgrade.append("--silent")
    return [
        Step("Refreshing winget sources...", ["winget", "source", "update"], done="Sources refreshed",
             best_effort=True, requires="winget", skip_msg="winget not found, skipping source refresh"),
        Step("Upgrading installed packages...", upgrade, done="Packages upgraded"),
    ]
