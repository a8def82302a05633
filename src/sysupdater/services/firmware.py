from ..core.admin import has_command, privileged
from ..core.console import Console
from ..core.process import Process
from ..domain.config import RunConfiguration
from ..domain.reboot import confirmed
from ..domain import reports
from . import platform as plat
from .steps import Step, StepRunner

FIRMWARE_PROMPT = "Do you want to update Raspberry Pi firmware? This may take time and requires reboot (y/N): "
RELEASE_PROMPT = "If a new Ubuntu release is available, do you want to start the upgrade now? (y/N): "


class FirmwareService:
    """
    Firmware, EEPROM and OS release upgrades. Everything here is best-effort:
    a failure is reported and the update run carries on.
    """

    def __init__(self, console: Console, proc: Process, runner: StepRunner, cfg: RunConfiguration,
                 ask=None, has=has_command):
        self.console = console
        self.proc = proc
        self.runner = runner
        self.cfg = cfg
        self.ask = ask or console.ask
        self.has = has

    def fwupd(self):
        if not self.has("fwupdmgr"):
            self.console.warn("fwupdmgr not available, skipping firmware updates")
            return
        self.runner.run(Step("Checking for firmware updates...", privileged(["fwupdmgr", "refresh", "--force"]),
                             best_effort=True))
        self.runner.run(Step("Installing firmware updates...", privileged(["fwupdmgr", "update", "-y"]),
                             best_effort=True, warning="No firmware updates available or update failed"))
        self.console.ok("Firmware update check completed")

    def rpi_firmware(self):
        self.console.line()
        if not (self.cfg.assume_yes or confirmed(self.ask(FIRMWARE_PROMPT))):
            return False
        # sudo drops the caller's environment, so pass the variable through env(1)
        cmd = ["env", "SKIP_WARNING=1", "rpi-update"] if self.cfg.assume_yes else ["rpi-update"]
        ok = self.runner.run(Step("Updating Raspberry Pi firmware and kernel...", privileged(cmd),
                                  done="Firmware and kernel updated", best_effort=True, interactive=True,
                                  requires="rpi-update",
                                  skip_msg="rpi-update not available, skipping firmware update"))
        if ok:
            self.console.warn("Firmware update completed - reboot will be required")
        return ok

    def rpi_eeprom(self):
        if not self.has("rpi-eeprom-update"):
            self.console.warn("rpi-eeprom-update not available, skipping EEPROM updates")
            return
        self.console.info("Checking for EEPROM updates...")
        rc, out = self.proc.run_capture(privileged(["rpi-eeprom-update"]))
        for line in out.splitlines():
            if line.strip():
                self.console.detail(line.rstrip())
        if rc != 0:
            self.console.warn(f"EEPROM check did not complete (exit code {rc})")
            self.runner.record("Checking for EEPROM updates...", reports.WARNING, rc)
            return
        if plat.eeprom_update_available(out):
            self.runner.run(Step("EEPROM update available, installing...", privileged(["rpi-eeprom-update", "-a"]),
                                 done="EEPROM updated - reboot required", best_effort=True))
        else:
            self.console.ok("EEPROM is up to date")

    def rpi_tools(self):
        self.console.info("Updating Raspberry Pi configuration tools...")
        rc, out = self.proc.run_capture(["dpkg", "-l"])
        if rc == 0 and plat.desktop_installed(out):
            self.console.info("Desktop version detected, updating GUI tools...")
        if self.has("raspi-config"):
            self.console.ok("raspi-config is available and updated through apt")

    def release_upgrade(self):
        if not self.has("do-release-upgrade"):
            self.console.warn("do-release-upgrade not found. Skipping Ubuntu release upgrade.")
            return
        self.console.info("Checking for Ubuntu release upgrades...")
        self.proc.run_capture(privileged(["apt", "install", "-y", "ubuntu-release-upgrader-core"]))
        self.runner.run(Step("Looking for a new Ubuntu release...", privileged(["do-release-upgrade", "-c"]),
                             best_effort=True, quiet=True))
        self.console.line()
        if self.cfg.force_release_upgrade:
            self.console.info("--release-upgrade specified: proceeding with Ubuntu release upgrade.")
            go = True
        elif self.cfg.assume_yes:
            go = True
        else:
            go = confirmed(self.ask(RELEASE_PROMPT))
        if not go:
            self.console.info("Skipping Ubuntu release upgrade.")
            return
        self.console.warn("Starting Ubuntu distribution release upgrade. This may take a long time and could reboot the system.")
        warning = "Release upgrade did not complete. Review the output above."
        if self.cfg.assume_yes:
            step = Step("Running non-interactive release upgrade...",
                        privileged(["env", "DEBIAN_FRONTEND=noninteractive",
                                    "do-release-upgrade", "-f", "DistUpgradeViewNonInteractive"]),
                        best_effort=True, warning=warning)
        else:
            step = Step("Running release upgrade...", privileged(["do-release-upgrade"]),
                        best_effort=True, interactive=True, warning=warning)
        self.runner.run(step)
