import os, time
from ..core.admin import has_command, is_admin
from ..core.console import Console
from ..core.process import Process
from ..domain.config import RunConfiguration
from ..domain.reboot import confirmed
from ..domain.reports import RunReport
from . import packages
from . import platform as plat
from .firmware import FirmwareService
from .reboot import RebootService
from .steps import PreconditionFailed, StepRunner
from .system import SystemService


class Updater:
    """
    Runs one platform's update sequence, then the reboot flow.

    Collaborators are created from the configuration unless passed in, so
    tests can swap in fakes for the process layer, the prompt and the sleep.
    """

    def __init__(self, console: Console, cfg: RunConfiguration, platform_name: str,
                 proc: Process | None = None, system: SystemService | None = None,
                 ask=None, sleep=time.sleep, has=has_command, before_reboot=None):
        self.console = console
        self.cfg = cfg
        self.platform_name = platform_name
        self.proc = proc or Process(debug=cfg.debug, dry_run=cfg.dry_run)
        self.system = system or SystemService(console, self.proc)
        self.ask = ask or console.ask
        self.has = has
        self.report = RunReport(platform_name)
        self.runner = StepRunner(console, self.proc, self.report, has=has)
        self.firmware = FirmwareService(console, self.proc, self.runner, cfg, ask=self.ask, has=has)
        self.reboot = RebootService(console, self.system, self.runner, cfg, platform_name,
                                    ask=self.ask, sleep=sleep, before_reboot=before_reboot)

    # ----- preconditions -----
    def check_not_root(self):
        if os.name != "nt" and is_admin():
            raise PreconditionFailed("This script should not be run as root. Please run as a regular user.")

    def check_internet(self):
        if not self.system.check_internet():
            raise PreconditionFailed("Aborting: no network connectivity.")

    def check_raspberry_pi(self):
        if plat.looks_like_raspberry_pi(self.system.device_model()):
            return
        self.console.warn("This doesn't appear to be a Raspberry Pi system.")
        if self.cfg.assume_yes:
            return
        if not confirmed(self.ask("Continue anyway? (y/N): ")):
            raise PreconditionFailed("Aborted on a non-Raspberry Pi system.")

    # ----- variants -----
    def _ubuntu(self):
        self.system.show_info(self.platform_name)
        self.console.line()
        self.check_not_root()
        self.check_internet()
        self.console.line("Starting system update process...")
        self.console.line()
        self.runner.run_all(packages.ubuntu_sequence())
        self.firmware.fwupd()
        self.firmware.release_upgrade()
        self._finish()

    def _raspberry_pi(self):
        self.system.show_info(self.platform_name)
        self.console.line()
        self.check_raspberry_pi()
        self.system.check_temperature()
        self.console.line("Starting Raspberry Pi update process...")
        self.console.line()
        self.runner.run_all(packages.raspberry_pi_base())
        self.firmware.rpi_firmware()
        self.firmware.rpi_eeprom()
        self.firmware.rpi_tools()
        self.runner.run_all([packages.snap_refresh(), packages.flatpak_update(), *packages.cleanup(purge_kernels=True)])
        self.system.housekeeping(self.runner)
        self.system.check_sd_card()
        self._finish()
        self.system.check_temperature()

    def _minimal(self):
        self.runner.run_all(packages.minimal_sequence())
        self._finish()

    def _windows(self):
        if not self.has("winget"):
            raise PreconditionFailed("winget is not installed. Install App Installer from the Microsoft Store.")
        self.system.show_info(self.platform_name)
        self.console.line()
        self.runner.run_all(packages.windows_sequence(self.cfg.assume_yes))
        self._finish()

    def _finish(self):
        self.console.line()
        self.console.ok("All updates completed successfully!")
        self.console.line()
        self.reboot.handle(self.report)
        self.console.line()
        self.console.ok("Update run finished!")

    def run(self) -> RunReport:
        self.console.header(plat.TITLES[self.platform_name])
        self.console.line()
        try:
            {
                plat.UBUNTU: self._ubuntu,
                plat.RASPBERRY_PI: self._raspberry_pi,
                plat.MINIMAL: self._minimal,
                plat.WINDOWS: self._windows,
            }[self.platform_name]()
        finally:
            self.report.mark_finished()
        return self.report
