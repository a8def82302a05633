"""Tests for the per-platform update runs, with every external command faked."""

from unittest.mock import MagicMock, patch

import pytest

from sysupdater.data import paths
from sysupdater.domain import reports
from sysupdater.domain.config import RunConfiguration
from sysupdater.services import platform as plat
from sysupdater.services.firmware import FIRMWARE_PROMPT, RELEASE_PROMPT
from sysupdater.services.reboot import REBOOT_PROMPT
from sysupdater.services.steps import PreconditionFailed, StepFailed
from sysupdater.services.updater import Updater

from conftest import FakeProcess, Prompts, output, touch

ALL_TOOLS = {"snap", "flatpak", "fwupdmgr", "do-release-upgrade", "rpi-update",
             "rpi-eeprom-update", "raspi-config", "updatedb", "winget"}


def _updater(console, system, proc, cfg=None, platform_name=plat.UBUNTU, ask=None, tools=ALL_TOOLS):
    return Updater(console, cfg or RunConfiguration(), platform_name, proc=proc, system=system,
                   ask=ask or Prompts(), sleep=MagicMock(), has=lambda name: name in tools)


@pytest.fixture(autouse=True)
def not_root():
    with patch("sysupdater.services.updater.is_admin", return_value=False):
        yield


@pytest.mark.unit
class TestUbuntu:

    def test_full_run_in_order(self, console, system, proc):
        report = _updater(console, system, proc, ask=Prompts("n")).run()

        order = ["ping", "apt update", "apt upgrade -y", "apt dist-upgrade -y", "snap refresh",
                 "flatpak update -y", "apt autoremove -y", "apt autoclean", "fwupdmgr refresh --force",
                 "fwupdmgr update -y", "do-release-upgrade -c"]
        positions = [proc.index(f) for f in order]
        assert positions == sorted(positions)
        assert report.finished is not None
        assert "All updates completed successfully!" in output(console)
        assert "No reboot required" in output(console)

    def test_root_is_refused_before_any_update(self, console, system, proc):
        with patch("sysupdater.services.updater.is_admin", return_value=True):
            with pytest.raises(PreconditionFailed, match="should not be run as root"):
                _updater(console, system, proc).run()

        assert not proc.ran("apt")

    def test_no_network_stops_before_any_update(self, console, system):
        proc = FakeProcess(results={"ping": 1})
        system.proc = proc

        with pytest.raises(PreconditionFailed):
            _updater(console, system, proc).run()

        assert not proc.ran("apt")

    def test_failed_upgrade_aborts_the_run(self, console, system):
        proc = FakeProcess(results={"apt upgrade": 100})
        system.proc = proc
        u = _updater(console, system, proc)

        with pytest.raises(StepFailed) as exc:
            u.run()

        assert exc.value.rc == 100
        assert not proc.ran("dist-upgrade")
        assert u.report.finished is not None
        assert u.report.labels(reports.FAILED) == ["Upgrading installed packages..."]

    def test_firmware_failures_are_best_effort(self, console, system):
        proc = FakeProcess(results={"fwupdmgr": 1})
        system.proc = proc

        _updater(console, system, proc, ask=Prompts("n")).run()

        assert proc.ran("do-release-upgrade -c")
        assert "No firmware updates available or update failed" in output(console)

    def test_missing_optional_tools_are_skipped(self, console, system, proc):
        _updater(console, system, proc, tools=set(), ask=Prompts()).run()

        assert not proc.ran("snap")
        assert not proc.ran("fwupdmgr")
        assert not proc.ran("do-release-upgrade")
        text = output(console)
        assert "Snap is not installed" in text
        assert "fwupdmgr not available" in text
        assert "do-release-upgrade not found" in text

    def test_release_upgrade_declined(self, console, system, proc):
        ask = Prompts("n")

        _updater(console, system, proc, ask=ask).run()

        assert ask.asked == [RELEASE_PROMPT]
        assert not proc.ran("DistUpgradeViewNonInteractive")
        assert not proc.ran("do-release-upgrade", mode="interactive")
        assert "Skipping Ubuntu release upgrade." in output(console)

    def test_forced_release_upgrade_runs_interactively(self, console, system, proc):
        ask = Prompts()

        _updater(console, system, proc, cfg=RunConfiguration(force_release_upgrade=True), ask=ask).run()

        assert ask.asked == []
        assert proc.ran("do-release-upgrade", mode="interactive")

    def test_assume_yes_release_upgrade_is_non_interactive(self, console, system, proc):
        _updater(console, system, proc, cfg=RunConfiguration(assume_yes=True)).run()

        assert proc.ran("DEBIAN_FRONTEND=noninteractive do-release-upgrade -f DistUpgradeViewNonInteractive")

    def test_reboot_marker_with_flags_reboots(self, console, system, proc, fake_root):
        touch(fake_root, paths.REBOOT_REQUIRED)
        ask = Prompts()

        report = _updater(console, system, proc, cfg=RunConfiguration(assume_yes=True, countdown_seconds=2),
                          ask=ask).run()

        assert ask.asked == []
        assert proc.lines()[-1].endswith("reboot")
        assert report.rebooted is True

    def test_reboot_marker_declined(self, console, system, proc, fake_root):
        touch(fake_root, paths.REBOOT_REQUIRED)
        ask = Prompts("n", "")

        report = _updater(console, system, proc, ask=ask).run()

        assert ask.asked == [RELEASE_PROMPT, REBOOT_PROMPT]
        assert not proc.ran("reboot")
        assert report.reboot_required is True
        assert report.rebooted is False


@pytest.mark.unit
class TestRaspberryPi:

    @pytest.fixture
    def pi(self, fake_root):
        touch(fake_root, paths.DEVICE_MODEL, "Raspberry Pi 4 Model B Rev 1.4\x00")
        touch(fake_root, paths.THERMAL_ZONE, "52000\n")

    def test_full_run_in_order(self, console, system, proc, pi):
        ask = Prompts("n")

        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=ask).run()

        assert ask.asked == [FIRMWARE_PROMPT]
        order = ["apt update", "apt upgrade -y", "apt dist-upgrade -y", "rpi-eeprom-update", "dpkg -l",
                 "snap refresh", "flatpak update -y", "apt autoremove -y", "apt autoclean",
                 "apt autoremove --purge -y", "updatedb", "df /"]
        positions = [proc.index(f) for f in order]
        assert positions == sorted(positions)
        assert not proc.ran("rpi-update")
        assert not proc.ran("ping")
        assert output(console).count("Current CPU temperature: 52°C") == 2

    def test_runs_as_root_without_complaint(self, console, system, proc, pi):
        with patch("sysupdater.services.updater.is_admin", return_value=True):
            _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("n")).run()

        assert proc.ran("apt update")

    def test_firmware_update_on_request(self, console, system, proc, pi):
        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("y")).run()

        assert proc.ran("rpi-update", mode="interactive")
        assert "Firmware update completed - reboot will be required" in output(console)

    def test_firmware_update_with_assume_yes_skips_warning(self, console, system, proc, pi, fake_root):
        ask = Prompts()

        _updater(console, system, proc, cfg=RunConfiguration(assume_yes=True, countdown_seconds=0),
                 platform_name=plat.RASPBERRY_PI, ask=ask).run()

        assert ask.asked == []
        assert proc.ran("SKIP_WARNING=1 rpi-update")

    def test_failed_firmware_update_does_not_abort(self, console, system, pi):
        proc = FakeProcess(results={"rpi-update": 1})
        system.proc = proc

        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("y")).run()

        assert proc.ran("flatpak update -y")

    def test_eeprom_update_installed_when_available(self, console, system, pi):
        proc = FakeProcess(captures={"rpi-eeprom-update": (0, "BOOTLOADER: update available\n*** UPDATE AVAILABLE ***\n")})
        system.proc = proc

        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("n")).run()

        assert proc.ran("rpi-eeprom-update -a")
        assert "EEPROM updated - reboot required" in output(console)

    def test_eeprom_up_to_date(self, console, system, proc, pi):
        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("n")).run()

        assert not proc.ran("rpi-eeprom-update -a")
        assert "EEPROM is up to date" in output(console)

    def test_not_a_pi_declined_exits_before_updates(self, console, system, proc):
        ask = Prompts("n")

        with pytest.raises(PreconditionFailed):
            _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=ask).run()

        assert ask.asked == ["Continue anyway? (y/N): "]
        assert not proc.ran("apt")

    def test_not_a_pi_confirmed_continues(self, console, system, proc):
        _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=Prompts("y", "n")).run()

        assert proc.ran("apt update")

    def test_firmware_backup_triggers_reboot_prompt(self, console, system, proc, pi, fake_root):
        touch(fake_root, paths.FIRMWARE_BACKUP)
        ask = Prompts("n", "n")

        report = _updater(console, system, proc, platform_name=plat.RASPBERRY_PI, ask=ask).run()

        assert ask.asked == [FIRMWARE_PROMPT, REBOOT_PROMPT]
        assert report.reboot_reason == "firmware-update"


@pytest.mark.unit
class TestOtherPlatforms:

    def test_minimal(self, console, system, proc):
        _updater(console, system, proc, platform_name=plat.MINIMAL).run()

        assert [l.replace("sudo ", "") for l in proc.lines()] == [
            "apt update", "apt full-upgrade -y", "apt dist-upgrade -y", "do-release-upgrade -c",
            "apt autoremove -y", "apt autoclean",
        ]

    def test_windows_requires_winget(self, console, system, proc):
        with pytest.raises(PreconditionFailed, match="winget"):
            _updater(console, system, proc, platform_name=plat.WINDOWS, tools=set()).run()

        assert proc.calls == []

    def test_windows_runs_winget_and_checks_registry(self, console, system, proc):
        proc.captures["RebootRequired"] = (0, "False")

        report = _updater(console, system, proc, platform_name=plat.WINDOWS).run()

        assert proc.ran("winget source update")
        assert proc.ran("winget upgrade --all")
        assert proc.ran("RebootRequired", mode="capture")
        assert report.reboot_required is False
