import time
from ..core.console import Console
from ..domain.config import RunConfiguration
from ..domain.reboot import Answer, RebootDecision, decide_reboot, parse_answer
from .countdown import reboot_countdown
from .steps import Step, StepFailed, StepRunner
from .system import SystemService

REBOOT_PROMPT = "Do you want to reboot now? (y/N): "


class RebootService:
    def __init__(self, console: Console, system: SystemService, runner: StepRunner, cfg: RunConfiguration,
                 platform_name: str, ask=None, sleep=time.sleep, before_reboot=None):
        self.console = console
        self.system = system
        self.runner = runner
        self.cfg = cfg
        self.platform_name = platform_name
        self.ask = ask or console.ask
        self.sleep = sleep
        self.before_reboot = before_reboot

    def decide(self) -> RebootDecision:
        package = self.system.reboot_marker_present()
        if package:
            self.console.warn("System restart is required to complete updates!")
            pkgs = self.system.reboot_packages()
            if pkgs:
                self.console.warn("Reboot required packages:")
                for p in pkgs:
                    self.console.line(p)
        firmware = self.system.firmware_marker_present(self.platform_name)
        if firmware:
            self.console.warn("Firmware was updated - reboot required!")
        return decide_reboot(package, firmware)

    def confirm(self) -> Answer:
        if self.cfg.skip_reboot_prompt:
            return Answer.YES
        return parse_answer(self.ask(REBOOT_PROMPT))

    def handle(self, report=None) -> bool:
        """Returns True when the reboot command was issued."""
        decision = self.decide()
        if report is not None:
            report.reboot_required = decision.required
            report.reboot_reason = decision.reason.value
        if not decision.required:
            self.console.ok("No reboot required")
            return False
        self.console.line()
        if self.confirm() is not Answer.YES:
            self.console.warn("Please remember to reboot your system later")
            return False
        self.console.info("Rebooting system...")
        reboot_countdown(self.cfg.countdown_seconds, self.console, self.sleep)
        if report is not None:
            report.rebooted = True
        if self.before_reboot:
            self.before_reboot()
        try:
            self.runner.run(Step("Issuing reboot...", self.system.reboot_command(self.platform_name)))
        except StepFailed:
            if report is not None:
                report.rebooted = False
            raise
        return True
