from dataclasses import dataclass
from enum import Enum


class RebootReason(Enum):
    NONE = "none"
    PACKAGE_UPDATE = "package-update"
    FIRMWARE_UPDATE = "firmware-update"


@dataclass(frozen=True)
class RebootDecision:
    required: bool
    reason: RebootReason = RebootReason.NONE


def decide_reboot(package_marker: bool, firmware_marker: bool = False) -> RebootDecision:
    """Firmware wins when both markers exist; the reason is informational."""
    if firmware_marker:
        return RebootDecision(True, RebootReason.FIRMWARE_UPDATE)
    if package_marker:
        return RebootDecision(True, RebootReason.PACKAGE_UPDATE)
    return RebootDecision(False, RebootReason.NONE)


class Answer(Enum):
    YES = "yes"
    NO = "no"
    UNRECOGNIZED = "unrecognized"


def parse_answer(text: str | None) -> Answer:
    s = (text or "").strip()
    if s in ("y", "Y"):
        return Answer.YES
    if s in ("n", "N"):
        return Answer.NO
    return Answer.UNRECOGNIZED


def confirmed(text: str | None) -> bool:
    return parse_answer(text) is Answer.YES


class ColorBand(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


def color_band(remaining: int) -> ColorBand:
    if remaining <= 3:
        return ColorBand.CRITICAL
    if remaining <= 5:
        return ColorBand.WARNING
    return ColorBand.NORMAL


@dataclass(frozen=True)
class CountdownState:
    seconds_remaining: int

    @property
    def color_band(self) -> ColorBand:
        return color_band(self.seconds_remaining)


def countdown_states(seconds: int):
    for i in range(seconds, 0, -1):
        yield CountdownState(i)
