import time
from ..core.colors import GREEN, YELLOW, RED, RESET
from ..core.console import Console
from ..domain.reboot import ColorBand, CountdownState, countdown_states

BAND_COLORS = {
    ColorBand.NORMAL: GREEN,
    ColorBand.WARNING: YELLOW,
    ColorBand.CRITICAL: RED,
}

def render(state: CountdownState) -> str:
    color = BAND_COLORS[state.color_band]
    return f"\r{color}Rebooting in {state.seconds_remaining:2d} seconds...{RESET} "

def reboot_countdown(seconds: int, console: Console, sleep=time.sleep) -> int:
    """
    Count down in place from ``seconds`` to 1, one update per second, and
    return the number of updates shown. Ctrl+C propagates as
    KeyboardInterrupt so the caller never reaches its reboot command.
    """
    if seconds <= 0:
        return 0
    console.warn(f"Reboot will start in {seconds} seconds. Press Ctrl+C to cancel.")
    ticks = 0
    for state in countdown_states(seconds):
        console.write(render(state))
        ticks += 1
        sleep(1)
    console.line()
    return ticks
