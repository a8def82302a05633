import argparse, os, signal, sys
from pathlib import Path
from .core.console import Console
from .domain.config import ConfigStore, RunConfiguration, DEFAULTS, DEFAULT_COUNTDOWN, PLATFORMS, validate_countdown
from .services.platform import resolve_platform
from .services.steps import PreconditionFailed, StepFailed
from .services.system import SystemService
from .services.updater import Updater

try:
    from . import __version__ as VERSION_TEXT
except ImportError:
    VERSION_TEXT = "1.0"

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sysupdater",
        description="Update system packages and reboot when the system asks for it.",
        allow_abbrev=False,
    )
    p.add_argument("-y", "--yes", action="store_true", help="answer yes to every prompt")
    p.add_argument("--auto", "--auto-reboot", dest="auto_reboot", action="store_true",
                   help="reboot without asking when a reboot is required")
    p.add_argument("--countdown", "--reboot-delay", dest="countdown", nargs="?", const=str(DEFAULT_COUNTDOWN),
                   metavar="N", help=f"seconds to count down before rebooting (default {DEFAULT_COUNTDOWN})")
    p.add_argument("--release-upgrade", action="store_true", help="start an Ubuntu release upgrade if one is available")
    p.add_argument("--platform", type=str, metavar="{" + ",".join(PLATFORMS) + "}")
    p.add_argument("--dry-run", action="store_true", help="print commands instead of running them")
    p.add_argument("--debug", action="store_true", help="echo every command before running it")
    p.add_argument("--report", type=str, metavar="{json,txt}")
    p.add_argument("--out", type=str, help="write the run report to this path")
    p.add_argument("--log-file", type=str, help="also write terminal output to this file")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION_TEXT}")
    return p

FLAGS = {"-y", "--yes", "--auto", "--auto-reboot", "--release-upgrade", "--dry-run", "--debug",
         "-h", "--help", "--version"}
COUNTDOWN_OPTS = {"--countdown", "--reboot-delay"}
VALUE_OPTS = {"--platform", "--report", "--out", "--log-file"}

def _sort_tokens(argv) -> tuple[list[str], list[str]]:
    """
    Split raw tokens into ones argparse can take without erroring and the
    warnings for the rest. Value options always consume the next token,
    whatever it looks like; argparse gets them in ``--opt=value`` form.
    """
    tokens, warnings = [], []
    it = iter(argv)
    for t in it:
        name = t.split("=", 1)[0]
        if t in FLAGS:
            tokens.append(t)
        elif name in COUNTDOWN_OPTS | VALUE_OPTS and "=" in t:
            tokens.append(t)
        elif t in COUNTDOWN_OPTS | VALUE_OPTS:
            value = next(it, None)
            if value is not None:
                tokens.append(f"{t}={value}")
            elif t in COUNTDOWN_OPTS:
                tokens.append(t)
            else:
                warnings.append(f"Missing value for {t}")
        else:
            warnings.append(f"Unknown option: {t}")
    return tokens, warnings

def parse_run_configuration(argv=None, defaults=None) -> tuple[RunConfiguration, list[str]]:
    """
    Build the run configuration from ``argv`` layered over settings-file
    ``defaults``. Never fails on bad input: problems come back as warnings.
    ``--help`` exits through argparse.
    """
    defaults = dict(DEFAULTS, **(defaults or {}))
    tokens, warnings = _sort_tokens(sys.argv[1:] if argv is None else argv)
    args, unknown = _build_parser().parse_known_args(tokens)
    warnings += [f"Unknown option: {t}" for t in unknown]

    raw = args.countdown if args.countdown is not None else defaults.get("countdown")
    countdown, w = validate_countdown(raw)
    if w:
        warnings.append(w)

    platform_name = args.platform or defaults.get("platform") or "auto"
    if platform_name not in PLATFORMS:
        warnings.append(f"Unknown platform '{platform_name}'. Detecting automatically.")
        platform_name = "auto"

    report = args.report or defaults.get("report") or "json"
    if report not in ("json", "txt"):
        warnings.append(f"Unknown report format '{report}'. Using json.")
        report = "json"

    cfg = RunConfiguration(
        assume_yes=args.yes or defaults.get("assume_yes") is True,
        auto_reboot=args.auto_reboot or defaults.get("auto_reboot") is True,
        countdown_seconds=countdown,
        force_release_upgrade=args.release_upgrade,
        platform=platform_name,
        dry_run=args.dry_run,
        debug=args.debug,
        report=report,
        out=args.out or defaults.get("out"),
        log_file=args.log_file or defaults.get("log_file"),
    )
    return cfg, warnings

def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt

def _write_report(console: Console, cfg: RunConfiguration, report):
    if not cfg.out:
        return
    out_path = Path(cfg.out).expanduser()
    try:
        report.save(cfg.report, out_path)
        console.ok(f"Report written: {out_path}")
    except OSError as e:
        console.warn(f"Could not write report: {e}")

def run_cli(argv=None, ask=None, sleep=None) -> int:
    store = ConfigStore()
    cfg, warnings = parse_run_configuration(argv, store.get_defaults())
    console = Console(debug=cfg.debug, dry_run=cfg.dry_run)
    console.enable_windows_ansi_utf8()
    if cfg.log_file:
        try:
            console.open_log(Path(cfg.log_file).expanduser())
        except OSError as e:
            console.warn(f"Could not open log file: {e}")
    for w in store.warnings + warnings:
        console.warn(w)

    model = SystemService(console).device_model()
    platform_name = resolve_platform(cfg.platform, os.name, model)
    kwargs = {"ask": ask}
    if sleep is not None:
        kwargs["sleep"] = sleep
    updater = Updater(console, cfg, platform_name, **kwargs)
    updater.reboot.before_reboot = lambda: _write_report(console, cfg, updater.report)

    previous = signal.signal(signal.SIGTERM, _raise_interrupt) if hasattr(signal, "SIGTERM") else None
    try:
        updater.run()
        if not updater.report.rebooted:
            _write_report(console, cfg, updater.report)
        return 0
    except PreconditionFailed as e:
        console.err(str(e))
        return 1
    except StepFailed as e:
        console.err(str(e))
        _write_report(console, cfg, updater.report)
        return e.rc if e.rc > 0 else 1
    except KeyboardInterrupt:
        console.line()
        console.err("Cancelled. No reboot was issued.")
        return 130
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
        console.close()

def main():
    return run_cli()

if __name__ == "__main__":
    sys.exit(main())
