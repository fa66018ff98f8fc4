import argparse
import json
import logging
import sys

from colors import SliceColors as SC
from core.config import INCONCLUSIVE_POLICIES, BisectConfig
from core.engine import BisectionEngine
from core.errors import BudgetExceededError, InconclusiveScanError, ThreatSliceError
from core.report import generate_report
from core.scanner import KasperskyScanner, resolve_scanner
from target_validation import MAX_FILE_SIZE, validate_target


def build_parser():
    parser = argparse.ArgumentParser(
        prog="threatslice",
        description=f"{SC.HEADER}threatslice - isolate the bytes an antivirus scanner flags{SC.RESET}",
    )
    parser.add_argument("target", help="Path to the file to bisect")
    parser.add_argument("--scanner", help="Path to the scanner executable (avp.com)")
    parser.add_argument("-d", "--debug", action="store_true", help="Trace every bisection step")
    parser.add_argument("--timeout", type=float, help="Per-scan timeout in seconds")
    parser.add_argument("--budget", type=float, help="Overall search budget in seconds (0 disables)")
    parser.add_argument("--interval", type=float, help="Progress report interval in seconds")
    parser.add_argument("--on-inconclusive", choices=INCONCLUSIVE_POLICIES,
                        help="What to do when the scanner gives no usable report")
    parser.add_argument("--retries", type=int, help="Retries per prefix for the 'retry' policy")
    parser.add_argument("--large", action="store_true", help="Bypass 100MB limit")
    parser.add_argument("-j", "--json", action="store_true", help="Raw JSON output")
    parser.add_argument("-o", "--log", help="Save result to JSON file")
    return parser


def load_config(args) -> BisectConfig:
    config = BisectConfig.from_env()
    return config.override(
        scan_timeout=args.timeout,
        budget=args.budget,
        progress_interval=args.interval,
        on_inconclusive=args.on_inconclusive,
        max_retries=args.retries,
        debug=True if args.debug else None,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        config = load_config(args)

        validation = validate_target(args.target, MAX_FILE_SIZE, allow_large=args.large)
        if not validation.is_valid:
            print(f"{SC.CRITICAL}[!] Invalid target: {validation.reason}{SC.RESET}")
            return 1

        scanner_path = resolve_scanner(args.scanner, config.scanner_candidates)
        print(f"{SC.INFO}[*] Scanner: {scanner_path}{SC.RESET}")

        scanner = KasperskyScanner(scanner_path, timeout=config.scan_timeout)
        engine = BisectionEngine(scanner, config)
        result = engine.run(validation.file_path)

    except BudgetExceededError as e:
        print(f"{SC.CRITICAL}[!] {e}{SC.RESET}")
        print(f"{SC.WARNING}[!] Last window: 0x{e.last_good:X} -> 0x{e.upper_bound:X}{SC.RESET}")
        return 1
    except InconclusiveScanError as e:
        print(f"{SC.CRITICAL}[!] {e}{SC.RESET}")
        print(f"{SC.WARNING}[!] Try --on-inconclusive clean to treat failed scans as clean{SC.RESET}")
        return 1
    except ThreatSliceError as e:
        print(f"{SC.CRITICAL}[!] Error: {e}{SC.RESET}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{SC.WARNING}[!] User interrupted scan.{SC.RESET}")
        return 130

    if args.json:
        print(json.dumps(result.to_dict(), indent=4))
    else:
        generate_report(result, scanner.name)

    if args.log:
        try:
            with open(args.log, "w") as f:
                json.dump(result.to_dict(), f, indent=4, default=str)
        except OSError as e:
            print(f"{SC.CRITICAL}[!] Could not save log {args.log}: {e}{SC.RESET}")
            return 1
        print(f"{SC.SUCCESS}[+] Log saved: {args.log}{SC.RESET}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
