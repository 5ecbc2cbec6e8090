"""Command line front-end for installing the vitals binary."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from app.config import get_app_config
from app.version import get_app_version
from services.install import (
    ConfigurationError,
    DownloadFailed,
    ExtractionError,
    InstallError,
    InstallPermissionDenied,
    IntegrityMismatch,
    Platform,
    SmokeTestFailed,
    UnsupportedPlatform,
    build_install_service,
    detect_platform,
    parse_platform,
)
from services.install.builder import resolve_bin_dir
from services.install.platforms import supported_platforms
from services.install.versioning import normalise_version
from shared.logging_config import LogVerbosity, ensure_app_logging, set_file_log_verbosity


_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2
EXIT_DOWNLOAD = 3
EXIT_INTEGRITY = 4
EXIT_EXTRACTION = 5
EXIT_PERMISSION = 6
EXIT_SMOKE_TEST = 7

_EXIT_CODES: tuple[tuple[type[InstallError], int], ...] = (
    (ConfigurationError, EXIT_CONFIGURATION),
    (DownloadFailed, EXIT_DOWNLOAD),
    (IntegrityMismatch, EXIT_INTEGRITY),
    (ExtractionError, EXIT_EXTRACTION),
    (InstallPermissionDenied, EXIT_PERMISSION),
    (SmokeTestFailed, EXIT_SMOKE_TEST),
)


def exit_code_for(error: InstallError) -> int:
    for error_type, code in _EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return EXIT_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vitals-install",
        description="Resolve, verify and install the prebuilt vitals binary.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_app_version()}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print debug messages to stderr."
    )
    parser.add_argument("--log-file", type=Path, help="Write the install log to this file.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    install = subparsers.add_parser("install", help="Download, verify and install a release.")
    _add_release_arguments(install)
    install.add_argument("--bin-dir", type=Path, help="Directory that receives the executable.")
    install.add_argument(
        "--manifest-url", help="URL of a SHA256SUMS list published with the release."
    )
    install.add_argument("--timeout", type=float, help="Download timeout in seconds.")
    install.add_argument(
        "--skip-smoke-test", action="store_true", help="Do not run the binary after installing."
    )
    install.add_argument(
        "--strict",
        action="store_true",
        help="Treat a failed smoke test as an error.",
    )
    install.set_defaults(handler=_run_install)

    resolve = subparsers.add_parser(
        "resolve", help="Print the download URL and checksum without downloading."
    )
    _add_release_arguments(resolve)
    resolve.set_defaults(handler=_run_resolve)

    platforms = subparsers.add_parser("platforms", help="List supported platforms.")
    platforms.set_defaults(handler=_run_platforms)
    return parser


def _add_release_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "release", nargs="?", metavar="VERSION", help="Release to install (default: newest known)."
    )
    parser.add_argument("--os", dest="os_name", help="Override the detected operating system.")
    parser.add_argument("--arch", help="Override the detected CPU architecture.")
    parser.add_argument("--manifest", type=Path, help="Checksum manifest (JSON or SHA256SUMS).")
    parser.add_argument("--base-url", help="Release host root URL.")


def _platform_from_args(args: argparse.Namespace) -> Platform:
    detected = detect_platform()
    if args.os_name is None and args.arch is None:
        return detected
    return parse_platform(args.os_name or detected.os, args.arch or detected.arch)


def _preflight(args: argparse.Namespace) -> tuple[str | None, Platform]:
    """Reject bad versions and unsupported platforms before loading any manifest."""

    version = normalise_version(args.release) if args.release is not None else None
    platform = _platform_from_args(args)
    if not platform.is_supported:
        raise UnsupportedPlatform(f"No vitals release artifact is published for {platform}")
    return version, platform


def _run_install(args: argparse.Namespace) -> int:
    version, platform = _preflight(args)
    service = build_install_service(
        bin_dir=args.bin_dir,
        manifest_path=args.manifest,
        manifest_url=args.manifest_url,
        version=version,
        base_url=args.base_url,
        timeout=args.timeout,
    )
    result = service.run(
        version,
        platform,
        run_smoke_test=not args.skip_smoke_test,
        strict_smoke_test=args.strict,
    )
    print(f"Installed {result.binary.path} ({result.descriptor.version}, {result.binary.platform})")
    if result.smoke_test is not None and not result.smoke_test.passed:
        print(
            f"warning: {result.binary.path} is installed but its smoke test failed: "
            f"{result.smoke_test.reason}",
            file=sys.stderr,
        )
        return EXIT_SMOKE_TEST
    return EXIT_OK


def _run_resolve(args: argparse.Namespace) -> int:
    version, platform = _preflight(args)
    service = build_install_service(
        manifest_path=args.manifest, version=version, base_url=args.base_url
    )
    descriptor = service.resolve(version, platform)
    print(f"url {descriptor.download_url}")
    print(f"sha256 {descriptor.expected_checksum}")
    return EXIT_OK


def _run_platforms(args: argparse.Namespace) -> int:
    detected = detect_platform()
    for platform in supported_platforms():
        marker = " (detected)" if platform == detected else ""
        print(f"{platform.tag}  {platform}{marker}")
    if not detected.is_supported:
        print(f"host {detected} is not supported", file=sys.stderr)
    print(f"install directory: {resolve_bin_dir(get_app_config())}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    ensure_app_logging(
        args.log_file,
        console_level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_stderr=True,
    )
    if args.verbose:
        set_file_log_verbosity(LogVerbosity.VERBOSE)

    try:
        return args.handler(args)
    except InstallError as exc:
        _LOGGER.error("%s", exc)
        return exit_code_for(exc)
    except KeyboardInterrupt:
        _LOGGER.warning("Install interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
