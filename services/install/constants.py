"""Constants shared across the install service modules."""

from __future__ import annotations

GITHUB_REPO = "onuroluc/vitals"
RELEASE_BASE_URL = f"https://github.com/{GITHUB_REPO}"
RELEASE_URL_TEMPLATE = "{base}/releases/download/v{version}/{binary}-{tag}.tar.gz"

BINARY_NAME = "vitals"
ARCHIVE_SUFFIX = ".tar.gz"

# (os, arch) -> asset filename suffix
PLATFORM_TAGS: dict[tuple[str, str], str] = {
    ("macos", "arm64"): "darwin-arm64",
    ("macos", "amd64"): "darwin-amd64",
    ("linux", "arm64"): "linux-arm64",
    ("linux", "amd64"): "linux-amd64",
}

OS_ALIASES = {
    "darwin": "macos",
    "macos": "macos",
    "macosx": "macos",
    "osx": "macos",
    "linux": "linux",
}
ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv8": "arm64",
    "armv8l": "arm64",
}

CHECKSUM_PLACEHOLDER = "PLACEHOLDER"

DEFAULT_TIMEOUT_SECONDS = 60.0
SMOKE_TEST_FLAG = "--help"
SMOKE_TEST_EXPECTED_OUTPUT = BINARY_NAME
SMOKE_TEST_TIMEOUT_SECONDS = 10.0

MAX_ARCHIVE_DOWNLOAD_BYTES = 200 * 1024 * 1024  # 200 MiB
MAX_BINARY_BYTES = 150 * 1024 * 1024  # 150 MiB
MAX_ARCHIVE_ENTRIES = 2000
DOWNLOAD_CHUNK_SIZE = 65536

TEMP_FILE_PREFIX = f".{BINARY_NAME}-"
TEMP_FILE_SUFFIX = ".tmp"
EXECUTABLE_MODE = 0o755

BIN_DIR_ENV = "VITALS_INSTALL_BIN_DIR"
MANIFEST_ENV = "VITALS_INSTALL_MANIFEST"
BASE_URL_ENV = "VITALS_INSTALL_BASE_URL"
TIMEOUT_ENV = "VITALS_INSTALL_TIMEOUT"
