"""Service responsible for resolving, verifying and installing releases."""

from __future__ import annotations

import logging
from pathlib import Path

from services.install.archive import extract_binary
from services.install.constants import (
    BINARY_NAME,
    DEFAULT_TIMEOUT_SECONDS,
    RELEASE_BASE_URL,
    SMOKE_TEST_EXPECTED_OUTPUT,
    SMOKE_TEST_FLAG,
    SMOKE_TEST_TIMEOUT_SECONDS,
)
from services.install.download import fetch_and_verify
from services.install.installers import Installer
from services.install.manifest import ChecksumManifest
from services.install.models import (
    ArtifactDescriptor,
    InstalledBinary,
    InstallResult,
    Platform,
    SmokeTestFailed,
    SmokeTestResult,
)
from services.install.platforms import detect_platform
from services.install.resolver import resolve
from services.install.smoke import smoke_test


_LOGGER = logging.getLogger(__name__)


class InstallService:
    """Run resolve, fetch/verify, install and smoke test as one pipeline.

    Each stage finishes before the next begins and nothing is retried.
    Configuration problems surface from :meth:`resolve` before any network
    access is attempted.
    """

    def __init__(
        self,
        manifest: ChecksumManifest,
        installer: Installer,
        *,
        base_url: str = RELEASE_BASE_URL,
        binary_name: str = BINARY_NAME,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        smoke_test_flag: str = SMOKE_TEST_FLAG,
        smoke_test_expected: str = SMOKE_TEST_EXPECTED_OUTPUT,
        smoke_test_timeout: float = SMOKE_TEST_TIMEOUT_SECONDS,
    ) -> None:
        self._manifest = manifest
        self._installer = installer
        self._base_url = base_url
        self._binary_name = binary_name
        self._timeout = timeout
        self._smoke_test_flag = smoke_test_flag
        self._smoke_test_expected = smoke_test_expected
        self._smoke_test_timeout = smoke_test_timeout

    @property
    def manifest(self) -> ChecksumManifest:
        return self._manifest

    def resolve(
        self, version: str | None = None, platform: Platform | None = None
    ) -> ArtifactDescriptor:
        """Return the descriptor for ``version`` (newest when omitted) on ``platform``."""

        if version is None:
            version = self._manifest.latest_version()
            _LOGGER.debug("No version requested; newest manifest entry is %s", version)
        if platform is None:
            platform = detect_platform()
        descriptor = resolve(
            version,
            platform,
            self._manifest,
            base_url=self._base_url,
            binary_name=self._binary_name,
        )
        _LOGGER.info(
            "Resolved %s %s for %s to %s",
            self._binary_name,
            descriptor.version,
            platform,
            descriptor.asset_name,
        )
        return descriptor

    def fetch_and_verify(self, descriptor: ArtifactDescriptor) -> bytes:
        return fetch_and_verify(descriptor, timeout=self._timeout)

    def install(self, archive: bytes, descriptor: ArtifactDescriptor) -> InstalledBinary:
        payload = extract_binary(archive, self._binary_name)
        return self._installer.install(payload, descriptor.version, descriptor.platform)

    def smoke_test(self, binary_path: Path) -> SmokeTestResult:
        return smoke_test(
            binary_path,
            flag=self._smoke_test_flag,
            expected_output=self._smoke_test_expected,
            timeout=self._smoke_test_timeout,
        )

    def run(
        self,
        version: str | None = None,
        platform: Platform | None = None,
        *,
        run_smoke_test: bool = True,
        strict_smoke_test: bool = False,
    ) -> InstallResult:
        """Install ``version`` for ``platform`` and return the :class:`InstallResult`.

        A failed smoke test leaves the binary installed.  It is reported on
        the result, or raised as :class:`SmokeTestFailed` when
        ``strict_smoke_test`` is set.
        """

        descriptor = self.resolve(version, platform)
        archive = self.fetch_and_verify(descriptor)
        binary = self.install(archive, descriptor)

        if not run_smoke_test:
            _LOGGER.debug("Skipping smoke test for %s", binary.path)
            return InstallResult(descriptor=descriptor, binary=binary)

        result = self.smoke_test(binary.path)
        if not result.passed and strict_smoke_test:
            raise SmokeTestFailed(
                f"{binary.path} was installed but its smoke test failed: {result.reason}",
                result,
            )
        return InstallResult(descriptor=descriptor, binary=binary, smoke_test=result)
