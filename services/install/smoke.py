"""Post-install smoke test for the installed executable."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from services.install.constants import (
    SMOKE_TEST_EXPECTED_OUTPUT,
    SMOKE_TEST_FLAG,
    SMOKE_TEST_TIMEOUT_SECONDS,
)
from services.install.models import SmokeTestResult


_LOGGER = logging.getLogger(__name__)

__all__ = ["smoke_test"]


def smoke_test(
    binary_path: Path,
    *,
    flag: str = SMOKE_TEST_FLAG,
    expected_output: str = SMOKE_TEST_EXPECTED_OUTPUT,
    timeout: float = SMOKE_TEST_TIMEOUT_SECONDS,
) -> SmokeTestResult:
    """Run ``binary_path flag`` and look for ``expected_output`` in its output.

    Never raises: launch errors and timeouts are reported as a failed result.
    """

    command = (str(binary_path), flag)
    _LOGGER.debug("Running smoke test: %s", " ".join(command))
    try:
        completed = subprocess.run(
            list(command),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return _failed(command, reason=f"timed out after {timeout} seconds")
    except OSError as exc:
        return _failed(command, reason=f"could not be launched: {exc}")

    output = "\n".join(part for part in (completed.stdout, completed.stderr) if part)
    if expected_output not in output:
        return _failed(
            command,
            output=output,
            returncode=completed.returncode,
            reason=f"output did not mention {expected_output!r}",
        )

    _LOGGER.info("Smoke test passed for %s", binary_path)
    return SmokeTestResult(
        passed=True, command=command, output=output, returncode=completed.returncode
    )


def _failed(
    command: tuple[str, ...],
    *,
    reason: str,
    output: str = "",
    returncode: int | None = None,
) -> SmokeTestResult:
    _LOGGER.warning("Smoke test failed for %s: %s", command[0], reason)
    return SmokeTestResult(
        passed=False, command=command, output=output, returncode=returncode, reason=reason
    )
