"""Process table backend using pgrep."""

import logging
import subprocess

from claufication.backends.base import ProcessBackend

logger = logging.getLogger(__name__)


def _run_pgrep(*args: str, timeout: float = 2.0) -> int:
    """Run pgrep and return its exit code.

    Args:
        *args: Arguments to pass to pgrep.
        timeout: Command timeout in seconds.

    Returns:
        pgrep's return code, or 1 if it could not run or timed out.
    """
    cmd = ["pgrep", *args]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode
    except subprocess.TimeoutExpired:
        logger.debug("pgrep timed out")
        return 1
    except OSError as e:
        logger.debug(f"pgrep unavailable: {e}")
        return 1


class PgrepProcessBackend(ProcessBackend):
    """Checks for a running process with `pgrep -x`."""

    def __init__(self, timeout: float = 2.0):
        """Initialize the backend.

        Args:
            timeout: Seconds to wait for pgrep before reporting "not running".
        """
        self._timeout = timeout

    def is_process_running(self, name: str) -> bool:
        return _run_pgrep("-x", name, timeout=self._timeout) == 0
