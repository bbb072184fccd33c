"""Open URLs in the system browser via the platform's opener command."""
from __future__ import annotations
import logging
import platform
import shutil
import subprocess
from typing import List, Optional

from .exceptions import OpenUrlError

logger = logging.getLogger(__name__)

# Short poll for an opener that fails straight away; anything still running
# after this is treated as launched and reaped later
OPENER_POLL_S = 0.1


def get_platform() -> str:
    """Return 'darwin', 'windows' or 'linux' (lower-cased platform.system())."""
    return platform.system().lower()


def opener_command(url: str, system: Optional[str] = None) -> List[str]:
    system = system or get_platform()
    if system == "darwin":
        return ["open", url]
    if system == "windows":
        return ["cmd", "/C", "start", "", url]
    return ["xdg-open", url]


def open_url(url: str, system: Optional[str] = None, wait: float = OPENER_POLL_S) -> Optional[subprocess.Popen]:
    """Launch the system opener for url without blocking for long.

    Raises OpenUrlError when the opener is missing, cannot be spawned, or
    exits non-zero within ``wait`` seconds. Returns the process if it is
    still running after that, so the caller can reap it, else None.
    """
    if not url.strip():
        return None

    cmd = opener_command(url, system)
    if shutil.which(cmd[0]) is None:
        raise OpenUrlError(f"{cmd[0]} not found; cannot open {url}")

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        raise OpenUrlError(f"failed to run {cmd[0]}: {e}") from e

    try:
        code = proc.wait(timeout=wait)
    except subprocess.TimeoutExpired:
        logger.debug(f"{cmd[0]} still running after {wait}s, assuming launched")
        return proc

    if code != 0:
        raise OpenUrlError(f"{cmd[0]} exited with status {code}")
    logger.debug(f"Opened {url} with {cmd[0]}")
    return None


class BrowserOpener:
    """Callable opener that keeps track of openers still running in the background."""

    def __init__(self, system: Optional[str] = None, wait: float = OPENER_POLL_S):
        self.system = system
        self.wait = wait
        self.running: List[subprocess.Popen] = []

    def __call__(self, url: str) -> None:
        self.reap()
        proc = open_url(url, self.system, self.wait)
        if proc is not None:
            self.running.append(proc)

    def reap(self) -> None:
        """Collect exit statuses of finished openers."""
        self.running = [proc for proc in self.running if proc.poll() is None]
