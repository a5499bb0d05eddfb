"""Privilege checks and sudo credential verification."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess

from cleansys.errors import PrivilegeError

log = logging.getLogger(__name__)

# Timeout for sudo helper invocations (seconds).
_SUDO_TIMEOUT = 15


def is_root() -> bool:
    """Check if the current process is running as root."""
    return os.geteuid() == 0


def sudo_available() -> bool:
    """Check if sudo is available on the system."""
    return shutil.which("sudo") is not None


def sudo_cached() -> bool:
    """Check whether sudo already holds a valid credential timestamp.

    Runs ``sudo -n true``, which succeeds without prompting only when a
    previous authentication is still cached.
    """
    if not sudo_available():
        return False
    try:
        proc = subprocess.run(
            ["sudo", "-n", "true"],
            capture_output=True,
            timeout=_SUDO_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return proc.returncode == 0


def verify_password(secret: str) -> bool:
    """Validate *secret* with ``sudo -S -v`` and cache the credential.

    The secret is written to the helper's stdin and never logged or
    stored.  Output is discarded.

    Returns:
        True if sudo accepted the password, False if it was rejected.

    Raises:
        PrivilegeError: If sudo is missing or did not answer in time.
    """
    if not sudo_available():
        raise PrivilegeError("sudo is not available on this system")

    log.debug("Verifying sudo credentials")
    try:
        proc = subprocess.run(
            ["sudo", "-S", "-p", "", "-v"],
            input=secret + "\n",
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=_SUDO_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        raise PrivilegeError("Authentication timed out")
    except OSError as exc:
        raise PrivilegeError(f"Could not run sudo: {exc}")

    if proc.returncode != 0:
        log.info("sudo rejected the supplied credentials")
        return False
    log.info("sudo credentials verified")
    return True


def privileged_command(args: list[str]) -> list[str]:
    """Prefix *args* with ``sudo -n`` unless already running as root.

    ``-n`` makes sudo fail instead of prompting, so a command run after a
    successful :func:`verify_password` reuses the cached credential and
    never blocks on a hidden terminal prompt.
    """
    if is_root():
        return list(args)
    return ["sudo", "-n", *args]


def run_privileged(args: list[str], timeout: int = 300) -> subprocess.CompletedProcess[str]:
    """Run a command with elevated rights and capture its output.

    Raises:
        PrivilegeError: If sudo refused to run it without a password.
    """
    cmd = privileged_command(args)
    log.debug("Running privileged command: %s", " ".join(args))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        raise PrivilegeError(f"{args[0]} timed out after {timeout} seconds")

    if proc.returncode != 0 and cmd[0] == "sudo" and "password is required" in proc.stderr:
        raise PrivilegeError("Root privileges required: sudo password is required")
    return proc
