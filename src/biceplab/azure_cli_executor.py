"""Standardized Azure CLI subprocess execution.

Provides run_az_command() - a thin wrapper around subprocess.run for the
tutorial's ``az`` calls. Calls block until the CLI exits: there is no
timeout and no retry, a failed call is reported once and the caller
decides what to do with it.

Usage:
    from biceplab.azure_cli_executor import run_az_command

    result = run_az_command(["az", "group", "create", "--name", "rg", "--location", "eastus"])

    # Inspect the exit status yourself
    result = run_az_command(["az", "account", "show"], check=False)
"""

import logging
import re
import subprocess

logger = logging.getLogger(__name__)

# Values following these flags never reach the log
_SENSITIVE_FLAGS = ("--password", "--client-secret", "--secret", "--sas-token", "--account-key")
_INLINE_SECRET = re.compile(r"(?i)(password|secret|token|key)=\S+")


def sanitize_command(cmd: list[str]) -> str:
    """Render a command line for logging with secret values masked.

    Args:
        cmd: Command list, e.g. ["az", "deployment", "group", "create", ...]

    Returns:
        Space-joined command with secret values replaced by ***
    """
    parts: list[str] = []
    mask_next = False
    for arg in cmd:
        if mask_next:
            parts.append("***")
            mask_next = False
            continue
        if arg in _SENSITIVE_FLAGS:
            mask_next = True
        parts.append(_INLINE_SECRET.sub(r"\1=***", arg))
    return " ".join(parts)


def run_az_command(
    cmd: list[str],
    *,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute an Azure CLI command and wait for it to exit.

    Args:
        cmd: Command list starting with "az", e.g. ["az", "resource", "list"]
        check: If True, raise CalledProcessError on non-zero exit (default: True)

    Returns:
        subprocess.CompletedProcess with stdout/stderr

    Raises:
        subprocess.CalledProcessError: On non-zero exit (when check=True)
        FileNotFoundError: If the az executable is not on PATH
    """
    logger.debug(f"Running: {sanitize_command(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True, check=check)
    logger.debug(f"Exit code {result.returncode}: {cmd[:3]}")
    return result


__all__ = ["run_az_command", "sanitize_command"]
