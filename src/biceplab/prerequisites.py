"""
Prerequisites Checker Module

Verifies the Azure CLI is installed and logged in before any deployment.

Security Requirements:
- No credential storage
- Read-only system checks
- No shell=True in subprocess calls
"""

import logging
import platform
import shutil
from dataclasses import dataclass
from typing import ClassVar

from biceplab.azure_cli_executor import run_az_command

logger = logging.getLogger(__name__)


@dataclass
class PrerequisiteResult:
    """Result of prerequisite checks."""

    all_available: bool
    missing: list[str]
    available: list[str]
    platform_name: str


class PrerequisiteError(Exception):
    """Raised when prerequisites are missing."""

    pass


class PrerequisiteChecker:
    """
    Check required external tools are installed.

    Required tools:
    - az (Azure CLI, including its bundled Bicep support)
    """

    REQUIRED_TOOLS: ClassVar[list[str]] = ["az"]

    @classmethod
    def check_tool(cls, tool_name: str) -> bool:
        """
        Check if a single tool is available in PATH.

        Security: Uses shutil.which (safe, no subprocess)
        """
        result = shutil.which(tool_name)
        if result:
            logger.debug(f"Found {tool_name} at {result}")
            return True
        logger.debug(f"Tool not found: {tool_name}")
        return False

    @classmethod
    def check_all(cls) -> PrerequisiteResult:
        """
        Check all prerequisites and return comprehensive result.

        Example:
            >>> result = PrerequisiteChecker.check_all()
            >>> if not result.all_available:
            ...     print(f"Missing: {result.missing}")
        """
        missing: list[str] = []
        available: list[str] = []

        for tool in cls.REQUIRED_TOOLS:
            if cls.check_tool(tool):
                available.append(tool)
            else:
                missing.append(tool)

        result = PrerequisiteResult(
            all_available=(len(missing) == 0),
            missing=missing,
            available=available,
            platform_name=cls.detect_platform(),
        )

        if not result.all_available:
            logger.debug(f"Missing prerequisites: {', '.join(missing)}")

        return result

    @classmethod
    def check_logged_in(cls) -> bool:
        """Return True if ``az account show`` succeeds."""
        result = run_az_command(["az", "account", "show", "--output", "none"], check=False)
        return result.returncode == 0

    @classmethod
    def ensure_ready(cls) -> None:
        """
        Fail fast unless the Azure CLI is installed and authenticated.

        Raises:
            PrerequisiteError: With instructions for fixing the environment
        """
        result = cls.check_all()
        if not result.all_available:
            raise PrerequisiteError(cls.format_missing_message(result.missing, result.platform_name))

        if not cls.check_logged_in():
            raise PrerequisiteError(
                "Azure CLI is not logged in.\n\n"
                "Run 'az login' (and 'az account set --subscription <id>' if you have\n"
                "several subscriptions), then run biceplab again."
            )

    @classmethod
    def detect_platform(cls) -> str:
        """
        Detect the operating system platform.

        Returns:
            str: Platform name (macos, linux, windows, unknown)
        """
        system = platform.system().lower()

        if system == "darwin":
            return "macos"
        if system == "linux":
            return "linux"
        if system == "windows":
            return "windows"
        return "unknown"

    @classmethod
    def format_missing_message(cls, missing: list[str], platform_name: str) -> str:
        """
        Format user-friendly installation instructions for missing tools.

        Example:
            >>> print(PrerequisiteChecker.format_missing_message(["az"], "macos"))
        """
        if not missing:
            return "All prerequisites are installed."

        lines: list[str] = ["Missing required tools:", ""]
        lines.extend(f"  - {tool}" for tool in missing)
        lines.append("")
        lines.append(f"Platform: {platform_name}")
        lines.append("")

        if "az" in missing:
            lines.append("Install Azure CLI:")
            if platform_name == "macos":
                lines.append("  brew install azure-cli")
            elif platform_name == "linux":
                lines.append("  curl -sL https://aka.ms/InstallAzureCLIDeb | sudo bash")
            elif platform_name == "windows":
                lines.append("  winget install -e --id Microsoft.AzureCLI")
            else:
                lines.append("  https://learn.microsoft.com/cli/azure/install-azure-cli")
            lines.append("")

        lines.append("After installing, run 'az login' and then biceplab again.")
        return "\n".join(lines)


__all__ = ["PrerequisiteChecker", "PrerequisiteError", "PrerequisiteResult"]
