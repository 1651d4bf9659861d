"""Utility functions and helpers for the nvdeploy application."""
import logging
import subprocess
from pathlib import Path
from typing import Any, List, Optional

from ..config import Config

logger = logging.getLogger("nvdeploy.utils")


def run_command(
    cmd: List[str],
    *,
    check: bool = True,
    capture_output: bool = True,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """Run an external command and log what happened.

    Args:
        cmd: Command and arguments
        check: Raise ``CalledProcessError`` on a non-zero exit code
        capture_output: Capture stdout/stderr instead of inheriting them
        cwd: Working directory for the command
        timeout: Seconds before the process is killed

    Returns:
        The completed process

    Raises:
        subprocess.CalledProcessError: If ``check`` is set and the command fails
        subprocess.TimeoutExpired: If the command runs past ``timeout``
    """
    cmd_str = ' '.join(cmd)
    logger.debug(f"💻 Running: {cmd_str}")
    try:
        result = subprocess.run(
            cmd,
            check=check,
            text=True,
            cwd=cwd,
            timeout=timeout,
            stdout=subprocess.PIPE if capture_output else None,
            stderr=subprocess.PIPE if capture_output else None,
        )
        if capture_output:
            logger.debug(f"🟢 Output:\n{result.stdout}")
        return result
    except subprocess.CalledProcessError as e:
        msg = f"❌ Command failed: {cmd_str} (exit code: {e.returncode})"
        if capture_output:
            msg += f"\nStdout:\n{e.stdout}\nStderr:\n{e.stderr}"
        logger.error(msg)
        raise
    except subprocess.TimeoutExpired:
        logger.error(f"⏰ Command timed out after {timeout}s: {cmd_str}")
        raise


def command_output(error: subprocess.SubprocessError) -> str:
    """Return the most useful line of output from a failed command."""
    for stream in (getattr(error, "stderr", None), getattr(error, "stdout", None)):
        if isinstance(stream, bytes):
            stream = stream.decode(errors="replace")
        if stream and stream.strip():
            return stream.strip().splitlines()[-1]
    return str(error)


def redact_sensitive_data(data: Any) -> Any:
    """Recursively redact sensitive data from dictionaries and lists.

    Args:
        data: Input data that might contain sensitive information

    Returns:
        Data with sensitive values redacted
    """
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if any(
                redact_key.lower() in k.lower()
                for redact_key in Config.REDACT_KEYS
            ) else redact_sensitive_data(v)
            for k, v in data.items()
        }
    elif isinstance(data, (list, tuple)):
        return [redact_sensitive_data(item) for item in data]
    return data
