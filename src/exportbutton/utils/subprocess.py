"""Subprocess and external command utilities."""

import subprocess


def run_subprocess(
    cmd: list[str], *, input_text: str | None = None, timeout: float | None = None
) -> tuple[int, str, str]:
    """Run subprocess command with proper error handling.

    Args:
        cmd: Command and arguments list
        input_text: Optional text written to the command's stdin
        timeout: Optional timeout in seconds

    Returns:
        Tuple of (return_code, stdout_output, stderr_output)
    """
    try:
        result = subprocess.run(cmd, input=input_text, capture_output=True, text=True, timeout=timeout)
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return -1, "", f"Command timed out after {timeout} seconds"
    except OSError as e:
        return -1, "", str(e)
