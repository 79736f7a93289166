from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Callable, Dict, Optional, Sequence, Tuple

from .errors import SubprocessFailure

logger = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str]], str]


def _decode(stream: object) -> str:
    if isinstance(stream, (bytes, bytearray)):
        return stream.decode("utf-8", "ignore")
    return str(stream or "")


def run_command(cmd: Sequence[str]) -> str:
    """Run a blocking tool invocation and return its stripped stdout."""
    logger.debug("exec %s", " ".join(cmd))
    try:
        res = subprocess.run(
            list(cmd),
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise SubprocessFailure(
            "TOOL_NOT_FOUND", f"{cmd[0]} is not installed or not on PATH", cmd=cmd
        ) from e
    except subprocess.CalledProcessError as e:
        stderr = _decode(e.stderr).strip()
        raise SubprocessFailure(
            "SUBPROCESS_FAILED",
            f"{cmd[0]} failed (exit_code={e.returncode}): {stderr or 'unknown error'}",
            cmd=cmd,
            returncode=e.returncode,
            stderr=stderr,
        ) from e
    return (res.stdout or "").strip()


def tool_available(bin_path: str) -> Tuple[bool, str]:
    if not bin_path:
        return False, "not configured"
    found: Optional[str] = shutil.which(bin_path)
    if not found:
        return False, f"{bin_path} not found on PATH"
    return True, found


def check_tools(bins: Dict[str, str]) -> Dict[str, Dict[str, object]]:
    out: Dict[str, Dict[str, object]] = {}
    for label, bin_path in bins.items():
        ok, detail = tool_available(bin_path)
        out[label] = {"available": ok, "detail": detail}
    return out
