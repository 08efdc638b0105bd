"""
Node.js adapter — runs npm/yarn/pnpm inside an unpacked archive.

Action params:
    package_manager (str): 'npm', 'yarn' or 'pnpm' (default: 'npm').
    args (list[str]): Extra arguments appended to the command.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import time
from pathlib import Path

from slimpack.adapters.base import Adapter, ExecutionContext
from slimpack.core.models.action import Receipt

logger = logging.getLogger(__name__)

_PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")
_OPERATIONS = ("install", "version")


def executable(package_manager: str, platform: str | None = None) -> str:
    """Name of the package manager binary on this platform.

    On Windows the managers ship as ``.cmd`` shims, which
    ``subprocess`` will not find without the extension.
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        return f"{package_manager}.cmd"
    return package_manager


class NodeAdapter(Adapter):
    """Node.js package manager adapter."""

    def __init__(self, package_manager: str = "npm"):
        self._package_manager = package_manager

    @property
    def name(self) -> str:
        return "node"

    def is_available(self) -> bool:
        return shutil.which(executable(self._package_manager)) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.operation
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(_OPERATIONS)}"

        pm = context.action.params.get("package_manager", self._package_manager)
        if pm not in _PACKAGE_MANAGERS:
            return False, f"Unknown package manager '{pm}'. Valid: {', '.join(_PACKAGE_MANAGERS)}"

        if not Path(context.cwd).is_dir():
            return False, f"Working directory does not exist: {context.cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        pm = context.action.params.get("package_manager", self._package_manager)
        extra = list(context.action.params.get("args", []))

        if context.action.operation == "version":
            return self._exec(context, [executable(pm), "--version"], timeout=15)

        logger.info("Installing node modules for %s ...", context.package)
        receipt = self._exec(context, [executable(pm), "install", *extra])
        if receipt.output:
            logger.info("%s", receipt.output)
        return receipt

    # ── Helpers ─────────────────────────────────────────────────

    def _exec(
        self,
        ctx: ExecutionContext,
        cmd: list[str],
        timeout: int | None = None,
    ) -> Receipt:
        timeout = timeout or ctx.timeout
        command = " ".join(cmd)
        logger.debug("Executing: %s (cwd=%s)", command, ctx.cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=ctx.cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Command timed out after {timeout}s",
                command=command,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Cannot run {cmd[0]}: {e}",
                command=command,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=stdout,
                stderr=stderr,
                command=command,
                return_code=0,
                duration_ms=elapsed_ms,
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=f"Command exited with code {result.returncode}",
            output=stdout,
            stderr=stderr,
            command=command,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
