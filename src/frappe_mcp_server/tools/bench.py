#!/usr/bin/env python3
# src/frappe_mcp_server/tools/bench.py
"""
Bench runner and the bench-command tools.

Every Frappe operation the gateway performs goes through the ``bench`` CLI,
spawned as an argv list (never through a shell) inside the bench directory.
A failing command is reported back to the client as text, not as a protocol
error, so the model can read bench's own diagnostics.
"""

import asyncio
import contextlib
import logging
import shlex
from collections.abc import Sequence
from typing import Any

import orjson

from ..constants import DEFAULT_BENCH_TIMEOUT, DEFAULT_ENCODING, MAX_COMMAND_OUTPUT_BYTES
from ..registry import ToolDescriptor, tool

logger = logging.getLogger(__name__)

BENCH_EXECUTABLE = "bench"
COMMAND_FAILED_PREFIX = "Command failed: "


class BenchRunner:
    """Runs ``bench`` subcommands asynchronously with a timeout and output cap."""

    def __init__(
        self,
        frappe_path: str,
        timeout: float = DEFAULT_BENCH_TIMEOUT,
        executable: str = BENCH_EXECUTABLE,
        max_output_bytes: int = MAX_COMMAND_OUTPUT_BYTES,
    ):
        self.frappe_path = frappe_path
        self.timeout = timeout
        self.executable = executable
        self.max_output_bytes = max_output_bytes

    def build_argv(self, command: str | Sequence[str], site: str | None = None) -> list[str]:
        """Turn a bench subcommand into a full argv list."""
        args = shlex.split(command) if isinstance(command, str) else list(command)
        if not args:
            raise ValueError("Bench command must not be empty")
        argv = [self.executable]
        if site:
            argv.extend(["--site", site])
        return argv + args

    async def run(self, command: str | Sequence[str], site: str | None = None, cwd: str | None = None) -> str:
        """Run a bench subcommand and return its stdout, or a failure report."""
        argv = self.build_argv(command, site)
        display = shlex.join(argv)
        logger.info(f"Running: {display}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=cwd or self.frappe_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning(f"Could not start {display}: {e}")
            return f"{COMMAND_FAILED_PREFIX}{display}: {e}\nStderr: "

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning(f"Timed out after {self.timeout:g}s: {display}")
            return f"{COMMAND_FAILED_PREFIX}{display} timed out after {self.timeout:g}s\nStderr: "

        out = self._decode(stdout)
        err = self._decode(stderr)
        if process.returncode != 0:
            logger.warning(f"{display} exited with status {process.returncode}")
            return f"{COMMAND_FAILED_PREFIX}{display} (exit status {process.returncode})\nStderr: {err}"
        return out

    async def execute(
        self,
        method: str,
        args: list[Any] | None = None,
        kwargs: dict[str, Any] | None = None,
        site: str | None = None,
    ) -> str:
        """Call a Python function on a site through ``bench execute``.

        ``bench execute`` evaluates ``--args``/``--kwargs`` as Python literals,
        so arguments are rendered with ``repr``.
        """
        command = ["execute", method]
        if args is not None:
            command.extend(["--args", repr(args)])
        if kwargs is not None:
            command.extend(["--kwargs", repr(kwargs)])
        return await self.run(command, site=site)

    def _decode(self, data: bytes) -> str:
        if len(data) > self.max_output_bytes:
            logger.warning(f"Command output truncated from {len(data)} bytes")
            return data[: self.max_output_bytes].decode(DEFAULT_ENCODING, errors="replace") + "\n... [output truncated]"
        return data.decode(DEFAULT_ENCODING, errors="replace")


def is_failure(output: str) -> bool:
    """True when ``output`` is a failure report from BenchRunner.run."""
    return output.startswith(COMMAND_FAILED_PREFIX)


def parse_json_output(output: str) -> Any:
    """Decode the JSON that ``bench execute`` prints for a return value.

    Bench may print log lines before the result, so the last line is tried
    when the whole output does not parse. Returns None when nothing parses.
    """
    text = output.strip()
    if not text or is_failure(text):
        return None
    for candidate in (text, text.splitlines()[-1]):
        try:
            return orjson.loads(candidate)
        except orjson.JSONDecodeError:
            continue
    return None


# ============================================================================
# Bench command tools
# ============================================================================


def bench_tools(runner: BenchRunner) -> list[ToolDescriptor]:
    """Tools that run bench commands directly."""

    @tool(
        name="frappe_run_bench_command",
        description="Execute bench commands for Frappe development",
        input_schema={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Bench command to execute"},
                "site": {"type": "string", "description": "Site name (optional)"},
                "cwd": {"type": "string", "description": "Working directory (optional)"},
            },
            "required": ["command"],
        },
    )
    async def run_bench_command(arguments: dict[str, Any]) -> str:
        return await runner.run(arguments["command"], site=arguments.get("site"), cwd=arguments.get("cwd"))

    @tool(
        name="frappe_migrate_database",
        description="Run database migration for Frappe apps",
        input_schema={
            "type": "object",
            "properties": {"site": {"type": "string", "description": "Site name to migrate"}},
            "required": ["site"],
        },
    )
    async def migrate_database(arguments: dict[str, Any]) -> str:
        return await runner.run(["migrate"], site=arguments["site"])

    @tool(
        name="frappe_install_app",
        description="Install a Frappe app on a site",
        input_schema={
            "type": "object",
            "properties": {
                "app_name": {"type": "string", "description": "Name of the app to install"},
                "site": {"type": "string", "description": "Site name"},
            },
            "required": ["app_name", "site"],
        },
    )
    async def install_app(arguments: dict[str, Any]) -> str:
        return await runner.run(["install-app", arguments["app_name"]], site=arguments["site"])

    @tool(
        name="frappe_create_app",
        description="Create a new Frappe app",
        input_schema={
            "type": "object",
            "properties": {
                "app_name": {"type": "string", "description": "Name of the new app"},
                "title": {"type": "string", "description": "Title of the app"},
                "publisher": {"type": "string", "description": "Publisher name"},
                "description": {"type": "string", "description": "App description"},
            },
            "required": ["app_name", "title", "publisher"],
        },
    )
    async def create_app(arguments: dict[str, Any]) -> str:
        command = [
            "new-app",
            arguments["app_name"],
            "--title",
            arguments["title"],
            "--publisher",
            arguments["publisher"],
        ]
        if arguments.get("description"):
            command.extend(["--description", arguments["description"]])
        return await runner.run(command)

    return [run_bench_command, migrate_database, install_app, create_app]


__all__ = ["BenchRunner", "bench_tools", "is_failure", "parse_json_output"]
