"""
Preview Sandbox Adapter - turns a file manifest into a running preview
"""

import asyncio
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

import aiohttp

from ..models import GeneratedFile, SystemConfig
from ..utils.exceptions import InstallError, PreviewError
from ..utils.logging import get_logger
from .project_template import merge_manifest, react_project_files

URL_PATTERN = re.compile(r"https?://[^\s]+")
ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


class PreviewSandbox(ABC):
    """External collaborator that materializes and serves generated projects"""

    @abstractmethod
    async def initialize(self) -> None:
        """Boot the sandbox; idempotent and memoized"""

    @abstractmethod
    async def materialize(self, files: Iterable[GeneratedFile]) -> List[str]:
        """Write the project, returning the relative paths written"""

    @abstractmethod
    async def install(self) -> None:
        """Install dependencies; InstallError on non-zero exit"""

    @abstractmethod
    async def start_server(self) -> str:
        """Start the dev server and return its URL"""

    async def close(self) -> None:
        """Stop anything the sandbox started"""


class LocalPreviewSandbox(PreviewSandbox):
    """Sandbox backed by a local directory and npm subprocesses"""

    def __init__(self, config: SystemConfig, workspace: Optional[Path] = None):
        self.config = config
        self.workspace = Path(workspace or config.sandbox_dir) / config.sandbox_project_name
        self.logger = get_logger(__name__)

        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._server_process: Optional[asyncio.subprocess.Process] = None
        self._output_task: Optional[asyncio.Task] = None
        self._server_url: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._boot()
            self._initialized = True
            self.logger.info(f"Preview sandbox initialized at {self.workspace}")

    async def _boot(self):
        self.workspace.mkdir(parents=True, exist_ok=True)

    def _require_initialized(self):
        if not self._initialized:
            raise PreviewError("Preview sandbox not initialized")

    def _resolve(self, relative_path: str) -> Path:
        root = self.workspace.resolve()
        target = (root / relative_path).resolve()
        if target != root and root not in target.parents:
            raise PreviewError(f"Path escapes the sandbox: {relative_path}")
        return target

    async def materialize(self, files: Iterable[GeneratedFile]) -> List[str]:
        self._require_initialized()

        project = merge_manifest(
            react_project_files(self.config.sandbox_project_name, self.config.dev_server_port),
            files,
        )

        written = []
        for relative_path, content in project.items():
            target = self._resolve(relative_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            written.append(relative_path)

        self.logger.info(f"Materialized {len(written)} files into {self.workspace}")
        return written

    async def run_command(self, command: str, *args: str) -> str:
        """Run a command in the project directory and return its combined output"""
        self._require_initialized()
        exit_code, output = await self._run(command, *args)
        if exit_code != 0:
            raise PreviewError(f"Command failed with exit code {exit_code}: {output}")
        return output

    async def _run(self, command: str, *args: str):
        try:
            process = await asyncio.create_subprocess_exec(
                command, *args,
                cwd=str(self.workspace),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise PreviewError(f"Failed to start {command}: {str(e)}") from e
        stdout, _ = await process.communicate()
        return process.returncode, stdout.decode("utf-8", errors="replace")

    async def install(self) -> None:
        self._require_initialized()
        self.logger.info("Installing preview dependencies")
        exit_code, output = await self._run("npm", "install")
        if exit_code != 0:
            raise InstallError(exit_code, output)

    async def start_server(self) -> str:
        self._require_initialized()
        if self._server_url:
            return self._server_url

        try:
            process = await asyncio.create_subprocess_exec(
                "npm", "run", "dev",
                cwd=str(self.workspace),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise PreviewError(f"Failed to start dev server: {str(e)}") from e
        self._server_process = process

        ready: asyncio.Future = asyncio.get_running_loop().create_future()
        self._output_task = asyncio.create_task(self._pump_output(process, ready))
        probe_task = asyncio.create_task(self._probe_after_fallback(ready))

        try:
            url = await asyncio.wait_for(ready, timeout=self.config.server_start_timeout)
        except asyncio.TimeoutError as e:
            await self._stop_server()
            raise PreviewError("Dev server did not become ready in time") from e
        except PreviewError:
            await self._stop_server()
            raise
        finally:
            probe_task.cancel()

        self._server_url = url
        self.logger.info(f"Preview server ready at {url}")
        return url

    async def _pump_output(self, process: asyncio.subprocess.Process, ready: asyncio.Future):
        """Drain dev server output, resolving ``ready`` on the first announced URL"""
        async for raw_line in process.stdout:
            line = ANSI_PATTERN.sub("", raw_line.decode("utf-8", errors="replace")).rstrip()
            self.logger.debug(f"dev server: {line}")
            if ready.done():
                continue
            if "ready" in line.lower() or "localhost" in line:
                match = URL_PATTERN.search(line)
                if match:
                    ready.set_result(match.group(0))

        exit_code = await process.wait()
        if not ready.done():
            ready.set_exception(PreviewError(f"Dev server exited with code {exit_code}"))

    async def _probe_after_fallback(self, ready: asyncio.Future):
        """Readiness fallback: poll the configured port once the grace period is over"""
        await asyncio.sleep(self.config.ready_fallback_seconds)
        url = f"http://localhost:{self.config.dev_server_port}/"
        timeout = aiohttp.ClientTimeout(total=2)
        async with aiohttp.ClientSession(timeout=timeout) as http:
            while not ready.done():
                try:
                    async with http.get(url) as response:
                        if response.status < 500 and not ready.done():
                            ready.set_result(url)
                            return
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    pass
                await asyncio.sleep(0.5)

    async def _stop_server(self):
        process = self._server_process
        if process is not None and process.returncode is None:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=5)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
        if self._output_task is not None:
            self._output_task.cancel()
        self._server_process = None
        self._output_task = None
        self._server_url = None

    async def close(self) -> None:
        await self._stop_server()
