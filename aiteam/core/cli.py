"""
命令行界面 - one-shot generation, interactive REPL and HTTP server
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from aiohttp import web
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models import GenerationSession, SessionStatus, SystemConfig, TaskStatus
from ..utils.config import load_config
from ..utils.exceptions import AITeamError
from ..utils.logging import get_logger
from ..utils.paths import get_project_paths
from .coordinator import CoordinatorFactory, GenerationCoordinator

STATUS_STYLES = {
    TaskStatus.PENDING: "dim",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "red",
}

SESSION_STYLES = {
    SessionStatus.PLANNING: "cyan",
    SessionStatus.EXECUTING: "yellow",
    SessionStatus.COMPLETED: "green",
    SessionStatus.FAILED: "red",
}


class CLIInterface:
    """CLI界面"""

    def __init__(self, console: Optional[Console] = None):
        self.coordinator: Optional[GenerationCoordinator] = None
        self.console = console or Console()
        self.logger = get_logger(__name__)

    def initialize(self, config: Optional[SystemConfig] = None,
                   agent_config_path: Optional[str] = None) -> bool:
        """初始化系统"""
        try:
            self.coordinator = CoordinatorFactory.create_coordinator(
                config=config,
                agent_config_path=agent_config_path,
            )
            self.logger.info("✓ 系统初始化成功")
            return True
        except AITeamError as e:
            self.logger.error(f"✗ 系统初始化失败: {str(e)}")
            self.console.print(f"[red]✗ Initialization failed: {str(e)}[/red]")
            return False

    def render_session(self, session: GenerationSession):
        """Print session header, task table and generated files"""
        style = SESSION_STYLES[session.status]
        header = [
            f"[bold]Session:[/bold] {session.id}",
            f"[bold]Status:[/bold] [{style}]{session.status.value}[/{style}] (generation {session.generation})",
        ]
        if session.complexity:
            header.append(f"[bold]Complexity:[/bold] {session.complexity.value}")
        if session.overview:
            header.append(f"[bold]Overview:[/bold] {session.overview}")
        if session.preview_url:
            header.append(f"[bold]Preview:[/bold] {session.preview_url}")
        if session.error:
            header.append(f"[red]Error: {session.error}[/red]")
        self.console.print(Panel.fit("\n".join(header), title="Generation"))

        if session.tasks:
            table = Table(title="Tasks")
            table.add_column("ID", style="cyan", no_wrap=True)
            table.add_column("Title", style="white")
            table.add_column("Role", style="green")
            table.add_column("Priority", style="yellow")
            table.add_column("Depends on", style="blue")
            table.add_column("Status")
            for task in session.tasks:
                task_style = STATUS_STYLES[task.status]
                table.add_row(
                    task.id,
                    task.title,
                    task.assigned_role.value,
                    task.priority.value,
                    ", ".join(task.dependencies) or "-",
                    f"[{task_style}]{task.status.value}[/{task_style}]",
                )
            self.console.print(table)

        for task in session.failed_tasks():
            self.console.print(f"[red]✗ {task.title}: {task.error}[/red]")

        if session.results.files:
            files = Table(title="Generated files")
            files.add_column("Path", style="cyan")
            files.add_column("Type", style="green")
            files.add_column("Size", justify="right")
            for generated in session.results.files:
                files.add_row(generated.path, generated.type.value, str(len(generated.content)))
            self.console.print(files)

    def render_sessions(self, sessions: List[GenerationSession]):
        table = Table(title="Sessions")
        table.add_column("Session", style="cyan", no_wrap=True)
        table.add_column("Status")
        table.add_column("Gen", justify="right")
        table.add_column("Request", style="white")
        for session in sessions:
            style = SESSION_STYLES[session.status]
            request = session.user_request
            table.add_row(
                session.id,
                f"[{style}]{session.status.value}[/{style}]",
                str(session.generation),
                request[:50] + "..." if len(request) > 50 else request,
            )
        self.console.print(table)

    async def run_generate(self, user_request: str) -> GenerationSession:
        """处理单个请求"""
        if not self.coordinator:
            raise RuntimeError("系统未初始化")

        self.console.print(f"\n[bold]Generating: {user_request}[/bold]")
        with self.console.status("Working..."):
            session_id = await self.coordinator.start_generation(user_request)
            session = await self.coordinator.wait_for_session(session_id)
        self.render_session(session)
        return session

    async def run_feedback(self, feedback: str) -> Optional[GenerationSession]:
        active = self.coordinator.get_active_session()
        if active is None:
            self.console.print("[yellow]No session yet, enter a request first[/yellow]")
            return None

        with self.console.status("Regenerating..."):
            await self.coordinator.regenerate_with_feedback(active.id, feedback, wait=False)
            session = await self.coordinator.wait_for_session(active.id)
        self.render_session(session)
        return session

    def _show_help(self):
        """显示帮助信息"""
        table = Table(title="Commands")
        table.add_column("Command", style="cyan", no_wrap=True)
        table.add_column("Description", style="white")
        table.add_column("Example", style="green")

        table.add_row("status", "Show the active session", "status")
        table.add_row("sessions", "List all sessions", "sessions")
        table.add_row("feedback <text>", "Regenerate the active session", "feedback use a dark theme")
        table.add_row("help", "Show this help", "help")
        table.add_row("quit/exit", "Leave", "quit")
        table.add_row("anything else", "Start a new generation", "build a todo app")

        self.console.print(table)

    async def run_interactive_mode(self):
        """运行交互模式"""
        if not self.coordinator:
            self.logger.error("系统未初始化")
            return

        self.console.print(Panel.fit(
            "[bold blue]AI Team[/bold blue]\n"
            f"Model: {os.getenv('OPENAI_MODEL', 'default')}\n"
            "[dim]Type 'help' for commands, 'quit' to leave[/dim]",
            title="System"
        ))

        while True:
            try:
                user_input = self.console.input("\n[bold cyan]> [/bold cyan]").strip()
                if not user_input:
                    continue

                command, _, argument = user_input.partition(" ")
                command = command.lower()

                if command in ("quit", "exit"):
                    self.console.print("[yellow]Bye![/yellow]")
                    break
                elif command == "help":
                    self._show_help()
                elif command == "status":
                    active = self.coordinator.get_active_session()
                    if active is None:
                        self.console.print("[yellow]No active session[/yellow]")
                    else:
                        self.render_session(active)
                elif command == "sessions":
                    self.render_sessions(self.coordinator.list_sessions())
                elif command == "feedback":
                    if not argument.strip():
                        self.console.print("[yellow]Usage: feedback <text>[/yellow]")
                        continue
                    await self.run_feedback(argument.strip())
                else:
                    await self.run_generate(user_input)

            except (KeyboardInterrupt, EOFError):
                self.console.print("\n[yellow]Interrupted[/yellow]")
                break
            except AITeamError as e:
                self.console.print(f"\n[red]Error: {str(e)}[/red]")
                self.logger.error(f"处理错误: {str(e)}")

    async def serve(self, host: str, port: int):
        """Run the HTTP surface until cancelled"""
        from .http_api import create_app

        runner = web.AppRunner(create_app(self.coordinator))
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()
        self.console.print(f"[green]Serving on http://{host}:{port}[/green]")
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            await runner.cleanup()
            self.coordinator = None

    async def cleanup(self):
        """清理资源"""
        if self.coordinator:
            await self.coordinator.shutdown()
            self.coordinator = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-agent application generator")
    parser.add_argument("--config", help="System config JSON file", default=None)
    parser.add_argument("--agent-config", help="Agent model config JSON file", default=None)
    parser.add_argument("--max-parallel", type=int, help="Maximum tasks running at once", default=None)
    parser.add_argument("--no-preview", action="store_true", help="Skip the preview sandbox")
    parser.add_argument("--interactive", "-i", action="store_true", help="Interactive mode")

    subparsers = parser.add_subparsers(dest="command")
    generate = subparsers.add_parser("generate", help="Generate an application from one request")
    generate.add_argument("request", nargs="+", help="Natural-language request")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


async def _run(args: argparse.Namespace, cli: CLIInterface) -> int:
    try:
        if args.command == "generate":
            session = await cli.run_generate(" ".join(args.request))
            return 0 if session.status == SessionStatus.COMPLETED else 1
        if args.command == "serve":
            await cli.serve(args.host, args.port)
            return 0
        await cli.run_interactive_mode()
        return 0
    finally:
        await cli.cleanup()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    project_paths = get_project_paths()
    try:
        config = load_config(args.config or project_paths.system_config_path)
    except AITeamError as e:
        print(f"❌ 配置错误: {str(e)}")
        return 1

    updates = {}
    if args.max_parallel is not None:
        updates["max_parallel_tasks"] = args.max_parallel
    if args.no_preview:
        updates["preview_enabled"] = False
    if updates:
        config = config.model_copy(update=updates)

    cli = CLIInterface()
    agent_config_path = args.agent_config or project_paths.agent_models_config_path
    if not cli.initialize(config, agent_config_path=agent_config_path):
        return 1

    try:
        return asyncio.run(_run(args, cli))
    except KeyboardInterrupt:
        print("\n\n👋 系统已停止")
        return 0


if __name__ == "__main__":
    sys.exit(main())
