"""Tests for the rich CLI front end."""

import pytest
from rich.console import Console

from aiteam.core.cli import CLIInterface, build_parser
from aiteam.models import SessionStatus
from aiteam.utils.exceptions import CapabilityError

from tests.helpers import FakeCapabilities, make_coordinator, make_plan

PLAN = make_plan(
    {"id": "1", "title": "Lay out architecture", "role": "architect", "priority": "high"},
    {"id": "2", "title": "Write components", "role": "implementer", "dependencies": ["1"], "description": "build"},
)


def _cli(capabilities) -> CLIInterface:
    cli = CLIInterface(console=Console(record=True, width=160))
    cli.coordinator = make_coordinator(capabilities)
    return cli


def test_parser_subcommands():
    parser = build_parser()

    generate = parser.parse_args(["--max-parallel", "2", "generate", "a", "todo", "app"])
    assert generate.command == "generate"
    assert generate.request == ["a", "todo", "app"]
    assert generate.max_parallel == 2

    serve = parser.parse_args(["--no-preview", "serve", "--port", "9000"])
    assert serve.command == "serve"
    assert serve.port == 9000
    assert serve.no_preview is True

    assert parser.parse_args(["-i"]).interactive is True


@pytest.mark.asyncio
async def test_run_generate_renders_tasks_and_files():
    cli = _cli(FakeCapabilities(plans=[PLAN]))

    session = await cli.run_generate("todo app")
    await cli.cleanup()

    assert session.status == SessionStatus.COMPLETED
    output = cli.console.export_text()
    assert "Lay out architecture" in output
    assert "Write components" in output
    assert "src/App.tsx" in output
    assert "completed" in output


@pytest.mark.asyncio
async def test_failed_task_is_reported():
    cli = _cli(FakeCapabilities(plans=[PLAN], failures={"build": CapabilityError("quota exceeded")}))

    session = await cli.run_generate("todo app")
    await cli.cleanup()

    assert session.status == SessionStatus.FAILED
    assert "quota exceeded" in cli.console.export_text()


@pytest.mark.asyncio
async def test_feedback_without_session():
    cli = _cli(FakeCapabilities(plans=[PLAN]))

    assert await cli.run_feedback("darker") is None
    assert "No session yet" in cli.console.export_text()


@pytest.mark.asyncio
async def test_feedback_regenerates_active_session():
    capabilities = FakeCapabilities(plans=[PLAN])
    cli = _cli(capabilities)
    first = await cli.run_generate("todo app")

    second = await cli.run_feedback("darker")
    await cli.cleanup()

    assert second.id == first.id
    assert second.generation == 2
    assert capabilities.plan_requests[-1].endswith("User feedback: darker")
