"""
HTTP surface over the session query API (aiohttp)
"""

from typing import Any, Dict

from aiohttp import web

from ..models import GenerationSession
from ..utils.exceptions import SessionNotFoundError
from ..utils.logging import get_logger
from .coordinator import GenerationCoordinator
from .events import describe_event

logger = get_logger(__name__)

COORDINATOR_KEY = web.AppKey("coordinator", GenerationCoordinator)


def session_payload(session: GenerationSession) -> Dict[str, Any]:
    return session.model_dump(mode="json", by_alias=True)


def session_summary(session: GenerationSession) -> Dict[str, Any]:
    return {
        "sessionId": session.id,
        "status": session.status.value,
        "generation": session.generation,
        "userRequest": session.user_request[:50] + "..." if len(session.user_request) > 50 else session.user_request,
        "tasks": session.task_counts(),
        "createdAt": session.created_at.isoformat(),
        "updatedAt": session.updated_at.isoformat(),
    }


async def _read_json(request: web.Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


async def start_generation(request: web.Request) -> web.Response:
    """POST /api/generate {prompt} -> {sessionId}"""
    coordinator = request.app[COORDINATOR_KEY]
    body = await _read_json(request)
    prompt = str(body.get("prompt") or "").strip()
    if not prompt:
        return web.json_response({"error": "Prompt is required"}, status=400)

    try:
        session_id = await coordinator.start_generation(prompt)
    except Exception as e:
        logger.error(f"Generation API error: {str(e)}")
        return web.json_response({"error": "Failed to start generation"}, status=500)

    return web.json_response({"sessionId": session_id})


async def get_session(request: web.Request) -> web.Response:
    """GET /api/generate?sessionId=..."""
    coordinator = request.app[COORDINATOR_KEY]
    session_id = request.query.get("sessionId")
    if not session_id:
        return web.json_response({"error": "Session ID is required"}, status=400)

    session = coordinator.get_session(session_id)
    if session is None:
        return web.json_response({"error": "Session not found"}, status=404)

    return web.json_response(session_payload(session))


async def regenerate(request: web.Request) -> web.Response:
    """POST /api/regenerate {sessionId, feedback}"""
    coordinator = request.app[COORDINATOR_KEY]
    body = await _read_json(request)
    session_id = body.get("sessionId")
    feedback = str(body.get("feedback") or "").strip()
    if not session_id:
        return web.json_response({"error": "Session ID is required"}, status=400)
    if not feedback:
        return web.json_response({"error": "Feedback is required"}, status=400)

    try:
        await coordinator.regenerate_with_feedback(session_id, feedback, wait=False)
    except SessionNotFoundError:
        return web.json_response({"error": "Session not found"}, status=404)
    except Exception as e:
        logger.error(f"Regeneration API error: {str(e)}")
        return web.json_response({"error": "Failed to regenerate"}, status=500)

    return web.json_response({"sessionId": session_id})


async def list_sessions(request: web.Request) -> web.Response:
    """GET /api/sessions"""
    coordinator = request.app[COORDINATOR_KEY]
    return web.json_response([session_summary(s) for s in coordinator.list_sessions()])


async def session_events(request: web.Request) -> web.Response:
    """GET /api/events?sessionId=... event history of one session"""
    coordinator = request.app[COORDINATOR_KEY]
    session_id = request.query.get("sessionId")
    if not session_id:
        return web.json_response({"error": "Session ID is required"}, status=400)
    if coordinator.get_session(session_id) is None:
        return web.json_response({"error": "Session not found"}, status=404)

    events = coordinator.event_bus.events_for(session_id)
    return web.json_response([describe_event(e) for e in events])


def create_app(coordinator: GenerationCoordinator) -> web.Application:
    app = web.Application()
    app[COORDINATOR_KEY] = coordinator
    app.router.add_post("/api/generate", start_generation)
    app.router.add_get("/api/generate", get_session)
    app.router.add_post("/api/regenerate", regenerate)
    app.router.add_get("/api/sessions", list_sessions)
    app.router.add_get("/api/events", session_events)

    async def _on_cleanup(app: web.Application):
        await coordinator.shutdown()

    app.on_cleanup.append(_on_cleanup)
    return app
