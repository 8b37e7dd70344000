"""
Result Integrator - folds review feedback into the code and hands the
manifest to the preview sandbox
"""

from typing import Optional

from ..models import SessionStatus, SystemConfig
from ..services.preview import PreviewSandbox
from ..utils.exceptions import IntegrationError
from ..utils.logging import get_logger
from .capabilities import WorkerCapabilities
from .events import EventBus, PreviewReady
from .roles import ImplementWork
from .store import SessionStore


def review_augmented_spec(request: str, review: str) -> str:
    return f"{request}\n\nReview feedback to incorporate:\n{review}"


class ResultIntegrator:
    """Runs once the scheduler has drained the queue"""

    def __init__(self, capabilities: WorkerCapabilities, store: SessionStore,
                 sandbox: Optional[PreviewSandbox], event_bus: EventBus, config: SystemConfig):
        self.capabilities = capabilities
        self.store = store
        self.sandbox = sandbox
        self.event_bus = event_bus
        self.config = config
        self.logger = get_logger(__name__)

    async def integrate(self, session_id: str):
        """
        Reconcile partial results and mark the session completed.

        Raises:
            IntegrationError: re-implementation or sandbox hand-off failed
        """
        try:
            await self._apply_review(session_id)
            await self._hand_off(session_id)
        except IntegrationError:
            raise
        except Exception as e:
            raise IntegrationError(f"Integration failed: {str(e)}") from e

        session = self.store.require(session_id)
        session.transition(SessionStatus.COMPLETED)
        self.logger.info(f"[{session_id}] Integration finished")

    async def _apply_review(self, session_id: str):
        session = self.store.require(session_id)
        results = session.results
        if results.review is None or results.code is None:
            return

        self.logger.info(f"[{session_id}] Re-implementing with review feedback")
        work = ImplementWork(
            spec=review_augmented_spec(session.user_request, results.review),
            architecture=results.architecture or "",
        )
        bundle = await work.run(self.capabilities)

        session = self.store.require(session_id)
        work.apply(session.results, bundle)
        session.touch()

    async def _hand_off(self, session_id: str):
        session = self.store.require(session_id)
        files = session.results.files
        if not files:
            return
        if self.sandbox is None or not self.config.preview_enabled:
            self.logger.debug(f"[{session_id}] Preview disabled, skipping sandbox")
            return

        await self.sandbox.initialize()
        await self.sandbox.materialize(list(files))
        self.logger.info(f"[{session_id}] Materialized {len(files)} generated files")

        if not self.config.preview_autostart:
            return

        await self.sandbox.install()
        url = await self.sandbox.start_server()

        session = self.store.require(session_id)
        session.preview_url = url
        session.touch()
        await self.event_bus.publish(PreviewReady(session_id=session_id, url=url))
