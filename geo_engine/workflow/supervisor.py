"""
Run Supervisor

Starts automatic-mode runs in the background and keeps their task
handles. Callers observe progress only through the persisted run
record (get_status), never through the task itself.
"""

import asyncio
import logging
from typing import Dict, Optional

from geo_engine.errors import WorkflowError
from geo_engine.models import WorkflowRun, validate_user_input

from .engine import WorkflowEngine

logger = logging.getLogger(__name__)


class RunSupervisor:
    """
    Usage:
        supervisor = RunSupervisor(WorkflowEngine.from_settings())
        run = await supervisor.start({"websiteUrl": "acme.com", "country": "US", "language": "en"})
        status = await supervisor.get_status(run.id)
    """

    def __init__(self, engine: WorkflowEngine):
        self.engine = engine
        self._tasks: Dict[str, asyncio.Task] = {}

    async def start(self, data) -> WorkflowRun:
        """
        Validate input, create a run and execute it in the background.

        Raises:
            InputValidationError: Before any run is created.
        """
        user_input = validate_user_input(data)
        run = await self.engine.create_run(user_input)

        task = asyncio.create_task(self._run(run.id))
        self._tasks[run.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(run.id, None))

        logger.info(f"Started background run {run.id} for {user_input.website_url}")
        return run

    async def _run(self, run_id: str):
        try:
            await self.engine.run_all(run_id)
            logger.info(f"Background run {run_id} completed")
        except WorkflowError as e:
            logger.error(f"Background run {run_id} failed: {e}")
        except Exception as e:
            logger.error(f"Background run {run_id} crashed: {e}")
            await self.engine.fail_run(run_id, str(e))

    async def get_status(self, run_id: str) -> WorkflowRun:
        return await self.engine.get_run(run_id)

    def is_active(self, run_id: str) -> bool:
        task = self._tasks.get(run_id)
        return task is not None and not task.done()

    async def wait(self, run_id: str, timeout: Optional[float] = None) -> WorkflowRun:
        """Wait for a background run to finish, then return its record."""
        task = self._tasks.get(run_id)
        if task is not None:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        return await self.engine.get_run(run_id)

    async def shutdown(self):
        """Let in-flight runs finish, then close the engine's clients."""
        tasks = list(self._tasks.values())
        if tasks:
            logger.info(f"Waiting for {len(tasks)} active runs")
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.engine.close()
