# app/services/workflow_engine.py

import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import List, Optional

from app.core.exceptions import WorkflowRequestError
from app.schemas.workflow import (
    RunStatus,
    StepStatus,
    WorkflowRunResult,
    WorkflowStep,
    WorkflowStepResult,
)
from app.services.history_store import HistoryStore
from app.services.step_executor import StepExecutor

logger = logging.getLogger(__name__)


class WorkflowEngine:
    def __init__(
        self,
        executor: StepExecutor,
        history: Optional[HistoryStore] = None,
        max_recent_runs: int = 100,
    ):
        self.executor = executor
        self.history = history
        self.max_recent_runs = max_recent_runs
        self.recent_runs: "OrderedDict[str, WorkflowRunResult]" = OrderedDict()

    async def run(self, steps: List[WorkflowStep], input_text: str) -> WorkflowRunResult:
        """
        Execute the steps in order, feeding each output into the next step.

        Stops at the first failed step; later steps are not attempted and do
        not appear in the result. The run duration is the sum of the step
        durations.
        """
        if not steps:
            raise WorkflowRequestError("Invalid steps")
        if not input_text:
            raise WorkflowRequestError("Missing input text")

        run_id = str(uuid.uuid4())
        step_results: List[WorkflowStepResult] = []
        status = RunStatus.SUCCESS
        current_input = input_text

        logger.info("🚀 Workflow %s started (%d steps)", run_id, len(steps))

        for step in steps:
            result = await self.executor.execute(step, current_input)
            step_results.append(result)

            logger.info(
                "Step %s (%s) -> %s in %dms",
                step.id, step.type, result.status.value, result.duration_ms,
            )

            if result.status == StepStatus.FAILED:
                status = RunStatus.FAILED
                logger.error("❌ Workflow %s halted at step %s", run_id, step.id)
                break

            current_input = result.output

        run = WorkflowRunResult(
            id=run_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            steps=tuple(step_results),
            status=status,
            original_input=input_text,
            duration_ms=sum(r.duration_ms for r in step_results),
        )

        if status == RunStatus.SUCCESS:
            logger.info("✅ Workflow %s completed in %dms", run_id, run.duration_ms)

        self._remember(run)
        if self.history is not None:
            try:
                await self.history.append(run)
            except Exception as e:
                logger.error("Failed to persist run %s: %s", run_id, e)

        return run

    def _remember(self, run: WorkflowRunResult) -> None:
        self.recent_runs[run.id] = run
        while len(self.recent_runs) > self.max_recent_runs:
            self.recent_runs.popitem(last=False)

    def get_run(self, run_id: str) -> Optional[WorkflowRunResult]:
        """Retrieve a recent run by ID."""
        return self.recent_runs.get(run_id)
