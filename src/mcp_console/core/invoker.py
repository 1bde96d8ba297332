"""Asynchronous invocation of remote calls.

A job runs off the controller's thread and produces exactly one
InvocationOutcome, whatever happens inside it: exceptions become failed
outcomes, and delivery is guarded so it happens once.

// [LAW:single-enforcer] execute() is the only place job exceptions are caught.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from mcp_console.core import outcome as _outcome
from mcp_console.core.outcome import InvocationOutcome
from mcp_console.remote.catalog import Operation, Resource
from mcp_console.remote.errors import RemoteError

logger = logging.getLogger(__name__)

DeliverFn = Callable[[InvocationOutcome], None]
SpawnFn = Callable[[Callable[[], None], str], None]


@dataclass(frozen=True)
class ToolCallJob:
    job_id: int
    operation: Operation
    arguments: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        return "call tool '{}'".format(self.operation.name)

    def run(self, remote) -> InvocationOutcome:
        result = remote.call_tool(self.operation.name, dict(self.arguments))
        text = _outcome.render_call_result(result)
        if result.is_error:
            return InvocationOutcome(
                job_id=self.job_id,
                success=False,
                rendered_text=text,
                error_detail="tool '{}' reported an error".format(self.operation.name),
            )
        return InvocationOutcome(job_id=self.job_id, success=True, rendered_text=text)


@dataclass(frozen=True)
class ResourceReadJob:
    job_id: int
    resource: Resource

    def describe(self) -> str:
        return "read resource '{}'".format(self.resource.uri)

    def run(self, remote) -> InvocationOutcome:
        items = remote.read_resource(self.resource.uri)
        text = _outcome.render_items(items) or "(empty resource)"
        return InvocationOutcome(job_id=self.job_id, success=True, rendered_text=text)


Job = ToolCallJob | ResourceReadJob


def execute(job: Job, remote) -> InvocationOutcome:
    """Run a job to completion, converting any failure into an outcome."""
    try:
        return job.run(remote)
    except RemoteError as exc:
        logger.warning("job %d failed: %s: %s", job.job_id, job.describe(), exc)
        return _outcome.failed(job.job_id, str(exc))
    except Exception as exc:
        logger.exception("job %d crashed: %s", job.job_id, job.describe())
        return _outcome.failed(job.job_id, "{}: {}".format(type(exc).__name__, exc))


def _thread_spawn(work: Callable[[], None], name: str) -> None:
    threading.Thread(target=work, name=name, daemon=True).start()


class AsyncInvoker:
    """Runs jobs without blocking the caller and delivers one outcome per job.

    spawn(work, name) starts work on an independent thread of control.
    The default is a daemon thread, so an in-flight call never holds up exit.
    """

    def __init__(self, remote, deliver: DeliverFn, spawn: SpawnFn | None = None):
        self._remote = remote
        self._deliver = deliver
        self._spawn = spawn or _thread_spawn

    def submit(self, job: Job) -> None:
        def _work() -> None:
            result = execute(job, self._remote)
            try:
                self._deliver(result)
            except Exception:
                # Host already torn down; nothing left to show the outcome on.
                logger.exception("could not deliver outcome for job %d", job.job_id)

        logger.debug("submitting job %d: %s", job.job_id, job.describe())
        self._spawn(_work, "invoke-{}".format(job.job_id))
