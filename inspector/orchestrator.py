"""
Inspection orchestrator.

Prepares every target, starts one worker process per target behind a
shared start gate, opens the gate once every worker exists and then
reaps the workers in whatever order they finish.
"""

from __future__ import annotations

import multiprocessing
from dataclasses import dataclass, field
from multiprocessing.connection import wait
from multiprocessing.context import BaseContext
from multiprocessing.process import BaseProcess
from typing import Callable, Iterable

from inspector.config_loader import AppConfig
from inspector.entity import TargetSpec, build_target_spec
from inspector.errors import OptionError, ResolutionError, SubprocessSpawnError
from inspector.report import describe_returncode, print_error, print_line
from inspector.score_log import ScoreLog, ScoreSink
from inspector.worker import worker_main


@dataclass
class WorkerHandle:
    spec: TargetSpec
    process: BaseProcess


@dataclass(frozen=True)
class WorkerExit:
    """Termination status of one worker."""

    pid: int
    path: str
    exitcode: int

    def describe(self) -> str:
        return f"Process with PID {self.pid} ({self.path}) {describe_returncode(self.exitcode)}"


@dataclass
class RunSummary:
    exits: list[WorkerExit] = field(default_factory=list)
    failed_targets: list[str] = field(default_factory=list)

    @property
    def setup_failed(self) -> bool:
        return bool(self.failed_targets)

    @property
    def worker_failures(self) -> list[WorkerExit]:
        return [e for e in self.exits if e.exitcode != 0]


class Orchestrator:
    """Fans targets out to worker processes behind a one-shot start gate."""

    def __init__(
        self,
        config: AppConfig,
        sink: ScoreSink | None = None,
        context: BaseContext | None = None,
    ) -> None:
        self.config = config
        self.sink = sink if sink is not None else ScoreLog(config.score_log)
        self._ctx = context or multiprocessing.get_context()
        # Allocated before any worker exists; shared with every child
        self.gate = self._ctx.Event()
        self.handles: list[WorkerHandle] = []
        self.failed_targets: list[str] = []

    def prepare(
        self,
        path: str,
        option_string: str | None,
        prompt: Callable[..., str] | None = None,
    ) -> TargetSpec | None:
        """Build a TargetSpec, reporting and recording the target on failure."""
        try:
            return build_target_spec(path, option_string, prompt)
        except (ResolutionError, OptionError) as exc:
            print_error(path, str(exc))
            self.failed_targets.append(path)
            return None

    def spawn(self, spec: TargetSpec) -> WorkerHandle | None:
        """Start a worker for spec. It will not act until the gate is released."""
        process = self._ctx.Process(
            target=worker_main,
            args=(spec, self.gate, self.config, self.sink),
            name=f"inspect:{spec.path}",
        )
        try:
            process.start()
        except OSError as exc:
            print_error(spec.path, str(SubprocessSpawnError("worker", exc)))
            self.failed_targets.append(spec.path)
            return None
        handle = WorkerHandle(spec=spec, process=process)
        self.handles.append(handle)
        return handle

    def release_barrier(self) -> None:
        self.gate.set()

    def collect(self) -> list[WorkerExit]:
        """Wait for every spawned worker; results are in completion order."""
        pending = {h.process.sentinel: h for h in self.handles}
        exits: list[WorkerExit] = []
        while pending:
            for sentinel in wait(list(pending)):
                handle = pending.pop(sentinel)
                handle.process.join()
                worker_exit = WorkerExit(
                    pid=handle.process.pid,
                    path=handle.spec.path,
                    exitcode=handle.process.exitcode,
                )
                print_line(worker_exit.describe())
                exits.append(worker_exit)
        return exits

    def run(
        self,
        targets: Iterable[tuple[str, str | None]],
        prompt: Callable[..., str] | None = None,
    ) -> RunSummary:
        """Prepare and spawn every target, release the gate, collect all workers."""
        for path, option_string in targets:
            spec = self.prepare(path, option_string, prompt)
            if spec is not None:
                self.spawn(spec)
        self.release_barrier()
        exits = self.collect()
        return RunSummary(exits=exits, failed_targets=list(self.failed_targets))
