"""
Compile-and-grade pipeline for a single source file.

Runs the compiler with its diagnostic stream wired into a filter
process through an explicit pipe, drains the filtered diagnostics,
grades them and appends the score to the injected sink.

    compiler --stderr--> P1 --> filter --stdout--> P2 --> this process
"""

from __future__ import annotations

import os
import selectors
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from inspector.diagnostics import DiagnosticRecord, GradeScale, classify
from inspector.errors import SubprocessSpawnError
from inspector.filesystem import basename
from inspector.report import describe_returncode
from inspector.score_log import ScoreSink

_READ_SIZE = 4096

# grep exits 1 when nothing matched, which is a clean compile
_FILTER_OK_CODES = (0, 1)
_COMPILER_OK_CODES = (0,)


class PipelineState(str, Enum):
    SPAWNED = "spawned"
    PIPES_WIRED = "pipes_wired"
    RUNNING = "running"
    DRAINING = "draining"
    REAPED = "reaped"
    SCORED = "scored"


@dataclass(frozen=True)
class PipelineConfig:
    """Commands and limits for the compile pipeline."""

    compiler: tuple[str, ...] = ("gcc", "-Wall", "-fsyntax-only")
    filter: tuple[str, ...] = ("grep", "-E", "error|warning")
    source_suffixes: tuple[str, ...] = (".c",)
    compile_timeout: float | None = 60.0

    def is_source(self, path: str) -> bool:
        return path.endswith(self.source_suffixes)


@dataclass(frozen=True)
class ProcessStatus:
    """How one pipeline child terminated."""

    step: str
    pid: int
    returncode: int
    ok_codes: tuple[int, ...] = (0,)

    @property
    def signaled(self) -> bool:
        return self.returncode < 0

    @property
    def abnormal(self) -> bool:
        return self.signaled or self.returncode not in self.ok_codes

    def describe(self) -> str:
        return f"{self.step} (PID {self.pid}) {describe_returncode(self.returncode)}"


@dataclass
class PipelineResult:
    record: DiagnosticRecord
    statuses: list[ProcessStatus] = field(default_factory=list)
    timed_out: bool = False

    @property
    def abnormal(self) -> list[ProcessStatus]:
        return [s for s in self.statuses if s.abnormal]


def _drain(fd: int, deadline: float | None) -> tuple[bytes, bool]:
    """
    Read fd to end-of-file. Returns (data, timed_out).

    On timeout the data read so far is returned.
    """
    chunks: list[bytes] = []
    with selectors.DefaultSelector() as selector:
        selector.register(fd, selectors.EVENT_READ)
        while True:
            timeout = None
            if deadline is not None:
                timeout = deadline - time.monotonic()
                if timeout <= 0:
                    return b"".join(chunks), True
            if not selector.select(timeout):
                continue
            chunk = os.read(fd, _READ_SIZE)
            if not chunk:
                return b"".join(chunks), False
            chunks.append(chunk)


def _read_available(fd: int) -> bytes:
    """Read whatever is already buffered in fd without blocking."""
    os.set_blocking(fd, False)
    chunks: list[bytes] = []
    while True:
        try:
            chunk = os.read(fd, _READ_SIZE)
        except BlockingIOError:
            break
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _reap(proc: subprocess.Popen, deadline: float | None) -> tuple[int, bool]:
    """Wait for proc until deadline, killing it past the deadline. Returns (returncode, killed)."""
    timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
    try:
        return proc.wait(timeout=timeout), False
    except subprocess.TimeoutExpired:
        proc.kill()
        return proc.wait(), True


class CompilePipeline:
    """One compile attempt; not reusable."""

    def __init__(
        self,
        source: Path | str,
        sink: ScoreSink,
        config: PipelineConfig | None = None,
        scale: GradeScale | None = None,
    ) -> None:
        self.source = str(source)
        self.sink = sink
        self.config = config or PipelineConfig()
        self.scale = scale or GradeScale()
        self.state = PipelineState.SPAWNED

    def _spawn(self, step: str, argv: list[str], **streams) -> subprocess.Popen:
        try:
            return subprocess.Popen(argv, close_fds=True, **streams)
        except OSError as exc:
            raise SubprocessSpawnError(step, exc) from exc

    def run(self) -> PipelineResult:
        diag_read, diag_write = os.pipe()
        out_read, out_write = os.pipe()
        open_fds = {diag_read, diag_write, out_read, out_write}
        self.state = PipelineState.PIPES_WIRED

        def _close(fd: int) -> None:
            if fd in open_fds:
                open_fds.discard(fd)
                os.close(fd)

        compiler = None
        try:
            compiler = self._spawn(
                "compiler",
                [*self.config.compiler, self.source],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=diag_write,
            )
            _close(diag_write)
            filter_proc = self._spawn(
                "filter",
                list(self.config.filter),
                stdin=diag_read,
                stdout=out_write,
            )
            _close(diag_read)
            _close(out_write)
        except SubprocessSpawnError:
            for fd in list(open_fds):
                _close(fd)
            if compiler is not None:
                compiler.kill()
                compiler.wait()
            raise
        self.state = PipelineState.RUNNING

        deadline = None
        if self.config.compile_timeout is not None:
            deadline = time.monotonic() + self.config.compile_timeout
        self.state = PipelineState.DRAINING
        try:
            data, timed_out = _drain(out_read, deadline)
            if timed_out:
                for proc in (compiler, filter_proc):
                    if proc.poll() is None:
                        proc.kill()
            compiler_code, compiler_killed = _reap(compiler, deadline)
            filter_code, filter_killed = _reap(filter_proc, deadline)
            timed_out = timed_out or compiler_killed or filter_killed
            if timed_out:
                # the filter may have flushed more lines before it died
                data += _read_available(out_read)
        finally:
            _close(out_read)

        statuses = [
            ProcessStatus("compiler", compiler.pid, compiler_code, _COMPILER_OK_CODES),
            ProcessStatus("filter", filter_proc.pid, filter_code, _FILTER_OK_CODES),
        ]
        self.state = PipelineState.REAPED

        text = data.decode("utf-8", errors="replace")
        record = classify(basename(self.source), text, self.scale)
        self.sink.append(record)
        self.state = PipelineState.SCORED
        return PipelineResult(record=record, statuses=statuses, timed_out=timed_out)
