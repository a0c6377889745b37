from datetime import UTC, datetime

from storer.schemas import ExecutionReport, ProcInfo, StageStatus, StatusSummary, StepExecution


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(raw: object) -> datetime | None:
    parsed: datetime | None = None
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    elif isinstance(raw, dict):
        seconds = raw.get("seconds", 0)
        nanos = raw.get("nanos", 0)
        try:
            parsed = datetime.fromtimestamp(int(seconds) + int(nanos) / 1e9, UTC)
        except (TypeError, ValueError, OverflowError, OSError):
            return None
    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def proc_info_from_step(execution: StepExecution) -> ProcInfo:
    return ProcInfo(
        cmd=execution.cmd,
        cmd_dir=execution.cmd_dir,
        stdin=execution.stdin,
        stdout=execution.stdout,
        stderr=execution.stderr,
        status=execution.status,
        env=execution.env,
    )


def step_duration_ms(execution: StepExecution) -> float:
    if execution.start_time is None or execution.finish_time is None:
        return 0.0
    elapsed = (execution.finish_time - execution.start_time).total_seconds() * 1000
    return elapsed if elapsed >= 0 else 0.0


def reduce_status(
    report: ExecutionReport,
    *,
    started_at: datetime | None = None,
    now: datetime | None = None,
) -> StatusSummary:
    proc_info: ProcInfo | None = None
    exec_time = 0.0
    for stage in report.stages:
        if stage.status == StageStatus.OK:
            continue
        # Later failing stages overwrite earlier ones.
        proc_info = proc_info_from_step(stage.execution)
        exec_time = step_duration_ms(stage.execution)

    if proc_info is None and started_at is not None:
        current = now or utc_now()
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=UTC)
        exec_time = max((current - started_at).total_seconds(), 0.0)

    if proc_info is not None:
        status_code: int | None = proc_info.status
    elif report.stages:
        status_code = report.stages[-1].execution.status
    else:
        status_code = None

    return StatusSummary(proc_info=proc_info, exec_time=exec_time, status_code=status_code)


def contains(codes: tuple[int, ...] | list[int], code: int | None) -> bool:
    if code is None:
        return False
    return any(code == candidate for candidate in codes)


def select_collection(
    status_code: int | None,
    success_codes: tuple[int, ...] | list[int],
    *,
    success_collection: str,
    error_collection: str,
) -> str:
    if contains(success_codes, status_code):
        return success_collection
    return error_collection
