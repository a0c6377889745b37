import json
import logging
from typing import BinaryIO

from storer.errors import DecodeError
from storer.schemas import STAGE_ORDER, ExecutionReport, StageResult, StageStatus, StepExecution
from storer.step_logic import parse_timestamp


logger = logging.getLogger(__name__)
SUPPORTED_FORMATS = ("json",)


def read_execution_report(stream: BinaryIO, fmt: str = "json") -> ExecutionReport:
    if fmt not in SUPPORTED_FORMATS:
        raise DecodeError(f"unsupported execution report format: {fmt}")

    raw = stream.read()
    if not raw or not raw.strip():
        raise DecodeError("error reading execution result: empty input")

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise DecodeError(f"error reading execution result: {exc}") from exc

    report = decode_report(payload)
    logger.info(
        "execution report decoded",
        extra={"stages": [stage.name for stage in report.stages], "files": len(report.files)},
    )
    return report


def decode_report(payload: object) -> ExecutionReport:
    if not isinstance(payload, dict):
        raise DecodeError("execution result must be a JSON object")

    stages: list[StageResult] = []
    for name in STAGE_ORDER:
        stage = payload.get(name)
        if stage is None:
            continue
        stages.append(_decode_stage(name, stage))

    package = _or_default(payload.get("package"), "")
    if not isinstance(package, str):
        raise DecodeError("package must be a string")

    files = _or_default(payload.get("files"), [])
    if not isinstance(files, list) or not all(isinstance(path, str) for path in files):
        raise DecodeError("files must be a list of strings")

    return ExecutionReport(
        stages=tuple(stages),
        package=package,
        files=tuple(files),
        crawling_timestamp=parse_timestamp(payload.get("crawling_timestamp")),
    )


def _decode_stage(name: str, stage: object) -> StageResult:
    if not isinstance(stage, dict):
        raise DecodeError(f"stage '{name}' must be an object")

    execution = _or_default(stage.get("execution"), {})
    if not isinstance(execution, dict):
        raise DecodeError(f"stage '{name}' execution must be an object")

    return StageResult(
        name=name,
        status=_decode_stage_status(name, stage.get("status", StageStatus.OK.name)),
        execution=_decode_execution(name, execution),
    )


def _decode_stage_status(name: str, raw: object) -> StageStatus:
    try:
        if isinstance(raw, bool):
            raise ValueError(raw)
        if isinstance(raw, int):
            return StageStatus(raw)
        if isinstance(raw, str):
            return StageStatus[raw.strip().upper()]
    except (KeyError, ValueError) as exc:
        raise DecodeError(f"stage '{name}' has unknown status {raw!r}") from exc
    raise DecodeError(f"stage '{name}' has unknown status {raw!r}")


def _decode_execution(name: str, execution: dict) -> StepExecution:
    text_fields: dict[str, str] = {}
    for key in ("cmd", "cmd_dir", "stdin", "stdout", "stderr"):
        value = _or_default(execution.get(key), "")
        if not isinstance(value, str):
            raise DecodeError(f"stage '{name}' field '{key}' must be a string")
        text_fields[key] = value

    status = execution.get("status", 0)
    if isinstance(status, bool) or not isinstance(status, int):
        raise DecodeError(f"stage '{name}' exit status must be an integer")

    return StepExecution(
        status=status,
        env=_decode_env(name, execution.get("env")),
        start_time=parse_timestamp(execution.get("start_time")),
        finish_time=parse_timestamp(execution.get("finish_time")),
        **text_fields,
    )


def _decode_env(name: str, env: object) -> tuple[str, ...]:
    if env is None:
        return ()
    if isinstance(env, dict):
        return tuple(f"{key}={value}" for key, value in env.items())
    if isinstance(env, list) and all(isinstance(item, str) for item in env):
        return tuple(env)
    raise DecodeError(f"stage '{name}' env must be a list of KEY=VALUE strings or an object")


def _or_default(value: object, default: object) -> object:
    # Only a missing or null key takes the default; wrong types must still fail.
    return default if value is None else value
