from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class StageStatus(IntEnum):
    OK = 0
    SETUP_ERROR = 1
    BUILD_ERROR = 2
    RUN_ERROR = 3
    TEARDOWN_ERROR = 4


STAGE_ORDER = ("setup", "build", "run", "teardown")


@dataclass(frozen=True)
class StepExecution:
    cmd: str = ""
    cmd_dir: str = ""
    stdin: str = ""
    stdout: str = ""
    stderr: str = ""
    status: int = 0
    env: tuple[str, ...] = ()
    start_time: datetime | None = None
    finish_time: datetime | None = None


@dataclass(frozen=True)
class StageResult:
    name: str
    status: StageStatus
    execution: StepExecution


@dataclass(frozen=True)
class ExecutionReport:
    stages: tuple[StageResult, ...] = ()
    package: str = ""
    files: tuple[str, ...] = ()
    crawling_timestamp: datetime | None = None


@dataclass(frozen=True)
class ProcInfo:
    cmd: str
    cmd_dir: str
    stdin: str
    stdout: str
    stderr: str
    status: int
    env: tuple[str, ...]


@dataclass(frozen=True)
class StatusSummary:
    proc_info: ProcInfo | None
    exec_time: float
    status_code: int | None


@dataclass(frozen=True)
class BackupDescriptor:
    url: str
    size: int
    hash: str


@dataclass
class AgencyMonthlyInfo:
    agency_id: str
    month: int
    year: int
    crawling_timestamp: datetime
    proc_info: ProcInfo | None = None
    exec_time: float = 0.0
    package: BackupDescriptor | None = None
    backups: list[BackupDescriptor] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.agency_id = self.agency_id.lower()

    @property
    def key(self) -> tuple[str, int, int]:
        return self.agency_id, self.month, self.year
