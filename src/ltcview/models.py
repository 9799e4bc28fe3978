"""Data models for ltcview."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class CellSnapshot:
    """Immutable snapshot of one cell's instance load."""

    cell_id: str
    missing: bool  # Cell hosts instances but did not report in
    running_instances: int
    claimed_instances: int

    def __post_init__(self) -> None:
        if self.running_instances < 0 or self.claimed_instances < 0:
            raise ValueError(f"negative instance count for cell {self.cell_id!r}")


@dataclass(slots=True, frozen=True)
class PortMapping:
    """Host to container port mapping of a running instance."""

    host_port: int
    container_port: int


@dataclass(slots=True, frozen=True)
class EnvironmentVariable:
    """A single environment variable of a desired app."""

    name: str
    value: str


@dataclass(slots=True, frozen=True)
class InstanceInfo:
    """Immutable snapshot of an app instance."""

    instance_guid: str
    cell_id: str
    index: int
    ip: str
    ports: tuple[PortMapping, ...]
    state: str  # 'RUNNING', 'CLAIMED', 'UNCLAIMED', 'CRASHED'
    since: int  # Nanoseconds since epoch, as reported


@dataclass(slots=True, frozen=True)
class AppInfo:
    """Immutable snapshot of a desired app and its actual instances."""

    process_guid: str
    desired_instances: int
    actual_running_instances: int
    stack: str = ""
    start_timeout: int = 0
    disk_mb: int = 0
    memory_mb: int = 0
    cpu_weight: int = 0
    ports: tuple[int, ...] = ()
    routes: tuple[str, ...] = ()
    log_guid: str = ""
    log_source: str = ""
    annotation: str = ""
    environment_variables: tuple[EnvironmentVariable, ...] = field(default=())
    actual_instances: tuple[InstanceInfo, ...] = field(default=())
