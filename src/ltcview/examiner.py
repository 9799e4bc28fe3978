"""Cluster data sources for ltcview."""

import logging
from typing import Any, Protocol

import httpx

from ltcview.models import (
    AppInfo,
    CellSnapshot,
    EnvironmentVariable,
    InstanceInfo,
    PortMapping,
)

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Cluster state could not be obtained."""


class AppNotFoundError(DataSourceError):
    """The requested app is neither desired nor running."""


class AppExaminer(Protocol):
    """Read-only view of cluster state."""

    def list_apps(self) -> list[AppInfo]: ...

    def app_status(self, app_name: str) -> AppInfo: ...

    def list_cells(self) -> list[CellSnapshot]: ...


class ReceptorExaminer:
    """
    AppExaminer backed by the receptor HTTP API.

    Every call fetches fresh state; nothing is cached between calls.
    Transport failures, error statuses and malformed payloads are raised
    as DataSourceError.
    """

    def __init__(
        self,
        base_url: str,
        auth: httpx.Auth | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the ReceptorExaminer.

        Args:
            base_url: Receptor API root, e.g. ``http://receptor.example.io``.
            auth: Optional credentials sent with every request.
            timeout: HTTP timeout in seconds.
            transport: Optional transport, used by tests.
        """
        self._client = httpx.Client(
            base_url=base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ReceptorExaminer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def list_apps(self) -> list[AppInfo]:
        """List all desired apps with their actual instances."""
        desired = self._get("/v1/desired_lrps")
        actuals = self._get("/v1/actual_lrps")
        instances = self._group_instances(actuals)

        apps = [
            self._build_app(lrp, instances.get(lrp.get("process_guid", ""), []))
            for lrp in desired
        ]
        return sorted(apps, key=lambda app: app.process_guid)

    def app_status(self, app_name: str) -> AppInfo:
        """Get the status of a single app."""
        desired = self._get("/v1/desired_lrps")
        actuals = self._get("/v1/actual_lrps")
        instances = self._group_instances(actuals).get(app_name, [])

        for lrp in desired:
            if lrp.get("process_guid") == app_name:
                return self._build_app(lrp, instances)

        if instances:
            # Still running somewhere after the desired LRP was removed
            return self._build_app({"process_guid": app_name, "instances": 0}, instances)

        raise AppNotFoundError("App not found.")

    def list_cells(self) -> list[CellSnapshot]:
        """
        List every cell with its running and claimed instance counts.

        Cells that host actual LRPs but are absent from the cell list are
        reported as missing.
        """
        reporting = {cell.get("cell_id", "") for cell in self._get("/v1/cells")}
        reporting.discard("")
        actuals = self._get("/v1/actual_lrps")

        running: dict[str, int] = {cell_id: 0 for cell_id in reporting}
        claimed: dict[str, int] = {cell_id: 0 for cell_id in reporting}
        for actual in actuals:
            cell_id = actual.get("cell_id") or ""
            if not cell_id:
                continue
            running.setdefault(cell_id, 0)
            claimed.setdefault(cell_id, 0)
            state = actual.get("state")
            if state == "RUNNING":
                running[cell_id] += 1
            elif state == "CLAIMED":
                claimed[cell_id] += 1

        return [
            CellSnapshot(
                cell_id=cell_id,
                missing=cell_id not in reporting,
                running_instances=running[cell_id],
                claimed_instances=claimed[cell_id],
            )
            for cell_id in sorted(running)
        ]

    def _get(self, path: str) -> list[dict[str, Any]]:
        """Fetch a JSON list from the receptor."""
        try:
            response = self._client.get(path)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise DataSourceError(
                f"receptor returned {exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.debug("Receptor request %s failed: %s", path, exc)
            raise DataSourceError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise DataSourceError(f"malformed response from {path}") from exc

        if not isinstance(payload, list):
            raise DataSourceError(f"malformed response from {path}")
        return [item for item in payload if isinstance(item, dict)]

    def _group_instances(self, actuals: list[dict[str, Any]]) -> dict[str, list[InstanceInfo]]:
        grouped: dict[str, list[InstanceInfo]] = {}
        for actual in actuals:
            try:
                instance = InstanceInfo(
                    instance_guid=actual.get("instance_guid") or "",
                    cell_id=actual.get("cell_id") or "",
                    index=int(actual.get("index") or 0),
                    ip=actual.get("address") or "",
                    ports=tuple(
                        PortMapping(
                            host_port=int(port.get("host_port") or 0),
                            container_port=int(port.get("container_port") or 0),
                        )
                        for port in actual.get("ports") or []
                    ),
                    state=actual.get("state") or "UNCLAIMED",
                    since=int(actual.get("since") or 0),
                )
            except (TypeError, ValueError, AttributeError) as exc:
                raise DataSourceError("malformed actual LRP in receptor response") from exc
            grouped.setdefault(actual.get("process_guid") or "", []).append(instance)

        for instances in grouped.values():
            instances.sort(key=lambda instance: instance.index)
        return grouped

    def _build_app(self, lrp: dict[str, Any], instances: list[InstanceInfo]) -> AppInfo:
        try:
            routes = lrp.get("routes") or []
            if isinstance(routes, dict):
                # {"cf-router": [{"hostnames": [...], "port": 8080}]}
                routes = [
                    hostname
                    for route in routes.get("cf-router") or []
                    for hostname in route.get("hostnames") or []
                ]
            return AppInfo(
                process_guid=lrp.get("process_guid") or "",
                desired_instances=int(lrp.get("instances") or 0),
                actual_running_instances=sum(
                    1 for instance in instances if instance.state == "RUNNING"
                ),
                stack=lrp.get("stack") or "",
                start_timeout=int(lrp.get("start_timeout") or 0),
                disk_mb=int(lrp.get("disk_mb") or 0),
                memory_mb=int(lrp.get("memory_mb") or 0),
                cpu_weight=int(lrp.get("cpu_weight") or 0),
                ports=tuple(int(port) for port in lrp.get("ports") or []),
                routes=tuple(str(route) for route in routes),
                log_guid=lrp.get("log_guid") or "",
                log_source=lrp.get("log_source") or "",
                annotation=lrp.get("annotation") or "",
                environment_variables=tuple(
                    EnvironmentVariable(name=env.get("name") or "", value=env.get("value") or "")
                    for env in lrp.get("env") or []
                ),
                actual_instances=tuple(instances),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise DataSourceError("malformed desired LRP in receptor response") from exc
