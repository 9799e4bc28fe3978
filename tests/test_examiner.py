"""Tests for the receptor-backed AppExaminer."""

import httpx
import pytest

from ltcview.examiner import AppNotFoundError, DataSourceError, ReceptorExaminer
from ltcview.models import CellSnapshot, EnvironmentVariable, PortMapping

DESIRED_LRPS = [
    {
        "process_guid": "web",
        "instances": 2,
        "stack": "lucid64",
        "start_timeout": 30,
        "disk_mb": 1024,
        "memory_mb": 128,
        "cpu_weight": 100,
        "ports": [8080],
        "routes": {"cf-router": [{"hostnames": ["web.example.io", "www.example.io"], "port": 8080}]},
        "log_guid": "web",
        "log_source": "APP",
        "annotation": "serves pages",
        "env": [{"name": "PORT", "value": "8080"}],
    },
    {
        "process_guid": "api",
        "instances": 1,
        "routes": ["api.example.io"],
    },
]

ACTUAL_LRPS = [
    {
        "process_guid": "web",
        "instance_guid": "web-1",
        "cell_id": "cell-1",
        "index": 1,
        "address": "10.0.0.1",
        "ports": [{"container_port": 8080, "host_port": 61002}],
        "state": "RUNNING",
        "since": 1_400_000_000_000_000_000,
    },
    {
        "process_guid": "web",
        "instance_guid": "web-0",
        "cell_id": "cell-1",
        "index": 0,
        "address": "10.0.0.1",
        "ports": [{"container_port": 8080, "host_port": 61001}],
        "state": "RUNNING",
        "since": 1_400_000_000_000_000_000,
    },
    {
        "process_guid": "api",
        "instance_guid": "api-0",
        "cell_id": "cell-2",
        "index": 0,
        "state": "CLAIMED",
    },
    {
        "process_guid": "api",
        "index": 1,
        "cell_id": "",
        "state": "UNCLAIMED",
    },
    {
        "process_guid": "old",
        "instance_guid": "old-0",
        "cell_id": "cell-9",
        "index": 0,
        "state": "RUNNING",
    },
]

CELLS = [
    {"cell_id": "cell-2", "stack": "lucid64"},
    {"cell_id": "cell-1", "stack": "lucid64"},
    {"cell_id": "cell-3", "stack": "lucid64"},
]


def make_examiner(routes: dict | None = None, requests: list | None = None) -> ReceptorExaminer:
    responses = {
        "/v1/desired_lrps": DESIRED_LRPS,
        "/v1/actual_lrps": ACTUAL_LRPS,
        "/v1/cells": CELLS,
    }
    if routes:
        responses.update(routes)

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        body = responses.get(request.url.path)
        if body is None:
            return httpx.Response(404)
        if isinstance(body, httpx.Response):
            return body
        if isinstance(body, Exception):
            raise body
        return httpx.Response(200, json=body)

    return ReceptorExaminer(
        "http://receptor.example.io",
        auth=httpx.BasicAuth("user", "pass"),
        transport=httpx.MockTransport(handler),
    )


class TestListCells:
    """Tests for ReceptorExaminer.list_cells."""

    def test_counts_running_and_claimed_per_cell(self):
        """Test instances are counted per cell and unknown cells are marked missing."""
        with make_examiner() as examiner:
            cells = examiner.list_cells()

        assert cells == [
            CellSnapshot(cell_id="cell-1", missing=False, running_instances=2, claimed_instances=0),
            CellSnapshot(cell_id="cell-2", missing=False, running_instances=0, claimed_instances=1),
            CellSnapshot(cell_id="cell-3", missing=False, running_instances=0, claimed_instances=0),
            CellSnapshot(cell_id="cell-9", missing=True, running_instances=1, claimed_instances=0),
        ]

    def test_fresh_fetch_every_call(self):
        """Test nothing is cached between polls."""
        requests: list[httpx.Request] = []
        with make_examiner(requests=requests) as examiner:
            examiner.list_cells()
            examiner.list_cells()

        assert [request.url.path for request in requests] == [
            "/v1/cells",
            "/v1/actual_lrps",
            "/v1/cells",
            "/v1/actual_lrps",
        ]

    def test_sends_basic_auth(self):
        """Test credentials are sent as basic auth."""
        requests: list[httpx.Request] = []
        with make_examiner(requests=requests) as examiner:
            examiner.list_cells()

        assert requests[0].headers["authorization"].startswith("Basic ")

    def test_error_status_is_data_source_error(self):
        """Test an HTTP error status becomes a DataSourceError."""
        with make_examiner({"/v1/cells": httpx.Response(500)}) as examiner:
            with pytest.raises(DataSourceError, match="500"):
                examiner.list_cells()

    def test_transport_error_is_data_source_error(self):
        """Test a connection failure becomes a DataSourceError."""
        error = httpx.ConnectError("connection refused")
        with make_examiner({"/v1/actual_lrps": error}) as examiner:
            with pytest.raises(DataSourceError, match="connection refused"):
                examiner.list_cells()

    def test_malformed_payload_is_data_source_error(self):
        """Test a payload that is not a list is rejected."""
        with make_examiner({"/v1/cells": {"not": "a list"}}) as examiner:
            with pytest.raises(DataSourceError):
                examiner.list_cells()

    def test_invalid_json_is_data_source_error(self):
        """Test a body that is not JSON is rejected."""
        bad = httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})
        with make_examiner({"/v1/cells": bad}) as examiner:
            with pytest.raises(DataSourceError):
                examiner.list_cells()


class TestListApps:
    """Tests for ReceptorExaminer.list_apps."""

    def test_apps_sorted_with_running_counts(self):
        """Test apps are sorted by name with running and desired counts."""
        with make_examiner() as examiner:
            apps = examiner.list_apps()

        assert [app.process_guid for app in apps] == ["api", "web"]
        api, web = apps
        assert (api.actual_running_instances, api.desired_instances) == (0, 1)
        assert (web.actual_running_instances, web.desired_instances) == (2, 2)

    def test_routes_from_router_map_and_list(self):
        """Test routes are read from both route formats."""
        with make_examiner() as examiner:
            api, web = examiner.list_apps()

        assert web.routes == ("web.example.io", "www.example.io")
        assert api.routes == ("api.example.io",)


class TestAppStatus:
    """Tests for ReceptorExaminer.app_status."""

    def test_full_status(self):
        """Test every desired field is carried into the app status."""
        with make_examiner() as examiner:
            app = examiner.app_status("web")

        assert app.stack == "lucid64"
        assert app.start_timeout == 30
        assert app.disk_mb == 1024
        assert app.memory_mb == 128
        assert app.cpu_weight == 100
        assert app.ports == (8080,)
        assert app.log_guid == "web"
        assert app.annotation == "serves pages"
        assert app.environment_variables == (EnvironmentVariable(name="PORT", value="8080"),)

    def test_instances_sorted_by_index(self):
        """Test instances are ordered by index."""
        with make_examiner() as examiner:
            app = examiner.app_status("web")

        assert [instance.index for instance in app.actual_instances] == [0, 1]
        first = app.actual_instances[0]
        assert first.instance_guid == "web-0"
        assert first.ip == "10.0.0.1"
        assert first.ports == (PortMapping(host_port=61001, container_port=8080),)

    def test_undesired_app_with_instances(self):
        """Test an app that only has actual instances is still reported."""
        with make_examiner() as examiner:
            app = examiner.app_status("old")

        assert app.desired_instances == 0
        assert app.actual_running_instances == 1

    def test_unknown_app(self):
        """Test an unknown app is reported as not found."""
        with make_examiner() as examiner:
            with pytest.raises(AppNotFoundError, match="App not found."):
                examiner.app_status("missing")
