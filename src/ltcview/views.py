"""One-shot views: app list and app status."""

from rich import box
from rich.markup import escape
from rich.table import Table

from ltcview.examiner import AppExaminer, DataSourceError
from ltcview.models import AppInfo
from ltcview.output import Output

RULE_WIDTH = 80
MIN_COLUMN_WIDTH = 13
HEADING_INDENT = " " * (MIN_COLUMN_WIDTH // 2)

STATE_COLORS = {
    "RUNNING": "green",
    "CLAIMED": "yellow",
    "UNCLAIMED": "cyan",
    "CRASHED": "red",
}


def color_instances(app: AppInfo) -> str:
    """Format ``running/desired`` instances, colored by health."""
    instances = f"{app.actual_running_instances}/{app.desired_instances}"
    if app.actual_running_instances == app.desired_instances:
        return f"[green]{instances}[/green]"
    if app.actual_running_instances == 0:
        return f"[red]{instances}[/red]"
    return f"[yellow]{instances}[/yellow]"


def color_instance_state(state: str) -> str:
    """Format an instance state, colored by what it means."""
    color = STATE_COLORS.get(state)
    if color is None:
        return escape(state)
    return f"[{color}]{escape(state)}[/{color}]"


def list_apps(output: Output, examiner: AppExaminer) -> None:
    """Print a table of every app."""
    try:
        apps = examiner.list_apps()
    except DataSourceError as exc:
        output.say(escape(f"Error listing apps: {exc}"))
        output.new_line()
        return

    if not apps:
        output.say("No apps to display.")
        output.new_line()
        return

    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
    table.add_column("App Name", no_wrap=True)
    table.add_column("Instances", no_wrap=True)
    table.add_column("DiskMB", justify="right")
    table.add_column("MemoryMB", justify="right")
    table.add_column("Routes", style="cyan")

    for app in apps:
        table.add_row(
            f"[bold]{escape(app.process_guid)}[/bold]",
            color_instances(app),
            str(app.disk_mb),
            str(app.memory_mb),
            escape(" ".join(app.routes)),
        )
    output.print(table)


def _rule(output: Output, pattern: str) -> None:
    output.say(pattern * RULE_WIDTH)
    output.new_line()


def _field(table: Table, name: str, value: object) -> None:
    table.add_row(name, value if isinstance(value, str) else str(value))


def _fields_table() -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(min_width=MIN_COLUMN_WIDTH - 1, no_wrap=True)
    table.add_column()
    return table


def app_status(output: Output, examiner: AppExaminer, app_name: str) -> None:
    """Print the detailed status of one app and each of its instances."""
    try:
        app = examiner.app_status(app_name)
    except DataSourceError as exc:
        output.say(escape(str(exc)))
        output.new_line()
        return

    _rule(output, "=")
    output.say(f"{HEADING_INDENT}[bold]{escape(app_name)}[/bold]")
    output.new_line()
    _rule(output, "-")

    table = _fields_table()
    _field(table, "Instances", color_instances(app))
    _field(table, "Stack", escape(app.stack))
    _field(table, "Start Timeout", app.start_timeout)
    _field(table, "DiskMB", app.disk_mb)
    _field(table, "MemoryMB", app.memory_mb)
    _field(table, "CPUWeight", app.cpu_weight)
    _field(table, "Ports", ",".join(str(port) for port in app.ports))
    _field(table, "Routes", escape(" ".join(app.routes)))
    _field(table, "LogGuid", escape(app.log_guid))
    _field(table, "LogSource", escape(app.log_source))
    _field(table, "Annotation", escape(app.annotation))
    output.print(table)

    _rule(output, "-")
    output.say("Environment")
    output.new_line()
    output.new_line()
    for env in app.environment_variables:
        output.say(escape(f'{env.name}="{env.value}"'))
        output.new_line()
    output.new_line()
    _rule(output, "=")

    for instance in app.actual_instances:
        output.say(
            f"{HEADING_INDENT}Instance {instance.index}  "
            f"\\[{color_instance_state(instance.state)}]"
        )
        output.new_line()
        _rule(output, "-")

        table = _fields_table()
        _field(table, "InstanceGuid", escape(instance.instance_guid))
        _field(table, "Cell ID", escape(instance.cell_id))
        _field(table, "Ip", escape(instance.ip))
        _field(
            table,
            "Ports",
            ";".join(f"{port.host_port}:{port.container_port}" for port in instance.ports),
        )
        _field(table, "Since", instance.since)
        output.print(table)
        _rule(output, "-")
