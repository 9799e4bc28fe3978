"""ltcview - command line entry point."""

import click

from ltcview import views
from ltcview.config import DURATION, RefreshConfig, Settings
from ltcview.examiner import AppExaminer, ReceptorExaminer
from ltcview.exit_handler import ExitHandler, SignalExitHandler
from ltcview.logging_config import configure_logging
from ltcview.output import Output
from ltcview.visualizer import RefreshLoop


class CliState:
    """
    Collaborators shared by every command.

    Anything not passed in is built lazily from the settings, so tests can
    inject fakes through ``CliRunner.invoke(..., obj=CliState(...))``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        examiner: AppExaminer | None = None,
        output: Output | None = None,
        exit_handler: ExitHandler | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._examiner = examiner
        self._output = output
        self._exit_handler = exit_handler

    @property
    def examiner(self) -> AppExaminer:
        if self._examiner is None:
            try:
                base_url = self.settings.receptor_url
            except ValueError:
                raise click.UsageError(
                    "Target not set. Pass --target or set LTCVIEW_TARGET."
                ) from None
            self._examiner = ReceptorExaminer(
                base_url,
                auth=self.settings.auth,
                timeout=self.settings.timeout,
            )
        return self._examiner

    @property
    def output(self) -> Output:
        if self._output is None:
            self._output = Output()
        return self._output

    @property
    def exit_handler(self) -> ExitHandler:
        if self._exit_handler is None:
            self._exit_handler = SignalExitHandler()
        return self._exit_handler

    def close(self) -> None:
        """Release anything this state built itself."""
        if isinstance(self._exit_handler, SignalExitHandler):
            self._exit_handler.join(timeout=1.0)
            self._exit_handler.close()
        if isinstance(self._examiner, ReceptorExaminer):
            self._examiner.close()


pass_state = click.make_pass_decorator(CliState)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--target", envvar="LTCVIEW_TARGET", default="", help="Lattice system domain.")
@click.option("--username", envvar="LTCVIEW_USERNAME", default="", help="Receptor username.")
@click.option("--password", envvar="LTCVIEW_PASSWORD", default="", help="Receptor password.")
@click.option(
    "--timeout",
    envvar="LTCVIEW_TIMEOUT",
    type=DURATION,
    default="10s",
    show_default=True,
    help="Receptor request timeout.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    target: str,
    username: str,
    password: str,
    timeout: float,
    verbose: bool,
) -> None:
    """Show apps and cells running on Lattice."""
    configure_logging(verbose)
    settings = Settings(target=target, username=username, password=password, timeout=timeout)
    if ctx.obj is None:
        ctx.obj = CliState(settings)
    ctx.call_on_close(ctx.obj.close)


@cli.command("list")
@pass_state
def list_command(state: CliState) -> None:
    """List all apps on lattice."""
    views.list_apps(state.output, state.examiner)


# Short alias, hidden from the help listing
cli.add_command(
    click.Command("li", callback=list_command.callback, params=list_command.params, hidden=True)
)


@cli.command("status")
@click.argument("app_name", required=False)
@pass_state
def status_command(state: CliState, app_name: str | None) -> None:
    """Displays detailed status information about the app and its instances."""
    if not app_name:
        raise click.UsageError("App Name required")
    views.app_status(state.output, state.examiner, app_name)


@cli.command("visualize")
@click.option(
    "-r",
    "--rate",
    type=DURATION,
    default="0",
    help="The rate at which to refresh the visualization, e.g. 1s or 500ms.",
)
@pass_state
def visualize_command(state: CliState, rate: float) -> None:
    """Visualize Lattice Cells."""
    config = RefreshConfig(interval=rate)
    examiner = state.examiner
    output = state.output

    output.say("[bold]Distribution[/bold]")
    output.new_line()

    RefreshLoop(output, examiner, state.exit_handler, config).run()


def main() -> None:
    """Entry point for the ltcview CLI."""
    cli(prog_name="ltcview")


if __name__ == "__main__":
    main()
