from click.testing import CliRunner

from sfexport.cli.cci import cli


def run_cli_command(*args, input=None, env=None):
    """Run a click command with arg parsing, letting exceptions through."""
    runner = CliRunner()
    return runner.invoke(
        cli,
        args,
        input=input,
        env=env,
        catch_exceptions=False,
        standalone_mode=False,
    )
