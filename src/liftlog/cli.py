"""CLI entry point for liftlog."""

import click

from .commands import history, init, plans, session
from .config import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="liftlog")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """liftlog: workout tracking from the terminal.

    Follow a plan exercise by exercise, log sets and weights, rest between
    sets, and review past sessions.

    Example usage:

        # Initialize the project
        liftlog init

        # See the available plans
        liftlog plans list
        liftlog plans show A

        # Train
        liftlog session start A

        # Review
        liftlog history list
    """
    configure_logging(verbose)


# Register commands
main.add_command(init)
main.add_command(plans)
main.add_command(history)
main.add_command(session)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
