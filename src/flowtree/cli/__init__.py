"""Flowtree CLI: lay out and inspect quest resource graphs.

Installed as the `flowtree` command by ``pip install flowtree[cli]``.

Commands:
    layout    Compute node positions for a JSON resource document
    inspect   Show the extracted forest (parents, depths, sockets)
"""

from __future__ import annotations


def _require_typer():
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: the flowtree CLI needs typer. Install with: pip install flowtree[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Build the `flowtree` Typer app."""
    _require_typer()

    import typer

    from flowtree.cli.layout_cmd import register_commands

    app = typer.Typer(
        name="flowtree",
        help="Tidy-tree layout for quest resource graphs.",
        no_args_is_help=True,
    )
    register_commands(app)
    return app


def main():
    create_app()()
