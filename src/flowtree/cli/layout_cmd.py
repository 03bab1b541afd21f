"""CLI commands for laying out and inspecting resource graphs.

Provides `flowtree layout` and `flowtree inspect` as top-level commands.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

import typer

from flowtree.cli._config import load_config
from flowtree.cli._format import (
    EMPTY_CELL,
    Table,
    format_coordinate,
    format_socket,
    format_sockets,
    print_json,
    print_lines,
)
from flowtree.content import InMemoryAccessor, load_resource
from flowtree.exceptions import FlowtreeError
from flowtree.graph import Graph, QuestGraphBuilder, build_graph
from flowtree.layout import ReingoldTilford


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_graph(path: str) -> tuple[Graph, QuestGraphBuilder]:
    """Load a JSON resource and build its graph, exiting on bad input."""
    try:
        resource = load_resource(path)
        return build_graph(resource.entry, InMemoryAccessor())
    except OSError as e:
        print(f"Error: Could not read '{path}': {e}")
        raise typer.Exit(1) from e
    except FlowtreeError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


def _connections_table(builder: QuestGraphBuilder) -> Table:
    table = Table(["From", "Socket", "To", "Socket"])
    for c in builder.connections:
        table.add_row(
            str(c.source.key),
            format_socket(c.source_socket),
            str(c.destination.key),
            format_socket(c.destination_socket),
        )
    return table


def register_commands(app: typer.Typer) -> None:
    """Register `layout` and `inspect` as top-level commands on the app."""

    @app.command("layout")
    def layout_cmd(
        resource: Annotated[str, typer.Argument(help="Path to a JSON resource document")],
        right_to_left: Annotated[
            bool | None,
            typer.Option("--right-to-left/--left-to-right", help="Side to place the roots on (overrides pyproject.toml)"),
        ] = None,
        node_distance: Annotated[float | None, typer.Option("--node-distance", help="Unit distance between nodes")] = None,
        tree_distance: Annotated[float | None, typer.Option("--tree-distance", help="Gap between root trees")] = None,
        scale_x: Annotated[float | None, typer.Option("--scale-x", help="Pixels per layout unit (x)")] = None,
        scale_y: Annotated[float | None, typer.Option("--scale-y", help="Pixels per layout unit (y)")] = None,
        as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
        """Compute tidy-tree positions for every node of a resource graph."""
        _configure_logging(verbose)
        config = load_config()
        try:
            layout_config = config.layout_config(
                left_to_right=None if right_to_left is None else not right_to_left,
                distance_between_nodes=node_distance,
                distance_between_trees=tree_distance,
            )
        except FlowtreeError as e:
            print(f"Error: {e}")
            raise typer.Exit(1) from e

        graph, builder = _load_graph(resource)
        layout = ReingoldTilford(layout_config).calculate_layout(graph)
        sx = scale_x if scale_x is not None else config.scale_x
        sy = scale_y if scale_y is not None else config.scale_y

        if as_json:
            vertices: list[dict[str, Any]] = []
            for (node, x, y), (_, px, py) in zip(layout.as_records(), layout.scaled(sx, sy)):
                vertices.append(
                    {
                        "id": node.key,
                        "type": node.content_type_name,
                        "x": x,
                        "y": y,
                        "pixel_x": px,
                        "pixel_y": py,
                    }
                )
            data = {
                "left_to_right": layout.config.left_to_right,
                "vertices": vertices,
                "edges": [{"child": c.key, "parent": p.key} for c, p in layout.edge_pairs()],
                "connections": [
                    {
                        "source": c.source.key,
                        "source_socket": c.source_socket,
                        "destination": c.destination.key,
                        "destination_socket": c.destination_socket,
                    }
                    for c in builder.connections
                ],
            }
            print_json("layout", data, output)
            return

        if not len(layout):
            print("\n  Graph is empty: no blocks found under graph.graphBlocks.")
            return

        print(f"\nLayout: {len(layout)} nodes | {len(layout.edges)} edges | {len(builder.connections)} connections\n")
        positions = Table(["Node", "Type", "X", "Y"], numeric=frozenset({"X", "Y"}))
        for node, x, y in layout.as_records():
            positions.add_row(str(node.key), node.content_type_short_name, format_coordinate(x), format_coordinate(y))
        print_lines(positions.render())

        if builder.connections:
            print("\n  Connections:\n")
            print_lines(_connections_table(builder).render())

        print(f"\n  For JSON: flowtree layout {resource} --json")

    @app.command("inspect")
    def inspect_cmd(
        resource: Annotated[str, typer.Argument(help="Path to a JSON resource document")],
        as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
        """Show the extracted forest: parents, depths and sockets."""
        _configure_logging(verbose)
        graph, builder = _load_graph(resource)

        entries = []
        for node in graph:
            parent = graph.parent_of(node)
            sockets = builder.sockets_for(node)
            entries.append(
                {
                    "id": node.key,
                    "type": node.content_type_name,
                    "parent": None if parent is None else parent.key,
                    "depth": graph.depth(node),
                    "inputs": list(sockets.inputs),
                    "outputs": list(sockets.outputs),
                }
            )

        if as_json:
            data = {
                "roots": [r.key for r in graph.roots()],
                "nodes": entries,
                "node_count": len(graph),
                "connection_count": len(builder.connections),
            }
            print_json("inspect", data, output)
            return

        print(f"\nGraph: {len(graph)} nodes | {len(graph.roots())} roots | {len(builder.connections)} connections\n")
        table = Table(["Node", "Type", "Parent", "Depth", "Inputs", "Outputs"], numeric=frozenset({"Depth"}))
        for e in entries:
            table.add_row(
                str(e["id"]),
                e["type"].split(".")[-1],
                EMPTY_CELL if e["parent"] is None else str(e["parent"]),
                str(e["depth"]),
                format_sockets(e["inputs"]),
                format_sockets(e["outputs"]),
            )
        print_lines(table.render())
