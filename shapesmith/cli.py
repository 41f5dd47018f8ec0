from collections import Counter
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from shapesmith.codegen.codegen import Codegen
from shapesmith.codegen.graph import ShapeGraphResolver
from shapesmith.codegen.hierarchy import HierarchyResolver
from shapesmith.config import get_config
from shapesmith.exceptions import ShapesmithError
from shapesmith.model.loader import ModelLoader

console = Console()
app = typer.Typer(
    name='shapesmith',
    help='Generate immutable Python models from service descriptions',
    no_args_is_help=True,
)


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
    ] = None,
) -> None:
    """Generate Python code from configuration.

    If no config file is specified, will look for shapesmith.yaml,
    shapesmith.yml or a [tool.shapesmith] table in pyproject.toml in the
    current directory.

    Examples:
        shapesmith generate
        shapesmith generate --config my-config.yaml
    """
    try:
        codegen_config = get_config(config)

        for document_config in codegen_config.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating code for {document_config.source} in {document_config.output}...',
                    total=None,
                )

                written = Codegen(document_config).generate()

                progress.update(
                    task, description=f'Code generation completed for {document_config.source}!'
                )
            console.print(f'[dim]Generated {len(written)} files in {document_config.output}[/dim]')

    except (ShapesmithError, FileNotFoundError) as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)


@app.command()
def validate(
    source: Annotated[str, typer.Argument(help='Path or URL to the service description')],
    service_name: Annotated[
        str | None,
        typer.Option('--service-name', help='Override for the service identifier'),
    ] = None,
) -> None:
    """Check that a service description compiles, without writing anything.

    Examples:
        shapesmith validate ./service.json
    """
    try:
        raw = ModelLoader().load(source)
        graph = ShapeGraphResolver(raw, service_name=service_name).resolve()
        hierarchy = HierarchyResolver(graph).resolve()
    except ShapesmithError as e:
        console.print(f'[red]Invalid:[/red] {e}')
        raise typer.Exit(1)

    counts = Counter(shape.kind.value for shape in graph)
    table = Table(title=f'{graph.service.service_id} ({graph.service.protocol})')
    table.add_column('Kind')
    table.add_column('Shapes', justify='right')
    for kind, count in sorted(counts.items()):
        table.add_row(kind, str(count))
    console.print(table)
    console.print(
        f'[green]Valid:[/green] {len(graph.operations)} operations, '
        f'{len(hierarchy.edges)} inheritance edges, {len(hierarchy.unions)} event streams'
    )


@app.command()
def version() -> None:
    """Show the version of shapesmith."""
    try:
        from shapesmith._version import version

        console.print(f'shapesmith version: {version}')
    except ImportError:
        console.print('shapesmith version: unknown')


if __name__ == '__main__':
    app()
