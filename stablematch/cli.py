"""
stablematch Command Line Interface

Provides CLI commands to generate sample problems, solve problem
definitions and benchmark the search algorithms.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="stablematch",
    help="Generalized stable matching engine CLI",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """Configure logging before any command runs."""
    from stablematch.utils.logger import setup_logging

    setup_logging("DEBUG" if verbose else None)


@app.command()
def version():
    """Show application version."""
    from stablematch import __version__, __app_name__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from stablematch.utils.config import get_settings

    settings = get_settings()

    table = Table(title="stablematch Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Reject Uniform Preferences", str(settings.matching.reject_uniform_preferences))
    table.add_row("Reject Uniform Fitness", str(settings.matching.reject_uniform_fitness))
    table.add_row("Population Size", str(settings.solver.population_size))
    table.add_row("Generations", str(settings.solver.generations))
    table.add_row("Runs Per Algorithm", str(settings.solver.run_count))
    table.add_row("Algorithms", ", ".join(settings.solver.algorithms))
    table.add_row("Max Workers", str(settings.solver.max_workers))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


def _parse_sizes(sizes: Optional[str]) -> Optional[list[int]]:
    if not sizes:
        return None
    try:
        return [int(size) for size in sizes.split(",")]
    except ValueError as e:
        raise typer.BadParameter(f"Expected comma separated integers, got '{sizes}'") from e


@app.command()
def sample(
    matching_type: str = typer.Option("oto", "--type", "-t", help="Matching type (oto/otm/mtm/triplet)"),
    sizes: Optional[str] = typer.Option(None, "--sizes", "-s", help="Set sizes, e.g. 5,5"),
    properties: int = typer.Option(3, "--properties", "-p", help="Number of properties"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the definition to a file"),
):
    """Generate a random problem definition."""
    from stablematch.data.sample import generate_sample_problem
    from stablematch.utils.constants import MatchingProblemType

    try:
        definition = generate_sample_problem(
            set_sizes=_parse_sizes(sizes),
            property_count=properties,
            matching_type=MatchingProblemType(matching_type.lower()),
            seed=seed,
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    document = definition.model_dump_json(indent=2)
    if output is None:
        console.print_json(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding="utf-8")
    console.print(f"[green]✓ Sample problem written to {output}[/green]")


def _load_problem(problem_file: Path, matching_type: Optional[str]):
    from stablematch.core.matching import build_problem
    from stablematch.data.models import MatchingProblemDefinition
    from stablematch.utils.constants import MatchingProblemType

    definition = MatchingProblemDefinition.from_json_file(problem_file)
    override = MatchingProblemType(matching_type.lower()) if matching_type else None
    return definition, build_problem(definition, override)


def _make_solver(definition, population: Optional[int], generations: Optional[int], seed: Optional[int]):
    from stablematch.core.solver import MatchingSolver, OptimizerConfig

    config = OptimizerConfig.from_settings()
    config.population_size = population or definition.population_size or config.population_size
    config.generations = generations or definition.generation or config.generations
    if seed is not None:
        config.seed = seed
    return MatchingSolver(config)


@app.command()
def solve(
    problem_file: Path = typer.Argument(..., help="Path to a JSON problem definition"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a", help="Search algorithm"),
    matching_type: Optional[str] = typer.Option(None, "--type", "-t", help="Override the matching type"),
    population: Optional[int] = typer.Option(None, "--population", help="Population size"),
    generations: Optional[int] = typer.Option(None, "--generations", "-g", help="Number of generations"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    as_json: bool = typer.Option(False, "--json", help="Print the solution as JSON"),
):
    """Solve a matching problem and show the best matching."""
    from stablematch.core.exceptions import MatchingError

    if not problem_file.exists():
        console.print(f"[red]Error: File not found: {problem_file}[/red]")
        raise typer.Exit(1)

    try:
        definition, problem = _load_problem(problem_file, matching_type)
        solver = _make_solver(definition, population, generations, seed)
        solution = solver.solve(problem, algorithm or definition.algorithm)
    except (MatchingError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(solution.to_dict()))
        return

    table = Table(title=f"Matches for {definition.problem_name or problem_file.name}")
    table.add_column("Individual", style="dim", justify="right")
    table.add_column("Set", justify="center")
    table.add_column("Partners", style="cyan")
    table.add_column("Satisfaction", justify="right")

    for index, partners in enumerate(solution.matches.to_list()):
        table.add_row(
            str(index),
            str(problem.data.get_set_of(index) + 1),
            ", ".join(str(p) for p in partners) or "[yellow]-[/yellow]",
            f"{solution.satisfactions[index]:.3f}",
        )

    console.print(table)
    console.print(f"\n[bold]Algorithm:[/bold] {solution.algorithm}")
    console.print(f"[bold]Fitness:[/bold] [green]{solution.fitness_value:.4f}[/green]")
    console.print(
        "[bold]Set satisfactions:[/bold] "
        + ", ".join(f"S{i + 1}={value:.3f}" for i, value in enumerate(solution.set_satisfactions))
    )
    console.print(f"[bold]Left overs:[/bold] {solution.left_overs or 'none'}")
    console.print(f"[bold]Runtime:[/bold] {solution.runtime:.1f} ms")


@app.command()
def insights(
    problem_file: Path = typer.Argument(..., help="Path to a JSON problem definition"),
    algorithms: Optional[list[str]] = typer.Option(None, "--algorithm", "-a", help="Algorithms to compare"),
    runs: Optional[int] = typer.Option(None, "--runs", "-r", help="Runs per algorithm"),
    matching_type: Optional[str] = typer.Option(None, "--type", "-t", help="Override the matching type"),
    population: Optional[int] = typer.Option(None, "--population", help="Population size"),
    generations: Optional[int] = typer.Option(None, "--generations", "-g", help="Number of generations"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
):
    """Benchmark search algorithms over repeated runs."""
    from stablematch.core.exceptions import MatchingError

    if not problem_file.exists():
        console.print(f"[red]Error: File not found: {problem_file}[/red]")
        raise typer.Exit(1)

    try:
        definition, problem = _load_problem(problem_file, matching_type)
        solver = _make_solver(definition, population, generations, seed)
        result = solver.get_insights(problem, algorithms or None, runs)
    except (MatchingError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Algorithm Insights")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Runs", justify="right")
    table.add_column("Best Fitness", justify="right", style="green")
    table.add_column("Mean Fitness", justify="right")
    table.add_column("Mean Runtime (ms)", justify="right")

    for name, fitness_values in result.fitness_values.items():
        runtimes = result.runtimes[name]
        table.add_row(
            name,
            str(len(fitness_values)),
            f"{max(fitness_values):.4f}",
            f"{sum(fitness_values) / len(fitness_values):.4f}",
            f"{sum(runtimes) / len(runtimes):.1f}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
