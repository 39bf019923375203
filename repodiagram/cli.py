"""CLI entry point for repodiagram."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax

from repodiagram.config import RepoDiagramConfig, SnapshotConfig, SynthesisConfig, load_config
from repodiagram.config.loader import DEFAULT_CONFIG_TEMPLATE
from repodiagram.errors import RepoDiagramError
from repodiagram.llm import create_llm_provider
from repodiagram.logging import configure_logging
from repodiagram.output import DiagramWriter
from repodiagram.snapshot import RepoRef, SnapshotAssembler, fetch_diff
from repodiagram.synthesis import DOT, DiagramSynthesizer, SynthesisResult, get_language

app = typer.Typer(
    name="repodiagram",
    help="Architecture diagrams for GitHub repositories, drafted by an LLM and checked by a parser.",
)

config_app = typer.Typer(help="Manage repodiagram configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: RepoDiagramConfig | None = None


def _get_config() -> RepoDiagramConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to repodiagram.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config.log_level, _config.log_format)


def _parse_ref(repo: str, ref: str) -> RepoRef:
    try:
        return RepoRef.parse(repo, ref=ref)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def tree(
    repo: str = typer.Argument(..., help="owner/repo or GitHub URL"),
    ref: str = typer.Option("main", "--ref", "-r", help="Branch, tag, or commit SHA"),
) -> None:
    """Print the directory tree of a repository snapshot."""
    cfg = _get_config()
    repo_ref = _parse_ref(repo, ref)
    assembler = SnapshotAssembler(cfg.snapshot)

    try:
        rendered = asyncio.run(assembler.directory_tree(repo_ref))
    except RepoDiagramError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    # Plain echo: file names may contain rich markup characters.
    typer.echo(repo_ref.full_name)
    if rendered:
        typer.echo(rendered)


@app.command()
def concat(
    repo: str = typer.Argument(..., help="owner/repo or GitHub URL"),
    ref: str = typer.Option("main", "--ref", "-r", help="Branch, tag, or commit SHA"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write corpus to file"),
    max_file_size: Annotated[
        int | None, typer.Option("--max-file-size", min=0, help="Skip files larger than N bytes")
    ] = None,
    include_binary: Annotated[
        bool, typer.Option("--include-binary", help="Emit binary files with an empty body")
    ] = False,
) -> None:
    """Concatenate a repository snapshot into a single text corpus."""
    cfg = _get_config()
    repo_ref = _parse_ref(repo, ref)
    assembler = SnapshotAssembler(cfg.snapshot)

    update: dict[str, object] = {}
    if max_file_size is not None:
        update["max_file_size_bytes"] = max_file_size
    if include_binary:
        update["treat_binary_as_ignored"] = False
    options = assembler.default_concat_options().model_copy(update=update)

    try:
        corpus = asyncio.run(assembler.concatenate(repo_ref, options))
    except RepoDiagramError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if output:
        Path(output).write_text(corpus, encoding="utf-8")
        rprint(f"[green]Written to[/green] {output} ({len(corpus)} chars)")
    else:
        typer.echo(corpus, nl=False)


def _preview(result: SynthesisResult, title: str) -> None:
    lexer = "dot" if result.language == DOT.name else "text"
    rprint(Panel(
        Syntax(result.diagram, lexer, theme="monokai"),
        title=title,
        border_style="blue",
    ))


async def _run_diagram(
    synthesizer: DiagramSynthesizer,
    repo_ref: RepoRef,
    *,
    head: str | None,
    snapshot_cfg: SnapshotConfig,
    writer: DiagramWriter | None,
) -> None:
    """Generate a diagram and optionally enhance it, all on one event loop.

    The base diagram is saved (or previewed) before the diff is fetched, so
    a failing diff step never discards it. *writer* is None for a dry run.
    """
    try:
        result = await synthesizer.generate(repo_ref)
    except RepoDiagramError as e:
        rprint(f"[red]Diagram failed:[/red] {e}")
        raise typer.Exit(1)

    lines = [
        f"[dim]Language:[/dim]     {synthesizer.language.display_name}",
        f"[dim]Attempts:[/dim]     {result.attempts}",
    ]
    if writer is None:
        _preview(result, f"{repo_ref} ({result.attempts} attempt(s))")
    else:
        dest = writer.write(repo_ref, result)
        rprint(f"[green]Written to[/green] {dest}")
        lines.insert(0, f"[dim]File:[/dim]         {dest}")

    if head:
        rprint(f"[bold]Fetching diff[/bold] {repo_ref.ref}..{head}...")
        try:
            diff = await fetch_diff(repo_ref, head, snapshot_cfg)
            if diff.strip():
                enhanced = await synthesizer.enhance_with_diff(result.conversation, diff)
            else:
                enhanced = None
                rprint("[yellow]No changes detected. Skipping enhanced diagram.[/yellow]")
        except RepoDiagramError as e:
            rprint(f"[red]Diff enhancement failed:[/red] {e}")
            raise typer.Exit(1)

        if enhanced is not None:
            if writer is None:
                _preview(enhanced, f"{repo_ref.full_name} {repo_ref.ref}..{head}")
            else:
                diff_dest = writer.write(repo_ref, enhanced, diff_head=head)
                lines.append(f"[dim]Diff file:[/dim]    {diff_dest}")

    if writer is not None:
        rprint(Panel("\n".join(lines), title="Diagram Complete", border_style="green"))


@app.command()
def diagram(
    repo: str = typer.Argument(..., help="owner/repo or GitHub URL"),
    ref: str = typer.Option("main", "--ref", "-r", help="Branch, tag, or commit SHA"),
    language: Annotated[
        str | None, typer.Option("--language", "-l", help="Diagram language: mermaid or dot")
    ] = None,
    model: Annotated[str | None, typer.Option("--model", "-m", help="Model identifier")] = None,
    max_attempts: Annotated[
        int | None, typer.Option("--max-attempts", min=1, help="Validation attempts")
    ] = None,
    head: Annotated[
        str | None, typer.Option("--head", help="Also produce a diagram enhanced with the diff to this ref")
    ] = None,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
) -> None:
    """Generate a validated architecture diagram for a repository."""
    cfg = _get_config()
    repo_ref = _parse_ref(repo, ref)

    update: dict[str, object] = {}
    if language:
        update["language"] = language.lower()
    if max_attempts is not None:
        update["max_attempts"] = max_attempts
    try:
        syn_cfg = SynthesisConfig.model_validate({**cfg.synthesis.model_dump(), **update})
        lang = get_language(syn_cfg.language)
        llm = create_llm_provider(cfg.llm, model=model)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint(
        f"[bold]Diagramming[/bold] {repo_ref} as {lang.display_name} "
        f"(llm: {cfg.llm.provider}, model: {llm.config.model})..."
    )

    assembler = SnapshotAssembler(cfg.snapshot)
    synthesizer = DiagramSynthesizer(
        llm, syn_cfg, language=lang, fetcher=assembler.concatenate
    )

    writer: DiagramWriter | None = None
    if not dry_run:
        out_cfg = cfg.output
        if output:
            out_cfg = out_cfg.model_copy(update={"base_dir": output})
        writer = DiagramWriter(out_cfg, remote_base_url=cfg.snapshot.remote_base_url)

    # SDK clients pool connections per event loop: keep every call on one loop.
    asyncio.run(_run_diagram(
        synthesizer, repo_ref, head=head, snapshot_cfg=cfg.snapshot, writer=writer
    ))


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default repodiagram.yaml in current directory."""
    target = Path("repodiagram.yaml")
    if target.exists() and not force:
        rprint("[yellow]repodiagram.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
