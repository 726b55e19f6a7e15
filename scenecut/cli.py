"""
scenecut.cli - Typer CLI entry point.

Provides all subcommands for building a storyboard, rendering scene images
and exporting the timeline.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from scenecut import __version__
from scenecut.config import CONFIG_FILENAME, ScenecutConfig
from scenecut.exceptions import ConfigError, ScenecutError
from scenecut.logging import configure_logging
from scenecut.project import Project
from scenecut.sequence import Asset, AssetLibrary, Scene, Sequence
from scenecut.utils import format_duration, truncate

app = typer.Typer(
    name="scenecut",
    help="Storyboard sequencing and NLE export toolkit.\n\n"
    "Builds an ordered sequence of scenes, renders scene images with visual "
    "continuity, and exports EDL, FCPXML, SRT and a DaVinci Resolve import pack.",
    add_completion=False,
)
asset_app = typer.Typer(help="Manage character, location and item references.")
app.add_typer(asset_app, name="asset")

console = Console()

PROMPTS_DIR = Path(__file__).parent / "prompts"
EXPORT_FORMATS = ("edl", "fcpxml", "srt", "resolve", "all")


def find_project_dir() -> Path | None:
    """Find the project directory by looking for scenecut.yaml."""
    current = Path.cwd()
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return None


def open_project() -> tuple[Project, ScenecutConfig, Sequence, AssetLibrary]:
    project_dir = find_project_dir()
    if not project_dir:
        console.print("[red]Error: Not in a Scenecut project directory[/red]")
        console.print("[dim]Run 'scenecut init' first or cd into a project directory[/dim]")
        raise typer.Exit(1)

    project = Project(project_dir)
    try:
        config = project.load_config()
        sequence, library = project.load_storyboard(config)
    except (FileNotFoundError, ScenecutError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    return project, config, sequence, library


def resolve_scene(sequence: Sequence, ref: str) -> Scene:
    """Find a scene by 1-based position or by id."""
    if ref.isdigit():
        position = int(ref)
        if 1 <= position <= len(sequence):
            return sequence.scenes[position - 1]
    else:
        scene = sequence.get(ref)
        if scene is not None:
            return scene
    console.print(f"[red]Error: No scene '{ref}'[/red]")
    console.print("[dim]Use a position from 'scenecut list' or a scene id[/dim]")
    raise typer.Exit(1)


def resolve_asset(library: AssetLibrary, ref: str) -> Asset:
    asset = library.find(ref)
    if asset is None:
        console.print(f"[red]Error: No asset '{ref}'[/red]")
        raise typer.Exit(1)
    return asset


def fail(e: Exception) -> NoReturn:
    console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"scenecut {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Scenecut - storyboard sequencing and NLE export toolkit."""
    configure_logging(verbose)


# Project


@app.command("init")
def init_project(
    name: str = typer.Argument(..., help="Project name"),
    preset: str = typer.Option(
        "cinema",
        "--preset",
        "-p",
        help="Format preset: cinema, uhd, vertical, square, or dci",
    ),
    path: str = typer.Option(".", "--path", "-d", help="Directory to create project in"),
) -> None:
    """Create a new Scenecut project.

    Creates a project directory with configuration, an empty storyboard,
    media storage and editable prompt templates.
    """
    project_path = Path(path) / name

    if project_path.exists():
        console.print(f"[red]Error: Directory '{project_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        project = Project(project_path)
        project.create(preset=preset)
    except ConfigError as e:
        shutil.rmtree(project_path, ignore_errors=True)
        fail(e)

    if PROMPTS_DIR.exists():
        for prompt_file in PROMPTS_DIR.glob("*.txt"):
            shutil.copy(prompt_file, project.prompts_dir / prompt_file.name)
        console.print(f"[dim]  Copied prompt templates to {project.prompts_dir}[/dim]")

    console.print(f"[green]✓[/green] Created project '{name}' with preset '{preset}'")
    console.print(f"[dim]  {project_path}[/dim]")
    console.print("\nNext steps:")
    console.print(f"  cd {name}")
    console.print('  scenecut add --description "..."')


# Sequence editing


@app.command("add")
def add_scene(
    title: str | None = typer.Option(None, "--title", "-t", help="Scene title"),
    description: str = typer.Option("", "--description", "-d", help="Visual description"),
    duration: float | None = typer.Option(None, "--duration", "-s", help="Duration in seconds"),
    dialogue: str = typer.Option("", "--dialogue", help="Spoken line"),
    shot_type: str | None = typer.Option(None, "--shot", help="Shot type, e.g. 'close-up'"),
    quality: str | None = typer.Option(None, "--quality", "-q", help="standard or high"),
    style: str = typer.Option("", "--style", help="Style prompt appended when rendering"),
    image: Path | None = typer.Option(None, "--image", "-i", help="Image file to use"),
) -> None:
    """Append a scene to the sequence and select it."""
    project, _config, sequence, library = open_project()

    try:
        scene = sequence.add_scene(
            title=title,
            description=description,
            duration=duration,
            dialogue=dialogue,
            shot_type=shot_type,
            quality=quality,
            style_prompt=style,
        )
        if image is not None:
            sequence.set_image(scene.id, project.media_store.import_file(image))
    except (ScenecutError, ValueError) as e:
        fail(e)

    project.save_storyboard(sequence, library)
    console.print(
        f"[green]✓[/green] Added scene {len(sequence)}: {scene.title} "
        f"({format_duration(scene.duration)})"
    )
    console.print(f"[dim]  id {scene.id}[/dim]")


@app.command("edit")
def edit_scene(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
    title: str | None = typer.Option(None, "--title", "-t"),
    description: str | None = typer.Option(None, "--description", "-d"),
    duration: float | None = typer.Option(None, "--duration", "-s"),
    dialogue: str | None = typer.Option(None, "--dialogue"),
    speech_prompt: str | None = typer.Option(None, "--speech", help="Voice direction"),
    music_mood: str | None = typer.Option(None, "--music", help="Music mood note"),
    shot_type: str | None = typer.Option(None, "--shot"),
    quality: str | None = typer.Option(None, "--quality", "-q"),
    style: str | None = typer.Option(None, "--style"),
    prompt: str | None = typer.Option(
        None, "--prompt", help="Render prompt overriding the description (empty clears)"
    ),
    image: Path | None = typer.Option(None, "--image", "-i", help="Replace the current image"),
    clear_image: bool = typer.Option(False, "--clear-image", help="Drop the current image"),
) -> None:
    """Edit scene fields."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    fields = {
        "title": title,
        "description": description,
        "duration": duration,
        "dialogue": dialogue,
        "speech_prompt": speech_prompt,
        "music_mood": music_mood,
        "shot_type": shot_type,
        "quality": quality,
        "style_prompt": style,
        "enhanced_prompt": prompt,
    }
    fields = {k: v for k, v in fields.items() if v is not None}

    try:
        if fields:
            scene = sequence.update_scene(scene.id, **fields)
        if clear_image:
            sequence.clear_image(scene.id)
        if image is not None:
            sequence.set_image(scene.id, project.media_store.import_file(image))
    except ScenecutError as e:
        fail(e)

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] Updated {scene.title}")


@app.command("remove")
def remove_scene(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
) -> None:
    """Delete a scene from the sequence."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    sequence.remove(scene.id)
    project.save_storyboard(sequence, library)

    console.print(f"[green]✓[/green] Removed {scene.title}")
    active = sequence.active_scene
    if active:
        console.print(f"[dim]  Selected: {active.title}[/dim]")


@app.command("move")
def move_scene(
    from_pos: int = typer.Argument(..., help="Current position (1-based)"),
    to_pos: int = typer.Argument(..., help="New position (1-based)"),
) -> None:
    """Move a scene to a new position in the edit order."""
    project, _config, sequence, library = open_project()

    if not sequence.reorder(from_pos - 1, to_pos - 1):
        console.print(f"[yellow]Nothing to move ({from_pos} -> {to_pos} of {len(sequence)})[/yellow]")
        return

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] Moved scene {from_pos} to position {to_pos}")


@app.command("resize")
def resize_scene(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
    seconds: float = typer.Argument(..., help="New duration in seconds (minimum 0.5)"),
) -> None:
    """Change a scene's duration."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    try:
        duration = sequence.resize_duration(scene.id, seconds)
    except ScenecutError as e:
        fail(e)

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] {scene.title}: {format_duration(duration)}")
    if duration != seconds:
        console.print("[dim]  Clamped to the 0.5s minimum[/dim]")


@app.command("select")
def select_scene(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
) -> None:
    """Make a scene the active one."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    sequence.select(scene.id)
    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] Selected {scene.title}")


@app.command("list")
def list_scenes() -> None:
    """Show the sequence."""
    project, config, sequence, library = open_project()
    settings = sequence.settings

    table = Table(title=f"{config.project_name} ({settings.width}x{settings.height} @ {settings.fps}fps)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Duration", style="green", justify="right")
    table.add_column("Image")
    table.add_column("Assets", style="magenta")
    table.add_column("Description")

    for i, scene in enumerate(sequence.scenes, 1):
        marker = "▶ " if scene.id == sequence.active_scene_id else ""
        if scene.image:
            image = f"[green]✓[/green] {len(scene.image_history)}"
        else:
            image = "[dim]-[/dim]"
        assets = ", ".join(a.name for a in library.resolve(scene.assigned_asset_ids))
        table.add_row(
            str(i),
            f"{marker}{scene.title}",
            format_duration(scene.duration),
            image,
            assets,
            truncate(scene.description),
        )

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(sequence)} scene(s), {format_duration(sequence.total_duration())}")


@app.command("settings")
def timeline_settings(
    fps: int | None = typer.Option(None, "--fps", help="Frame rate"),
    width: int | None = typer.Option(None, "--width", "-w", help="Frame width"),
    height: int | None = typer.Option(None, "--height", "-h", help="Frame height"),
) -> None:
    """Show or change timeline settings.

    A size change cascades the derived aspect ratio to every scene and asset.
    """
    project, _config, sequence, library = open_project()

    if fps is not None or width is not None or height is not None:
        try:
            sequence.update_settings(fps=fps, width=width, height=height, library=library)
        except ScenecutError as e:
            fail(e)
        project.save_storyboard(sequence, library)
        console.print("[green]✓[/green] Updated timeline settings")

    settings = sequence.settings
    console.print(f"  FPS:          {settings.fps}")
    console.print(f"  Size:         {settings.width}x{settings.height}")
    console.print(f"  Aspect ratio: {settings.aspect_ratio}")
    console.print(f"  Orientation:  {'vertical' if settings.is_vertical else 'horizontal'}")


# Assets


@asset_app.command("add")
def asset_add(
    name: str = typer.Argument(..., help="Asset name"),
    asset_type: str = typer.Option("character", "--type", "-t", help="character, location, or item"),
    description: str = typer.Option("", "--description", "-d"),
    trigger: str = typer.Option("", "--trigger", help="Trigger word used in prompts"),
    image: Path | None = typer.Option(None, "--image", "-i", help="Reference image file"),
) -> None:
    """Add an asset to the library."""
    project, _config, sequence, library = open_project()

    try:
        ref = project.media_store.import_file(image) if image is not None else None
        asset = library.add(
            Asset(
                type=asset_type,
                name=name,
                description=description,
                trigger_word=trigger,
                image=ref,
                aspect_ratio=sequence.settings.aspect_ratio,
            )
        )
    except (ScenecutError, ValueError) as e:
        fail(e)

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] Added {asset.type} '{asset.name}'")


@asset_app.command("list")
def asset_list() -> None:
    """Show the asset library."""
    _project, _config, _sequence, library = open_project()

    table = Table(title="Assets")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Trigger", style="magenta")
    table.add_column("Image")
    table.add_column("Description")
    for asset in library.assets:
        table.add_row(
            asset.name,
            asset.type,
            asset.trigger_word,
            "[green]✓[/green]" if asset.image else "[dim]-[/dim]",
            truncate(asset.description),
        )
    console.print(table)


@asset_app.command("remove")
def asset_remove(
    asset_ref: str = typer.Argument(..., help="Asset name or id"),
) -> None:
    """Remove an asset. Scenes keep the dangling id, which is ignored."""
    project, _config, sequence, library = open_project()
    asset = resolve_asset(library, asset_ref)

    library.remove(asset.id)
    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] Removed asset '{asset.name}'")


@app.command("assign")
def assign_asset(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
    asset_ref: str = typer.Argument(..., help="Asset name or id"),
    remove: bool = typer.Option(False, "--remove", "-r", help="Unassign instead"),
) -> None:
    """Attach an asset to a scene as a render reference."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)
    asset = resolve_asset(library, asset_ref)

    if remove:
        changed = sequence.unassign_asset(scene.id, asset.id)
        verb = "Unassigned"
    else:
        changed = sequence.assign_asset(scene.id, asset.id)
        verb = "Assigned"

    if not changed:
        console.print("[yellow]No change[/yellow]")
        return

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] {verb} '{asset.name}' on {scene.title}")


# Images


@app.command("render")
def render_scenes(
    scene_refs: list[str] | None = typer.Argument(None, help="Scene positions or ids"),
    all_scenes: bool = typer.Option(False, "--all", "-a", help="Render every scene"),
    missing: bool = typer.Option(False, "--missing", "-m", help="Render scenes without an image"),
) -> None:
    """Generate scene images.

    Each scene uses the previous scene's image as continuity reference and
    its assigned assets as subject references. Adjacent scenes in one batch
    render in edit order so each picks up its predecessor's new image.
    Defaults to the active scene.
    """
    project, config, sequence, library = open_project()

    if all_scenes:
        targets = list(sequence.scenes)
    elif missing:
        targets = [s for s in sequence.scenes if s.image is None]
    elif scene_refs:
        targets = [resolve_scene(sequence, ref) for ref in scene_refs]
    elif sequence.active_scene:
        targets = [sequence.active_scene]
    else:
        console.print("[yellow]No scenes to render[/yellow]")
        return

    from scenecut.generate.client import create_image_client_from_config
    from scenecut.generate.render import render_many

    generator = create_image_client_from_config(config)
    ids = [s.id for s in targets]

    console.print(f"[bold]Rendering {len(ids)} scene(s)...[/bold]")
    outcomes = asyncio.run(render_many(sequence, ids, generator, library, project.media_store, config))

    project.save_storyboard(sequence, library)

    failed = 0
    for outcome in outcomes:
        scene = sequence.get(outcome.scene_id)
        label = scene.title if scene else outcome.scene_id
        if outcome.ok:
            console.print(f"  [green]✓[/green] {label}")
        elif outcome.status == "discarded":
            console.print(f"  [dim]- {label}: scene removed, image discarded[/dim]")
        else:
            failed += 1
            console.print(f"  [red]✗[/red] {label}: {outcome.message}")

    if failed:
        raise typer.Exit(1)


@app.command("history")
def image_history(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
    prev: bool = typer.Option(False, "--prev", "-p", help="Step back to the previous image"),
    next_: bool = typer.Option(False, "--next", "-n", help="Step forward to the next image"),
) -> None:
    """Show or step through a scene's image history."""
    project, _config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    if prev or next_:
        if sequence.step_history(scene.id, -1 if prev else 1) is None:
            console.print("[yellow]Nothing to step through[/yellow]")
            return
        project.save_storyboard(sequence, library)

    if not scene.image_history:
        console.print(f"[dim]{scene.title} has no images yet[/dim]")
        return

    console.print(f"[bold]{scene.title}[/bold]")
    for i, ref in enumerate(scene.image_history, 1):
        marker = "[green]▶[/green]" if ref == scene.image else " "
        console.print(f"  {marker} {i}. {ref}")


# Prompt assistance


@app.command("enhance")
def enhance_scene(
    scene_ref: str = typer.Argument(..., help="Scene position or id"),
    voice: bool = typer.Option(False, "--voice", help="Write voice direction for the dialogue"),
) -> None:
    """Polish a scene description into a render prompt with the LLM.

    With --voice, rewrites the dialogue with stress and pacing marks instead.
    """
    project, config, sequence, library = open_project()
    scene = resolve_scene(sequence, scene_ref)

    from scenecut.exceptions import LLMError
    from scenecut.llm.client import create_client_from_config
    from scenecut.llm.enhance import enhance_description, voice_direction
    from scenecut.llm.templates import PromptTemplateManager

    client = create_client_from_config(config)
    template_manager = PromptTemplateManager(project.prompts_dir)

    try:
        if voice:
            if not scene.dialogue:
                console.print(f"[red]Error: {scene.title} has no dialogue[/red]")
                raise typer.Exit(1)
            text = voice_direction(client, scene.dialogue, scene.description, template_manager, console)
            sequence.update_scene(scene.id, speech_prompt=text)
        else:
            if not scene.description:
                console.print(f"[red]Error: {scene.title} has no description[/red]")
                raise typer.Exit(1)
            context = library.describe(scene.assigned_asset_ids)
            text = enhance_description(client, scene.description, context, template_manager, console)
            sequence.update_scene(scene.id, enhanced_prompt=text)
    except LLMError as e:
        fail(e)

    project.save_storyboard(sequence, library)
    console.print(f"[green]✓[/green] {'Voice direction' if voice else 'Prompt'} for {scene.title}:")
    console.print(f"[dim]{text}[/dim]")
    usage = client.get_token_usage()
    if usage["total_tokens"] > 0:
        console.print(f"[dim]Token usage: {usage['total_tokens']:,} total[/dim]")


# Export


@app.command("export")
def export_timeline(
    format: str = typer.Option(
        "all",
        "--format",
        "-f",
        help="Export format: edl, fcpxml, srt, resolve (import script), or all",
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output file (single format) or directory (all)"
    ),
) -> None:
    """Export the timeline for DaVinci Resolve, Premiere Pro or Final Cut Pro."""
    project, config, sequence, _library = open_project()

    format = format.lower()
    if format not in EXPORT_FORMATS:
        console.print(f"[red]Error: Unknown format '{format}'. Use one of: {', '.join(EXPORT_FORMATS)}.[/red]")
        raise typer.Exit(1)

    from scenecut.export import (
        build_manifest,
        generate_edl,
        generate_fcpxml,
        generate_resolve_script,
        generate_srt,
        timeline_name,
    )
    from scenecut.export.package import export_basename
    from scenecut.export.resolve_script import RESOLVE_SCRIPT_FILENAME
    from scenecut.export.srt import SRT_FILENAME
    from scenecut.io import write_text

    name = config.project_name
    base = export_basename(name)
    generators = {
        "edl": (f"{base}.edl", lambda m: generate_edl(m, name)),
        "fcpxml": (f"{base}.fcpxml", lambda m: generate_fcpxml(m, name)),
        "srt": (SRT_FILENAME, lambda m: generate_srt(m, config.srt_offset_seconds)),
        "resolve": (RESOLVE_SCRIPT_FILENAME, lambda m: generate_resolve_script(m, name)),
    }
    selected = list(generators) if format == "all" else [format]

    try:
        manifest = build_manifest(sequence, timeline_name(config.project_name))
        written = []
        for key in selected:
            filename, generate = generators[key]
            if output and format != "all":
                output_path = Path(output)
            else:
                output_path = (Path(output) if output else project.export_dir) / filename
            write_text(output_path, generate(manifest))
            written.append(output_path)
    except (ScenecutError, OSError) as e:
        fail(e)

    for path in written:
        console.print(f"[green]✓[/green] Exported to {path}")
    console.print(
        f"[dim]  {len(manifest.clips)} clip(s), {manifest.total_frames()} frames @ {manifest.fps}fps[/dim]"
    )
    if any(clip.is_placeholder for clip in manifest.clips):
        console.print("[dim]  Scenes without images use the placeholder still[/dim]")


@app.command("pack")
def export_pack(
    output: str | None = typer.Option(None, "--output", "-o", help="Zip file path"),
) -> None:
    """Build a zip with stills, timelines, captions and the Resolve import script."""
    project, config, sequence, _library = open_project()

    from scenecut.export.package import build_export_pack, export_basename

    output_path = Path(output) if output else project.export_dir / f"{export_basename(config.project_name)}_pack.zip"

    try:
        result = build_export_pack(sequence, project.media_store, output_path, config.project_name, config)
    except ScenecutError as e:
        fail(e)

    console.print(f"[green]✓[/green] Export pack written to {result.path}")
    console.print(f"[dim]  {len(result.files)} files, {result.placeholders} placeholder scene(s)[/dim]")
    console.print("[dim]  See README_DAVINCI.txt inside for Resolve import steps[/dim]")


if __name__ == "__main__":
    app()
