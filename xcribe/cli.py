import argparse
import sys
import logging
from pathlib import Path
from typing import Optional, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .core.config import load_config
from .core.console import console
from .core.errors import XcribeError
from .core.factory import ProviderFactory
from .core.labels import STRUCTURE_LABELS, DETAIL_LABELS, STYLE_LABELS, RENDERING_LABELS, label_for
from .core.manager import SessionController, SessionState
from .core.models import AppConfig, StructureType, DetailLevel, OutputStyle, RenderingMode, TranscriptionProfile
from .core.profiles import ProfileStore, JsonFileBackend
from .utils import setup_logging, default_log_dir

logger = logging.getLogger("Xcribe")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xcribe", description="Xcribe - configurable AI transcription.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument("-c", "--config", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("setup", help="Run interactive setup wizard")
    subparsers.add_parser("options", help="List the available settings values")

    transcribe_parser = subparsers.add_parser("transcribe", help="Transcribe an audio file")
    transcribe_parser.add_argument("file", help="Input audio file")
    transcribe_parser.add_argument("-p", "--profile", help="Profile id or name to apply")
    transcribe_parser.add_argument("--structure", choices=[s.value for s in StructureType])
    transcribe_parser.add_argument("--detail", choices=[d.value for d in DetailLevel])
    transcribe_parser.add_argument("--style", choices=[s.value for s in OutputStyle])
    transcribe_parser.add_argument("--language", help="Target language (free text)")
    transcribe_parser.add_argument("--mode", choices=[m.value for m in RenderingMode], help="Rendering mode: fast or quality")
    transcribe_parser.add_argument("-o", "--output-dir", help="Directory for the exported .txt file")
    transcribe_parser.add_argument("--no-export", action="store_true", help="Only print the transcript")

    profiles_parser = subparsers.add_parser("profiles", help="Manage profiles (list, show, add, edit, delete)")
    profiles_subparsers = profiles_parser.add_subparsers(dest="profiles_command", help="Profile commands")
    profiles_subparsers.add_parser("list", help="List profiles")
    show_parser = profiles_subparsers.add_parser("show", help="Show a profile")
    show_parser.add_argument("profile", help="Profile id or name")
    profiles_subparsers.add_parser("add", help="Create a profile interactively")
    edit_parser = profiles_subparsers.add_parser("edit", help="Edit a profile interactively")
    edit_parser.add_argument("profile", help="Profile id or name")
    delete_parser = profiles_subparsers.add_parser("delete", help="Delete a profile")
    delete_parser.add_argument("profile", help="Profile id or name")

    return parser


def open_profile_store(config: AppConfig) -> ProfileStore:
    return ProfileStore(JsonFileBackend(config.paths.profiles))


def create_session(config: AppConfig, store: Optional[ProfileStore] = None, debug: bool = False) -> SessionController:
    provider_config = config.providers.get(config.provider)
    if debug and provider_config is not None and hasattr(provider_config, "log_api_calls"):
        provider_config = provider_config.model_copy(update={"log_api_calls": True})
    log_dir = Path(config.paths.logs).expanduser() if config.paths.logs else default_log_dir()
    provider = ProviderFactory.create(config.provider, provider_config, log_dir=log_dir)
    return SessionController(provider, store, settings=config.default_settings())


def run_transcribe(args: argparse.Namespace, config: AppConfig) -> int:
    # Profile storage is only touched when a profile was asked for
    store = open_profile_store(config) if args.profile else None
    session = create_session(config, store, debug=args.verbose or config.debug)

    if store is not None:
        profile = _require_profile(store, args.profile)
        session.apply_profile(profile.id)

    overrides = {
        "structure": args.structure,
        "detail_level": args.detail,
        "output_style": args.style,
        "language": args.language,
        "rendering_mode": args.mode,
    }
    session.update_settings(**{k: v for k, v in overrides.items() if v is not None})

    _print_settings(session)
    session.confirm_settings()
    session.select_audio(args.file)

    with console.status(f"Transcribing {Path(args.file).name}..."):
        state = session.start_transcription()

    if state is not SessionState.DONE:
        console.error_panel(session.error, title="Transcription failed")
        return 1

    result = session.result
    console.print(Panel(
        Text(result.text),
        title=f"[bold]Transcript[/bold] ({result.model})",
        subtitle=result.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        border_style="green",
    ))

    if not args.no_export:
        output_path = session.export_result(args.output_dir or config.paths.exports)
        console.success(f"Saved to {output_path}")

    session.reset()
    return 0


def run_profiles(args: argparse.Namespace, config: AppConfig) -> int:
    store = open_profile_store(config)

    if args.profiles_command == "list":
        table = Table(title="Profiles")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold cyan")
        table.add_column("Structure")
        table.add_column("Detail")
        table.add_column("Style")
        for p in store.list():
            table.add_row(p.id, Text(p.name), label_for(p.structure), label_for(p.detail_level), label_for(p.output_style))
        console.print(table)

    elif args.profiles_command == "show":
        _print_profile(_require_profile(store, args.profile))

    elif args.profiles_command in ("add", "edit"):
        from .wizard import ProfileEditor
        existing = _require_profile(store, args.profile) if args.profiles_command == "edit" else None
        saved = ProfileEditor(store).edit(existing)
        if saved:
            console.success(f"Profile '{saved.name}' saved ({saved.id})")

    elif args.profiles_command == "delete":
        profile = store.find(args.profile)
        if profile and store.delete(profile.id):
            console.success(f"Deleted profile '{profile.name}'")
        else:
            console.warning(f"No profile named '{args.profile}'; nothing deleted.")

    else:
        console.print("Use one of: list, show, add, edit, delete")
        return 1

    return 0


def print_options() -> None:
    for title, labels in (
        ("Structure (--structure)", STRUCTURE_LABELS),
        ("Detail (--detail)", DETAIL_LABELS),
        ("Style (--style)", STYLE_LABELS),
        ("Rendering (--mode)", RENDERING_LABELS),
    ):
        console.key_value_panel([(member.value, label) for member, label in labels.items()], title=title)


def _require_profile(store: ProfileStore, id_or_name: str) -> TranscriptionProfile:
    profile = store.find(id_or_name)
    if profile is None:
        raise XcribeError(f"Profile '{id_or_name}' not found. Run 'xcribe profiles list'.")
    return profile


def _print_settings(session: SessionController) -> None:
    s = session.settings
    rows = [
        ("Structure", label_for(s.structure)),
        ("Detail", label_for(s.detail_level)),
        ("Style", label_for(s.output_style)),
        ("Language", s.language),
        ("Rendering", label_for(s.rendering_mode)),
    ]
    rows.extend((f"  ## {sec.title}", sec.instruction) for sec in s.sections)
    console.key_value_panel(rows, title="Settings")


def _print_profile(profile: TranscriptionProfile) -> None:
    rows = [
        ("ID", profile.id),
        ("Structure", label_for(profile.structure)),
        ("Detail", label_for(profile.detail_level)),
        ("Style", label_for(profile.output_style)),
    ]
    rows.extend((f"  ## {sec.title}", sec.instruction) for sec in profile.sections)
    console.key_value_panel(rows, title=profile.name)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "setup":
            from .wizard import run_wizard
            run_wizard()
            return 0

        if args.command == "options":
            print_options()
            return 0

        config = load_config(args.config)

        debug_mode = args.verbose or config.debug
        console.configure(output_mode=config.output_mode, debug=debug_mode)
        setup_logging(log_dir=config.paths.logs, debug=debug_mode, output_mode=config.output_mode)

        if args.command == "transcribe":
            return run_transcribe(args, config)
        if args.command == "profiles":
            return run_profiles(args, config)

    except XcribeError as e:
        console.error_panel(e.message)
        if e.detail:
            logger.debug(e.detail)
        return 1
    except KeyboardInterrupt:
        console.warning("Interrupted.")
        return 130

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
