import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text
import questionary

from .constants import DEFAULT_LANGUAGE
from .core.config import USER_CONFIG_DIR, DEFAULT_CONFIG_FILENAME
from .core.console import console as console_manager
from .core.labels import STRUCTURE_LABELS, DETAIL_LABELS, STYLE_LABELS, RENDERING_LABELS, label_for
from .core.models import (
    TranscriptionProfile, StructureSection, StructureType, RenderingMode
)
from .core.profiles import ProfileStore

console = console_manager.console

LOCAL_CONFIG = Path(DEFAULT_CONFIG_FILENAME)
LOCAL_ENV = Path(".env")
USER_CONFIG_FILE = USER_CONFIG_DIR / DEFAULT_CONFIG_FILENAME
USER_ENV_FILE = USER_CONFIG_DIR / ".env"

API_KEY_ENV_VAR = "GEMINI_API_KEY"


class EnvManager:
    """Manages reading and writing to the .env file."""

    def __init__(self, env_path: Path):
        self.env_path = env_path
        self.values: Dict[str, str] = {}
        self._load()

    def _load(self):
        if not self.env_path.exists():
            return

        with open(self.env_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    key, val = line.split("=", 1)
                    self.values[key.strip()] = val.strip().strip("'").strip('"')

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str):
        self.values[key] = value
        self._save_key(key, value)

    def _save_key(self, key: str, value: str):
        """Updates or appends a key, keeping the rest of the file as it is."""
        self.env_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.env_path.exists():
            self.env_path.touch()

        lines = self.env_path.read_text().splitlines()
        new_lines = []
        found = False

        for line in lines:
            if line.strip().startswith(f"{key}="):
                new_lines.append(f"{key}={value}")
                found = True
            else:
                new_lines.append(line)

        if not found:
            if new_lines and new_lines[-1] != "":
                new_lines.append("")
            new_lines.append(f"{key}={value}")

        self.env_path.write_text("\n".join(new_lines) + "\n")


def _enum_choices(labels: Dict[Any, str]) -> List[questionary.Choice]:
    return [questionary.Choice(label, value=member) for member, label in labels.items()]


class SetupWizard:
    def __init__(self):
        self.config_path, self.env_path = self._determine_paths()
        self.env_manager = EnvManager(self.env_path)
        self.config = self._load_config()

    def _determine_paths(self) -> Tuple[Path, Path]:
        # A config in the working directory means project mode
        if LOCAL_CONFIG.exists():
            return LOCAL_CONFIG, LOCAL_ENV
        return USER_CONFIG_FILE, USER_ENV_FILE

    def _load_config(self) -> Dict[str, Any]:
        if self.config_path.exists():
            with open(self.config_path, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def run(self):
        console.print(Panel("[bold cyan]Xcribe[/bold cyan]", title="[bold white]Setup Wizard[/bold white]",
                            subtitle=f"Config: {self.config_path}", border_style="blue"))

        while True:
            self._display_dashboard()

            choice = questionary.select(
                "What would you like to configure?",
                choices=[
                    questionary.Choice("1. API Key", value="keys"),
                    questionary.Choice("2. Session Defaults", value="session"),
                    questionary.Choice("3. Save & Exit", value="save"),
                    questionary.Choice("4. Exit without Saving", value="exit"),
                ]
            ).ask()

            if choice == "keys":
                self._setup_api_key()
            elif choice == "session":
                self._setup_session()
            elif choice == "save":
                self._save_config()
                console.print(Panel(f"[bold green]Configuration Saved to {self.config_path}![/bold green]", border_style="green"))
                break
            elif choice == "exit":
                console.print("[yellow]Exiting without saving...[/yellow]")
                break
            elif choice is None:  # Ctrl+C
                break

    def _display_dashboard(self):
        session = self.config.get("session", {})
        key = self.env_manager.get(API_KEY_ENV_VAR)
        mode = RenderingMode(session.get("rendering_mode", RenderingMode.FAST.value))
        console_manager.key_value_panel(
            [
                ("API Key", Text.from_markup("[green]OK[/green]" if key else "[red]Missing[/red]")),
                ("Language", session.get("language", DEFAULT_LANGUAGE)),
                ("Rendering", label_for(mode)),
            ],
            title="Current Configuration",
        )

    def _setup_api_key(self):
        current_val = self.env_manager.get(API_KEY_ENV_VAR)
        display_val = f"{current_val[:4]}...{current_val[-4:]}" if current_val and len(current_val) > 8 else (current_val or "Not Set")

        if questionary.confirm(f"Configure Gemini API Key? (Current: {display_val})", default=not bool(current_val)).ask():
            new_val = questionary.password("Enter Gemini API Key:", default=current_val or "").ask()
            if new_val:
                self.env_manager.set(API_KEY_ENV_VAR, new_val)
                console.print(f"[green]Updated {API_KEY_ENV_VAR}[/green]")

    def _setup_session(self):
        session = self.config.setdefault("session", {})
        language = questionary.text("Default target language:", default=session.get("language", DEFAULT_LANGUAGE)).ask()
        mode = questionary.select("Default rendering:", choices=_enum_choices(RENDERING_LABELS)).ask()
        if language is not None:
            session["language"] = language
        if mode is not None:
            session["rendering_mode"] = mode.value

    def _save_config(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(self.config, f, sort_keys=False)


class ProfileEditor:
    """Interactive create/edit of a profile, including its custom sections."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def edit(self, profile: Optional[TranscriptionProfile] = None) -> Optional[TranscriptionProfile]:
        """Returns the saved profile, or None when the user cancelled."""
        profile = profile or TranscriptionProfile(name="New profile")

        name = questionary.text("Profile name:", default=profile.name).ask()
        if not name or not name.strip():
            console_manager.warning("A profile needs a name; nothing saved.")
            return None

        structure = questionary.select(
            "Structure:", choices=_enum_choices(STRUCTURE_LABELS), default=profile.structure
        ).ask()
        detail = questionary.select(
            "Level of detail:", choices=_enum_choices(DETAIL_LABELS), default=profile.detail_level
        ).ask()
        style = questionary.select(
            "Output style:", choices=_enum_choices(STYLE_LABELS), default=profile.output_style
        ).ask()
        if structure is None or detail is None or style is None:
            return None

        sections = list(profile.sections)
        if structure is StructureType.CUSTOM:
            sections = self._edit_sections(sections)

        updated = profile.model_copy(update={
            "name": name.strip(),
            "structure": structure,
            "detail_level": detail,
            "output_style": style,
            "sections": sections if structure is StructureType.CUSTOM else [],
        })
        return self.store.save(updated)

    def _edit_sections(self, sections: List[StructureSection]) -> List[StructureSection]:
        while True:
            for index, section in enumerate(sections, start=1):
                console.print(f"  [cyan]{index}.[/cyan] [bold]{escape(section.title or '(untitled)')}[/bold] - {escape(section.instruction)}")
            if not sections:
                console.print("  [dim]No sections yet.[/dim]")

            action = questionary.select(
                "Sections:",
                choices=[
                    questionary.Choice("Add section", value="add"),
                    questionary.Choice("Remove section", value="remove", disabled=None if sections else "no sections"),
                    questionary.Choice("Done", value="done"),
                ]
            ).ask()

            if action == "add":
                title = questionary.text("Section title:").ask()
                instruction = questionary.text("Instruction for this section:").ask()
                if title is not None and instruction is not None:
                    sections.append(StructureSection(title=title, instruction=instruction))
            elif action == "remove":
                victim = questionary.select(
                    "Remove which section?",
                    choices=[questionary.Choice(s.title or "(untitled)", value=s.id) for s in sections]
                ).ask()
                sections = [s for s in sections if s.id != victim]
            else:
                return sections


def run_wizard():
    wizard = SetupWizard()
    wizard.run()
