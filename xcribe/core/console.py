from contextlib import contextmanager
from typing import ContextManager, Iterable, Tuple, Union

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box
from rich.traceback import install as install_rich_traceback
from rich.theme import Theme

xcribe_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})


class ConsoleManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConsoleManager, cls).__new__(cls)
            cls._instance.initialized = False
        return cls._instance

    def __init__(self):
        if self.initialized:
            return

        self.console = Console(theme=xcribe_theme)
        self.output_mode = "standard"
        self.initialized = True
        install_rich_traceback(console=self.console, show_locals=False)

    def configure(self, output_mode: str = "standard", debug: bool = False):
        """
        output_mode: 'standard', 'verbose', 'silent'
        """
        self.output_mode = output_mode.lower()
        if debug:
            self.output_mode = "verbose"

    def print(self, *args, **kwargs):
        if self.output_mode != "silent":
            self.console.print(*args, **kwargs)

    def success(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"✅ {message}", style="success")

    def warning(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"⚠️ {message}", style="warning")

    def error_panel(self, message: str, title: str = "Error"):
        # Errors are shown even in silent mode
        self.console.print(Panel(Text(message), title=title, border_style="red", expand=False))

    def key_value_panel(self, rows: Iterable[Tuple[str, Union[str, RenderableType]]], title: str):
        """Two-column panel. Plain string values are shown literally, never as markup."""
        table = Table(box=box.SIMPLE, show_header=False, expand=True)
        table.add_column("Setting", style="bold cyan")
        table.add_column("Value", style="white")
        for key, value in rows:
            table.add_row(Text(key), Text(value) if isinstance(value, str) else value)
        self.print(Panel(table, title=f"[bold]{escape(title)}[/bold]", border_style="green"))

    @contextmanager
    def status(self, message: str) -> ContextManager:
        """
        Spinner in standard mode, start/end log lines in verbose mode, nothing when silent.
        """
        if self.output_mode == "silent":
            yield
            return

        if self.output_mode == "verbose":
            self.console.log(f"Started: {message}")
            try:
                yield
            finally:
                self.console.log(f"Finished: {message}")
            return

        with self.console.status(f"[bold cyan]{escape(message)}", spinner="dots"):
            yield


console = ConsoleManager()
