"""Item pickers: plain prompt, fzf, and a fuzzy finder with live preview.

All pickers share one capability, ``select(items, on_select)``, where the
continuation receives the chosen item or ``None`` when the user backs out.
"""

import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from prompt_toolkit.completion import CompleteEvent, FuzzyWordCompleter
from prompt_toolkit.document import Document
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from courier.utils.console import get_console
from courier.utils.errors import PickerError
from courier.utils.logging import get_logger

logger = get_logger(__name__)

OnSelect = Callable[[Optional[str]], None]
PreviewHook = Callable[[str], str]


class PickerKind(str, Enum):
    FUZZY_PREVIEW = "fuzzy-preview"
    FUZZY = "fuzzy"
    PLAIN = "plain"


# Probe order used when no picker is configured.
PICKER_PRIORITY = (PickerKind.FUZZY_PREVIEW, PickerKind.FUZZY, PickerKind.PLAIN)


def choose_picker_kind(
    available: Mapping[PickerKind, bool], preference: Optional[str] = None
) -> PickerKind:
    """Pick a picker kind from an availability snapshot.

    An explicit preference wins when that picker is available; otherwise the
    first available kind in ``PICKER_PRIORITY`` is used.
    """
    if preference:
        kind = PickerKind(preference)
        if available.get(kind):
            return kind
        logger.warning(f"Picker '{kind.value}' is not available, probing defaults")

    for kind in PICKER_PRIORITY:
        if available.get(kind):
            return kind

    raise PickerError("No picker is available in this terminal")


def fuzzy_filter(items: Sequence[str], query: str) -> List[str]:
    """Items containing the query characters in order, best matches first."""
    query = query.strip()
    if not query:
        return list(items)

    completer = FuzzyWordCompleter(list(items), WORD=True)
    document = Document(query, cursor_position=len(query))
    return [c.text for c in completer.get_completions(document, CompleteEvent())]


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


## Picker Variants


class Picker(ABC):
    kind: PickerKind

    @classmethod
    @abstractmethod
    def is_available(cls) -> bool:
        """Whether this picker can run in the current environment."""

    @abstractmethod
    def select(self, items: Sequence[str], on_select: OnSelect, title: str = "") -> None:
        """Let the user pick one of ``items`` and pass it to ``on_select``."""


class PlainPicker(Picker):
    """Indexed prompt; accepts a number from the list or the item itself."""

    kind = PickerKind.PLAIN

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    @classmethod
    def is_available(cls) -> bool:
        return True

    def select(self, items: Sequence[str], on_select: OnSelect, title: str = "") -> None:
        if title:
            self.console.print(f"[bold]{escape(title)}[/bold]")
        for index, item in enumerate(items, start=1):
            self.console.print(f"  [cyan]{index:>3}[/cyan]  {escape(item)}")

        on_select(self._ask(items))

    def _ask(self, items: Sequence[str]) -> Optional[str]:
        """Prompt until the answer names an item; blank input backs out."""
        while True:
            try:
                answer = Prompt.ask("Select", console=self.console, default="")
            except (KeyboardInterrupt, EOFError):
                return None

            if not (answer or "").strip():
                return None

            choice = self.resolve(items, answer)
            if choice is not None:
                return choice

            self.console.print(
                f"[red]Enter a number from 1 to {len(items)} or a listed name[/red]"
            )

    @staticmethod
    def resolve(items: Sequence[str], answer: str) -> Optional[str]:
        answer = (answer or "").strip()
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return items[int(answer) - 1]
        if answer in items:
            return answer
        return None


class FuzzyFinderPicker(Picker):
    """Delegates matching to the external ``fzf`` program."""

    kind = PickerKind.FUZZY
    executable = "fzf"

    @classmethod
    def is_available(cls) -> bool:
        return shutil.which(cls.executable) is not None and _is_interactive()

    def select(self, items: Sequence[str], on_select: OnSelect, title: str = "") -> None:
        argv = [self.executable, "--no-multi"]
        if title:
            argv += ["--prompt", f"{title}> "]

        try:
            result = subprocess.run(
                argv,
                input="\n".join(items),
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as e:
            raise PickerError(f"Failed to run {self.executable}: {e}") from e

        # fzf exits 1 when nothing matched and 130 when the user aborted.
        choice = result.stdout.strip() if result.returncode == 0 else ""
        on_select(choice or None)


class PreviewFinderPicker(Picker):
    """Full-screen fuzzy finder with a live preview pane.

    The preview hook is called for the highlighted candidate and its text is
    shown beside the list. Hook results are cached per candidate for the
    lifetime of one selection.
    """

    kind = PickerKind.FUZZY_PREVIEW

    def __init__(self, preview: PreviewHook):
        self.preview = preview
        self.query = ""
        self.matches: List[str] = []
        self.index = 0
        self._cache: Dict[str, str] = {}

    @classmethod
    def is_available(cls) -> bool:
        return _is_interactive()

    @property
    def highlighted(self) -> Optional[str]:
        if not self.matches:
            return None
        return self.matches[self.index]

    def refilter(self, items: Sequence[str], query: str) -> None:
        self.query = query
        self.matches = fuzzy_filter(items, query)
        self.index = 0

    def move(self, step: int) -> None:
        if self.matches:
            self.index = (self.index + step) % len(self.matches)

    def preview_text(self) -> str:
        candidate = self.highlighted
        if candidate is None:
            return ""
        if candidate not in self._cache:
            self._cache[candidate] = self.preview(candidate)
        return self._cache[candidate]

    def _list_fragments(self):
        fragments = []
        for position, item in enumerate(self.matches):
            style = "reverse" if position == self.index else ""
            fragments.append((style, f" {item}\n"))
        return fragments

    def select(self, items: Sequence[str], on_select: OnSelect, title: str = "") -> None:
        from prompt_toolkit.application import Application
        from prompt_toolkit.buffer import Buffer
        from prompt_toolkit.key_binding import KeyBindings
        from prompt_toolkit.layout import HSplit, Layout, VSplit, Window
        from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
        from prompt_toolkit.widgets import Frame

        self._cache.clear()
        self.refilter(items, "")

        search = Buffer(
            multiline=False,
            on_text_changed=lambda buf: self.refilter(items, buf.text),
        )

        kb = KeyBindings()

        @kb.add("up")
        @kb.add("c-p")
        def _(event):
            self.move(-1)

        @kb.add("down")
        @kb.add("c-n")
        def _(event):
            self.move(1)

        @kb.add("enter")
        def _(event):
            event.app.exit(result=self.highlighted)

        @kb.add("c-c")
        @kb.add("escape", eager=True)
        def _(event):
            event.app.exit(result=None)

        layout = Layout(
            HSplit(
                [
                    VSplit(
                        [
                            Frame(
                                Window(FormattedTextControl(self._list_fragments)),
                                title=title or "Select",
                            ),
                            Frame(
                                Window(
                                    FormattedTextControl(self.preview_text),
                                    wrap_lines=False,
                                ),
                                title="Preview",
                            ),
                        ]
                    ),
                    Frame(Window(BufferControl(buffer=search), height=1), title="Filter"),
                ]
            ),
            focused_element=search,
        )

        app = Application(layout=layout, key_bindings=kb, full_screen=True)
        on_select(app.run())


def picker_availability(preview_enabled: bool = True) -> Dict[PickerKind, bool]:
    """Snapshot of which picker variants can run right now."""
    return {
        PickerKind.FUZZY_PREVIEW: preview_enabled and PreviewFinderPicker.is_available(),
        PickerKind.FUZZY: FuzzyFinderPicker.is_available(),
        PickerKind.PLAIN: PlainPicker.is_available(),
    }


def create_picker(
    preference: Optional[str] = None,
    preview: Optional[PreviewHook] = None,
    console: Optional[Console] = None,
    available: Optional[Mapping[PickerKind, bool]] = None,
) -> Picker:
    """Build the picker to use for one selection."""
    if available is None:
        available = picker_availability(preview_enabled=preview is not None)
    elif preview is None:
        available = {**available, PickerKind.FUZZY_PREVIEW: False}

    kind = choose_picker_kind(available, preference)
    logger.debug(f"Using {kind.value} picker")

    if kind is PickerKind.FUZZY_PREVIEW:
        return PreviewFinderPicker(preview)
    if kind is PickerKind.FUZZY:
        return FuzzyFinderPicker()
    return PlainPicker(console)
