"""Terminal views: authentication, dashboard, and editor.

Each view renders from ``controller.state`` and turns typed commands
into controller or editing-session operations.  The loop in
``TerminalApp.run`` dispatches on ``state.view`` until the user quits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from mindful_journal.browser import ALL_MOODS, MOOD_FILTERS, mood_emoji, parse_mood_filter
from mindful_journal.controller import (
    Confirmer,
    Notice,
    NoticeLevel,
    Notifier,
    SessionController,
)
from mindful_journal.editor import EntryEditingSession
from mindful_journal.errors import ConfirmationRequired, JournalError
from mindful_journal.models import JournalEntry, Mood, View
from mindful_journal.reflection import ReflectionGenerator

logger = logging.getLogger(__name__)

APP_NAME = "MindfulJournal"
BODY_TERMINATOR = "."
SNIPPET_LENGTH = 80

_NOTICE_STYLE = {
    NoticeLevel.INFO: "cyan",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.ERROR: "red",
}

DASHBOARD_HELP = (
    "[bold]n[/bold] new  [bold]e N[/bold] edit  [bold]d N[/bold] delete  "
    "[bold]f MOOD[/bold] filter  [bold]r[/bold] refresh  [bold]l[/bold] logout  "
    "[bold]q[/bold] quit"
)
EDITOR_HELP = (
    "[bold]t[/bold] title  [bold]b[/bold] body  [bold]m[/bold] mood  [bold]g[/bold] tags  "
    "[bold]a[/bold] reflect  [bold]c[/bold] clear reflection  [bold]s[/bold] save  "
    "[bold]x[/bold] cancel"
)


class TerminalApp:
    """Interactive terminal front end for a SessionController.

    Args:
        build_controller: Called with the app's notifier and confirmer,
            returns the controller to drive.
        generator: Reflection generator passed to every editing session.
        console: Where output goes.
        stream: Input stream for prompts. None reads from the terminal.
    """

    def __init__(
        self,
        build_controller: Callable[[Notifier, Confirmer], SessionController],
        generator: ReflectionGenerator | None = None,
        console: Console | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.generator = generator
        self.console = console or Console()
        self._stream = stream
        self.mood_filter = ALL_MOODS
        self.controller = build_controller(self.notify, self.confirm)

    # ── Prompt plumbing ──────────────────────────────────────────

    def notify(self, notice: Notice) -> None:
        style = _NOTICE_STYLE[notice.level]
        self.console.print(f"[{style}]{escape(notice.message)}[/{style}]")

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(prompt, console=self.console, stream=self._stream, default=False)

    def _ask(self, prompt: str, **kwargs: object) -> str:
        return Prompt.ask(prompt, console=self.console, stream=self._stream, **kwargs)

    def _ask_secret(self, prompt: str) -> str:
        # getpass reads from the tty, so hide input only when no stream is injected.
        return Prompt.ask(
            prompt, console=self.console, stream=self._stream, password=self._stream is None
        )

    def _read_body(self, current: str) -> str:
        self.console.print(
            f"[dim]Write your thoughts. End with a line containing only "
            f"'{BODY_TERMINATOR}'. An empty first line keeps the current text.[/dim]"
        )
        lines: list[str] = []
        while True:
            line = self._ask("")
            if line == BODY_TERMINATOR:
                break
            if not lines and not line and current:
                return current
            lines.append(line)
        return "\n".join(lines).strip()

    # ── Main loop ────────────────────────────────────────────────

    def run(self) -> None:
        with self.console.status("Loading your journal..."):
            self.controller.boot()

        keep_going = True
        while keep_going:
            view = self.controller.state.view
            if view == View.AUTHENTICATING:
                keep_going = self.auth_view()
            elif view == View.BROWSING:
                keep_going = self.dashboard_view()
            else:
                keep_going = self.editor_view()

    # ── Authentication ───────────────────────────────────────────

    def auth_view(self) -> bool:
        """Log in or register. Returns False when the user quits."""
        self.console.print(
            Panel.fit("Welcome back\nSign in to access your journal", title=APP_NAME)
        )
        action = self._ask(
            "Log in, register or quit", choices=["l", "r", "q"], default="l"
        )
        if action == "q":
            return False

        try:
            if action == "r":
                name = self._ask("Full name")
                email = self._ask("Email address")
                password = self._ask_secret("Password")
                with self.console.status("Creating your account..."):
                    self.controller.register(email, password, name)
            else:
                email = self._ask("Email address")
                password = self._ask_secret("Password")
                with self.console.status("Signing in..."):
                    self.controller.login(email, password)
        except ConfirmationRequired as exc:
            self.notify(Notice(NoticeLevel.SUCCESS, str(exc)))
        except JournalError as exc:
            self.notify(Notice(NoticeLevel.ERROR, str(exc) or "An error occurred"))
        return True

    # ── Dashboard ────────────────────────────────────────────────

    def render_dashboard(self) -> list[JournalEntry]:
        state = self.controller.state
        user = state.current_user
        name = user.name if user else ""
        self.console.rule(f"[bold]{APP_NAME}[/bold]  {escape(name)}")
        count = len(state.entries)
        noun = "entry" if count == 1 else "entries"
        self.console.print(f"You have {count} {noun} in your journal.")

        filters = []
        for value in MOOD_FILTERS:
            label = value if value == ALL_MOODS else f"{mood_emoji(value)} {value}"
            filters.append(f"[reverse]{label}[/reverse]" if value == self.mood_filter else label)
        self.console.print("  ".join(filters))

        visible = self.controller.visible_entries(self.mood_filter)
        if not visible:
            if state.entries:
                self.console.print("[dim]No entries match this mood.[/dim]")
            else:
                self.console.print(
                    "[dim]Your journal is empty. Capture your first thought with 'n'.[/dim]"
                )
            return visible

        table = Table(show_lines=True)
        table.add_column("#", justify="right")
        table.add_column("Mood")
        table.add_column("Date")
        table.add_column("Entry")
        table.add_column("Tags")
        for index, entry in enumerate(visible, start=1):
            body = entry.content
            if len(body) > SNIPPET_LENGTH:
                body = body[:SNIPPET_LENGTH].rstrip() + "..."
            text = f"[bold]{escape(entry.title)}[/bold]\n{escape(body)}"
            if entry.reflection:
                text += f'\n[italic magenta]"{escape(entry.reflection)}"[/italic magenta]'
            table.add_row(
                str(index),
                mood_emoji(entry.mood),
                entry.created_at.strftime("%b %d, %Y"),
                text,
                escape(", ".join(f"#{t}" for t in entry.tags)),
            )
        self.console.print(table)
        return visible

    def dashboard_view(self) -> bool:
        """Browse, filter, and pick entries. Returns False when the user quits."""
        visible = self.render_dashboard()
        self.console.print(DASHBOARD_HELP)
        command = self._ask("Command").strip()
        if not command:
            return True

        verb, _, arg = command.partition(" ")
        verb = verb.lower()
        arg = arg.strip()

        if verb == "q":
            return False
        if verb == "n":
            self.controller.begin_new_entry()
        elif verb in ("e", "d"):
            entry = self._pick(visible, arg)
            if entry is None:
                return True
            if verb == "e":
                self.controller.begin_edit_entry(entry)
            elif self.controller.delete_entry(entry.id):
                self.notify(Notice(NoticeLevel.SUCCESS, f"Deleted '{entry.title}'."))
        elif verb == "f":
            try:
                self.mood_filter = parse_mood_filter(arg or ALL_MOODS)
            except ValueError as exc:
                self.notify(Notice(NoticeLevel.ERROR, str(exc)))
        elif verb == "r":
            user = self.controller.state.current_user
            if user is not None:
                self.controller.load_entries(user.id)
        elif verb == "l":
            self.controller.logout()
        else:
            self.notify(Notice(NoticeLevel.ERROR, f"Unknown command: {verb}"))
        return True

    def _pick(self, visible: list[JournalEntry], arg: str) -> JournalEntry | None:
        try:
            index = int(arg)
        except ValueError:
            self.notify(Notice(NoticeLevel.ERROR, "Give the entry number, e.g. 'e 2'."))
            return None
        if not 1 <= index <= len(visible):
            self.notify(Notice(NoticeLevel.ERROR, f"No entry numbered {index}."))
            return None
        return visible[index - 1]

    # ── Editor ───────────────────────────────────────────────────

    def render_editor(self, session: EntryEditingSession) -> None:
        heading = "Edit entry" if self.controller.state.entry_being_edited else "New entry"
        lines = [
            f"[bold]Title:[/bold] {escape(session.title) or '[dim]untitled[/dim]'}",
            f"[bold]Mood:[/bold] {mood_emoji(session.mood)} {session.mood.value}",
            f"[bold]Tags:[/bold] {escape(session.tags_text)}",
            "",
            escape(session.content) or "[dim]What's on your mind?[/dim]",
        ]
        if session.reflection:
            reflection = escape(session.reflection)
            lines += ["", f'[italic magenta]AI reflection: "{reflection}"[/italic magenta]']
        self.console.print(Panel("\n".join(lines), title=heading))

    def editor_view(self) -> bool:
        """Edit the open draft until it is saved or cancelled."""
        session = EntryEditingSession.for_controller(
            self.controller, generator=self.generator, notify=self.notify
        )
        if self.controller.state.entry_being_edited is None:
            session.update_field("title", self._ask("Title"))
            session.update_field("content", self._read_body(""))
            self._edit_mood(session)
            session.update_field("tags_text", self._ask("Tags (comma separated)", default=""))

        while self.controller.state.view == View.EDITING:
            self.render_editor(session)
            self.console.print(EDITOR_HELP)
            command = self._ask("Command").strip().lower()
            if command == "t":
                session.update_field("title", self._ask("Title", default=session.title))
            elif command == "b":
                session.update_field("content", self._read_body(session.content))
            elif command == "m":
                self._edit_mood(session)
            elif command == "g":
                session.update_field(
                    "tags_text", self._ask("Tags (comma separated)", default=session.tags_text)
                )
            elif command == "a":
                self._reflect(session)
            elif command == "c":
                session.clear_reflection()
            elif command == "s":
                if not session.can_save:
                    self.notify(Notice(NoticeLevel.ERROR, "Title and content are required."))
                    continue
                with self.console.status("Saving..."):
                    session.save()
            elif command == "x":
                self.controller.cancel_edit()
            elif command:
                self.notify(Notice(NoticeLevel.ERROR, f"Unknown command: {command}"))
        return True

    def _edit_mood(self, session: EntryEditingSession) -> None:
        choice = self._ask(
            "Mood", choices=[m.value for m in Mood], default=session.mood.value
        )
        session.update_field("mood", choice)

    def _reflect(self, session: EntryEditingSession) -> None:
        if self.generator is None or not self.generator.is_configured():
            self.notify(Notice(NoticeLevel.INFO, "AI reflections are not configured."))
            return
        if not session.content.strip():
            self.notify(Notice(NoticeLevel.INFO, "Write something first."))
            return
        with self.console.status("Reflecting on your entry..."):
            session.request_reflection()
