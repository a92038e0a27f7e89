from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Dict, Optional

from rich.table import Table
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Header, Input, Static

from rtplay.commands import CommandContext
from rtplay.episodes import Episode
from rtplay.errors import RadioTError
from rtplay.notify import LaunchType, Notifier, ToastStyle
from rtplay.playback import PlaybackController
from rtplay.search import Debouncer, EpisodeSearch, build_episode_row

logger = logging.getLogger(__name__)


class TextualNotifier(Notifier):
    """Routes notifications to the app's toasts; safe from worker threads."""

    def __init__(self, app: App, *, launch_type: LaunchType = LaunchType.USER_INITIATED) -> None:
        super().__init__(launch_type=launch_type)
        self.app = app

    def _post(self, message: str, *, severity: str = "information") -> None:
        self.app.call_from_thread(self.app.notify, message, severity=severity)

    def hud(self, message: str) -> None:
        self._post(message)

    def toast(self, title: str, *, style: ToastStyle = ToastStyle.SUCCESS) -> None:
        if style is ToastStyle.FAILURE:
            self._post(title, severity="error")
        else:
            self._post(title)


class _TimerHandle:
    def __init__(self, timer: Timer) -> None:
        self.timer = timer

    def cancel(self) -> None:
        self.timer.stop()


class BrowseApp(App[None]):
    TITLE = "Radio-T"
    SUB_TITLE = "Episodes"

    BINDINGS = [
        ("ctrl+o", "open_in_browser", "Open in Browser"),
        ("ctrl+t", "play_pause", "Play/Pause"),
        ("ctrl+x", "stop_playback", "Stop"),
        ("escape", "focus_search", "Search"),
    ]

    CSS = """
    #body {
        height: 1fr;
    }
    #episodes {
        width: 3fr;
    }
    #detail {
        width: 2fr;
        padding: 0 1;
        border-left: solid $primary;
    }
    """

    def __init__(self, ctx: CommandContext) -> None:
        super().__init__()
        self.ctx = ctx
        self.search = EpisodeSearch(
            ctx.client,
            limit=ctx.settings.search_limit,
            latest_limit=ctx.settings.latest_limit,
        )
        self.controller = PlaybackController(
            bridge=ctx.bridge,
            store=ctx.store,
            notifier=TextualNotifier(self, launch_type=ctx.notifier.launch_type),
            live_stream_url=ctx.settings.live_stream_url,
        )
        self._debouncer: Debouncer[str] = Debouncer(
            self._search_settled,
            delay=ctx.settings.debounce_seconds,
            schedule=self._schedule,
        )
        self._episodes_by_key: Dict[str, Episode] = {}
        self._load_nonce = 0

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(placeholder="Search episodes...", id="search")
        with Horizontal(id="body"):
            yield DataTable(id="episodes")
            yield Static("", id="detail")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#episodes", DataTable)
        table.cursor_type = "row"
        table.add_columns("Title", "Date")
        self._load("")
        self.query_one("#search", Input).focus()

    def _schedule(self, delay: float, fn: Callable[[], None]) -> _TimerHandle:
        return _TimerHandle(self.set_timer(delay, fn))

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search":
            return
        self._debouncer.push(event.value or "")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "search":
            return
        self.query_one("#episodes", DataTable).focus()

    def _search_settled(self, query: str) -> None:
        self._load(query)

    def _load(self, query: str) -> None:
        self._load_nonce += 1
        nonce = self._load_nonce
        self.sub_title = "Loading..."

        def work() -> None:
            try:
                episodes = self.search.fetch(query)
            except RadioTError as exc:
                logger.warning("episode load failed: %s", exc)

                def fail() -> None:
                    if nonce == self._load_nonce:
                        self.sub_title = "Episodes"
                    self.notify(f"Failed to load episodes: {exc}", severity="error")

                self.call_from_thread(fail)
                return

            def apply() -> None:
                # A newer query was issued while this one was in flight.
                if nonce != self._load_nonce:
                    return
                self.search.apply(query, episodes)
                self.sub_title = f"Search: {self.search.query}" if self.search.query else "Latest episodes"
                self._render_results()

            self.call_from_thread(apply)

        self.run_worker(work, thread=True, group="load")

    def _render_results(self) -> None:
        table = self.query_one("#episodes", DataTable)
        table.clear()
        self._episodes_by_key = {}

        if not self.search.displayed:
            self.query_one("#detail", Static).update("No episodes")
            return

        for episode in self.search.displayed:
            row = build_episode_row(episode)
            if row.key in self._episodes_by_key:
                continue
            self._episodes_by_key[row.key] = episode
            table.add_row(row.title, row.date, key=row.key)

        table.cursor_coordinate = (0, 0)
        self._show_detail(self.search.displayed[0])

    def _show_detail(self, episode: Optional[Episode]) -> None:
        detail = self.query_one("#detail", Static)
        if episode is None:
            detail.update("")
            return
        row = build_episode_row(episode)

        topics = Table(show_header=False, box=None, padding=(0, 1))
        topics.add_column(style="dim", no_wrap=True)
        topics.add_column()
        for title, start in row.topics:
            topics.add_row(start, title)

        head = Text()
        head.append(row.title, style="bold")
        if row.date:
            head.append(f"\n{row.date}", style="dim")
        head.append("\n\nTopics\n", style="bold underline")

        grid = Table.grid()
        grid.add_row(head)
        grid.add_row(topics)
        detail.update(grid)

    def _episode_for_key(self, key: object) -> Optional[Episode]:
        value = getattr(key, "value", key)
        if isinstance(value, str):
            return self._episodes_by_key.get(value)
        return None

    def _highlighted_episode(self) -> Optional[Episode]:
        table = self.query_one("#episodes", DataTable)
        if not table.row_count:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except Exception:
            return None
        return self._episode_for_key(row_key)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show_detail(self._episode_for_key(event.row_key))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        episode = self._episode_for_key(event.row_key)
        if episode is not None:
            self.play_episode(episode)

    def play_episode(self, episode: Episode) -> None:
        self.notify(f"Starting playback: {episode.title}")

        def work() -> None:
            state = self.controller.stream_episode(self.ctx.state(), episode)
            if state.episode is not None and state.episode.file_name == episode.file_name:
                self.call_from_thread(self.notify, f"Now playing: {episode.title}")

        self.run_worker(work, thread=True, exclusive=True, group="playback")

    def action_play_pause(self) -> None:
        self.run_worker(
            lambda: self.controller.toggle(self.ctx.state()),
            thread=True,
            exclusive=True,
            group="playback",
        )

    def action_stop_playback(self) -> None:
        def work() -> None:
            state = self.ctx.state()
            self.controller.stop(state)
            if state.stream_id:
                self.call_from_thread(self.notify, "Stopped Playing")

        self.run_worker(work, thread=True, exclusive=True, group="playback")

    def action_open_in_browser(self) -> None:
        episode = self._highlighted_episode()
        if episode is None or not episode.url:
            self.notify("No episode selected")
            return
        webbrowser.open(episode.url)

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def on_unmount(self) -> None:
        self._debouncer.cancel()

