from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rtplay.api.client import RadioTClient
from rtplay.bridge import MediaBridge, make_bridge
from rtplay.config import Settings
from rtplay.errors import NetworkError, RadioTError
from rtplay.live import LiveStatus, evaluate_live_status, parse_started
from rtplay.notify import Notifier, ToastStyle
from rtplay.playback import PlaybackController
from rtplay.state import PlaybackState, PlayingType, Storage, default_store, load_state

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    settings: Settings
    client: RadioTClient
    store: Storage
    bridge: MediaBridge
    notifier: Notifier

    @classmethod
    def create(cls, settings: Settings, *, notifier: Notifier, log_dir=None) -> "CommandContext":
        client = RadioTClient(
            base_url=settings.episodes_base_url,
            news_base_url=settings.news_base_url,
            timeout=settings.http_timeout,
        )
        bridge = make_bridge(settings.bridge)
        if log_dir is not None and hasattr(bridge, "log_dir"):
            bridge.log_dir = log_dir
        return cls(
            settings=settings,
            client=client,
            store=default_store(),
            bridge=bridge,
            notifier=notifier,
        )

    def controller(self) -> PlaybackController:
        return PlaybackController(
            bridge=self.bridge,
            store=self.store,
            notifier=self.notifier,
            live_stream_url=self.settings.live_stream_url,
        )

    def state(self) -> PlaybackState:
        return load_state(self.store)


def toggle_command(ctx: CommandContext) -> int:
    try:
        ctx.controller().toggle(ctx.state())
    except RadioTError as exc:
        logger.exception("toggle failed")
        ctx.notifier.toast(f"Error: {exc}", style=ToastStyle.FAILURE)
        return 1
    return 0


def stop_command(ctx: CommandContext) -> int:
    state = ctx.state()
    try:
        ctx.controller().stop(state)
    except RadioTError as exc:
        logger.exception("stop failed")
        ctx.notifier.toast(f"Error: {exc}", style=ToastStyle.FAILURE)
        return 1
    if state.stream_id and ctx.notifier.user_initiated:
        ctx.notifier.toast("Stopped Playing")
    return 0


def fetch_live_status(ctx: CommandContext, *, now: Optional[datetime] = None) -> LiveStatus:
    start = ctx.client.fetch_show_start()
    try:
        started = parse_started(start.started)
    except ValueError as exc:
        raise NetworkError(f"unreadable show start time {start.started!r}") from exc
    status = evaluate_live_status(started, now=now, window_minutes=ctx.settings.live_window_minutes)
    logger.debug("show started %s, %.1f min ago, live=%s", started, status.minutes_since_start, status.is_live)
    return status


def live_command(ctx: CommandContext, *, now: Optional[datetime] = None) -> int:
    try:
        status = fetch_live_status(ctx, now=now)
        if not status.is_live:
            ctx.notifier.hud(ctx.settings.next_show_hint)
            return 0

        controller = ctx.controller()
        state = controller.stream_live(ctx.state())
        if state.playing_type is not PlayingType.LIVE:
            ctx.notifier.hud("Failed to start live stream")
            return 1
        if ctx.settings.play_after_join:
            controller.play(state)
        ctx.notifier.hud("Now streaming Radio-T live")
        return 0
    except RadioTError as exc:
        logger.error("live check failed: %s", exc)
        ctx.notifier.hud("Error: Failed to check show status or start live stream")
        return 1


def status_command(ctx: CommandContext, *, console: Optional[Console] = None, now: Optional[datetime] = None) -> int:
    console = console or Console(highlight=False)
    state = ctx.state()

    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()

    rc = 0
    try:
        status = fetch_live_status(ctx, now=now)
    except RadioTError as exc:
        logger.error("status check failed: %s", exc)
        table.add_row("Show", f"[red]unavailable[/] ({escape(str(exc))})")
        rc = 1
    else:
        local = status.started_at.astimezone().strftime("%Y-%m-%d %H:%M")
        if status.is_live:
            table.add_row("Show", f"[bold green]LIVE[/] since {local} ({status.minutes_since_start:.0f} min)")
            try:
                news = ctx.client.fetch_active_news()
            except RadioTError as exc:
                logger.warning("active news unavailable: %s", exc)
                news = None
            if news is not None:
                table.add_row("Topic", escape(news.title))
                if news.link:
                    table.add_row("", news.link)
        else:
            table.add_row("Show", f"off air (last started {local})")
            table.add_row("Next", ctx.settings.next_show_hint)

    if state.playing_type is PlayingType.NOTHING:
        table.add_row("Player", "idle")
    else:
        what = "live stream" if state.playing_type is PlayingType.LIVE else (state.episode.title if state.episode else "episode")
        table.add_row("Player", f"{escape(what)} ({'playing' if state.is_playing else 'paused'})")

    console.print(table)
    return rc


def browse_command(ctx: CommandContext) -> int:
    from rtplay.tui import BrowseApp

    app = BrowseApp(ctx)
    app.run()
    return 0
