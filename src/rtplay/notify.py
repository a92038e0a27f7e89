from __future__ import annotations

import abc
import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class LaunchType(enum.Enum):
    USER_INITIATED = "user"
    BACKGROUND = "background"


class ToastStyle(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Notifier(abc.ABC):
    """Where user-facing messages go.

    A HUD is a bare one-liner; a toast carries a title and a style.
    """

    def __init__(self, *, launch_type: LaunchType = LaunchType.USER_INITIATED) -> None:
        self.launch_type = launch_type

    @property
    def user_initiated(self) -> bool:
        return self.launch_type is LaunchType.USER_INITIATED

    @abc.abstractmethod
    def hud(self, message: str) -> None: ...

    @abc.abstractmethod
    def toast(self, title: str, *, style: ToastStyle = ToastStyle.SUCCESS) -> None: ...


class ConsoleNotifier(Notifier):
    def __init__(
        self,
        *,
        launch_type: LaunchType = LaunchType.USER_INITIATED,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__(launch_type=launch_type)
        self.console = console or Console(highlight=False)

    def hud(self, message: str) -> None:
        self.console.print(escape(message))

    def toast(self, title: str, *, style: ToastStyle = ToastStyle.SUCCESS) -> None:
        if style is ToastStyle.FAILURE:
            logger.info("failure toast: %s", title)
            self.console.print(f"[bold red]✗[/] {escape(title)}")
        else:
            self.console.print(f"[green]✓[/] {escape(title)}")


@dataclass
class RecordingNotifier(Notifier):
    """Keeps messages in memory; handy for embedding and tests."""

    launch_type: LaunchType = LaunchType.USER_INITIATED
    huds: List[str] = field(default_factory=list)
    toasts: List[Tuple[str, ToastStyle]] = field(default_factory=list)

    def hud(self, message: str) -> None:
        self.huds.append(message)

    def toast(self, title: str, *, style: ToastStyle = ToastStyle.SUCCESS) -> None:
        self.toasts.append((title, style))

    @property
    def failures(self) -> List[str]:
        return [t for t, s in self.toasts if s is ToastStyle.FAILURE]
