"""Terminal checklist for picking branches."""

import curses
import logging
from typing import Any, Optional

from pick import Picker

from git_del_branches.git import UserCancelled

logger = logging.getLogger(__name__)

TITLE = "Select branches to delete\n(arrows to move, [space] to mark, [enter] to confirm, [q] to quit)"

QUIT_KEYS = (ord("q"), 27)  # q, Esc


class _KeyRecorder:
    """Screen wrapper remembering the last key read."""

    def __init__(self, screen: Any) -> None:
        self._screen = screen
        self.last_key: Optional[int] = None

    def getch(self) -> int:
        self.last_key = self._screen.getch()
        return self.last_key

    def __getattr__(self, name: str) -> Any:
        return getattr(self._screen, name)


class BranchPicker(Picker):
    """Multi-select picker that tells a quit apart from an empty selection."""

    def run_loop(self, screen, position):
        recorder = _KeyRecorder(screen)
        picked = super().run_loop(recorder, position)
        if self.quit_keys is not None and recorder.last_key in self.quit_keys:
            raise UserCancelled("Quit")
        return picked


def select_branches(names: list[str], title: str = TITLE) -> list[str]:
    """Let the user mark any number of branch names.

    Args:
        names: Branch names to offer, in display order
        title: Text shown above the checklist

    Returns:
        The marked names in display order. Empty if the user confirmed
        without marking anything.

    Raises:
        UserCancelled: If the user quits, interrupts, or the terminal fails
    """
    if not names:
        return []

    picker = BranchPicker(
        names,
        title,
        indicator="->",
        multiselect=True,
        min_selection_count=0,
        quit_keys=QUIT_KEYS,
    )
    try:
        picked = picker.start()
    except KeyboardInterrupt as err:
        raise UserCancelled("Interrupted") from err
    except curses.error as err:
        logger.warning("Terminal error while showing the branch list: %s", err)
        raise UserCancelled("Terminal error") from err

    indexes = sorted(index for _, index in picked)
    return [names[index] for index in indexes]
