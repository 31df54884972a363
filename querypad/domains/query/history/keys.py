"""Single key dispatcher deciding between history recall and the completion popup.

Up/Down are shared by history recall and popup navigation. Routing both
through one dispatcher with a fixed precedence (popup first) means a key press
is never interpreted twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from .ring import HistoryRing

DEFAULT_OLDER_KEY = "up"
DEFAULT_NEWER_KEY = "down"


class KeyEventResult(NamedTuple):
    """Outcome of a key event.

    ``handled`` False means the key should go on to its default handler (the
    popup or the editor). ``new_buffer_text`` is set when the buffer must be
    replaced.
    """

    handled: bool
    new_buffer_text: str | None = None


NOT_HANDLED = KeyEventResult(handled=False)


class HistoryKeyDispatcher:
    """Routes history keys to a HistoryRing unless the popup owns them."""

    def __init__(
        self,
        ring: HistoryRing,
        older_key: str = DEFAULT_OLDER_KEY,
        newer_key: str = DEFAULT_NEWER_KEY,
    ):
        self._ring = ring
        self.older_key = older_key
        self.newer_key = newer_key

    def on_key_event(self, key: str, popup_visible: bool, current_text: str = "") -> KeyEventResult:
        """Handle a key press.

        Args:
            key: Textual key name (e.g. "up").
            popup_visible: Whether the completion popup is showing.
            current_text: Current buffer, kept as the draft when recall starts.
        """
        if key not in (self.older_key, self.newer_key):
            return NOT_HANDLED

        # The popup takes precedence: it uses the same keys for its selection
        if popup_visible:
            return NOT_HANDLED

        if key == self.older_key:
            text = self._ring.recall_older(current_text=current_text)
        else:
            text = self._ring.recall_newer()

        return KeyEventResult(handled=True, new_buffer_text=text)
