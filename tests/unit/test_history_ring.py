"""Tests for the in-session history ring."""

from __future__ import annotations

from querypad.domains.query.history.ring import NOT_BROWSING, HistoryRing


class TestSubmit:
    """Tests for HistoryRing.submit."""

    def test_blank_queries_are_ignored(self):
        """Only non-blank queries are appended."""
        ring = HistoryRing()
        assert ring.submit("A") is True
        assert ring.submit("") is False
        assert ring.submit("   \n") is False
        assert ring.submit("B") is True
        assert ring.entries == ("A", "B")

    def test_submit_stops_browsing(self):
        """Submitting resets the cursor to not browsing."""
        ring = HistoryRing(["A", "B"])
        ring.recall_older()
        assert ring.is_browsing
        ring.submit("C")
        assert ring.index == NOT_BROWSING
        assert not ring.is_browsing

    def test_max_entries_drops_oldest(self):
        """The ring keeps only the newest entries."""
        ring = HistoryRing(max_entries=2)
        for query in ("A", "B", "C"):
            ring.submit(query)
        assert ring.entries == ("B", "C")
        assert len(ring) == 2


class TestRecall:
    """Tests for recall_older / recall_newer."""

    def test_older_older_newer(self):
        """Recall walks B, A, then back to B."""
        ring = HistoryRing()
        ring.submit("A")
        ring.submit("")
        ring.submit("B")

        assert ring.recall_older() == "B"
        assert ring.recall_older() == "A"
        assert ring.recall_newer() == "B"

    def test_older_clamps_at_oldest(self):
        """Past the oldest entry the cursor stays put."""
        ring = HistoryRing(["A", "B"])
        ring.recall_older()
        ring.recall_older()
        assert ring.recall_older() == "A"
        assert ring.index == 1

    def test_newer_returns_to_live_buffer(self):
        """Stepping past the newest entry restores the draft."""
        ring = HistoryRing(["A", "B"])
        assert ring.recall_older(current_text="SELECT 1") == "B"
        assert ring.recall_newer() == "SELECT 1"
        assert ring.index == NOT_BROWSING

    def test_newer_without_draft_restores_empty(self):
        """With no draft the live buffer comes back empty."""
        ring = HistoryRing(["A"])
        ring.recall_older()
        assert ring.recall_newer() == ""

    def test_newer_when_not_browsing_is_noop(self):
        """recall_newer at -1 leaves the buffer alone."""
        ring = HistoryRing(["A"])
        assert ring.recall_newer() is None
        assert ring.index == NOT_BROWSING

    def test_empty_ring(self):
        """Nothing to recall from an empty ring."""
        ring = HistoryRing()
        assert ring.recall_older() is None
        assert ring.recall_newer() is None
        assert ring.index == NOT_BROWSING

    def test_popup_visible_suppresses_recall(self):
        """With the popup showing, recall neither changes the buffer nor the cursor."""
        ring = HistoryRing(["A", "B"])
        assert ring.recall_older(popup_visible=True) is None
        assert ring.index == NOT_BROWSING

        ring.recall_older()
        assert ring.recall_newer(popup_visible=True) is None
        assert ring.index == 0

    def test_draft_kept_only_when_browsing_starts(self):
        """Later recalls do not overwrite the stashed draft."""
        ring = HistoryRing(["A", "B"])
        ring.recall_older(current_text="draft")
        ring.recall_older(current_text="B")
        ring.recall_newer()
        assert ring.recall_newer() == "draft"

    def test_cursor_always_valid(self):
        """Any sequence of moves keeps index in [-1, len - 1]."""
        ring = HistoryRing(["A", "B", "C"])
        moves = [ring.recall_older] * 5 + [ring.recall_newer] * 7 + [ring.recall_older] * 2
        for move in moves:
            move()
            assert NOT_BROWSING <= ring.index <= len(ring) - 1


class TestReplace:
    """Tests for HistoryRing.replace."""

    def test_replace_resets_cursor(self):
        """Loading new entries stops browsing."""
        ring = HistoryRing(["A"])
        ring.recall_older()
        ring.replace(["X", "", "Y"])
        assert ring.entries == ("X", "Y")
        assert ring.index == NOT_BROWSING
