import pytest

from conftest import FailingStore
from smartbot.messages import assistant_message, user_message
from smartbot.sessions.archive import ArchiveUnavailable, SessionArchive
from smartbot.sessions.schema import DEFAULT_TITLE, derive_title


def _conversation(prompt: str):
    return [
        assistant_message("Hello!", message_id="welcome"),
        user_message(prompt),
        assistant_message(f"answer to {prompt}"),
    ]


class TestDeriveTitle:
    def test_short_prompt_used_verbatim(self):
        assert derive_title(_conversation("Hi")) == "Hi"

    def test_long_prompt_truncated(self):
        title = derive_title(_conversation("x" * 31))
        assert title == "x" * 30 + "..."

    def test_exact_limit_not_truncated(self):
        assert derive_title(_conversation("y" * 30)) == "y" * 30

    def test_no_user_message_uses_default(self):
        assert derive_title([assistant_message("only me")]) == DEFAULT_TITLE


class TestSessionArchive:
    def test_most_recent_first(self, archive):
        first = archive.archive(_conversation("first"))
        second = archive.archive(_conversation("second"))

        assert archive.list().ids() == [second, first]

    def test_cap_evicts_oldest(self, store):
        archive = SessionArchive(store, limit=20)
        ids = [archive.archive(_conversation(f"prompt {i}")) for i in range(21)]

        listing = archive.list()
        assert len(listing) == 20
        assert ids[0] not in archive
        assert listing[0].id == ids[-1]
        assert listing[-1].id == ids[1]

    def test_listing_is_read_only_copy(self, archive):
        session_id = archive.archive(_conversation("hello"))

        listing = archive.list()
        listed = listing[0]
        listed.title = "tampered"
        listed.messages.clear()

        stored = archive.get(session_id)
        assert stored.title == "hello"
        assert len(stored.messages) == 3

    def test_listing_can_be_iterated_twice(self, archive):
        archive.archive(_conversation("a"))
        archive.archive(_conversation("b"))

        listing = archive.list()
        assert [s.title for s in listing] == ["b", "a"]
        assert [s.title for s in listing] == ["b", "a"]

    def test_listing_is_a_snapshot(self, archive):
        archive.archive(_conversation("a"))
        listing = archive.list()

        archive.archive(_conversation("b"))

        assert len(listing) == 1
        assert len(archive.list()) == 2

    def test_archive_copies_messages(self, archive):
        messages = _conversation("hello")
        session_id = archive.archive(messages)

        messages[1].text = "changed"

        assert archive.get(session_id).messages[1].text == "hello"

    def test_delete_and_clear(self, archive):
        a = archive.archive(_conversation("a"))
        b = archive.archive(_conversation("b"))

        assert archive.delete(a) is True
        assert archive.delete(a) is False
        assert archive.list().ids() == [b]

        archive.clear()
        assert len(archive) == 0

    def test_persisted_and_reloaded(self, store):
        archive = SessionArchive(store)
        session_id = archive.archive(_conversation("remember me"))

        reloaded = SessionArchive(store)

        assert reloaded.list().ids() == [session_id]
        assert reloaded.get(session_id).messages[1].text == "remember me"

    def test_reload_respects_limit(self, store):
        archive = SessionArchive(store, limit=20)
        for i in range(12):
            archive.archive(_conversation(str(i)))

        smaller = SessionArchive(store, limit=10)

        assert len(smaller) == 10
        assert smaller.list()[0].title == "11"

    def test_persistence_failure_keeps_memory(self):
        store = FailingStore()
        archive = SessionArchive(store)

        with pytest.raises(ArchiveUnavailable) as excinfo:
            archive.archive(_conversation("hello"))

        session_id = excinfo.value.session_id
        assert session_id in archive
        assert store.raw(archive.key) is None

        store.fail_saves = False
        archive.archive(_conversation("again"))
        assert len(SessionArchive(store)) == 2

    def test_rejects_non_positive_limit(self, store):
        with pytest.raises(ValueError):
            SessionArchive(store, limit=0)
