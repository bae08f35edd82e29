import asyncio

from kaamkar.errors import AiQuotaError, IndexRequiredError, ReadError, WriteError
from kaamkar.viewstate import Debouncer, LoadState, NoteSuggestions, ViewState


class FakeTodos:
    def __init__(self) -> None:
        self.items = [{"id": "1", "title": "a", "completed": False}]
        self.fail_with: Exception | None = None
        self.calls: list[dict] = []

    def list(self, **params) -> list[dict]:
        self.calls.append(params)
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.items)


def test_load_then_keep_data_on_failure() -> None:
    source = FakeTodos()
    view = ViewState("todos", source.list)

    asyncio.run(view.load())
    assert view.state == LoadState.ready
    assert [t["id"] for t in view.data] == ["1"]

    source.fail_with = ReadError("Failed to load todos")
    asyncio.run(view.load())
    assert view.state == LoadState.error
    assert view.error == "Failed to load todos"
    assert [t["id"] for t in view.data] == ["1"]

    view.dismiss()
    assert view.notice is None


def test_index_errors_are_shown_with_their_link() -> None:
    source = FakeTodos()
    source.fail_with = IndexRequiredError("todos", ("userId", "createdAt"), "https://console.test/indexes")
    view = ViewState("todos", source.list)
    asyncio.run(view.load())
    assert view.error.startswith("This query on 'todos' requires a composite index")
    assert view.error.endswith("Create it here: https://console.test/indexes")


def test_set_params_refetches_only_on_change() -> None:
    source = FakeTodos()
    view = ViewState("transactions", source.list, month="2024-03")
    asyncio.run(view.load())

    assert asyncio.run(view.set_params(month="2024-03")) is False
    assert asyncio.run(view.set_params(month="2024-04")) is True
    assert source.calls == [{"month": "2024-03"}, {"month": "2024-04"}]


def test_mutate_reloads_and_patch_replaces() -> None:
    source = FakeTodos()
    view = ViewState("todos", source.list)
    asyncio.run(view.load())

    def create() -> dict:
        source.items.append({"id": "2", "title": "b", "completed": False})
        return source.items[-1]

    created = asyncio.run(view.mutate(create))
    assert created["id"] == "2"
    assert [t["id"] for t in view.data] == ["1", "2"]

    async def toggle() -> dict:
        return {"id": "1", "title": "a", "completed": True}

    asyncio.run(view.patch(toggle))
    assert view.data[0]["completed"] is True
    assert len(source.calls) == 2


def test_failed_mutation_keeps_list() -> None:
    source = FakeTodos()
    view = ViewState("todos", source.list)
    asyncio.run(view.load())

    def broken() -> dict:
        raise ReadError("nope")

    assert asyncio.run(view.mutate(broken)) is None
    assert view.error == "Failed to update todos"
    assert [t["id"] for t in view.data] == ["1"]


def test_debouncer_runs_last_call_once() -> None:
    fired: list[str] = []

    async def scenario() -> None:
        debouncer = Debouncer(0.05, fired.append)
        debouncer.trigger("a")
        debouncer.trigger("b")
        debouncer.trigger("c")
        assert debouncer.pending
        await debouncer.flush()
        assert not debouncer.pending

    asyncio.run(scenario())
    assert fired == ["c"]


def test_cancelled_debouncer_never_fires() -> None:
    fired: list[str] = []

    async def scenario() -> None:
        debouncer = Debouncer(0.05, fired.append)
        debouncer.trigger("a")
        debouncer.cancel()
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert fired == []


def test_note_suggestions_wait_for_quiet() -> None:
    requests: list[tuple[str, str]] = []

    def suggest(title: str, content: str) -> str:
        requests.append((title, content))
        return f"expand on {title}"

    async def scenario() -> NoteSuggestions:
        panel = NoteSuggestions(suggest, delay=0.05)
        panel.on_edit("Tr", "")
        panel.on_edit("Trip", "pack")
        await panel.wait()
        return panel

    panel = asyncio.run(scenario())
    assert requests == [("Trip", "pack")]
    assert panel.suggestions == "expand on Trip"
    assert panel.error is None


def test_note_suggestions_surface_assistant_errors() -> None:
    async def suggest(title: str, content: str) -> str:
        raise AiQuotaError()

    async def scenario() -> NoteSuggestions:
        panel = NoteSuggestions(suggest, delay=0.01)
        panel.on_edit("Trip", "pack")
        await panel.wait()
        return panel

    panel = asyncio.run(scenario())
    assert panel.suggestions is None
    assert "quota" in panel.error.lower()


def test_blank_note_cancels_pending_request() -> None:
    calls: list[str] = []

    async def scenario() -> None:
        panel = NoteSuggestions(lambda title, content: calls.append(title), delay=0.05)
        panel.on_edit("Trip", "")
        panel.on_edit("  ", "")
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert calls == []


def test_note_suggestions_report_store_errors() -> None:
    def suggest(title: str, content: str) -> str:
        raise WriteError("Failed to create note")

    async def scenario() -> NoteSuggestions:
        panel = NoteSuggestions(suggest, delay=0.01)
        panel.on_edit("Trip", "pack")
        await panel.wait()
        return panel

    panel = asyncio.run(scenario())
    assert panel.suggestions is None
    assert panel.error == "Failed to get note suggestions"


def test_successful_patch_clears_previous_error() -> None:
    source = FakeTodos()
    view = ViewState("todos", source.list)
    asyncio.run(view.load())

    source.fail_with = ReadError("offline")
    asyncio.run(view.load())
    assert view.state == LoadState.error

    async def toggle() -> dict:
        return {"id": "1", "title": "a", "completed": True}

    asyncio.run(view.patch(toggle))
    assert view.state == LoadState.ready
    assert view.error is None
    assert view.data[0]["completed"] is True
