"""
Tests for the DextApp context wired to the message channel.

Uses stub plugins, a real temp SQLite cache and a real event loop with a
short debounce window.
"""

import asyncio
from unittest.mock import patch

import pytest
import pytest_asyncio

from conftest import StubPlugin, make_registry
from dext.app import DextApp
from dext.constants import (
    IPC_COPY_CURRENT_ITEM,
    IPC_EXECUTE_ITEM,
    IPC_ITEM_DETAILS_REQUEST,
    IPC_ITEM_DETAILS_RESPONSE,
    IPC_QUERY_COMMAND,
    IPC_QUERY_RESULTS,
)
from dext.errors import UnknownMessageError
from dext.ipc import MessageChannel, QueueSender
from dext.search.router import ResultItem

SETTLE = 0.2


@pytest_asyncio.fixture
async def app(settings, tmp_cache):
    core = StubPlugin("Core", titles=["Firefox", "Files"])
    calc = StubPlugin("Calc", keyword="calc", titles=["4"], details_content="<p>4</p>")
    registry = make_registry(("tests.core", core, True), ("tests.calc", calc, False))
    dext = DextApp(settings, registry, tmp_cache)
    dext.stubs = {"core": core, "calc": calc}
    yield dext
    await dext.close()


async def _drain(queue):
    replies = []
    while not queue.empty():
        replies.append(queue.get_nowait())
    return replies


class TestQueryCommand:
    """Test debounced query handling over the channel."""

    @pytest.mark.asyncio
    async def test_query_replies_with_ranked_dicts(self, app):
        sender = QueueSender()
        await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "calc 2+2"}, sender)
        await asyncio.sleep(SETTLE)

        (kind, payload), = await _drain(sender.queue)
        assert kind == IPC_QUERY_RESULTS
        assert isinstance(payload, list)
        assert {p["title"] for p in payload} == {"Firefox", "Files", "4"}
        assert all(p["plugin"] is not None for p in payload)

    @pytest.mark.asyncio
    async def test_burst_is_processed_once_with_last_phrase(self, app):
        sender = QueueSender()
        for phrase in ["c", "ca", "cal", "calc", "calc 2+2"]:
            await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": phrase}, sender)
        await asyncio.sleep(SETTLE)

        replies = await _drain(sender.queue)
        assert len(replies) == 1
        assert app.stubs["calc"].query_calls == [["2+2"]]
        assert app.stubs["core"].query_calls == [["calc", "2+2"]]

    @pytest.mark.asyncio
    async def test_failed_query_sends_no_reply(self, app):
        app.stubs["core"].fail = True
        sender = QueueSender()
        await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "xyz"}, sender)
        await asyncio.sleep(SETTLE)

        assert sender.queue.empty()

    @pytest.mark.asyncio
    async def test_stale_results_are_dropped(self, app):
        app.stubs["core"].delay = 0.15
        sender = QueueSender()

        await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "slow"}, sender)
        await asyncio.sleep(0.05)  # first query is now in flight
        app.stubs["core"].delay = 0.0
        await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "fast"}, sender)
        await asyncio.sleep(0.4)

        replies = await _drain(sender.queue)
        assert len(replies) == 1
        assert app.stubs["core"].query_calls == [["slow"], ["fast"]]


class TestItemDetails:
    """Test detail requests through the channel and the cache."""

    @pytest.mark.asyncio
    async def test_details_reply_and_cache(self, app):
        results = await app.query("calc 2+2")
        calc_item = next(i for i in results if i.title == "4")
        sender = QueueSender()

        await app.channel.dispatch(IPC_ITEM_DETAILS_REQUEST, calc_item.to_dict(), sender)
        await asyncio.sleep(SETTLE)
        await app.channel.dispatch(IPC_ITEM_DETAILS_REQUEST, calc_item.to_dict(), sender)
        await asyncio.sleep(SETTLE)

        replies = await _drain(sender.queue)
        assert replies == [(IPC_ITEM_DETAILS_RESPONSE, "<p>4</p>")] * 2
        assert app.stubs["calc"].details_calls == ["4"]

    @pytest.mark.asyncio
    async def test_item_dict_round_trip_keeps_cache_key(self, app):
        results = await app.query("calc 2+2")
        item = results[0]
        assert ResultItem.from_dict(item.to_dict()).cache_key() == item.cache_key()

    @pytest.mark.asyncio
    async def test_unknown_plugin_sends_no_reply(self, app):
        sender = QueueSender()
        await app.channel.dispatch(IPC_ITEM_DETAILS_REQUEST, {"title": "orphan"}, sender)
        await asyncio.sleep(SETTLE)
        assert sender.queue.empty()


class TestExecuteAndCopy:
    """Test side-effect commands."""

    @pytest.mark.asyncio
    async def test_execute_is_immediate(self, app):
        sender = QueueSender()
        with patch("dext.actions.subprocess.Popen") as popen:
            await app.channel.dispatch(IPC_EXECUTE_ITEM, {
                "action": "exec",
                "item": {"title": "lock", "arg": "hyprlock"},
            }, sender)
        assert popen.call_args[0][0] == "hyprlock"
        assert sender.queue.empty()

    @pytest.mark.asyncio
    async def test_execute_honours_camel_case_modifier(self, app):
        sender = QueueSender()
        with patch("dext.actions.subprocess.Popen") as popen:
            await app.channel.dispatch(IPC_EXECUTE_ITEM, {
                "action": "exec",
                "item": {"title": "lock", "arg": "hyprlock", "mods": {"alt": {"arg": "loginctl lock-session"}}},
                "isSuperMod": False,
                "isAltMod": True,
            }, sender)
        assert popen.call_args[0][0] == "loginctl lock-session"

    @pytest.mark.asyncio
    async def test_copy_is_debounced(self, app):
        sender = QueueSender()
        with patch("dext.actions.write_clipboard") as write:
            for text in ["a", "b", "c"]:
                await app.channel.dispatch(
                    IPC_COPY_CURRENT_ITEM, {"title": text, "arg": text}, sender
                )
            await asyncio.sleep(SETTLE)
        write.assert_called_once_with("c")


class TestChannel:
    """Test the bare message channel."""

    @pytest.mark.asyncio
    async def test_unknown_kind_raises(self):
        channel = MessageChannel()
        with pytest.raises(UnknownMessageError):
            await channel.dispatch("nope", None, QueueSender())

    @pytest.mark.asyncio
    async def test_reply_goes_to_sender(self):
        channel = MessageChannel()
        channel.on("ping", lambda request: request.reply("pong", request.payload))
        sender = QueueSender()
        await channel.dispatch("ping", 1, sender)
        assert sender.queue.get_nowait() == ("pong", 1)

    @pytest.mark.asyncio
    async def test_async_handler_is_awaited(self):
        channel = MessageChannel()

        async def handler(request):
            await asyncio.sleep(0)
            request.reply("done", None)

        channel.on("work", handler)
        sender = QueueSender()
        await channel.dispatch("work", None, sender)
        assert sender.queue.get_nowait() == ("done", None)

    def test_app_registers_all_kinds(self, settings, tmp_cache):
        dext = DextApp(settings, make_registry(), tmp_cache)
        assert set(dext.channel.kinds) == {
            IPC_QUERY_COMMAND, IPC_ITEM_DETAILS_REQUEST, IPC_EXECUTE_ITEM, IPC_COPY_CURRENT_ITEM,
        }

    @pytest.mark.asyncio
    async def test_close_unregisters_handlers(self, settings, tmp_cache):
        dext = DextApp(settings, make_registry(), tmp_cache)
        await dext.close()
        assert dext.channel.kinds == []
        with pytest.raises(UnknownMessageError):
            await dext.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "x"}, QueueSender())


class TestCreate:
    """Test building a context from settings."""

    @pytest.mark.asyncio
    async def test_create_loads_core_plugins(self, settings, tmp_commands):
        settings["plugins"]["commands_file"] = str(tmp_commands)
        dext = DextApp.create(settings=settings)
        try:
            names = [d.name for d in dext.registry.descriptors]
            assert names == ["Commands", "Web Search", "Calculator"]

            results = await dext.query("calc 2+2")
            titles = [r.title for r in results]
            # "calc" matches the web search titles strongly, the bare value not at all
            assert titles == [
                "Search Google for calc 2+2",
                "Search Wikipedia for calc 2+2",
                "4",
            ]
        finally:
            await dext.close()
