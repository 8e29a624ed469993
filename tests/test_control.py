"""
Tests for the operator control channel.
"""

import asyncio
import json

import pytest

from dartqueue.api.control import ACTION_ALIASES
from dartqueue.core.events import OperatorMessage, OperatorRequest
from dartqueue.shared.models import PlayerStats

from doubles import FakeConnection, connect_chat


def operate(runtime, *requests):
    """Run operator requests through the engine; return frames a display client saw."""
    client = FakeConnection()
    runtime.hub.add(client)

    async def scenario():
        for request in requests:
            if isinstance(request, (str, bytes)):
                runtime.engine.submit(OperatorMessage(request))
            else:
                action, payload = request
                runtime.engine.submit(OperatorRequest(action, payload))
        await runtime.engine.process_pending()

    asyncio.run(scenario())
    return [json.loads(frame) for frame in client.frames]


def frame(action, payload=None):
    return json.dumps({"action": action, "payload": payload})


class TestFrames:
    def test_every_request_broadcasts(self, runtime):
        frames = operate(runtime, frame("clear"), frame("bogus"), frame("remove", "nobody"))
        assert len(frames) == 3

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"advance"', b"\xff"])
    def test_unparseable_frames_are_dropped_without_broadcast(self, runtime, raw):
        runtime.state.queue = ["Alice"]

        frames = operate(runtime, raw)

        assert frames == []
        assert runtime.state.queue == ["Alice"]

    @pytest.mark.parametrize("action", ["advance", "next", " NEXT ", "Advance"])
    def test_advance_spellings(self, runtime, action):
        runtime.state.queue = ["Alice", "Bob"]

        frames = operate(runtime, frame(action))

        assert runtime.state.current == "Alice"
        assert frames[-1]["current"] == "Alice"
        assert frames[-1]["next"] == "Bob"

    def test_aliases_route_to_canonical_handlers(self, runtime):
        for alias, canonical in ACTION_ALIASES.items():
            assert canonical in runtime.control._handlers, alias


class TestQueueActions:
    def test_clear(self, runtime, repos):
        runtime.state.queue = ["Alice"]
        runtime.state.current = "Bob"

        operate(runtime, frame("clear"))

        assert runtime.state.queue == []
        assert runtime.state.current is None
        assert repos.queue.load().queue == []

    def test_remove_exact_match(self, runtime):
        runtime.state.queue = ["Alice", "Bob"]

        operate(runtime, frame("remove", "alice"), frame("remove", "Bob"))

        assert runtime.state.queue == ["Alice"]

    def test_remove_object_payload(self, runtime):
        runtime.state.queue = ["Alice"]
        operate(runtime, frame("remove", {"name": "Alice"}))
        assert runtime.state.queue == []


class TestRecordResult:
    def test_result_for_current_player(self, runtime, repos):
        runtime.state.current = "Bob"

        frames = operate(
            runtime, frame("result", {"legsFor": 3, "legsAgainst": 1, "avg": 55.5})
        )

        assert runtime.state.stats["Bob"] == PlayerStats(
            games=1, wins=1, losses=0, legs_for=3, legs_against=1, avg_sum=55.5
        )
        assert runtime.state.current is None
        assert frames[-1]["current"] is None
        assert repos.stats.load()["Bob"].avg_sum == 55.5
        assert repos.queue.load().current is None

    def test_average_synonym(self, runtime):
        runtime.state.current = "Bob"
        operate(
            runtime,
            frame("record-result", {"legsFor": 1, "legsAgainst": 3, "average": 40}),
        )
        assert runtime.state.stats["Bob"].losses == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"legsFor": "3", "legsAgainst": 1, "avg": 50},
            {"legsFor": 3, "legsAgainst": True, "avg": 50},
            {"legsFor": 3, "legsAgainst": 1},
            {"legsFor": 3, "legsAgainst": 1, "avg": None},
            "3-1",
            None,
        ],
    )
    def test_malformed_payload_is_ignored(self, runtime, payload):
        runtime.state.current = "Bob"

        frames = operate(runtime, frame("result", payload))

        assert runtime.state.stats == {}
        assert runtime.state.current == "Bob"
        assert len(frames) == 1

    def test_non_finite_values_are_ignored(self, runtime):
        runtime.state.current = "Bob"
        raw = '{"action": "result", "payload": {"legsFor": 3, "legsAgainst": 1, "avg": NaN}}'

        operate(runtime, raw)

        assert runtime.state.stats == {}

    def test_out_of_range_integers_are_ignored(self, runtime):
        runtime.state.current = "Bob"
        huge = "9" * 400
        raw = (
            '{"action": "result", "payload": '
            f'{{"legsFor": {huge}, "legsAgainst": 1, "avg": 50}}}}'
        )

        frames = operate(runtime, raw)

        assert runtime.state.stats == {}
        assert runtime.state.current == "Bob"
        assert len(frames) == 1

    def test_no_current_player(self, runtime):
        operate(runtime, frame("result", {"legsFor": 3, "legsAgainst": 1, "avg": 50}))
        assert runtime.state.stats == {}


class TestAnnouncementActions:
    def test_add(self, runtime, repos, clock):
        frames = operate(runtime, frame("loop_add", {"message": " Welcome! ", "intervalMinutes": 5}))

        [item] = runtime.state.announcements
        assert item.message == "Welcome!"
        assert item.interval_minutes == 5
        assert item.enabled
        assert item.last_sent_at == clock()
        assert frames[-1]["loopMessages"] == [
            {
                "id": item.id,
                "message": "Welcome!",
                "intervalMinutes": 5,
                "enabled": True,
                "nextSendInSeconds": 300,
            }
        ]
        assert [a.id for a in repos.announcements.load(clock())] == [item.id]

    def test_interval_accepts_numeric_string(self, runtime):
        operate(runtime, frame("announcement-add", {"message": "Hi", "intervalMinutes": "2.5"}))
        assert runtime.state.announcements[0].interval_minutes == 2.5

    @pytest.mark.parametrize(
        "payload",
        [
            {"message": "   ", "intervalMinutes": 5},
            {"message": "Hi", "intervalMinutes": 0},
            {"message": "Hi", "intervalMinutes": -1},
            {"message": "Hi", "intervalMinutes": "soon"},
            {"message": "Hi", "intervalMinutes": True},
            {"message": "Hi"},
        ],
    )
    def test_add_rejects_invalid(self, runtime, payload):
        operate(runtime, frame("loop_add", payload))
        assert runtime.state.announcements == []

    def test_update(self, runtime, clock):
        item = runtime.state.add_announcement("Hi", 5, clock())

        operate(
            runtime,
            frame("loop_update", {"id": item.id, "message": "Hello", "intervalMinutes": 10}),
            frame("loop_update", {"id": "missing", "message": "X", "intervalMinutes": 1}),
        )

        assert [(a.message, a.interval_minutes) for a in runtime.state.announcements] == [
            ("Hello", 10)
        ]

    def test_toggle_scenario(self, runtime, clock):
        operate(runtime, frame("announcement_add", {"message": "Welcome!", "intervalMinutes": 5}))
        item = runtime.state.announcements[0]

        clock.advance(60_000)
        operate(runtime, frame("loop_toggle", {"id": item.id, "enabled": False}))
        assert item.enabled is False

        clock.advance(10 * 60_000)
        frames = operate(runtime, frame("loop_toggle", {"id": item.id, "enabled": True}))

        assert item.enabled is True
        assert item.last_sent_at == clock()
        assert frames[-1]["loopMessages"][0]["nextSendInSeconds"] == 300

    def test_delete(self, runtime, clock):
        a = runtime.state.add_announcement("A", 5, clock())
        b = runtime.state.add_announcement("B", 5, clock())

        operate(runtime, frame("loop_delete", a.id), frame("loop_delete", {"id": "missing"}))

        assert runtime.state.announcements == [b]


class TestCommandActions:
    def test_add(self, runtime, repos):
        frames = operate(
            runtime, frame("command_add", {"name": " !Discord ", "response": "discord.gg/darts"})
        )

        [command] = runtime.state.commands
        assert command.name == "!discord"
        assert frames[-1]["customCommands"] == [
            {"id": command.id, "name": "!discord", "response": "discord.gg/darts"}
        ]
        assert repos.commands.load() == [command]

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "discord", "response": "x"},
            {"name": "!", "response": ""},
            {"name": "", "response": "x"},
            {"name": "!discord", "response": "   "},
        ],
    )
    def test_add_rejects_invalid(self, runtime, payload):
        operate(runtime, frame("command_add", payload))
        assert runtime.state.commands == []

    def test_bare_prefix_is_a_valid_name(self, runtime):
        operate(runtime, frame("command_add", {"name": "!", "response": "x"}))

        assert [c.name for c in runtime.state.commands] == ["!"]

    def test_duplicate_name_is_rejected(self, runtime):
        operate(
            runtime,
            frame("command_add", {"name": "!discord", "response": "one"}),
            frame("command_add", {"name": "!DISCORD", "response": "two"}),
        )

        assert [c.response for c in runtime.state.commands] == ["one"]

    def test_update_rejects_name_taken_by_another(self, runtime, clock):
        a = runtime.state.add_command("!a", "one", clock())
        b = runtime.state.add_command("!b", "two", clock())

        operate(
            runtime,
            frame("command_update", {"id": b.id, "name": "!a", "response": "x"}),
            frame("command_update", {"id": a.id, "name": "!c", "response": "three"}),
        )

        assert (a.name, a.response) == ("!c", "three")
        assert (b.name, b.response) == ("!b", "two")

    def test_delete(self, runtime, clock):
        a = runtime.state.add_command("!a", "one", clock())
        operate(runtime, frame("command_delete", {"id": a.id}))
        assert runtime.state.commands == []


class TestSettingsSave:
    def test_first_save_completes_setup_and_connects(self, runtime, transports, repos):
        frames = operate(runtime, frame("settings_save", {"channel": " DartsNight "}))

        config = repos.config.load()
        assert (config.channel, config.setup_completed) == ("dartsnight", True)
        assert frames[-1]["settings"] == {
            "channel": "dartsnight",
            "setupCompleted": True,
            "botConnected": False,
        }
        assert [t.channel for t in transports.created] == ["dartsnight"]

    def test_empty_channel_is_rejected(self, runtime, transports, repos):
        operate(runtime, frame("settings_save", {"channel": "  "}))

        assert repos.config.load().setup_completed is False
        assert transports.created == []

    def test_channel_change_reconnects(self, ready_runtime, transports):
        async def scenario():
            old = await connect_chat(ready_runtime, transports)
            ready_runtime.engine.submit(OperatorRequest("settings_save", {"channel": "other"}))
            await ready_runtime.engine.process_pending()
            await asyncio.sleep(0)
            return old

        old = asyncio.run(scenario())

        assert old.closed
        assert [t.channel for t in transports.created] == ["dartsnight", "other"]
        assert ready_runtime.session.transport is transports.last

    def test_same_channel_keeps_session(self, ready_runtime, transports):
        async def scenario():
            await connect_chat(ready_runtime, transports)
            ready_runtime.engine.submit(
                OperatorRequest("settings_save", {"channel": "DartsNight"})
            )
            await ready_runtime.engine.process_pending()

        asyncio.run(scenario())

        assert len(transports.created) == 1
        assert ready_runtime.session.connected
