"""
Tests for ThreadsCommand, MessagesCommand and RunsCommand

`threads ask` is the full round trip: post, run, wait, read the reply.
"""

import pytest

from aicli.commands.threads import MessagesCommand, RunsCommand, ThreadsCommand, message_text
from aicli.errors import ExternalOperationFailure, InvalidArgument
from tests.factories import FakeModel, make_args, page, text_message


class TestThreads:

    @pytest.fixture
    def command(self, factory):
        return factory.create_command(ThreadsCommand)

    def test_create_without_metadata(self, factory, command):
        factory.client.beta.threads.create.return_value = FakeModel(id="t1")

        assert command.create(make_args()) == {"id": "t1"}
        factory.client.beta.threads.create.assert_called_once_with()

    def test_create_with_metadata(self, factory, command):
        command.create(make_args(metadata='{"topic": "billing"}'))
        factory.client.beta.threads.create.assert_called_once_with(metadata={"topic": "billing"})

    def test_metadata_must_be_object(self, command):
        with pytest.raises(InvalidArgument):
            command.update(make_args(id="t1", metadata="[1]"))

    def test_update(self, factory, command):
        factory.client.beta.threads.update.return_value = {"id": "t1"}

        command.update(make_args(id="t1", metadata='{"k": "v"}'))

        factory.client.beta.threads.update.assert_called_once_with("t1", metadata={"k": "v"})


class TestAsk:

    @pytest.fixture
    def threads(self, factory):
        threads = factory.client.beta.threads
        threads.runs.create.return_value = FakeModel(id="run_1", status="queued")
        threads.runs.retrieve.return_value = FakeModel(id="run_1", status="completed")
        threads.messages.list.return_value = page(
            text_message("assistant", "The answer is 42.", run_id="run_1"),
            text_message("user", "What is the answer?"),
        )
        return threads

    def test_returns_reply_text(self, factory, threads):
        command = factory.create_command(ThreadsCommand)

        reply = command.ask(make_args(thread_id="t1", assistant_id="asst_1", question="What is the answer?"))

        assert reply == "The answer is 42."
        threads.messages.create.assert_called_once_with("t1", role="user", content="What is the answer?")
        threads.runs.create.assert_called_once_with("t1", assistant_id="asst_1")
        threads.runs.retrieve.assert_called_once_with("run_1", thread_id="t1")
        assert factory.sleeps == [1.0]

    def test_attachments(self, factory, threads):
        factory.create_command(ThreadsCommand).ask(
            make_args(thread_id="t1", assistant_id="asst_1", question="Summarize", file_ids="file-1,file-2")
        )

        kwargs = threads.messages.create.call_args.kwargs
        assert kwargs["attachments"] == [
            {"file_id": "file-1", "tools": [{"type": "file_search"}]},
            {"file_id": "file-2", "tools": [{"type": "file_search"}]},
        ]

    def test_failed_run_raises(self, factory, threads):
        threads.runs.retrieve.return_value = FakeModel(id="run_1", status="failed")

        with pytest.raises(ExternalOperationFailure) as exc:
            factory.create_command(ThreadsCommand).ask(
                make_args(thread_id="t1", assistant_id="asst_1", question="?")
            )

        assert "ended with status 'failed'" in exc.value.message

    def test_reply_from_other_run_skipped(self, factory, threads):
        threads.messages.list.return_value = page(text_message("assistant", "Old answer", run_id="run_0"))

        with pytest.raises(ExternalOperationFailure):
            factory.create_command(ThreadsCommand).ask(
                make_args(thread_id="t1", assistant_id="asst_1", question="?")
            )

    def test_through_dispatcher_with_latest_ids(self, factory, threads, capsys):
        factory.seed("assistants.create", result={"id": "asst_1"})
        factory.seed("threads.create", result={"id": "t1"})
        cli = factory.create_cli()

        assert cli.run(["threads", "ask", "--question", "What is the answer?"]) == 0

        assert capsys.readouterr().out == "The answer is 42.\n"
        entry = factory.log.replay()[-1]
        assert entry.command == "threads.ask"
        assert entry.args == {"question": "What is the answer?", "thread_id": "t1", "assistant_id": "asst_1"}
        assert entry.result == "The answer is 42."


class TestMessages:

    def test_create(self, factory):
        factory.client.beta.threads.messages.create.return_value = FakeModel(id="msg_1")

        result = factory.create_command(MessagesCommand).create(
            make_args(thread_id="t1", role="user", content="Hello")
        )

        assert result == {"id": "msg_1"}
        factory.client.beta.threads.messages.create.assert_called_once_with("t1", role="user", content="Hello")

    def test_list(self, factory):
        factory.client.beta.threads.messages.list.return_value = page(FakeModel(id="msg_1"))

        result = factory.create_command(MessagesCommand).list(make_args(thread_id="t1", limit="5"))

        assert result == [{"id": "msg_1"}]
        factory.client.beta.threads.messages.list.assert_called_once_with("t1", limit=5)

    def test_message_text_joins_blocks(self):
        message = text_message("assistant", "one")
        message.content.append(text_message("assistant", "two").content[0])
        assert message_text(message) == "one\ntwo"


class TestRuns:

    def test_create(self, factory):
        factory.client.beta.threads.runs.create.return_value = FakeModel(id="run_1", thread_id="t1")

        result = factory.create_command(RunsCommand).create(
            make_args(thread_id="t1", assistant_id="asst_1", instructions="Be brief")
        )

        assert result["thread_id"] == "t1"
        factory.client.beta.threads.runs.create.assert_called_once_with(
            "t1", assistant_id="asst_1", instructions="Be brief"
        )

    def test_createandpoll_returns_terminal_state(self, factory):
        runs = factory.client.beta.threads.runs
        runs.create.return_value = FakeModel(id="run_1", status="queued")
        runs.retrieve.side_effect = [
            FakeModel(id="run_1", status="in_progress"),
            FakeModel(id="run_1", status="requires_action"),
        ]

        result = factory.create_command(RunsCommand).createandpoll(
            make_args(thread_id="t1", assistant_id="asst_1")
        )

        assert result["status"] == "requires_action"
        assert factory.sleeps == [1.0, 2.0]

    def test_createandpoll_gives_up(self, factory):
        runs = factory.client.beta.threads.runs
        runs.create.return_value = FakeModel(id="run_1", status="queued")
        runs.retrieve.return_value = FakeModel(id="run_1", status="queued")

        with pytest.raises(ExternalOperationFailure):
            factory.create_command(RunsCommand).createandpoll(make_args(thread_id="t1", assistant_id="asst_1"))

        assert len(factory.sleeps) == factory.config.poll.max_attempts

    def test_retrieve(self, factory):
        factory.client.beta.threads.runs.retrieve.return_value = {"id": "run_1"}

        factory.create_command(RunsCommand).retrieve(make_args(thread_id="t1", run_id="run_1"))

        factory.client.beta.threads.runs.retrieve.assert_called_once_with("run_1", thread_id="t1")

    def test_stream_prints_deltas(self, factory, capsys):
        stream = factory.client.beta.threads.runs.stream.return_value.__enter__.return_value
        stream.text_deltas = iter(["Hel", "lo"])

        result = factory.create_command(RunsCommand).stream(make_args(thread_id="t1", assistant_id="asst_1"))

        assert result is None
        assert capsys.readouterr().out == "Hello\n"
        factory.client.beta.threads.runs.stream.assert_called_once_with(thread_id="t1", assistant_id="asst_1")
