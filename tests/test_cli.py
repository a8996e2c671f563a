"""
Tests for the dispatcher — one invocation, end to end

Exercises the full state machine against a mocked OpenAI client:
resolve, parse, fill latest ids, invoke, log, print, exit code.
"""

import orjson
import pytest

from aicli.cli import AiCLI, main
from aicli.config import ConfigManager
from aicli.errors import ExternalOperationFailure


class TestHelp:

    def test_no_tokens_prints_help(self, cli, capsys):
        assert cli.run([]) == 0

        out = capsys.readouterr().out
        assert "ai-cli threads create [--metadata]" in out
        assert "ai-cli threads runs retrieve [--thread_id] [--run_id]" in out
        assert "ai-cli assistants create --name" in out

    def test_help_flag_anywhere(self, factory, cli, capsys):
        assert cli.run(["threads", "create", "--help"]) == 0

        assert "CONVENTIONS" in capsys.readouterr().out
        factory.client.beta.threads.create.assert_not_called()

    def test_help_lists_every_namespace(self, cli):
        text = cli.help_text()
        for group in ("assistants", "threads", "files", "vectorstores", "log", "config"):
            assert f"ai-cli {group} " in text

    def test_version(self, cli, capsys):
        assert cli.run(["--version"]) == 0
        assert capsys.readouterr().out.startswith("ai-cli ")


class TestResolutionErrors:

    def test_unknown_command(self, cli, capsys):
        assert cli.run(["bogus"]) == 1

        captured = capsys.readouterr()
        assert "Error: Unknown command: bogus" in captured.err
        assert "COMMANDS" in captured.out

    def test_namespace_alone_is_unknown(self, cli, capsys):
        assert cli.run(["threads", "runs"]) == 1
        assert "Unknown command: threads runs" in capsys.readouterr().err

    def test_missing_required_parameter(self, factory, cli, capsys):
        assert cli.run(["assistants", "create"]) == 1

        assert "Missing required parameter: --name" in capsys.readouterr().err
        factory.client.beta.assistants.create.assert_not_called()


class TestLatestFallback:
    """Id flags left out (or empty) resolve from the history log."""

    def test_create_retrieve_delete_cycle(self, factory, cli, capsys):
        threads = factory.client.beta.threads
        threads.create.return_value = {"id": "t1", "object": "thread"}
        threads.retrieve.return_value = {"id": "t1", "object": "thread"}
        threads.delete.return_value = {"id": "t1", "deleted": True}

        assert cli.run(["threads", "create"]) == 0
        assert cli.run(["threads", "retrieve"]) == 0
        threads.retrieve.assert_called_once_with("t1")

        assert cli.run(["threads", "delete", "--id"]) == 0
        threads.delete.assert_called_once_with("t1")

        capsys.readouterr()
        assert cli.run(["threads", "retrieve"]) == 1
        assert "No recent thread found" in capsys.readouterr().err

    def test_retrieve_on_empty_log(self, factory, cli, capsys):
        assert cli.run(["threads", "retrieve"]) == 1

        assert "No recent thread found in the log" in capsys.readouterr().err
        factory.client.beta.threads.retrieve.assert_not_called()

    def test_explicit_id_wins(self, factory, cli):
        factory.seed("threads.create", result={"id": "t1"})
        factory.client.beta.threads.retrieve.return_value = {"id": "t9"}

        assert cli.run(["threads", "retrieve", "--id", "t9"]) == 0
        factory.client.beta.threads.retrieve.assert_called_once_with("t9")

    def test_delete_requires_flag_presence(self, factory, cli, capsys):
        factory.seed("threads.create", result={"id": "t1"})

        assert cli.run(["threads", "delete"]) == 1
        assert "Missing required parameter: --id" in capsys.readouterr().err

    def test_run_scoped_to_given_thread(self, factory, cli):
        factory.seed("threads.runs.create", result={"id": "run_1", "thread_id": "t1"}, thread_id="t1")
        factory.seed("threads.runs.create", result={"id": "run_2", "thread_id": "t2"}, thread_id="t2")
        factory.client.beta.threads.runs.retrieve.return_value = {"id": "run_1"}

        assert cli.run(["threads", "runs", "retrieve", "--thread_id", "t1"]) == 0
        factory.client.beta.threads.runs.retrieve.assert_called_once_with("run_1", thread_id="t1")

    def test_run_and_thread_both_from_log(self, factory, cli):
        factory.seed("threads.create", result={"id": "t1"})
        factory.seed("threads.create", result={"id": "t2"})
        factory.seed("threads.runs.create", result={"id": "run_1", "thread_id": "t1"})
        factory.seed("threads.runs.create", result={"id": "run_2", "thread_id": "t2"})
        factory.client.beta.threads.runs.retrieve.return_value = {"id": "run_2"}

        assert cli.run(["threads", "runs", "retrieve"]) == 0
        factory.client.beta.threads.runs.retrieve.assert_called_once_with("run_2", thread_id="t2")

    def test_no_run_in_thread(self, factory, cli, capsys):
        factory.seed("threads.runs.create", result={"id": "run_2", "thread_id": "t2"})

        assert cli.run(["threads", "runs", "retrieve", "--thread_id", "t1"]) == 1
        assert "No recent run found in the log for thread_id t1" in capsys.readouterr().err


class TestAuditing:
    """Only successful mutating commands are logged, with resolved args."""

    def test_create_is_logged(self, factory, cli):
        factory.client.beta.assistants.create.return_value = {"id": "asst_1", "name": "Helper"}

        assert cli.run(["assistants", "create", "--name", "Helper"]) == 0

        entries = factory.log.replay()
        assert len(entries) == 1
        assert entries[0].command == "assistants.create"
        assert entries[0].args == {"name": "Helper"}
        assert entries[0].result["id"] == "asst_1"

    def test_logged_args_hold_resolved_id(self, factory, cli):
        factory.seed("files.create", result={"id": "file-1"})
        factory.client.files.delete.return_value = {"id": "file-1", "deleted": True}

        assert cli.run(["files", "delete", "--id"]) == 0

        assert factory.log.replay()[-1].args == {"id": "file-1"}

    def test_reads_are_not_logged(self, factory, cli):
        factory.client.beta.assistants.list.return_value.data = []

        assert cli.run(["assistants", "list"]) == 0
        assert factory.log.replay() == []

    def test_failed_command_not_logged(self, factory, cli, capsys):
        factory.client.beta.threads.create.side_effect = ExternalOperationFailure("rate limited")

        assert cli.run(["threads", "create"]) == 1

        assert "Error: rate limited" in capsys.readouterr().err
        assert factory.log.replay() == []

    def test_log_lines_are_json(self, factory, cli):
        factory.client.beta.threads.create.return_value = {"id": "t1", "created_at": 1700000000}

        cli.run(["threads", "create"])

        line = factory.log_path.read_bytes().splitlines()[0]
        assert orjson.loads(line)["command"] == "threads.create"

    def test_logging_failure_warns_and_succeeds(self, factory, capsys):
        factory.log_path.mkdir(parents=True)
        factory.client.beta.threads.create.return_value = {"id": "t1"}
        cli = factory.create_cli()

        assert cli.run(["threads", "create"]) == 0

        captured = capsys.readouterr()
        assert '"id": "t1"' in captured.out
        assert "Logging failed" in captured.err


class TestOutput:

    def test_result_printed_with_iso_timestamps(self, factory, cli, capsys):
        factory.client.beta.threads.create.return_value = {"id": "t1", "created_at": 0}

        cli.run(["threads", "create"])

        out = capsys.readouterr().out
        assert '"created_at_iso": "1970-01-01T00:00:00+00:00"' in out

    def test_unexpected_exception_is_reported(self, factory, cli, capsys):
        factory.client.beta.threads.create.side_effect = RuntimeError("boom")

        assert cli.run(["threads", "create"]) == 1
        assert "Error: boom" in capsys.readouterr().err


class TestMain:

    def test_interrupt_exits_130(self, monkeypatch, capsys):
        def interrupted(self, tokens):
            raise KeyboardInterrupt
        monkeypatch.setattr(AiCLI, "run", interrupted)
        monkeypatch.setattr(AiCLI, "__init__", lambda self: None)

        assert main(["threads", "create"]) == 130
        assert "Interrupted." in capsys.readouterr().err

    def test_main_help(self, monkeypatch, factory, capsys):
        monkeypatch.setattr("aicli.cli.ConfigManager", lambda: factory.config_manager)

        assert main([]) == 0
        assert "COMMANDS" in capsys.readouterr().out

    def test_unusable_environment_value_exits_1(self, monkeypatch, factory, capsys):
        monkeypatch.setenv("AICLI_POLL_INTERVAL", "fast")
        monkeypatch.setattr("aicli.cli.ConfigManager", lambda: ConfigManager(factory.config_dir))

        assert main(["log", "path"]) == 1

        err = capsys.readouterr().err
        assert "Error: Invalid value for poll.interval: 'fast'" in err
        assert "Traceback" not in err

    def test_invalid_file_value_exits_1(self, monkeypatch, factory, capsys):
        (factory.config_dir / "config.yaml").write_text("poll:\n  interval: -2\n")
        monkeypatch.setattr("aicli.cli.ConfigManager", lambda: ConfigManager(factory.config_dir))

        assert main(["log", "path"]) == 1
        assert "poll.interval must be positive" in capsys.readouterr().err


class TestLazyClient:

    def test_local_commands_need_no_client(self, factory, monkeypatch):
        from aicli.config import ConfigManager

        def fail(api):
            raise AssertionError("client should not be built")
        monkeypatch.setattr("aicli.cli.create_client", fail)
        cli = AiCLI(config_manager=ConfigManager(factory.config_dir))

        assert cli.run(["log", "path"]) == 0
        assert cli.run(["config", "show"]) == 0

    @pytest.mark.parametrize("tokens", [["threads", "create"]])
    def test_client_built_on_first_remote_call(self, factory, monkeypatch, tokens):
        from aicli.config import ConfigManager

        built = []
        def fake(api):
            built.append(api)
            return factory.client
        factory.client.beta.threads.create.return_value = {"id": "t1"}
        monkeypatch.setattr("aicli.cli.create_client", fake)
        cli = AiCLI(config_manager=ConfigManager(factory.config_dir))

        assert cli.run(tokens) == 0
        assert len(built) == 1


class TestExplicitDeleteCycle:

    def test_delete_by_explicit_id_clears_latest(self, factory, cli, capsys):
        factory.client.beta.threads.create.return_value = {"id": "t1"}
        factory.client.beta.threads.retrieve.return_value = {"id": "t1"}
        factory.client.beta.threads.delete.return_value = {"id": "t1", "deleted": True}

        assert cli.run(["threads", "create"]) == 0
        assert cli.run(["threads", "delete", "--id", "t1"]) == 0

        capsys.readouterr()
        assert cli.run(["threads", "retrieve"]) == 1
        assert "thread" in capsys.readouterr().err
