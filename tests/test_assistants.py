"""
Tests for AssistantsCommand — assistant lifecycle against a mocked client
"""

import pytest

from aicli.commands.assistants import AssistantsCommand
from aicli.errors import InvalidArgument
from tests.factories import FakeModel, make_args, page


@pytest.fixture
def command(factory):
    return factory.create_command(AssistantsCommand)


class TestCreate:

    def test_defaults_from_config(self, factory, command):
        factory.client.beta.assistants.create.return_value = FakeModel(id="asst_1")

        result = command.create(make_args(name="Helper"))

        assert result == {"id": "asst_1"}
        factory.client.beta.assistants.create.assert_called_once_with(
            name="Helper",
            model="gpt-4.1",
            instructions="You are a helpful assistant.",
            tools=[],
        )

    def test_empty_flags_use_defaults(self, factory, command):
        command.create(make_args(name="Helper", model="", instructions=""))

        kwargs = factory.client.beta.assistants.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1"
        assert kwargs["instructions"] == "You are a helpful assistant."

    def test_tools_json(self, factory, command):
        command.create(make_args(name="Helper", tools='[{"type": "code_interpreter"}]'))

        kwargs = factory.client.beta.assistants.create.call_args.kwargs
        assert kwargs["tools"] == [{"type": "code_interpreter"}]

    def test_vector_stores_enable_file_search(self, factory, command):
        command.create(make_args(name="Helper", vector_store_ids="vs_1,vs_2"))

        kwargs = factory.client.beta.assistants.create.call_args.kwargs
        assert kwargs["tools"] == [{"type": "file_search"}]
        assert kwargs["tool_resources"] == {"file_search": {"vector_store_ids": ["vs_1", "vs_2"]}}

    def test_file_search_not_duplicated(self, factory, command):
        command.create(make_args(name="Helper", tools='[{"type": "file_search"}]', vector_store_ids='["vs_1"]'))

        kwargs = factory.client.beta.assistants.create.call_args.kwargs
        assert kwargs["tools"] == [{"type": "file_search"}]

    def test_invalid_tools_json(self, command):
        with pytest.raises(InvalidArgument) as exc:
            command.create(make_args(name="Helper", tools="[not json"))
        assert exc.value.name == "tools"

    def test_tools_must_be_array(self, command):
        with pytest.raises(InvalidArgument):
            command.create(make_args(name="Helper", tools='{"type": "file_search"}'))


class TestOtherOperations:

    def test_retrieve(self, factory, command):
        factory.client.beta.assistants.retrieve.return_value = FakeModel(id="asst_1", name="Helper")

        assert command.retrieve(make_args(id="asst_1"))["name"] == "Helper"

    def test_update_sends_only_given_fields(self, factory, command):
        factory.client.beta.assistants.update.return_value = {"id": "asst_1"}

        command.update(make_args(id="asst_1", name="Renamed", model=""))

        factory.client.beta.assistants.update.assert_called_once_with("asst_1", name="Renamed")

    def test_delete(self, factory, command):
        factory.client.beta.assistants.delete.return_value = FakeModel(id="asst_1", deleted=True)

        assert command.delete(make_args(id="asst_1")) == {"id": "asst_1", "deleted": True}

    def test_list(self, factory, command):
        factory.client.beta.assistants.list.return_value = page(FakeModel(id="a"), FakeModel(id="b"))

        result = command.list(make_args(limit="2", order="asc"))

        assert [a["id"] for a in result] == ["a", "b"]
        factory.client.beta.assistants.list.assert_called_once_with(order="asc", limit=2)

    def test_list_bad_limit(self, command):
        with pytest.raises(InvalidArgument):
            command.list(make_args(limit="ten"))
