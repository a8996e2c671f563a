"""
AssistantsCommand — Assistant lifecycle

create / retrieve / update / delete / list against the Assistants API.
Id flags fall back to the latest assistant created through this tool.
"""

from ..core.registry import Command, Namespace, Parameter
from ..core.resolver import ASSISTANTS
from ..services.client import to_plain
from .base import BaseCommand, bind, int_arg, json_arg, list_arg, pick


class AssistantsCommand(BaseCommand):
    """Assistant CRUD."""

    def create(self, args):
        """Create an assistant. Empty --model/--instructions use configured defaults."""
        api = self.config.api
        params = {
            "name": args["name"],
            "model": args.value_or("model", api.default_model),
            "instructions": args.value_or("instructions", api.default_instructions),
            "tools": json_arg(args, "tools", default=[], expect=list),
        }
        vector_store_ids = list_arg(args, "vector_store_ids")
        if vector_store_ids:
            if not any(t.get("type") == "file_search" for t in params["tools"] if isinstance(t, dict)):
                params["tools"].append({"type": "file_search"})
            params["tool_resources"] = {"file_search": {"vector_store_ids": vector_store_ids}}
        return to_plain(self.client.beta.assistants.create(**params))

    def retrieve(self, args):
        return to_plain(self.client.beta.assistants.retrieve(args["id"]))

    def update(self, args):
        fields = pick(args, "name", "instructions", "model")
        tools = json_arg(args, "tools", expect=list)
        if tools is not None:
            fields["tools"] = tools
        vector_store_ids = list_arg(args, "vector_store_ids")
        if vector_store_ids is not None:
            fields["tool_resources"] = {"file_search": {"vector_store_ids": vector_store_ids}}
        return to_plain(self.client.beta.assistants.update(args["id"], **fields))

    def delete(self, args):
        return to_plain(self.client.beta.assistants.delete(args["id"]))

    def list(self, args):
        params = pick(args, "order", "after")
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        return to_plain(self.client.beta.assistants.list(**params).data)


def _id(description="Assistant ID (default: latest)", optional=True):
    return Parameter("id", optional=optional, description=description, latest=ASSISTANTS.key)


def register() -> Namespace:
    """Declarative command table for the assistants namespace."""
    return Namespace.of(
        "assistants",
        Command(
            "create",
            params=(
                Parameter("name", description="Assistant name"),
                Parameter("instructions", optional=True,
                          description='Instructions (default: "You are a helpful assistant.")'),
                Parameter("tools", optional=True, description="JSON array of tool objects"),
                Parameter("model", optional=True, description="Model name (default: from config)"),
                Parameter("vector_store_ids", optional=True,
                          description="Vector store IDs for file_search (comma-separated or JSON)"),
            ),
            handler=bind(AssistantsCommand, "create"),
            description="Create an assistant",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_id(),),
            handler=bind(AssistantsCommand, "retrieve"),
            description="Show an assistant",
        ),
        Command(
            "update",
            params=(
                _id(),
                Parameter("name", optional=True, description="Assistant name"),
                Parameter("instructions", optional=True, description="Instructions"),
                Parameter("tools", optional=True, description="JSON array of tool objects"),
                Parameter("model", optional=True, description="Model name"),
                Parameter("vector_store_ids", optional=True,
                          description="Replace file_search vector store IDs"),
            ),
            handler=bind(AssistantsCommand, "update"),
            description="Modify an assistant",
            audited=True,
        ),
        Command(
            "delete",
            params=(_id("Assistant ID (empty value: latest)", optional=False),),
            handler=bind(AssistantsCommand, "delete"),
            description="Delete an assistant",
            audited=True,
        ),
        Command(
            "list",
            params=(
                Parameter("limit", optional=True, description="Max items to return (default 20)"),
                Parameter("order", optional=True, description="asc or desc (default desc)"),
                Parameter("after", optional=True, description="Pagination cursor"),
            ),
            handler=bind(AssistantsCommand, "list"),
            description="List assistants",
        ),
        description="Assistants",
    )
