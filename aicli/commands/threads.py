"""
ThreadsCommand — Threads, their messages, and their runs

threads           create / retrieve / update / delete / ask
threads messages  create / list
threads runs      create / createandpoll / retrieve / list / stream

Run lookups are scoped: the latest run fallback for `runs retrieve`
only considers runs of the thread named by --thread_id (itself falling
back to the latest thread).
"""

import sys

from ..core.registry import Command, Namespace, Parameter
from ..core.resolver import ASSISTANTS, RUNS, THREADS
from ..errors import ExternalOperationFailure
from ..presentation.symbols import safe_print
from ..services.client import RUN_ACTIVE, to_plain
from .base import BaseCommand, bind, int_arg, json_arg, list_arg, pick


def message_text(message) -> str:
    """Concatenated text blocks of one message."""
    parts = []
    for block in getattr(message, "content", None) or []:
        text = getattr(block, "text", None)
        value = getattr(text, "value", None)
        if value:
            parts.append(value)
    return "\n".join(parts)


class ThreadsCommand(BaseCommand):
    """Thread CRUD plus the one-shot question/answer round trip."""

    def create(self, args):
        metadata = json_arg(args, "metadata", expect=dict)
        params = {"metadata": metadata} if metadata is not None else {}
        return to_plain(self.client.beta.threads.create(**params))

    def retrieve(self, args):
        return to_plain(self.client.beta.threads.retrieve(args["id"]))

    def update(self, args):
        metadata = json_arg(args, "metadata", default={}, expect=dict)
        return to_plain(self.client.beta.threads.update(args["id"], metadata=metadata))

    def delete(self, args):
        return to_plain(self.client.beta.threads.delete(args["id"]))

    def ask(self, args):
        """
        Post a question, run the assistant, wait, and return its reply.

        Returns the reply text (logged as the entry's result).
        """
        threads = self.client.beta.threads
        thread_id = args["thread_id"]

        message = {"role": "user", "content": args["question"]}
        file_ids = list_arg(args, "file_ids")
        if file_ids:
            message["attachments"] = [
                {"file_id": file_id, "tools": [{"type": "file_search"}]}
                for file_id in file_ids
            ]
        threads.messages.create(thread_id, **message)

        run = threads.runs.create(thread_id, assistant_id=args["assistant_id"])
        run = self.poller.until_done(
            run,
            lambda r: threads.runs.retrieve(r.id, thread_id=thread_id),
            active=RUN_ACTIVE,
            what="run",
        )
        if run.status != "completed":
            raise ExternalOperationFailure(f"Run {run.id} ended with status '{run.status}'")

        page = threads.messages.list(thread_id, order="desc", limit=20)
        for candidate in page.data:
            if candidate.role != "assistant":
                continue
            if getattr(candidate, "run_id", None) not in (None, run.id):
                continue
            reply = message_text(candidate)
            if reply:
                return reply
        raise ExternalOperationFailure(f"Run {run.id} completed without an assistant reply")


class MessagesCommand(BaseCommand):
    """Messages inside a thread."""

    def create(self, args):
        return to_plain(self.client.beta.threads.messages.create(
            args["thread_id"], role=args["role"], content=args["content"]
        ))

    def list(self, args):
        params = pick(args, "order")
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        return to_plain(self.client.beta.threads.messages.list(args["thread_id"], **params).data)


class RunsCommand(BaseCommand):
    """Runs of an assistant on a thread."""

    def _run_params(self, args):
        params = {"assistant_id": args["assistant_id"]}
        params.update(pick(args, "instructions"))
        return params

    def create(self, args):
        return to_plain(self.client.beta.threads.runs.create(args["thread_id"], **self._run_params(args)))

    def createandpoll(self, args):
        """Create a run and wait for a terminal status. Non-success states are returned, not raised."""
        runs = self.client.beta.threads.runs
        thread_id = args["thread_id"]
        run = runs.create(thread_id, **self._run_params(args))
        run = self.poller.until_done(
            run,
            lambda r: runs.retrieve(r.id, thread_id=thread_id),
            active=RUN_ACTIVE,
            what="run",
        )
        return to_plain(run)

    def retrieve(self, args):
        return to_plain(self.client.beta.threads.runs.retrieve(args["run_id"], thread_id=args["thread_id"]))

    def list(self, args):
        params = {}
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        return to_plain(self.client.beta.threads.runs.list(args["thread_id"], **params).data)

    def stream(self, args):
        """Print text deltas as they arrive. Nothing is returned."""
        with self.client.beta.threads.runs.stream(
            thread_id=args["thread_id"], **self._run_params(args)
        ) as stream:
            for text in stream.text_deltas:
                safe_print(text, end="")
                sys.stdout.flush()
        safe_print("")
        return None


def _thread_id(optional=True, name="thread_id"):
    return Parameter(name, optional=optional, description="Thread ID (default: latest)",
                     latest=THREADS.key)


def _assistant_id():
    return Parameter("assistant_id", optional=True, description="Assistant ID (default: latest)",
                     latest=ASSISTANTS.key)


def _messages() -> Namespace:
    return Namespace.of(
        "messages",
        Command(
            "create",
            params=(
                _thread_id(),
                Parameter("role", description="Message role ('user' or 'assistant')"),
                Parameter("content", description="Message content"),
            ),
            handler=bind(MessagesCommand, "create"),
            description="Add a message to a thread",
            audited=True,
        ),
        Command(
            "list",
            params=(
                _thread_id(),
                Parameter("limit", optional=True, description="Max messages to return"),
                Parameter("order", optional=True, description="asc or desc"),
            ),
            handler=bind(MessagesCommand, "list"),
            description="List messages of a thread",
        ),
    )


def _runs() -> Namespace:
    run_params = (
        _thread_id(),
        _assistant_id(),
        Parameter("instructions", optional=True, description="Override instructions"),
    )
    return Namespace.of(
        "runs",
        Command(
            "create",
            params=run_params,
            handler=bind(RunsCommand, "create"),
            description="Start a run",
            audited=True,
        ),
        Command(
            "createandpoll",
            params=run_params,
            handler=bind(RunsCommand, "createandpoll"),
            description="Start a run and wait for it to finish",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(
                _thread_id(),
                Parameter("run_id", optional=True, description="Run ID (default: latest run of the thread)",
                          latest=RUNS.key, scope="thread_id"),
            ),
            handler=bind(RunsCommand, "retrieve"),
            description="Show a run",
        ),
        Command(
            "list",
            params=(
                _thread_id(),
                Parameter("limit", optional=True, description="Max runs to return"),
            ),
            handler=bind(RunsCommand, "list"),
            description="List runs of a thread",
        ),
        Command(
            "stream",
            params=run_params,
            handler=bind(RunsCommand, "stream"),
            description="Start a run and stream its output",
        ),
    )


def register() -> Namespace:
    """Declarative command table for the threads namespace."""
    return Namespace.of(
        "threads",
        Command(
            "create",
            params=(Parameter("metadata", optional=True, description="JSON object of metadata"),),
            handler=bind(ThreadsCommand, "create"),
            description="Create a thread",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_thread_id(name="id"),),
            handler=bind(ThreadsCommand, "retrieve"),
            description="Show a thread",
        ),
        Command(
            "update",
            params=(
                _thread_id(name="id"),
                Parameter("metadata", description="JSON object of metadata"),
            ),
            handler=bind(ThreadsCommand, "update"),
            description="Replace a thread's metadata",
            audited=True,
        ),
        Command(
            "delete",
            params=(Parameter("id", description="Thread ID (empty value: latest)", latest=THREADS.key),),
            handler=bind(ThreadsCommand, "delete"),
            description="Delete a thread",
            audited=True,
        ),
        Command(
            "ask",
            params=(
                _thread_id(),
                _assistant_id(),
                Parameter("question", description="Question to ask"),
                Parameter("file_ids", optional=True, description="File IDs to attach (comma-separated or JSON)"),
            ),
            handler=bind(ThreadsCommand, "ask"),
            description="Ask a question and print the assistant's reply",
            audited=True,
        ),
        _messages(),
        _runs(),
        description="Threads",
    )
