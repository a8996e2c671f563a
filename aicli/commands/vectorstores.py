"""
VectorStoresCommand — Vector stores, their files, and file batches

vectorstores              create / retrieve / update / delete / list
vectorstores files        create / retrieve / list / delete
vectorstores filebatches  create / createandpoll / uploadandpoll / retrieve / list / cancel

uploadandpoll accepts local files and directories; directories are
walked for text files matching --ext.
"""

from pathlib import Path
from typing import Iterable, List

from ..core.registry import Command, Namespace, Parameter
from ..core.resolver import FILES, VECTORSTORES
from ..errors import InvalidArgument
from ..services.client import BATCH_ACTIVE, to_plain
from .base import BaseCommand, bind, int_arg, json_arg, list_arg, pick


DEFAULT_EXTENSIONS = (".py", ".js", ".ts", ".json", ".md", ".txt")
UPLOAD_PURPOSE = "assistants"


def collect_files(paths: Iterable[str], extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> List[Path]:
    """
    Expand files and directories into a sorted, de-duplicated file list.

    Explicit files are always kept; directory contents are filtered by extension.
    """
    wanted = {e if e.startswith(".") else f".{e}" for e in extensions}
    found = []
    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_file():
            found.append(path)
        elif path.is_dir():
            found.extend(
                p for p in sorted(path.rglob("*"))
                if p.is_file() and p.suffix in wanted
            )
        else:
            raise InvalidArgument("paths", f"no such file or directory: {path}")

    unique = []
    seen = set()
    for path in found:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


class VectorStoresCommand(BaseCommand):
    """Vector store CRUD."""

    def create(self, args):
        params = pick(args, "name")
        file_ids = list_arg(args, "file_ids")
        if file_ids:
            params["file_ids"] = file_ids
        expires_after = json_arg(args, "expires_after", expect=dict)
        if expires_after is not None:
            params["expires_after"] = expires_after
        return to_plain(self.client.vector_stores.create(**params))

    def retrieve(self, args):
        return to_plain(self.client.vector_stores.retrieve(args["id"]))

    def update(self, args):
        params = pick(args, "name")
        expires_after = json_arg(args, "expires_after", expect=dict)
        if expires_after is not None:
            params["expires_after"] = expires_after
        return to_plain(self.client.vector_stores.update(args["id"], **params))

    def delete(self, args):
        return to_plain(self.client.vector_stores.delete(args["id"]))

    def list(self, args):
        params = pick(args, "order", "after")
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        return to_plain(self.client.vector_stores.list(**params).data)


class VectorStoreFilesCommand(BaseCommand):
    """Files attached to a vector store."""

    def create(self, args):
        return to_plain(self.client.vector_stores.files.create(
            args["vector_store_id"], file_id=args["file_id"]
        ))

    def retrieve(self, args):
        return to_plain(self.client.vector_stores.files.retrieve(
            args["file_id"], vector_store_id=args["vector_store_id"]
        ))

    def list(self, args):
        params = pick(args, "order", "filter")
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        page = self.client.vector_stores.files.list(args["vector_store_id"], **params)
        return to_plain(page.data)

    def delete(self, args):
        return to_plain(self.client.vector_stores.files.delete(
            args["file_id"], vector_store_id=args["vector_store_id"]
        ))


class FileBatchesCommand(BaseCommand):
    """Batched file attachment."""

    def _file_ids(self, args) -> List[str]:
        file_ids = list_arg(args, "file_ids")
        if not file_ids:
            raise InvalidArgument("file_ids", "at least one file ID is required")
        return file_ids

    def _wait(self, batch, vector_store_id):
        batches = self.client.vector_stores.file_batches
        return self.poller.until_done(
            batch,
            lambda b: batches.retrieve(b.id, vector_store_id=vector_store_id),
            active=BATCH_ACTIVE,
            what="file batch",
        )

    def create(self, args):
        return to_plain(self.client.vector_stores.file_batches.create(
            args["vector_store_id"], file_ids=self._file_ids(args)
        ))

    def createandpoll(self, args):
        vector_store_id = args["vector_store_id"]
        batch = self.client.vector_stores.file_batches.create(vector_store_id, file_ids=self._file_ids(args))
        return to_plain(self._wait(batch, vector_store_id))

    def uploadandpoll(self, args):
        """
        Upload local files, attach them as one batch, wait for indexing.

        Each upload is logged as its own files.create entry when it
        completes, so files already uploaded stay on record if a later
        upload or the batch itself fails.
        """
        vector_store_id = args["vector_store_id"]
        extensions = list_arg(args, "ext") or DEFAULT_EXTENSIONS
        paths = collect_files(list_arg(args, "paths") or [], extensions)
        if not paths:
            raise InvalidArgument("paths", "no matching files to upload")

        file_ids = []
        for path in paths:
            with open(path, "rb") as f:
                uploaded = self.client.files.create(file=f, purpose=UPLOAD_PURPOSE)
            self.log.append("files.create", {"file": str(path), "purpose": UPLOAD_PURPOSE}, to_plain(uploaded))
            file_ids.append(uploaded.id)

        batch = self.client.vector_stores.file_batches.create(vector_store_id, file_ids=file_ids)
        result = to_plain(self._wait(batch, vector_store_id))
        if isinstance(result, dict):
            result["uploaded_file_ids"] = file_ids
        return result

    def retrieve(self, args):
        return to_plain(self.client.vector_stores.file_batches.retrieve(
            args["batch_id"], vector_store_id=args["vector_store_id"]
        ))

    def list(self, args):
        """Files belonging to one batch."""
        params = pick(args, "order", "filter")
        limit = int_arg(args, "limit")
        if limit is not None:
            params["limit"] = limit
        page = self.client.vector_stores.file_batches.list_files(
            args["batch_id"], vector_store_id=args["vector_store_id"], **params
        )
        return to_plain(page.data)

    def cancel(self, args):
        return to_plain(self.client.vector_stores.file_batches.cancel(
            args["batch_id"], vector_store_id=args["vector_store_id"]
        ))


def _store_id(name="vector_store_id", optional=True, description="Vector store ID (default: latest)"):
    return Parameter(name, optional=optional, description=description, latest=VECTORSTORES.key)


def _files() -> Namespace:
    file_id = Parameter("file_id", optional=True, description="File ID (default: latest uploaded file)",
                        latest=FILES.key)
    return Namespace.of(
        "files",
        Command(
            "create",
            params=(_store_id(), file_id),
            handler=bind(VectorStoreFilesCommand, "create"),
            description="Attach a file to a vector store",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_store_id(), Parameter("file_id", description="File ID in vector store")),
            handler=bind(VectorStoreFilesCommand, "retrieve"),
            description="Show a vector store file",
        ),
        Command(
            "list",
            params=(
                _store_id(),
                Parameter("limit", optional=True, description="Max items to return"),
                Parameter("order", optional=True, description="asc or desc"),
                Parameter("filter", optional=True, description="Filter by status (in_progress, completed, ...)"),
            ),
            handler=bind(VectorStoreFilesCommand, "list"),
            description="List files of a vector store",
        ),
        Command(
            "delete",
            params=(_store_id(), Parameter("file_id", description="File ID in vector store")),
            handler=bind(VectorStoreFilesCommand, "delete"),
            description="Detach a file from a vector store",
            audited=True,
        ),
    )


def _filebatches() -> Namespace:
    file_ids = Parameter("file_ids", description="File IDs to batch add (comma-separated or JSON)")
    batch_id = Parameter("batch_id", description="Batch ID")
    return Namespace.of(
        "filebatches",
        Command(
            "create",
            params=(_store_id(), file_ids),
            handler=bind(FileBatchesCommand, "create"),
            description="Attach several files",
            audited=True,
        ),
        Command(
            "createandpoll",
            params=(_store_id(), file_ids),
            handler=bind(FileBatchesCommand, "createandpoll"),
            description="Attach several files and wait for indexing",
            audited=True,
        ),
        Command(
            "uploadandpoll",
            params=(
                _store_id(),
                Parameter("paths", description="Local files or directories (comma-separated or JSON)"),
                Parameter("ext", optional=True,
                          description="Extensions to pick from directories (default: .py,.js,.ts,.json,.md,.txt)"),
            ),
            handler=bind(FileBatchesCommand, "uploadandpoll"),
            description="Upload local files as a batch and wait for indexing",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_store_id(), batch_id),
            handler=bind(FileBatchesCommand, "retrieve"),
            description="Show a file batch",
        ),
        Command(
            "list",
            params=(
                _store_id(),
                batch_id,
                Parameter("limit", optional=True, description="Max items to return"),
                Parameter("order", optional=True, description="asc or desc"),
                Parameter("filter", optional=True, description="Filter by status"),
            ),
            handler=bind(FileBatchesCommand, "list"),
            description="List files in a batch",
        ),
        Command(
            "cancel",
            params=(_store_id(), batch_id),
            handler=bind(FileBatchesCommand, "cancel"),
            description="Cancel a file batch",
            audited=True,
        ),
    )


def register() -> Namespace:
    """Declarative command table for the vectorstores namespace."""
    return Namespace.of(
        "vectorstores",
        Command(
            "create",
            params=(
                Parameter("name", optional=True, description="Vector store name"),
                Parameter("file_ids", optional=True, description="File IDs to index (comma-separated or JSON)"),
                Parameter("expires_after", optional=True, description="Expiration policy (JSON object)"),
            ),
            handler=bind(VectorStoresCommand, "create"),
            description="Create a vector store",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_store_id("id"),),
            handler=bind(VectorStoresCommand, "retrieve"),
            description="Show a vector store",
        ),
        Command(
            "update",
            params=(
                _store_id("id"),
                Parameter("name", optional=True, description="New name for the vector store"),
                Parameter("expires_after", optional=True, description="Expiration policy (JSON object)"),
            ),
            handler=bind(VectorStoresCommand, "update"),
            description="Modify a vector store",
            audited=True,
        ),
        Command(
            "delete",
            params=(_store_id("id", optional=False, description="Vector store ID (empty value: latest)"),),
            handler=bind(VectorStoresCommand, "delete"),
            description="Delete a vector store",
            audited=True,
        ),
        Command(
            "list",
            params=(
                Parameter("limit", optional=True, description="Max items to return"),
                Parameter("order", optional=True, description="asc or desc"),
                Parameter("after", optional=True, description="Pagination cursor"),
            ),
            handler=bind(VectorStoresCommand, "list"),
            description="List vector stores",
        ),
        _files(),
        _filebatches(),
        description="Vector stores",
    )
