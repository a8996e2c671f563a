"""
FilesCommand — Uploaded files

create (upload) / retrieve / list / delete / download
"""

from pathlib import Path

from ..core.registry import Command, Namespace, Parameter
from ..core.resolver import FILES
from ..errors import InvalidArgument
from ..services.client import to_plain
from .base import BaseCommand, bind, pick


DEFAULT_PURPOSE = "assistants"


class FilesCommand(BaseCommand):
    """File storage."""

    def create(self, args):
        path = Path(args["file"]).expanduser()
        if not path.is_file():
            raise InvalidArgument("file", f"no such file: {path}")
        purpose = args.value_or("purpose", DEFAULT_PURPOSE)
        with open(path, "rb") as f:
            return to_plain(self.client.files.create(file=f, purpose=purpose))

    def retrieve(self, args):
        return to_plain(self.client.files.retrieve(args["id"]))

    def list(self, args):
        return to_plain(self.client.files.list(**pick(args, "purpose")).data)

    def delete(self, args):
        return to_plain(self.client.files.delete(args["id"]))

    def download(self, args):
        """Save file content to --output. Returns a confirmation line."""
        output = Path(args["output"]).expanduser()
        response = self.client.files.content(args["id"])
        output.parent.mkdir(parents=True, exist_ok=True)
        response.write_to_file(output)
        return f"File {args['id']} downloaded and saved to {output}"


def _id(optional=True, description="File ID (default: latest)"):
    return Parameter("id", optional=optional, description=description, latest=FILES.key)


def register() -> Namespace:
    """Declarative command table for the files namespace."""
    return Namespace.of(
        "files",
        Command(
            "create",
            params=(
                Parameter("file", description="Path to file to upload"),
                Parameter("purpose", optional=True, description="Purpose (default: 'assistants')"),
            ),
            handler=bind(FilesCommand, "create"),
            description="Upload a file",
            audited=True,
        ),
        Command(
            "retrieve",
            params=(_id(),),
            handler=bind(FilesCommand, "retrieve"),
            description="Show file metadata",
        ),
        Command(
            "list",
            params=(Parameter("purpose", optional=True, description="Only files with this purpose"),),
            handler=bind(FilesCommand, "list"),
            description="List files",
        ),
        Command(
            "delete",
            params=(_id(optional=False, description="File ID (empty value: latest)"),),
            handler=bind(FilesCommand, "delete"),
            description="Delete a file",
            audited=True,
        ),
        Command(
            "download",
            params=(
                _id(),
                Parameter("output", description="Output file name (path to save the file)"),
            ),
            handler=bind(FilesCommand, "download"),
            description="Download file content",
        ),
        description="Files",
    )
