"""Kind-tagged node identifiers.

Every node is addressed by a canonical string of the form ``"<kind>:<key>"``
where ``kind`` is ``folder`` or ``file`` and ``key`` is the opaque store key.
Parsing a string into a ``NodeId`` is the only place the tag is interpreted;
everything downstream works with the parsed value.
"""

from dataclasses import dataclass
from enum import Enum

from graphfs.exceptions import InvalidArgumentError

MAX_NAME_LENGTH = 255


class NodeKind(str, Enum):
    """The two kinds of node in the hierarchy."""

    FOLDER = "folder"
    FILE = "file"

    @property
    def prefix(self) -> str:
        return f"{self.value}:"


class ExpectedKind(str, Enum):
    """Kind an identifier must carry for a given role."""

    FOLDER = "folder"
    FILE = "file"
    ANY = "any"


@dataclass(frozen=True)
class NodeId:
    """A parsed, kind-tagged node identifier."""

    kind: NodeKind
    key: str

    @classmethod
    def parse(cls, value: str) -> "NodeId":
        """Parse a canonical identifier. Raises InvalidArgumentError when malformed."""
        tag, sep, key = value.partition(":")
        try:
            kind = NodeKind(tag)
        except ValueError:
            kind = None
        if not sep or kind is None:
            raise InvalidArgumentError(
                f"Invalid ID format. Must start with 'file:' or 'folder:'. Received: {value}"
            )
        if not key:
            raise InvalidArgumentError(f"Invalid ID. Missing record key after '{tag}:'")
        return cls(kind=kind, key=key)

    @classmethod
    def folder(cls, key: str) -> "NodeId":
        return cls(kind=NodeKind.FOLDER, key=key)

    @classmethod
    def file(cls, key: str) -> "NodeId":
        return cls(kind=NodeKind.FILE, key=key)

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.key}"


def validate_id(value: str, expected: ExpectedKind) -> NodeId:
    """Check that ``value`` is a non-empty identifier tagged with the expected kind.

    Args:
        value: Canonical identifier received from a caller
        expected: FILE or FOLDER for an exact tag match, ANY for either

    Returns:
        The parsed NodeId

    Raises:
        InvalidArgumentError: If the id is empty, malformed, or carries the wrong tag
    """
    if not value:
        raise InvalidArgumentError("ID cannot be empty")

    if expected is not ExpectedKind.ANY:
        prefix = f"{expected.value}:"
        if not value.startswith(prefix):
            raise InvalidArgumentError(
                f"Invalid ID. Expected a {expected.value} ID starting with '{prefix}', "
                f"but received: {value}"
            )

    return NodeId.parse(value)


def validate_name(value: str, field: str = "name") -> str:
    """Check that a folder name or file title is 1-255 characters long."""
    if not value:
        raise InvalidArgumentError(f"{field} cannot be empty")
    if len(value) > MAX_NAME_LENGTH:
        raise InvalidArgumentError(
            f"{field} must be at most {MAX_NAME_LENGTH} characters, got {len(value)}"
        )
    return value
