"""
Queryable shape model consumed by the generators.

The model is loaded from a JSON document of the form::

    {
      "shapes": {
        "example#Job": {
          "type": "structure",
          "members": {
            "createdAt": {
              "target": "smithy.api#Timestamp",
              "traits": {"smithy.api#timestampFormat": "epoch-seconds"}
            }
          }
        }
      }
    }

Only the queries code generation needs are offered here; the model is
otherwise treated as opaque.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ModelError, UnsupportedTraitVariant

TIMESTAMP_FORMAT_TRAIT = "smithy.api#timestampFormat"
DOCUMENTATION_TRAIT = "smithy.api#documentation"
REQUIRED_TRAIT = "smithy.api#required"
IDEMPOTENCY_TOKEN_TRAIT = "smithy.api#idempotencyToken"
HTTP_TRAIT = "smithy.api#http"


class TimestampFormat(Enum):
    """Values of the timestampFormat trait."""

    EPOCH_SECONDS = "epoch-seconds"
    DATE_TIME = "date-time"
    HTTP_DATE = "http-date"
    UNKNOWN = "unknown"

    @classmethod
    def from_trait_value(cls, value: Any, shape_id: str = None) -> "TimestampFormat":
        """Parse a trait value, rejecting anything without a mapping."""
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        raise UnsupportedTraitVariant(TIMESTAMP_FORMAT_TRAIT, value, shape_id)


class ShapeType(Enum):
    """Shape kinds the generators understand."""

    BLOB = "blob"
    BOOLEAN = "boolean"
    STRING = "string"
    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    TIMESTAMP = "timestamp"
    DOCUMENT = "document"
    LIST = "list"
    SET = "set"
    MAP = "map"
    STRUCTURE = "structure"
    OPERATION = "operation"
    SERVICE = "service"


# Prelude shapes every model can target without declaring them
PRELUDE: Dict[str, ShapeType] = {
    "smithy.api#Blob": ShapeType.BLOB,
    "smithy.api#Boolean": ShapeType.BOOLEAN,
    "smithy.api#String": ShapeType.STRING,
    "smithy.api#Byte": ShapeType.BYTE,
    "smithy.api#Short": ShapeType.SHORT,
    "smithy.api#Integer": ShapeType.INTEGER,
    "smithy.api#Long": ShapeType.LONG,
    "smithy.api#Float": ShapeType.FLOAT,
    "smithy.api#Double": ShapeType.DOUBLE,
    "smithy.api#Timestamp": ShapeType.TIMESTAMP,
    "smithy.api#Document": ShapeType.DOCUMENT,
}


@dataclass
class MemberShape:
    """A named member of an aggregate shape."""

    id: str
    name: str
    target: str
    traits: Dict[str, Any] = field(default_factory=dict)

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits


@dataclass
class Shape:
    """A top-level shape in the model."""

    id: str
    type: ShapeType
    members: List[MemberShape] = field(default_factory=list)
    traits: Dict[str, Any] = field(default_factory=dict)
    input: Optional[str] = None
    output: Optional[str] = None
    operations: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.id.split("#", 1)[-1]

    @property
    def namespace(self) -> str:
        return self.id.split("#", 1)[0] if "#" in self.id else ""

    def get_member(self, name: str) -> Optional[MemberShape]:
        for member in self.members:
            if member.name == name:
                return member
        return None


class Model:
    """Read-only index of shapes by id."""

    def __init__(self, shapes: Dict[str, Shape]):
        self._shapes = dict(shapes)
        for shape_id, shape_type in PRELUDE.items():
            self._shapes.setdefault(shape_id, Shape(shape_id, shape_type))

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Model":
        """
        Build a model from its JSON document form.

        Args:
            document: Parsed model document with a ``shapes`` object

        Returns:
            Model instance

        Raises:
            ModelError: If the document is malformed
        """
        if not isinstance(document, dict) or not isinstance(
            document.get("shapes"), dict
        ):
            raise ModelError("Model document must contain a 'shapes' object")

        shapes = {}
        for shape_id, node in document["shapes"].items():
            shapes[shape_id] = _parse_shape(shape_id, node)

        return cls(shapes)

    def get_shape(self, shape_id: str) -> Optional[Shape]:
        return self._shapes.get(shape_id)

    def expect_shape(self, shape_id: str) -> Shape:
        """Get a shape by id, failing if the model does not define it."""
        shape = self._shapes.get(shape_id)
        if shape is None:
            raise ModelError(f"Shape not found in model: {shape_id}")
        return shape

    def expect_member(self, member_id: str) -> MemberShape:
        """Get a member by its ``namespace#Shape$member`` id."""
        container_id, _, member_name = member_id.partition("$")
        member = self.expect_shape(container_id).get_member(member_name)
        if member is None:
            raise ModelError(f"Member not found in model: {member_id}")
        return member

    def shapes_of_type(self, shape_type: ShapeType) -> List[Shape]:
        """All shapes of a kind, sorted by id for deterministic output."""
        return sorted(
            (s for s in self._shapes.values() if s.type == shape_type),
            key=lambda s: s.id,
        )

    def timestamp_format(
        self, member_id: str, default: TimestampFormat = TimestampFormat.DATE_TIME
    ) -> TimestampFormat:
        """
        Resolve the timestampFormat trait applied to a member or its target.

        Args:
            member_id: Member id
            default: Format used when neither carries the trait

        Returns:
            TimestampFormat

        Raises:
            UnsupportedTraitVariant: If the trait value has no mapping
        """
        member = self.expect_member(member_id)
        target = self.expect_shape(member.target)

        for traits in (member.traits, target.traits):
            if TIMESTAMP_FORMAT_TRAIT in traits:
                return TimestampFormat.from_trait_value(
                    traits[TIMESTAMP_FORMAT_TRAIT], member_id
                )
        return default

    def __len__(self) -> int:
        return len(self._shapes)


def _parse_shape(shape_id: str, node: Dict[str, Any]) -> Shape:
    if not isinstance(node, dict):
        raise ModelError(f"Shape {shape_id} must be an object")

    try:
        shape_type = ShapeType(node.get("type"))
    except ValueError as e:
        raise ModelError(f"Unsupported shape type for {shape_id}: {node.get('type')}") from e

    members = []
    member_nodes = dict(node.get("members", {}))
    for key in ("member", "key", "value"):
        if key in node:
            member_nodes[key] = node[key]

    for member_name, member_node in member_nodes.items():
        if not isinstance(member_node, dict) or "target" not in member_node:
            raise ModelError(f"Member {shape_id}${member_name} must declare a target")
        members.append(
            MemberShape(
                id=f"{shape_id}${member_name}",
                name=member_name,
                target=member_node["target"],
                traits=dict(member_node.get("traits", {})),
            )
        )

    return Shape(
        id=shape_id,
        type=shape_type,
        members=members,
        traits=dict(node.get("traits", {})),
        input=_target_of(node.get("input")),
        output=_target_of(node.get("output")),
        operations=[_target_of(op) for op in node.get("operations", [])],
    )


def _target_of(node: Any) -> Optional[str]:
    if node is None:
        return None
    if isinstance(node, dict):
        return node.get("target")
    return str(node)
