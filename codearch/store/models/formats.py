from __future__ import annotations

from enum import Enum

from codearch.core.errors import UnsupportedFormatError


class Placement(Enum):
    """ Which bucket of the parent a decoded child lands in. """
    VISIBLE = "visible"      # node.children, drives tree expansion
    HIDDEN = "hidden"        # node.hidden_children, property panel only
    NESTED = "nested"        # hidden, but decoded one level further first


class NodeFormat(Enum):
    """ The closed set of `format` values a schema may carry. """
    PARENT_OBJECT = "parent-object"
    ARRAY_PARENT_OBJECTS = "array-parent-objects"
    SUB_OBJECT = "sub-object"
    HIDDEN = "hidden"
    INPUT_STRING = "input-string"
    CHECKBOX = "checkbox"
    DROPDOWN_SELECT = "dropdown-select"
    DROPDOWN_SELECT_TAG = "dropdown-select-tag"
    POOL_DROPDOWN_SELECT = "pool-dropdown-select"
    POOL_DROPDOWN_SELECT_TAG = "pool-dropdown-select-tag"

    @classmethod
    def of(cls, schema: dict | None) -> NodeFormat:
        """ Read the format of a schema.

        Parameters
        ----------
        schema : dict or None
            The governing schema of a node.

        Returns
        -------
        NodeFormat

        Raises
        ------
        UnsupportedFormatError
            if the format is missing or not one of the known values.
        """
        raw = (schema or {}).get("format")
        try:
            return cls(raw)
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported format {raw!r}") from None

    @property
    def placement(self) -> Placement:
        match self:
            case NodeFormat.PARENT_OBJECT | NodeFormat.ARRAY_PARENT_OBJECTS:
                return Placement.VISIBLE
            case NodeFormat.SUB_OBJECT:
                return Placement.NESTED
            case (NodeFormat.HIDDEN | NodeFormat.INPUT_STRING | NodeFormat.CHECKBOX
                  | NodeFormat.DROPDOWN_SELECT | NodeFormat.DROPDOWN_SELECT_TAG
                  | NodeFormat.POOL_DROPDOWN_SELECT | NodeFormat.POOL_DROPDOWN_SELECT_TAG):
                return Placement.HIDDEN
        raise UnsupportedFormatError(f"No placement for {self}")

    @property
    def is_tag_select(self) -> bool:
        return self in (NodeFormat.DROPDOWN_SELECT_TAG, NodeFormat.POOL_DROPDOWN_SELECT_TAG)

    @property
    def is_pool(self) -> bool:
        return self in (NodeFormat.POOL_DROPDOWN_SELECT, NodeFormat.POOL_DROPDOWN_SELECT_TAG)


class JsonType(Enum):
    """ Schema `type` values the synthesizer can build defaults for. """
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    @classmethod
    def of(cls, schema: dict | None) -> JsonType:
        raw = (schema or {}).get("type")
        try:
            return cls(raw)
        except (ValueError, TypeError):
            raise UnsupportedFormatError(f"Type {raw!r} is not supported") from None


class Collapsible(Enum):
    """ Presentation state of a node in the tree. """
    NONE = 0
    COLLAPSED = 1
    EXPANDED = 2
