from .formats import NodeFormat, JsonType, Placement, Collapsible
from .tag import TagEntry, TAGS_KEY, TAG_KEY, LABEL_KEY, ID_KEY, TAGS_SCHEMA
from .node import Node, node_key
