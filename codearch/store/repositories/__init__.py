from .node_cache import NodeCache
from .tag_repo import TagRepo, validate_tags
