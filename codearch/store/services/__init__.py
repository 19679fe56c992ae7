from .tagging_service import TaggingService, collect_tag_ids
from .tree_service import TreeService
