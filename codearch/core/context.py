from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from codearch.core.config import Config
from codearch.core.errors import SchemaError, DocumentError
from codearch.core.logging_config import configure_logging
from codearch.store.documents import DocumentStore
from codearch.store.repositories import NodeCache
from codearch.store.schema_resolver import SchemaResolver

logger = logging.getLogger(__name__)

SCHEMA_SUFFIX = ".schema.json"


@dataclass
class ProjectContext:
    """ Everything one open project needs: the resolved top-level schema, where documents live and the node cache.
    Lives from open() to close(); pass it to the services instead of keeping module-level state.
    """
    schema: dict
    schema_path: Path
    store: DocumentStore
    resolver: SchemaResolver
    cache: NodeCache = field(default_factory=NodeCache)

    @property
    def base_path(self) -> Path:
        return self.schema_path.parent

    @property
    def projects_path(self) -> Path:
        return self.store.root

    @classmethod
    def open(cls, cfg: Config) -> ProjectContext:
        """ Open a project from the configuration.

        Raises
        ------
        SchemaError
            if the profile is not a `*.schema.json` file or cannot be loaded/resolved.
        DocumentError
            if the projects directory does not exist.
        """
        configure_logging(cfg.log_level)

        schema_path = cfg.schema_path
        if not cfg.path_file_profile or not schema_path.name.endswith(SCHEMA_SUFFIX):
            raise SchemaError(f"{schema_path} is not a JSON Schema file")
        projects = cfg.projects_path
        if not cfg.path_projects or not projects.is_dir():
            raise DocumentError(f"Projects directory {projects} does not exist")

        resolver = SchemaResolver(schema_path.parent)
        schema = resolver.resolve(resolver.load(schema_path.resolve()))
        if not isinstance(schema, dict):
            raise SchemaError(f"Schema {schema_path} is not a JSON object")

        store = DocumentStore(projects, cfg.document_ext)
        documents = store.list()
        if documents:
            logger.info("Opened project %s with %d documents", projects, len(documents))
        else:
            logger.warning("No documents found in %s", projects)
        return cls(schema=schema, schema_path=schema_path, store=store, resolver=resolver)

    def close(self) -> None:
        self.cache.clear()
        self.resolver.clear()
        logger.info("Closed project %s", self.projects_path)

    def __enter__(self) -> ProjectContext:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
