"""SQLAlchemy adapter package for flatport."""

from __future__ import annotations

from .mappings import (
    AGENT_CLASS_BY_KIND,
    PaddedDate,
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyAgentRepository,
    SqlAlchemyDescriptionRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyKeymapRepository,
    SqlAlchemyNoteRepository,
    SqlAlchemyPhysicalObjectRepository,
    SqlAlchemyPropertyRepository,
    SqlAlchemyRelationRepository,
    SqlAlchemyRightsRepository,
    SqlAlchemyTermRepository,
)
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "AGENT_CLASS_BY_KIND",
    "PaddedDate",
    "SqlAlchemyAgentRepository",
    "SqlAlchemyDescriptionRepository",
    "SqlAlchemyEventRepository",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyKeymapRepository",
    "SqlAlchemyNoteRepository",
    "SqlAlchemyPhysicalObjectRepository",
    "SqlAlchemyPropertyRepository",
    "SqlAlchemyRelationRepository",
    "SqlAlchemyRightsRepository",
    "SqlAlchemyTermRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
