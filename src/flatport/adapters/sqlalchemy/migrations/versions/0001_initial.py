"""Initial flatport schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

from flatport.domain.model import EntityType, Taxonomy

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0001_initial"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_UUID = sa.Uuid()


def _i18n_text_columns(*names: str) -> list[sa.Column[str]]:
    return [sa.Column(name, sa.Text(), nullable=True) for name in names]


def upgrade() -> None:
    op.create_table(
        "term",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("taxonomy", sa.Enum(Taxonomy, native_enum=False), nullable=False),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_term"),
        sa.UniqueConstraint("taxonomy", "culture", "name", name="uq_term_term_taxonomy"),
    )
    op.create_table(
        "object_term_relation",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("object_id", _UUID, nullable=False),
        sa.Column("term_id", _UUID, nullable=False),
        sa.ForeignKeyConstraint(
            ["term_id"], ["term.id"], name="fk_object_term_relation_object_term_relation_term_id_term"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_object_term_relation"),
        sa.UniqueConstraint(
            "object_id", "term_id", name="uq_object_term_relation_object_term_relation_object_id"
        ),
    )
    op.create_table(
        "actor",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("kind", sa.Enum(EntityType, native_enum=False), nullable=False),
        sa.Column("source_culture", sa.String(16), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("description_identifier", sa.String(), nullable=True),
        sa.Column("corporate_body_identifiers", sa.String(), nullable=True),
        sa.Column("entity_type_id", _UUID, nullable=True),
        sa.Column("identifier", sa.String(), nullable=True),
        sa.Column("upload_limit", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["entity_type_id"], ["term.id"], name="fk_actor_actor_entity_type_id_term"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_actor"),
        sa.UniqueConstraint("slug", name="uq_actor_actor_slug"),
    )
    op.create_index("ix_actor_kind", "actor", ["kind"])
    op.create_table(
        "actor_i18n",
        sa.Column("actor_id", _UUID, nullable=False),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.Column("authorized_form_of_name", sa.String(), nullable=True),
        *_i18n_text_columns(
            "dates_of_existence",
            "history",
            "places",
            "legal_status",
            "functions",
            "mandates",
            "internal_structures",
            "general_context",
            "geocultural_context",
            "collecting_policies",
            "buildings",
            "holdings",
            "finding_aids",
            "opening_times",
            "access_conditions",
            "research_services",
        ),
        sa.ForeignKeyConstraint(["actor_id"], ["actor.id"], name="fk_actor_i18n_actor_i18n_actor_id_actor"),
        sa.PrimaryKeyConstraint("actor_id", "culture", name="pk_actor_i18n"),
    )
    op.create_index("ix_actor_i18n_name", "actor_i18n", ["authorized_form_of_name"])
    op.create_table(
        "contact_information",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("actor_id", _UUID, nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("telephone", sa.String(), nullable=True),
        sa.Column("street_address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("region", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        sa.Column("country_code", sa.String(3), nullable=True),
        sa.Column("fax", sa.String(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("contact_person", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["actor_id"], ["actor.id"], name="fk_contact_information_contact_information_actor_id_actor"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_contact_information"),
    )
    op.create_table(
        "description",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("source_culture", sa.String(16), nullable=False),
        sa.Column("identifier", sa.String(), nullable=True),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("parent_id", _UUID, nullable=True),
        sa.Column("repository_id", _UUID, nullable=True),
        sa.Column("level_of_description_id", _UUID, nullable=True),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["description.id"], name="fk_description_description_parent_id_description"
        ),
        sa.ForeignKeyConstraint(
            ["repository_id"], ["actor.id"], name="fk_description_description_repository_id_actor"
        ),
        sa.ForeignKeyConstraint(
            ["level_of_description_id"],
            ["term.id"],
            name="fk_description_description_level_of_description_id_term",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_description"),
        sa.UniqueConstraint("slug", name="uq_description_description_slug"),
    )
    op.create_index("ix_description_identifier", "description", ["identifier"])
    op.create_table(
        "description_i18n",
        sa.Column("description_id", _UUID, nullable=False),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("alternate_title", sa.String(), nullable=True),
        *_i18n_text_columns(
            "extent_and_medium",
            "archival_history",
            "acquisition",
            "scope_and_content",
            "arrangement",
            "access_conditions",
            "reproduction_conditions",
            "physical_characteristics",
            "finding_aids",
            "location_of_originals",
            "related_units_of_description",
            "rules",
            "sources",
            "revision_history",
        ),
        sa.ForeignKeyConstraint(
            ["description_id"],
            ["description.id"],
            name="fk_description_i18n_description_i18n_description_id_description",
        ),
        sa.PrimaryKeyConstraint("description_id", "culture", name="pk_description_i18n"),
    )
    op.create_index("ix_description_i18n_title", "description_i18n", ["title"])
    op.create_table(
        "note",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("object_id", _UUID, nullable=False),
        sa.Column("type_id", sa.String(), nullable=False),
        sa.Column("source_culture", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_note"),
    )
    op.create_index("ix_note_owner", "note", ["object_id", "type_id"])
    op.create_table(
        "note_i18n",
        sa.Column("note_id", _UUID, nullable=False),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["note_id"], ["note.id"], name="fk_note_i18n_note_i18n_note_id_note"),
        sa.PrimaryKeyConstraint("note_id", "culture", name="pk_note_i18n"),
    )
    op.create_table(
        "event",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("object_id", _UUID, nullable=False),
        sa.Column("type_id", sa.String(), nullable=False),
        sa.Column("actor_id", _UUID, nullable=True),
        sa.Column("start_date", sa.String(10), nullable=True),
        sa.Column("end_date", sa.String(10), nullable=True),
        sa.Column("start_time", sa.String(), nullable=True),
        sa.Column("end_time", sa.String(), nullable=True),
        sa.Column("date", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.ForeignKeyConstraint(["actor_id"], ["actor.id"], name="fk_event_event_actor_id_actor"),
        sa.PrimaryKeyConstraint("id", name="pk_event"),
    )
    op.create_index("ix_event_object", "event", ["object_id"])
    op.create_table(
        "property",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("object_id", _UUID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("scope", sa.String(), nullable=True),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_property"),
    )
    op.create_index("ix_property_owner", "property", ["object_id", "name"])
    op.create_table(
        "relation",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("subject_id", _UUID, nullable=False),
        sa.Column("object_id", _UUID, nullable=False),
        sa.Column("type_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_relation"),
    )
    op.create_index("ix_relation_pair", "relation", ["subject_id", "object_id"])
    op.create_table(
        "rights",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("rights_holder_id", _UUID, nullable=True),
        sa.Column("basis_id", _UUID, nullable=True),
        sa.Column("act_id", _UUID, nullable=True),
        sa.Column("copyright_status_id", _UUID, nullable=True),
        sa.Column("restriction", sa.Boolean(), nullable=True),
        sa.Column("start_date", sa.String(10), nullable=True),
        sa.Column("end_date", sa.String(10), nullable=True),
        sa.Column("rights_note", sa.Text(), nullable=True),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.ForeignKeyConstraint(
            ["rights_holder_id"], ["actor.id"], name="fk_rights_rights_rights_holder_id_actor"
        ),
        sa.ForeignKeyConstraint(["basis_id"], ["term.id"], name="fk_rights_rights_basis_id_term"),
        sa.ForeignKeyConstraint(["act_id"], ["term.id"], name="fk_rights_rights_act_id_term"),
        sa.ForeignKeyConstraint(
            ["copyright_status_id"], ["term.id"], name="fk_rights_rights_copyright_status_id_term"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_rights"),
    )
    op.create_table(
        "physical_object",
        sa.Column("id", _UUID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("type_id", _UUID, nullable=True),
        sa.Column("culture", sa.String(16), nullable=False),
        sa.ForeignKeyConstraint(
            ["type_id"], ["term.id"], name="fk_physical_object_physical_object_type_id_term"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_physical_object"),
    )
    op.create_table(
        "keymap",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_name", sa.String(), nullable=False),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("target_name", sa.Enum(EntityType, native_enum=False), nullable=False),
        sa.Column("target_id", _UUID, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_keymap"),
    )
    op.create_index("ix_keymap_source", "keymap", ["source_id", "source_name", "target_name"])


def downgrade() -> None:
    op.drop_index("ix_keymap_source", table_name="keymap")
    op.drop_table("keymap")
    op.drop_table("physical_object")
    op.drop_table("rights")
    op.drop_index("ix_relation_pair", table_name="relation")
    op.drop_table("relation")
    op.drop_index("ix_property_owner", table_name="property")
    op.drop_table("property")
    op.drop_index("ix_event_object", table_name="event")
    op.drop_table("event")
    op.drop_table("note_i18n")
    op.drop_index("ix_note_owner", table_name="note")
    op.drop_table("note")
    op.drop_index("ix_description_i18n_title", table_name="description_i18n")
    op.drop_table("description_i18n")
    op.drop_index("ix_description_identifier", table_name="description")
    op.drop_table("description")
    op.drop_table("contact_information")
    op.drop_index("ix_actor_i18n_name", table_name="actor_i18n")
    op.drop_table("actor_i18n")
    op.drop_index("ix_actor_kind", table_name="actor")
    op.drop_table("actor")
    op.drop_table("object_term_relation")
    op.drop_table("term")
