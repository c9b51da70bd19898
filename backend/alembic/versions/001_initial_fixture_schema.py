"""Initial fixture schema: tournaments, categories, clubs, zones, matches, matchday ledger

Revision ID: 001_initial_fixture
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_fixture"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="DRAFT"),
        sa.Column("fixture_locked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournamentcategory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kickoff_time", sa.String(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("promotional", sa.Boolean(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "name", name="uq_tournament_category_name"),
    )
    op.create_index("ix_tournamentcategory_tournament_id", "tournamentcategory", ["tournament_id"])

    op.create_table(
        "club",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_club_name", "club", ["name"])

    op.create_table(
        "zone",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="OPEN"),
        sa.Column("locked_at", sa.DateTime(), nullable=True),
        sa.Column("fixture_seed", sa.BigInteger(), nullable=True),
        sa.Column("fixture_double_round", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
    )
    op.create_index("ix_zone_tournament_id", "zone", ["tournament_id"])

    op.create_table(
        "clubzone",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("zone_id", sa.Integer(), nullable=False),
        sa.Column("club_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["zone_id"], ["zone.id"]),
        sa.ForeignKeyConstraint(["club_id"], ["club.id"]),
        sa.UniqueConstraint("zone_id", "club_id", name="uq_clubzone_zone_club"),
    )
    op.create_index("ix_clubzone_zone_id", "clubzone", ["zone_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("zone_id", sa.Integer(), nullable=False),
        sa.Column("matchday", sa.Integer(), nullable=False),
        sa.Column("leg", sa.String(), nullable=False),
        sa.Column("home_club_id", sa.Integer(), nullable=False),
        sa.Column("away_club_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="SCHEDULED"),
        sa.Column("date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["zone_id"], ["zone.id"]),
        sa.ForeignKeyConstraint(["home_club_id"], ["club.id"]),
        sa.ForeignKeyConstraint(["away_club_id"], ["club.id"]),
        sa.UniqueConstraint("zone_id", "matchday", "home_club_id", "away_club_id", name="uq_match_zone_matchday_pair"),
    )
    op.create_index("ix_match_tournament_id", "match", ["tournament_id"])
    op.create_index("ix_match_zone_id", "match", ["zone_id"])

    op.create_table(
        "matchcategory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("tournament_category_id", sa.Integer(), nullable=False),
        sa.Column("kickoff_time", sa.String(), nullable=False),
        sa.Column("counts_for_general", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["tournament_category_id"], ["tournamentcategory.id"]),
        sa.UniqueConstraint("match_id", "tournament_category_id", name="uq_matchcategory_match_category"),
    )
    op.create_index("ix_matchcategory_match_id", "matchcategory", ["match_id"])

    op.create_table(
        "zonematchday",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("zone_id", sa.Integer(), nullable=False),
        sa.Column("matchday", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("date", sa.DateTime(), nullable=True),
        sa.Column("played_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["zone_id"], ["zone.id"]),
        sa.UniqueConstraint("zone_id", "matchday", name="uq_zonematchday_zone_matchday"),
    )
    op.create_index("ix_zonematchday_zone_id", "zonematchday", ["zone_id"])


def downgrade() -> None:
    op.drop_index("ix_zonematchday_zone_id", table_name="zonematchday")
    op.drop_table("zonematchday")
    op.drop_index("ix_matchcategory_match_id", table_name="matchcategory")
    op.drop_table("matchcategory")
    op.drop_index("ix_match_zone_id", table_name="match")
    op.drop_index("ix_match_tournament_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_clubzone_zone_id", table_name="clubzone")
    op.drop_table("clubzone")
    op.drop_index("ix_zone_tournament_id", table_name="zone")
    op.drop_table("zone")
    op.drop_index("ix_club_name", table_name="club")
    op.drop_table("club")
    op.drop_index("ix_tournamentcategory_tournament_id", table_name="tournamentcategory")
    op.drop_table("tournamentcategory")
    op.drop_table("tournament")
