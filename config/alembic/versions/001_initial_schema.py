"""Initial schema: movies, rooms, candidate lists, swipes and matches.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "movies",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("overview", sa.Text(), nullable=True),
        sa.Column("poster_path", sa.String(), nullable=True),
        sa.Column("release_date", sa.JSON(), nullable=True),
        sa.Column("genres", sa.JSON(), nullable=True),
        sa.Column("rt_rating", sa.JSON(), nullable=True),
        sa.Column("imdb_rating", sa.String(), nullable=True),
        sa.Column("metascore", sa.String(), nullable=True),
        sa.Column("mpaa_rating", sa.String(), nullable=True),
        sa.Column("runtime", sa.JSON(), nullable=True),
        sa.Column("streaming_services", sa.JSON(), nullable=True),
        sa.Column("last_updated", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_movies_title", "movies", ["title"])
    op.create_index("ix_movies_last_updated", "movies", ["last_updated"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("user1_id", sa.String(), nullable=False),
        sa.Column("user2_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("filters", sa.JSON(), nullable=True),
        sa.Column("filters_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("status IN ('active', 'completed')", name="valid_room_status"),
    )

    op.create_table(
        "room_movies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "room_id",
            sa.String(16),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "movie_id",
            sa.String(),
            sa.ForeignKey("movies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.UniqueConstraint("room_id", "position", name="uq_room_movie_position"),
        sa.UniqueConstraint("room_id", "movie_id", name="uq_room_movie_movie"),
    )
    op.create_index("ix_room_movies_room_id", "room_movies", ["room_id"])

    op.create_table(
        "swipes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "room_id",
            sa.String(16),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column(
            "movie_id",
            sa.String(),
            sa.ForeignKey("movies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("direction", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("room_id", "user_id", "movie_id", name="uq_swipe_room_user_movie"),
        sa.CheckConstraint("direction IN ('like', 'dislike')", name="valid_swipe_direction"),
    )
    op.create_index("ix_swipes_room_movie", "swipes", ["room_id", "movie_id"])

    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "room_id",
            sa.String(16),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "movie_id",
            sa.String(),
            sa.ForeignKey("movies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("room_id", "movie_id", name="uq_match_room_movie"),
    )
    op.create_index("ix_matches_room_id", "matches", ["room_id"])


def downgrade() -> None:
    op.drop_index("ix_matches_room_id")
    op.drop_table("matches")
    op.drop_index("ix_swipes_room_movie")
    op.drop_table("swipes")
    op.drop_index("ix_room_movies_room_id")
    op.drop_table("room_movies")
    op.drop_table("rooms")
    op.drop_index("ix_movies_last_updated")
    op.drop_index("ix_movies_title")
    op.drop_table("movies")
