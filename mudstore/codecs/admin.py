"""Administrative records: admin accounts, bug reports and snake high scores."""

from .base import BoolField, EntityCodec, IntegerField, TextField, TimestampField, now_timestamp


def _now(_document):
    return now_timestamp()


ADMINS = EntityCodec(
    "admins",
    "Admins",
    "admin.json",
    [
        TextField("username"),
        TextField("level", default="admin"),
        TextField("addedBy", "added_by", default="system"),
        TimestampField("addedOn", "added_on", default_factory=_now),
    ],
    primary_key=("username",),
    update_columns=("level",),
    collection_key="admins",
)

BUG_REPORTS = EntityCodec(
    "bug_reports",
    "Bug Reports",
    "bug-reports.json",
    [
        TextField("id"),
        TextField("user", default="unknown"),
        TimestampField("datetime", default_factory=_now),
        TextField("report", default=""),
        TextField("logs.raw", "logs_raw"),
        TextField("logs.user", "logs_user"),
        BoolField("solved", default=False),
        TimestampField("solvedOn", "solved_on"),
        TextField("solvedBy", "solved_by"),
        TextField("solvedReason", "solved_reason"),
    ],
    primary_key=("id",),
    update_columns=("solved", "solved_on", "solved_by", "solved_reason"),
    collection_key="reports",
)

# Scores without a date share the epoch so re-imports land on the same key.
UNDATED_SCORE = "1970-01-01T00:00:00.000Z"

# A player may post several scores; the timestamp tells them apart.
SNAKE_SCORES = EntityCodec(
    "snake_scores",
    "Snake Scores",
    "snake-scores.json",
    [
        TextField("username"),
        IntegerField("score", default=0),
        TimestampField("date", default=UNDATED_SCORE),
    ],
    primary_key=("username", "date"),
    update_columns=("score",),
    collection_key="scores",
)
