from enum import StrEnum


class Sport(StrEnum):
    NFL = "nfl"
    CFB = "cfb"
    NBA = "nba"
    NCAAB = "ncaab"


class BetType(StrEnum):
    SPREAD = "spread"
    MONEYLINE = "moneyline"
    TOTAL = "total"


class PreferredBetType(StrEnum):
    SPREAD = "spread"
    MONEYLINE = "moneyline"
    TOTAL = "total"
    ANY = "any"


class PickResult(StrEnum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"


class PredictionTarget(StrEnum):
    MONEYLINE = "moneyline"
    RUNLINE = "runline"
    OU = "ou"


class LeaderboardSortMode(StrEnum):
    OVERALL = "overall"
    RECENT_RUN = "recent_run"
    LONGEST_STREAK = "longest_streak"
    BOTTOM_100 = "bottom_100"


GRADED_RESULTS = frozenset({PickResult.WON, PickResult.LOST, PickResult.PUSH})
