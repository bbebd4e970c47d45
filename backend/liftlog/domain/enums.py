"""
Enumerations shared by models, services and API schemas.
"""

from enum import Enum


class ExerciseShape(str, Enum):
    """How a set of an exercise is measured."""

    TIMED = "TIMED"  # time_seconds, optional load (planks, carries)
    REP_BASED = "REP_BASED"  # reps without external load (push-ups, pull-ups)
    REP_AND_WEIGHT = "REP_AND_WEIGHT"  # reps x load (bench press, squat)


class MuscleGroup(str, Enum):
    CHEST = "CHEST"
    BACK = "BACK"
    LEGS = "LEGS"
    SHOULDERS = "SHOULDERS"
    ARMS = "ARMS"
    CORE = "CORE"
    CARDIO = "CARDIO"
    FULL_BODY = "FULL_BODY"


class WeightUnit(str, Enum):
    KG = "KG"
    LBS = "LBS"


class RecordType(str, Enum):
    MAX_WEIGHT = "MAX_WEIGHT"
    MAX_REPS = "MAX_REPS"
    MAX_TIME = "MAX_TIME"
    MAX_VOLUME = "MAX_VOLUME"


class AchievementCategory(str, Enum):
    MILESTONE = "MILESTONE"
    STREAK = "STREAK"
    CONSISTENCY = "CONSISTENCY"
    PERSONAL_RECORD = "PERSONAL_RECORD"
    VOLUME = "VOLUME"
    EXERCISE_SPECIFIC = "EXERCISE_SPECIFIC"
    MUSCLE_FOCUS = "MUSCLE_FOCUS"


class AchievementRarity(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class ChallengeType(str, Enum):
    TOTAL_WORKOUTS = "TOTAL_WORKOUTS"
    TOTAL_VOLUME = "TOTAL_VOLUME"
    TOTAL_SETS = "TOTAL_SETS"
    WORKOUT_STREAK = "WORKOUT_STREAK"
    SPECIFIC_EXERCISE = "SPECIFIC_EXERCISE"


class ChallengeStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
