from .user import User
from .catalog import Exercise, WorkoutPlan, PlanDay, PlanExerciseTarget
from .workout import WorkoutSession, WorkoutSet
from .records import PersonalRecord
from .achievements import Achievement, UserAchievement
from .challenges import Challenge, ChallengeParticipant
from .projections import WeeklyMetrics, UserStats

__all__ = [
    "User",
    "Exercise",
    "WorkoutPlan",
    "PlanDay",
    "PlanExerciseTarget",
    "WorkoutSession",
    "WorkoutSet",
    "PersonalRecord",
    "Achievement",
    "UserAchievement",
    "Challenge",
    "ChallengeParticipant",
    "WeeklyMetrics",
    "UserStats",
]
