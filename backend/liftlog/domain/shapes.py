"""
Per-shape set arithmetic: personal record candidates and set volume.

Every function dispatches on ExerciseShape explicitly; an unknown shape is a
programming error, never a silent zero.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from liftlog.domain.enums import ExerciseShape, RecordType, WeightUnit

KG_PER_LB = 0.45359237


@dataclass(frozen=True)
class SetValues:
    """Measured values of one logged set."""

    reps: Optional[int] = None
    time_seconds: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: WeightUnit = WeightUnit.KG

    @property
    def load(self) -> float:
        """External load in kilograms. Records and volume are always kg."""
        if not self.weight:
            return 0.0
        if self.weight_unit == WeightUnit.LBS:
            return self.weight * KG_PER_LB
        return self.weight


PRIMARY_RECORD_TYPE: Dict[ExerciseShape, RecordType] = {
    ExerciseShape.REP_AND_WEIGHT: RecordType.MAX_VOLUME,
    ExerciseShape.REP_BASED: RecordType.MAX_REPS,
    ExerciseShape.TIMED: RecordType.MAX_TIME,
}

# Display priority: lower number wins. MAX_TIME and MAX_REPS share a tier.
PR_PRIORITY: Dict[RecordType, int] = {
    RecordType.MAX_VOLUME: 0,
    RecordType.MAX_TIME: 1,
    RecordType.MAX_REPS: 1,
    RecordType.MAX_WEIGHT: 2,
}


def _unknown_shape(shape) -> ValueError:
    return ValueError(f"Unhandled exercise shape: {shape!r}")


def record_candidates(shape: ExerciseShape, values: SetValues) -> Dict[RecordType, float]:
    """
    Candidate record values a set produces for its exercise shape.

    Only strictly positive candidates are returned; a zero can never be a
    personal record.
    """
    load = values.load
    # A loaded bodyweight set (weighted push-up) scores like a barbell set.
    if shape == ExerciseShape.REP_AND_WEIGHT or (shape == ExerciseShape.REP_BASED and load > 0):
        reps = values.reps or 0
        candidates = {
            RecordType.MAX_WEIGHT: load,
            RecordType.MAX_REPS: float(reps),
            RecordType.MAX_VOLUME: load * reps,
        }
    elif shape == ExerciseShape.REP_BASED:
        reps = float(values.reps or 0)
        candidates = {
            RecordType.MAX_REPS: reps,
            RecordType.MAX_VOLUME: reps,
        }
    elif shape == ExerciseShape.TIMED:
        seconds = float(values.time_seconds or 0)
        candidates = {
            RecordType.MAX_TIME: seconds,
            RecordType.MAX_WEIGHT: load,
            RecordType.MAX_VOLUME: load * seconds if load > 0 else seconds,
        }
    else:
        raise _unknown_shape(shape)

    return {rt: value for rt, value in candidates.items() if value > 0}


def set_volume(shape: ExerciseShape, values: SetValues) -> float:
    """Load moved by a set: weight x reps, or weight x seconds for timed work."""
    if shape in (ExerciseShape.REP_AND_WEIGHT, ExerciseShape.REP_BASED):
        return values.load * (values.reps or 0)
    if shape == ExerciseShape.TIMED:
        return values.load * (values.time_seconds or 0)
    raise _unknown_shape(shape)


def primary_record_type(shape: ExerciseShape) -> RecordType:
    try:
        return PRIMARY_RECORD_TYPE[shape]
    except KeyError:
        raise _unknown_shape(shape)


def select_display_record(records: List) -> Optional[object]:
    """
    Pick the record to show for one exercise.

    Priority MAX_VOLUME > MAX_TIME = MAX_REPS > MAX_WEIGHT; ties go to the
    higher value, then the more recent achieved_at.
    """
    if not records:
        return None

    def sort_key(record):
        return (
            -PR_PRIORITY[RecordType(record.record_type)],
            record.value,
            record.achieved_at,
        )

    return max(records, key=sort_key)
