"""
Set input schema and shape validation.

A set is validated completely before the engine touches the store, so a
malformed set is rejected with no write.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from liftlog.domain.enums import ExerciseShape, WeightUnit
from liftlog.domain.errors import ValidationError
from liftlog.domain.shapes import SetValues

RPE_MIN = 6
RPE_MAX = 10


class SetInput(BaseModel):
    """Values supplied when logging a set."""

    reps: Optional[int] = Field(None, ge=0, description="Repetitions (rep-based shapes)")
    time_seconds: Optional[int] = Field(None, ge=0, description="Duration (timed shape)")
    weight: Optional[float] = Field(None, ge=0, description="External load")
    weight_unit: WeightUnit = WeightUnit.KG
    rpe: Optional[int] = Field(None, ge=RPE_MIN, le=RPE_MAX, description="Rate of perceived exertion")
    is_warmup: bool = False
    is_dropset: bool = False
    notes: Optional[str] = Field(None, max_length=500)

    @property
    def values(self) -> SetValues:
        return SetValues(
            reps=self.reps,
            time_seconds=self.time_seconds,
            weight=self.weight,
            weight_unit=self.weight_unit,
        )


def parse_set_input(**fields) -> SetInput:
    """
    Build a SetInput, translating schema failures into ValidationError.

    Raises:
        ValidationError: If any field is out of range
    """
    try:
        return SetInput(**fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Invalid set: {first.get('msg')}", field=field) from e


def validate_set_for_shape(shape: ExerciseShape, set_input: SetInput) -> None:
    """
    Check that exactly the value field matching the exercise shape is set.

    Timed exercises take time_seconds; rep-based shapes take reps. The
    populated field must be positive.
    """
    if shape == ExerciseShape.TIMED:
        if set_input.reps is not None:
            raise ValidationError("Timed exercises record time, not reps", field="reps")
        if not set_input.time_seconds:
            raise ValidationError("Timed sets require time_seconds > 0", field="time_seconds")
    elif shape in (ExerciseShape.REP_BASED, ExerciseShape.REP_AND_WEIGHT):
        if set_input.time_seconds is not None:
            raise ValidationError(
                "Rep-based exercises record reps, not time", field="time_seconds"
            )
        if not set_input.reps:
            raise ValidationError("Rep-based sets require reps > 0", field="reps")
    else:
        raise ValueError(f"Unhandled exercise shape: {shape!r}")
