from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionKind(str, Enum):
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    NUMERIC_SLIDER = "numeric-slider"
    NUMERIC_INPUT = "numeric-input"
    BOOLEAN = "boolean"


CHOICE_KINDS = (QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE)


class Tier(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


# --- Question schema ---

class QuestionSpec(BaseModel):
    """A single question as presented to the user. Immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    id: str
    kind: QuestionKind
    prompt: str
    options: Optional[Tuple[str, ...]] = None # single-choice / multi-choice only
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    required: bool = True
    hint: Optional[str] = None
    section: Optional[str] = None # wizard step; None for single-screen quizzes


class TierThresholds(BaseModel):
    """Inclusive lower bounds for each tier."""
    model_config = ConfigDict(frozen=True)

    low: float = 0.0
    moderate: float
    high: float

    @model_validator(mode='after')
    def check_ascending(self) -> 'TierThresholds':
        if not (self.low <= self.moderate <= self.high):
            raise ValueError(
                f"Tier thresholds must be ascending (low <= moderate <= high), "
                f"got low={self.low}, moderate={self.moderate}, high={self.high}"
            )
        return self


# --- Weighted-sum scoring ---

class PrimaryTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    table: Dict[str, float]
    default_base: float = 50.0 # Used when the label is not in the table
    default_answer: Optional[str] = None # Looked up when the question is unanswered


class NumericModifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["numeric"]
    question_id: str
    coefficient: float
    default: float = 0.0
    clamp: Tuple[float, float] = (0.0, 100.0)


class BooleanModifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["boolean"]
    question_id: str
    when_true: float


class CategoricalModifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["categorical"]
    question_id: str
    table: Dict[str, float]
    default: Optional[str] = None # Label assumed when the question is unanswered


ModifierRule = Annotated[
    Union[NumericModifier, BooleanModifier, CategoricalModifier],
    Field(discriminator="type"),
]


class WeightedSumScoring(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: Literal["weighted_sum"]
    primary: PrimaryTerm
    modifiers: List[ModifierRule] = Field(default_factory=list)
    thresholds: TierThresholds


# --- Composite (multi-metric) scoring ---

class Factor(BaseModel):
    """One normalised input to a composite: either an ordinal scale or a numeric range."""
    model_config = ConfigDict(frozen=True)

    question_id: str
    weight: float = Field(default=1.0, gt=0)
    scale: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    default: Optional[float] = None
    invert: bool = False

    @model_validator(mode='after')
    def check_source(self) -> 'Factor':
        if self.scale is None:
            if self.min is None or self.max is None:
                raise ValueError(f"Factor '{self.question_id}' needs either a scale or both min and max")
            if self.max <= self.min:
                raise ValueError(f"Factor '{self.question_id}' has max <= min")
        return self


class CompositeSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    factors: List[Factor] = Field(..., min_length=1)


class ScoreBlend(BaseModel):
    model_config = ConfigDict(frozen=True)

    weights: Dict[str, float] # {composite_name: weight}, must sum to 1.0
    inverted: List[str] = Field(default_factory=list) # Composites entering as 1 - value


class TierMetric(BaseModel):
    model_config = ConfigDict(frozen=True)

    composite: str
    thresholds: TierThresholds


class LevelSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    composite: str
    max_level: int = Field(..., ge=1)


class CompositeScoring(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: Literal["composite"]
    scales: Dict[str, List[str]]
    composites: Dict[str, CompositeSpec]
    score: ScoreBlend
    tier_metric: TierMetric
    levels: Dict[str, LevelSpec] = Field(default_factory=dict)


ScoringConfig = Annotated[
    Union[WeightedSumScoring, CompositeScoring],
    Field(discriminator="model"),
]


# --- Advice ---

class AdviceBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_score: float
    message: str


class AdviceRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    when: Literal["equals", "in", "is_true", "is_not_true", "at_least", "tier_in"]
    question_id: Optional[str] = None # Not used by tier_in
    value: Any = None

    @model_validator(mode='after')
    def check_operands(self) -> 'AdviceRule':
        if self.when != "tier_in" and not self.question_id:
            raise ValueError(f"Advice rule '{self.when}' requires a question_id")
        if self.when in ("in", "tier_in") and not isinstance(self.value, (list, tuple)):
            raise ValueError(f"Advice rule '{self.when}' requires a list value")
        if self.when == "at_least" and (isinstance(self.value, bool) or not isinstance(self.value, (int, float))):
            raise ValueError("Advice rule 'at_least' requires a numeric value")
        if self.when == "equals" and self.value is None:
            raise ValueError("Advice rule 'equals' requires a value")
        return self


class AdviceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    bands: List[AdviceBand] = Field(..., min_length=1)
    rules: List[AdviceRule] = Field(default_factory=list)
    max_items: int = Field(default=8, ge=1)


class QuizConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    subtitle: str = ""
    version: str = "1.0.0"
    questions: List[QuestionSpec] = Field(..., min_length=1)
    scoring: ScoringConfig
    advice: AdviceConfig


# --- Results ---

class ScoreResult(BaseModel):
    """Pure output of a scorer; recomputed on demand, never mutated."""
    model_config = ConfigDict(frozen=True)

    numeric_score: int = Field(..., ge=0, le=100)
    tier: Tier
    tier_source: str = "score" # "score", or the composite the tier was derived from
    auxiliary_metrics: Dict[str, float] = Field(default_factory=dict)


class QuizOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    quiz_id: str
    result: ScoreResult
    advice: List[str]


# Custom Error Classes
class QuizConfigurationError(ValueError):
    """Raised when a quiz definition is missing, unparsable or inconsistent."""
    pass

class IncompleteAnswersError(ValueError):
    """Raised when a submission is missing answers to required questions."""
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing answers for required questions: {self.missing}")

class UnknownQuizError(ValueError):
    """Raised when a quiz id is not present in the catalog."""
    pass

class AnswerSetFrozenError(ValueError):
    """Raised when an answer set is modified after scoring was triggered."""
    pass
