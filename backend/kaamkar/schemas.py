import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _non_blank(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
NonBlankStr = Annotated[str, AfterValidator(_non_blank)]
# fields named ``date`` would shadow the type inside a class body
CalendarDate = date

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class TransactionType(str, Enum):
    income = "income"
    expense = "expense"


class BudgetBand(str, Enum):
    green = "green"
    yellow = "yellow"
    red = "red"


class GoalStatus(str, Enum):
    not_started = "not-started"
    in_progress = "in-progress"
    completed = "completed"
    abandoned = "abandoned"


class RoutineFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    custom = "custom"


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class TextAlignment(str, Enum):
    left = "left"
    center = "center"
    right = "right"
    justify = "justify"


class AssistantAction(str, Enum):
    generate = "generate"
    summarize = "summarize"
    improve_note = "improveNote"
    prioritize_todos = "prioritizeTodos"


class Payload(BaseModel):
    """Base for request bodies; enums are stored as their plain values."""

    model_config = ConfigDict(use_enum_values=True)


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    id: str
    userId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ApiErrorDetail(BaseModel):
    field: str
    message: str


class ApiErrorPayload(BaseModel):
    code: str
    message: str
    details: list[ApiErrorDetail] = Field(default_factory=list)
    link: Optional[str] = None


class ApiErrorResponse(BaseModel):
    error: ApiErrorPayload


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    status: str


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=128)
    fullName: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        v = value.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("invalid email format")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=128)
    rememberMe: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


class AuthResponse(BaseModel):
    token: str
    userId: str
    email: str
    fullName: Optional[str] = None


class UserRecord(Record):
    email: str
    fullName: Optional[str] = None
    passwordHash: str


# Notes


class NoteFormatting(Payload):
    backgroundColor: Optional[str] = None
    textColor: Optional[str] = None
    fontSize: Optional[str] = None
    isBold: bool = False
    isItalic: bool = False
    isUnderline: bool = False
    alignment: TextAlignment = TextAlignment.left


class NoteCreate(Payload):
    title: NonBlankStr = Field(min_length=1, max_length=200)
    content: str = ""
    categoryId: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    formatting: Optional[NoteFormatting] = None


class NoteUpdate(Payload):
    title: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = None
    categoryId: Optional[str] = None
    tags: Optional[list[str]] = None
    formatting: Optional[NoteFormatting] = None


class NoteRecord(Record):
    title: str
    content: str = ""
    categoryId: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    formatting: Optional[NoteFormatting] = None


class NoteCategoryCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=100)
    parentId: Optional[str] = None


class NoteCategoryRecord(Record):
    name: str
    parentId: Optional[str] = None


class NoteSuggestionResponse(BaseModel):
    noteId: str
    suggestions: str


# Todos


class TodoCreate(Payload):
    title: NonBlankStr = Field(min_length=1, max_length=300)
    priority: Priority = Priority.medium
    dueDate: Optional[date] = None


class TodoUpdate(Payload):
    title: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=300)
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    dueDate: Optional[date] = None


class TodoRecord(Record):
    title: str
    completed: bool = False
    priority: Priority = Priority.medium
    dueDate: Optional[date] = None


# Planner


class EventCreate(Payload):
    title: NonBlankStr = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start: UtcDatetime
    end: UtcDatetime
    allDay: bool = False

    @model_validator(mode="after")
    def validate_period(self) -> "EventCreate":
        if self.end < self.start:
            raise ValueError("end must be >= start")
        return self


class EventUpdate(Payload):
    title: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start: Optional[UtcDatetime] = None
    end: Optional[UtcDatetime] = None
    allDay: Optional[bool] = None

    @model_validator(mode="after")
    def validate_period(self) -> "EventUpdate":
        if self.start and self.end and self.end < self.start:
            raise ValueError("end must be >= start")
        return self


class EventRecord(Record):
    title: str
    description: Optional[str] = None
    start: datetime
    end: datetime
    allDay: bool = False


# Finance


class TransactionCreate(Payload):
    amount: float = Field(gt=0)
    description: str = Field(default="", max_length=500)
    category: NonBlankStr = Field(min_length=1, max_length=100)
    type: TransactionType
    date: CalendarDate


class TransactionUpdate(Payload):
    amount: Optional[float] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=100)
    type: Optional[TransactionType] = None
    date: Optional[CalendarDate] = None


class TransactionRecord(Record):
    amount: float
    description: str = ""
    category: str
    type: TransactionType
    date: CalendarDate


class BudgetCreate(Payload):
    category: NonBlankStr = Field(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    month: str
    spent: float = Field(default=0, ge=0)
    notes: Optional[str] = None

    @field_validator("month")
    @classmethod
    def validate_month(cls, value: str) -> str:
        if not MONTH_PATTERN.match(value):
            raise ValueError("month must use YYYY-MM format")
        return value


class BudgetUpdate(Payload):
    category: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=100)
    amount: Optional[float] = Field(default=None, gt=0)
    spent: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class BudgetRecord(Record):
    category: str
    amount: float
    month: str
    spent: float = 0
    notes: Optional[str] = None


class BudgetStatus(BaseModel):
    budgetId: str
    category: str
    amount: float
    spent: float
    percent: float
    band: BudgetBand


class FinanceSummary(BaseModel):
    month: str
    totalIncome: float
    totalExpense: float
    balance: float
    categoryData: dict[str, float]
    budgets: list[BudgetStatus] = Field(default_factory=list)


class FinanceCategories(BaseModel):
    expense: list[str]
    income: list[str]


# Goals


class Milestone(Payload):
    title: NonBlankStr = Field(min_length=1, max_length=200)
    targetValue: float = Field(gt=0)
    completed: bool = False
    completedAt: Optional[datetime] = None


class GoalCreate(Payload):
    title: NonBlankStr = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    targetValue: float = Field(gt=0)
    currentProgress: float = Field(default=0, ge=0)
    unit: str = ""
    status: GoalStatus = GoalStatus.not_started
    targetDate: Optional[date] = None
    milestones: list[Milestone] = Field(default_factory=list)
    relatedTodos: list[str] = Field(default_factory=list)


class GoalUpdate(Payload):
    title: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    targetValue: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    status: Optional[GoalStatus] = None
    targetDate: Optional[date] = None
    milestones: Optional[list[Milestone]] = None
    relatedTodos: Optional[list[str]] = None


class GoalRecord(Record):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    targetValue: float
    currentProgress: float = 0
    unit: str = ""
    status: GoalStatus = GoalStatus.not_started
    targetDate: Optional[date] = None
    milestones: list[Milestone] = Field(default_factory=list)
    relatedTodos: list[str] = Field(default_factory=list)


class ProgressUpdateCreate(Payload):
    value: float
    notes: Optional[str] = None

    @field_validator("value")
    @classmethod
    def validate_value(cls, value: float) -> float:
        if value == 0:
            raise ValueError("value must not be zero")
        return value


class ProgressUpdateRecord(Record):
    goalId: str
    value: float
    notes: Optional[str] = None


class GoalProgressResponse(BaseModel):
    goal: GoalRecord
    update: ProgressUpdateRecord


# Gym


class RoutineCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    frequency: RoutineFrequency = RoutineFrequency.weekly
    days: list[str] = Field(default_factory=list)


class RoutineUpdate(Payload):
    name: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    frequency: Optional[RoutineFrequency] = None
    days: Optional[list[str]] = None


class RoutineRecord(Record):
    name: str
    description: Optional[str] = None
    frequency: RoutineFrequency = RoutineFrequency.weekly
    days: list[str] = Field(default_factory=list)


class SessionCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    routineId: Optional[str] = None
    date: UtcDatetime
    duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SessionUpdate(Payload):
    name: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    routineId: Optional[str] = None
    date: Optional[UtcDatetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SessionRecord(Record):
    name: str
    routineId: Optional[str] = None
    date: datetime
    duration: Optional[int] = None
    notes: Optional[str] = None


class ExerciseSetCreate(Payload):
    exerciseId: str = Field(min_length=1)
    exerciseName: Optional[str] = None
    setNumber: Optional[int] = Field(default=None, ge=1)
    weight: float = Field(default=0, ge=0)
    reps: int = Field(ge=1)
    isPersonalRecord: bool = False
    notes: Optional[str] = None


class ExerciseSetUpdate(Payload):
    setNumber: Optional[int] = Field(default=None, ge=1)
    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=1)
    isPersonalRecord: Optional[bool] = None
    notes: Optional[str] = None


class ExerciseSetRecord(Record):
    workoutSessionId: str
    exerciseId: str
    exerciseName: Optional[str] = None
    setNumber: int
    weight: float = 0
    reps: int
    isPersonalRecord: bool = False
    notes: Optional[str] = None


class ExerciseCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    category: NonBlankStr = Field(min_length=1, max_length=100)
    equipment: str = "other"
    difficulty: Difficulty = Difficulty.beginner
    muscleGroups: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    instructions: Optional[str] = None


class ExerciseRecord(Record):
    name: str
    category: str
    equipment: str = "other"
    difficulty: Difficulty = Difficulty.beginner
    muscleGroups: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    instructions: Optional[str] = None
    isCustom: bool = False


class SessionDetail(BaseModel):
    session: SessionRecord
    sets: list[ExerciseSetRecord]
    exercises: list[ExerciseRecord]


class WorkoutStats(BaseModel):
    totalVolume: float
    totalSets: int
    exerciseCount: int
    duration: Optional[int] = None
    personalRecords: int


class OneRepMaxResponse(BaseModel):
    weight: float
    reps: int
    oneRepMax: float


class TimeUnderTensionResponse(BaseModel):
    reps: int
    secondsPerRep: float
    seconds: float


class SeedResponse(BaseModel):
    created: int


class TemplateExercise(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    sets: int = Field(ge=1)
    reps: int = Field(ge=1)
    weight: Optional[float] = Field(default=None, ge=0)


class TemplateCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    exercises: list[TemplateExercise] = Field(default_factory=list)


class TemplateUpdate(Payload):
    name: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    exercises: Optional[list[TemplateExercise]] = None


class TemplateRecord(Record):
    name: str
    description: Optional[str] = None
    exercises: list[TemplateExercise] = Field(default_factory=list)


class EquipmentCreate(Payload):
    name: NonBlankStr = Field(min_length=1, max_length=200)
    available: bool = True


class EquipmentUpdate(Payload):
    name: Optional[NonBlankStr] = Field(default=None, min_length=1, max_length=200)
    available: Optional[bool] = None


class EquipmentRecord(Record):
    name: str
    available: bool = True
    lastUsed: Optional[datetime] = None


# Dashboard


class DashboardStats(BaseModel):
    notesTotal: int
    notesRecent: int
    todosTotal: int
    todosCompleted: int
    eventsToday: int
    eventsUpcoming: int
    monthExpenses: float
    monthBudget: float
    goalsActive: int
    goalsCompleted: int


# Assistant


class AssistantRequest(BaseModel):
    action: AssistantAction
    data: dict[str, Any] = Field(default_factory=dict)


class AssistantResponse(BaseModel):
    result: str


class AssistantErrorResponse(BaseModel):
    error: str
    kind: str


# Admin


class IndexDeclare(BaseModel):
    collection: str = Field(min_length=1, max_length=64)
    fields: list[str] = Field(min_length=2)


class IndexResponse(BaseModel):
    collection: str
    fields: list[str]


class EnvVarStatus(BaseModel):
    exists: bool
    length: Optional[int] = None
    preview: Optional[str] = None


class EnvCheckResponse(BaseModel):
    status: str
    envVars: dict[str, EnvVarStatus]
    timestamp: datetime


class DebugStateResponse(BaseModel):
    backend: str
    counts: dict[str, int]
    indexes: int
