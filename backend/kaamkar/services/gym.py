from __future__ import annotations

import logging

from fastapi import HTTPException

from ..errors import ValidationError
from ..persistence import DocumentStore
from ..query import SERVER_TIMESTAMP
from ..repository import Repository
from ..schemas import (
    EquipmentCreate,
    EquipmentRecord,
    EquipmentUpdate,
    ExerciseCreate,
    ExerciseRecord,
    ExerciseSetCreate,
    ExerciseSetRecord,
    ExerciseSetUpdate,
    RoutineCreate,
    RoutineRecord,
    RoutineUpdate,
    SessionCreate,
    SessionDetail,
    SessionRecord,
    SessionUpdate,
    TemplateCreate,
    TemplateRecord,
    TemplateUpdate,
    WorkoutStats,
)
from .exercise_catalog import DEFAULT_EXERCISES

logger = logging.getLogger(__name__)


def one_rep_max(weight: float, reps: int) -> float:
    """Brzycki estimate; undefined from 37 reps on."""
    if reps < 1 or reps > 36:
        raise ValidationError("reps must be between 1 and 36", field="reps")
    if weight < 0:
        raise ValidationError("weight must be >= 0", field="weight")
    return round(weight * 36 / (37 - reps), 2)


def set_volume(weight: float, reps: int, sets: int = 1) -> float:
    return weight * reps * sets


def time_under_tension(reps: int, seconds_per_rep: float) -> float:
    if reps < 1:
        raise ValidationError("reps must be >= 1", field="reps")
    if seconds_per_rep <= 0:
        raise ValidationError("secondsPerRep must be > 0", field="secondsPerRep")
    return reps * seconds_per_rep


class GymService:
    def __init__(self, store: DocumentStore) -> None:
        self.routines = Repository(store, "workoutRoutines", RoutineRecord, label="routine")
        self.sessions = Repository(
            store,
            "workoutSessions",
            SessionRecord,
            dependents=(("exerciseSets", "workoutSessionId"),),
            label="workout session",
        )
        self.sets = Repository(store, "exerciseSets", ExerciseSetRecord, label="exercise set")
        self.exercises = Repository(store, "exercises", ExerciseRecord, label="exercise")
        self.templates = Repository(store, "workoutTemplates", TemplateRecord, label="template")
        self.equipment = Repository(store, "equipment", EquipmentRecord, label="equipment")

    # routines

    def create_routine(self, user_id: str, payload: RoutineCreate) -> RoutineRecord:
        return self.routines.create(user_id, payload)

    def list_routines(self, user_id: str) -> list[RoutineRecord]:
        return self.routines.list_by_owner(user_id)

    def get_routine(self, user_id: str, routine_id: str) -> RoutineRecord:
        return self.routines.get_owned(user_id, routine_id)

    def update_routine(self, user_id: str, routine_id: str, payload: RoutineUpdate) -> RoutineRecord:
        return self.routines.update(user_id, routine_id, payload)

    def delete_routine(self, user_id: str, routine_id: str) -> None:
        self.routines.delete(user_id, routine_id)

    # sessions

    def create_session(self, user_id: str, payload: SessionCreate) -> SessionRecord:
        if payload.routineId:
            self.routines.get_owned(user_id, payload.routineId)
        return self.sessions.create(user_id, payload)

    def list_sessions(self, user_id: str, limit: int | None = None) -> list[SessionRecord]:
        return self.sessions.list_by_owner(user_id, order_field="date", limit=limit)

    def get_session(self, user_id: str, session_id: str) -> SessionRecord:
        return self.sessions.get_owned(user_id, session_id)

    def update_session(self, user_id: str, session_id: str, payload: SessionUpdate) -> SessionRecord:
        if payload.routineId:
            self.routines.get_owned(user_id, payload.routineId)
        return self.sessions.update(user_id, session_id, payload)

    def delete_session(self, user_id: str, session_id: str) -> int:
        return self.sessions.delete(user_id, session_id)

    def session_detail(self, user_id: str, session_id: str) -> SessionDetail:
        session = self.sessions.get_owned(user_id, session_id)
        sets = self.list_sets(user_id, session_id)
        exercises: list[ExerciseRecord] = []
        seen: set[str] = set()
        for exercise_set in sets:
            if exercise_set.exerciseId in seen:
                continue
            seen.add(exercise_set.exerciseId)
            exercise = self.exercises.get_by_id(exercise_set.exerciseId)
            if exercise is None:
                logger.warning("session %s references missing exercise %s", session_id, exercise_set.exerciseId)
                continue
            exercises.append(exercise)
        return SessionDetail(session=session, sets=sets, exercises=exercises)

    def workout_stats(self, user_id: str, session_id: str) -> WorkoutStats:
        session = self.sessions.get_owned(user_id, session_id)
        sets = self.list_sets(user_id, session_id)
        return WorkoutStats(
            totalVolume=sum(set_volume(s.weight, s.reps) for s in sets),
            totalSets=len(sets),
            exerciseCount=len({s.exerciseId for s in sets}),
            duration=session.duration,
            personalRecords=sum(1 for s in sets if s.isPersonalRecord),
        )

    # exercise sets

    def add_set(self, user_id: str, session_id: str, payload: ExerciseSetCreate) -> ExerciseSetRecord:
        self.sessions.get_owned(user_id, session_id)
        exercise = self.get_exercise(user_id, payload.exerciseId)
        data = payload.model_dump()
        data["workoutSessionId"] = session_id
        data["exerciseName"] = payload.exerciseName or exercise.name
        if payload.setNumber is None:
            data["setNumber"] = len(self.list_sets(user_id, session_id)) + 1
        return self.sets.create(user_id, data)

    def list_sets(self, user_id: str, session_id: str) -> list[ExerciseSetRecord]:
        return self.sets.list_by_owner(
            user_id, {"workoutSessionId": session_id}, order_field="setNumber", direction="asc", tiebreak="id"
        )

    def update_set(self, user_id: str, set_id: str, payload: ExerciseSetUpdate) -> ExerciseSetRecord:
        return self.sets.update(user_id, set_id, payload)

    def mark_personal_record(self, user_id: str, set_id: str, is_record: bool = True) -> ExerciseSetRecord:
        return self.sets.update(user_id, set_id, {"isPersonalRecord": is_record})

    def delete_set(self, user_id: str, set_id: str) -> None:
        self.sets.delete(user_id, set_id)

    def personal_records(self, user_id: str, exercise_id: str) -> list[ExerciseSetRecord]:
        return self.sets.list_by_owner(user_id, {"exerciseId": exercise_id, "isPersonalRecord": True})

    def exercise_history(self, user_id: str, exercise_id: str, limit: int | None = None) -> list[ExerciseSetRecord]:
        return self.sets.list_by_owner(user_id, {"exerciseId": exercise_id}, limit=limit)

    # exercises

    def list_exercises(
        self, user_id: str, category: str | None = None, difficulty: str | None = None
    ) -> list[ExerciseRecord]:
        """Shared pool plus the user's custom exercises, ordered by name."""
        shared = self.exercises.list_where({"isCustom": False}, order_field="name", direction="asc")
        custom = self.exercises.list_where({"isCustom": True, "userId": user_id}, order_field="name", direction="asc")
        exercises = sorted(shared + custom, key=lambda e: e.name.lower())
        if category:
            exercises = [e for e in exercises if e.category == category]
        if difficulty:
            exercises = [e for e in exercises if e.difficulty == difficulty]
        return exercises

    def get_exercise(self, user_id: str, exercise_id: str) -> ExerciseRecord:
        exercise = self.exercises.get_by_id(exercise_id)
        if exercise is None or (exercise.isCustom and exercise.userId != user_id):
            raise HTTPException(status_code=404, detail=f"exercise not found: {exercise_id}")
        return exercise

    def create_exercise(self, user_id: str, payload: ExerciseCreate) -> ExerciseRecord:
        return self.exercises.create(user_id, {**payload.model_dump(), "isCustom": True})

    def delete_exercise(self, user_id: str, exercise_id: str) -> None:
        self.exercises.delete(user_id, exercise_id)

    def seed_exercises(self) -> int:
        """Add the missing entries of the shared pool; returns how many were created."""
        existing = {e.name for e in self.exercises.list_where({"isCustom": False}, order_field=None)}
        created = 0
        for name, category, equipment, difficulty, description in DEFAULT_EXERCISES:
            if name in existing:
                continue
            self.exercises.create(
                None,
                {
                    "name": name,
                    "category": category,
                    "equipment": equipment,
                    "difficulty": difficulty,
                    "muscleGroups": [category],
                    "description": description,
                    "isCustom": False,
                },
            )
            created += 1
        if created:
            logger.info("seeded %d shared exercises", created)
        return created

    # templates

    def create_template(self, user_id: str, payload: TemplateCreate) -> TemplateRecord:
        return self.templates.create(user_id, payload)

    def list_templates(self, user_id: str) -> list[TemplateRecord]:
        return self.templates.list_by_owner(user_id, order_field="name", direction="asc")

    def get_template(self, user_id: str, template_id: str) -> TemplateRecord:
        return self.templates.get_owned(user_id, template_id)

    def update_template(self, user_id: str, template_id: str, payload: TemplateUpdate) -> TemplateRecord:
        return self.templates.update(user_id, template_id, payload)

    def duplicate_template(self, user_id: str, template_id: str) -> TemplateRecord:
        source = self.templates.get_owned(user_id, template_id)
        return self.templates.create(
            user_id,
            {
                "name": f"{source.name} (Copy)",
                "description": source.description,
                "exercises": [e.model_dump() for e in source.exercises],
            },
        )

    def delete_template(self, user_id: str, template_id: str) -> None:
        self.templates.delete(user_id, template_id)

    # equipment

    def create_equipment(self, user_id: str, payload: EquipmentCreate) -> EquipmentRecord:
        return self.equipment.create(user_id, {**payload.model_dump(), "lastUsed": None})

    def list_equipment(self, user_id: str) -> list[EquipmentRecord]:
        return self.equipment.list_by_owner(user_id, order_field="name", direction="asc")

    def update_equipment(self, user_id: str, equipment_id: str, payload: EquipmentUpdate) -> EquipmentRecord:
        return self.equipment.update(user_id, equipment_id, payload)

    def toggle_equipment(self, user_id: str, equipment_id: str) -> EquipmentRecord:
        item = self.equipment.get_owned(user_id, equipment_id)
        changes: dict[str, object] = {"available": not item.available}
        if item.available:
            changes["lastUsed"] = SERVER_TIMESTAMP
        return self.equipment.update(user_id, equipment_id, changes)

    def delete_equipment(self, user_id: str, equipment_id: str) -> None:
        self.equipment.delete(user_id, equipment_id)
