from fastapi import APIRouter, Depends, Query, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import (
    Difficulty,
    EquipmentCreate,
    EquipmentRecord,
    EquipmentUpdate,
    ExerciseCreate,
    ExerciseRecord,
    ExerciseSetCreate,
    ExerciseSetRecord,
    ExerciseSetUpdate,
    OneRepMaxResponse,
    RoutineCreate,
    RoutineRecord,
    RoutineUpdate,
    SeedResponse,
    SessionCreate,
    SessionDetail,
    SessionRecord,
    SessionUpdate,
    TemplateCreate,
    TemplateRecord,
    TemplateUpdate,
    TimeUnderTensionResponse,
    WorkoutStats,
)
from ..services.gym import one_rep_max, time_under_tension

router = APIRouter(prefix="/gym", tags=["gym"])


@router.post("/routines", response_model=RoutineRecord, status_code=201)
def create_routine(payload: RoutineCreate, user_id: str = Depends(current_user_id)) -> RoutineRecord:
    return deps.gym.create_routine(user_id, payload)


@router.get("/routines", response_model=list[RoutineRecord])
def list_routines(user_id: str = Depends(current_user_id)) -> list[RoutineRecord]:
    return deps.gym.list_routines(user_id)


@router.get("/routines/{routine_id}", response_model=RoutineRecord)
def get_routine(routine_id: str, user_id: str = Depends(current_user_id)) -> RoutineRecord:
    return deps.gym.get_routine(user_id, routine_id)


@router.patch("/routines/{routine_id}", response_model=RoutineRecord)
def update_routine(routine_id: str, payload: RoutineUpdate, user_id: str = Depends(current_user_id)) -> RoutineRecord:
    return deps.gym.update_routine(user_id, routine_id, payload)


@router.delete("/routines/{routine_id}", status_code=204)
def delete_routine(routine_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_routine(user_id, routine_id)
    return Response(status_code=204)


@router.post("/sessions", response_model=SessionRecord, status_code=201)
def create_session(payload: SessionCreate, user_id: str = Depends(current_user_id)) -> SessionRecord:
    return deps.gym.create_session(user_id, payload)


@router.get("/sessions", response_model=list[SessionRecord])
def list_sessions(
    limit: int | None = Query(default=None, ge=1, le=500), user_id: str = Depends(current_user_id)
) -> list[SessionRecord]:
    return deps.gym.list_sessions(user_id, limit)


@router.get("/sessions/{session_id}", response_model=SessionDetail)
def get_session(session_id: str, user_id: str = Depends(current_user_id)) -> SessionDetail:
    return deps.gym.session_detail(user_id, session_id)


@router.patch("/sessions/{session_id}", response_model=SessionRecord)
def update_session(session_id: str, payload: SessionUpdate, user_id: str = Depends(current_user_id)) -> SessionRecord:
    return deps.gym.update_session(user_id, session_id, payload)


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_session(user_id, session_id)
    return Response(status_code=204)


@router.get("/sessions/{session_id}/stats", response_model=WorkoutStats)
def session_stats(session_id: str, user_id: str = Depends(current_user_id)) -> WorkoutStats:
    return deps.gym.workout_stats(user_id, session_id)


@router.post("/sessions/{session_id}/sets", response_model=ExerciseSetRecord, status_code=201)
def add_set(session_id: str, payload: ExerciseSetCreate, user_id: str = Depends(current_user_id)) -> ExerciseSetRecord:
    return deps.gym.add_set(user_id, session_id, payload)


@router.get("/sessions/{session_id}/sets", response_model=list[ExerciseSetRecord])
def list_sets(session_id: str, user_id: str = Depends(current_user_id)) -> list[ExerciseSetRecord]:
    deps.gym.get_session(user_id, session_id)
    return deps.gym.list_sets(user_id, session_id)


@router.patch("/sets/{set_id}", response_model=ExerciseSetRecord)
def update_set(set_id: str, payload: ExerciseSetUpdate, user_id: str = Depends(current_user_id)) -> ExerciseSetRecord:
    return deps.gym.update_set(user_id, set_id, payload)


@router.post("/sets/{set_id}/personal-record", response_model=ExerciseSetRecord)
def mark_personal_record(set_id: str, user_id: str = Depends(current_user_id)) -> ExerciseSetRecord:
    return deps.gym.mark_personal_record(user_id, set_id)


@router.delete("/sets/{set_id}", status_code=204)
def delete_set(set_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_set(user_id, set_id)
    return Response(status_code=204)


@router.get("/exercises", response_model=list[ExerciseRecord])
def list_exercises(
    category: str | None = None,
    difficulty: Difficulty | None = None,
    user_id: str = Depends(current_user_id),
) -> list[ExerciseRecord]:
    return deps.gym.list_exercises(user_id, category, difficulty.value if difficulty else None)


@router.post("/exercises", response_model=ExerciseRecord, status_code=201)
def create_exercise(payload: ExerciseCreate, user_id: str = Depends(current_user_id)) -> ExerciseRecord:
    return deps.gym.create_exercise(user_id, payload)


@router.post("/exercises/seed", response_model=SeedResponse)
def seed_exercises(user_id: str = Depends(current_user_id)) -> SeedResponse:
    return SeedResponse(created=deps.gym.seed_exercises())


@router.get("/exercises/{exercise_id}", response_model=ExerciseRecord)
def get_exercise(exercise_id: str, user_id: str = Depends(current_user_id)) -> ExerciseRecord:
    return deps.gym.get_exercise(user_id, exercise_id)


@router.delete("/exercises/{exercise_id}", status_code=204)
def delete_exercise(exercise_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_exercise(user_id, exercise_id)
    return Response(status_code=204)


@router.get("/exercises/{exercise_id}/history", response_model=list[ExerciseSetRecord])
def exercise_history(
    exercise_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    user_id: str = Depends(current_user_id),
) -> list[ExerciseSetRecord]:
    return deps.gym.exercise_history(user_id, exercise_id, limit)


@router.get("/exercises/{exercise_id}/records", response_model=list[ExerciseSetRecord])
def personal_records(exercise_id: str, user_id: str = Depends(current_user_id)) -> list[ExerciseSetRecord]:
    return deps.gym.personal_records(user_id, exercise_id)


@router.post("/templates", response_model=TemplateRecord, status_code=201)
def create_template(payload: TemplateCreate, user_id: str = Depends(current_user_id)) -> TemplateRecord:
    return deps.gym.create_template(user_id, payload)


@router.get("/templates", response_model=list[TemplateRecord])
def list_templates(user_id: str = Depends(current_user_id)) -> list[TemplateRecord]:
    return deps.gym.list_templates(user_id)


@router.get("/templates/{template_id}", response_model=TemplateRecord)
def get_template(template_id: str, user_id: str = Depends(current_user_id)) -> TemplateRecord:
    return deps.gym.get_template(user_id, template_id)


@router.patch("/templates/{template_id}", response_model=TemplateRecord)
def update_template(template_id: str, payload: TemplateUpdate, user_id: str = Depends(current_user_id)) -> TemplateRecord:
    return deps.gym.update_template(user_id, template_id, payload)


@router.post("/templates/{template_id}/duplicate", response_model=TemplateRecord, status_code=201)
def duplicate_template(template_id: str, user_id: str = Depends(current_user_id)) -> TemplateRecord:
    return deps.gym.duplicate_template(user_id, template_id)


@router.delete("/templates/{template_id}", status_code=204)
def delete_template(template_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_template(user_id, template_id)
    return Response(status_code=204)


@router.post("/equipment", response_model=EquipmentRecord, status_code=201)
def create_equipment(payload: EquipmentCreate, user_id: str = Depends(current_user_id)) -> EquipmentRecord:
    return deps.gym.create_equipment(user_id, payload)


@router.get("/equipment", response_model=list[EquipmentRecord])
def list_equipment(user_id: str = Depends(current_user_id)) -> list[EquipmentRecord]:
    return deps.gym.list_equipment(user_id)


@router.patch("/equipment/{equipment_id}", response_model=EquipmentRecord)
def update_equipment(
    equipment_id: str, payload: EquipmentUpdate, user_id: str = Depends(current_user_id)
) -> EquipmentRecord:
    return deps.gym.update_equipment(user_id, equipment_id, payload)


@router.post("/equipment/{equipment_id}/toggle", response_model=EquipmentRecord)
def toggle_equipment(equipment_id: str, user_id: str = Depends(current_user_id)) -> EquipmentRecord:
    return deps.gym.toggle_equipment(user_id, equipment_id)


@router.delete("/equipment/{equipment_id}", status_code=204)
def delete_equipment(equipment_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.gym.delete_equipment(user_id, equipment_id)
    return Response(status_code=204)


@router.get("/one-rep-max", response_model=OneRepMaxResponse)
def get_one_rep_max(weight: float, reps: int, user_id: str = Depends(current_user_id)) -> OneRepMaxResponse:
    return OneRepMaxResponse(weight=weight, reps=reps, oneRepMax=one_rep_max(weight, reps))


@router.get("/time-under-tension", response_model=TimeUnderTensionResponse)
def get_time_under_tension(
    reps: int,
    seconds_per_rep: float = Query(alias="secondsPerRep"),
    user_id: str = Depends(current_user_id),
) -> TimeUnderTensionResponse:
    return TimeUnderTensionResponse(
        reps=reps, secondsPerRep=seconds_per_rep, seconds=time_under_tension(reps, seconds_per_rep)
    )
