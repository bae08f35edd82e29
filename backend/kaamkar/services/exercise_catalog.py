"""Shared exercise pool loaded by ``GymService.seed_exercises``."""

# (name, category, equipment, difficulty, description)
DEFAULT_EXERCISES: tuple[tuple[str, str, str, str, str], ...] = (
    ("Bench Press", "chest", "barbell", "intermediate", "A compound exercise that targets the chest, shoulders, and triceps."),
    ("Incline Bench Press", "chest", "barbell", "intermediate", "Targets the upper chest, shoulders, and triceps."),
    ("Dumbbell Fly", "chest", "dumbbell", "beginner", "Isolation exercise for the chest."),
    ("Push-Up", "chest", "bodyweight", "beginner", "Bodyweight exercise for chest, shoulders, and triceps."),
    ("Cable Crossover", "chest", "cable", "intermediate", "Isolation exercise for the chest that provides constant tension."),
    ("Pull-Up", "back", "bodyweight", "intermediate", "Compound exercise for the back and biceps."),
    ("Bent-Over Row", "back", "barbell", "intermediate", "Compound exercise for the back and biceps."),
    ("Lat Pulldown", "back", "machine", "beginner", "Machine exercise targeting the latissimus dorsi."),
    ("Seated Cable Row", "back", "cable", "beginner", "Compound exercise for the middle back."),
    ("Deadlift", "back", "barbell", "advanced", "Compound exercise for the entire posterior chain."),
    ("Squat", "legs", "barbell", "intermediate", "Compound exercise for the entire lower body."),
    ("Leg Press", "legs", "machine", "beginner", "Machine exercise targeting the quadriceps, hamstrings, and glutes."),
    ("Romanian Deadlift", "legs", "barbell", "intermediate", "Exercise targeting the hamstrings and lower back."),
    ("Leg Extension", "legs", "machine", "beginner", "Isolation exercise for the quadriceps."),
    ("Leg Curl", "legs", "machine", "beginner", "Isolation exercise for the hamstrings."),
    ("Overhead Press", "shoulders", "barbell", "intermediate", "Compound exercise for the shoulders and triceps."),
    ("Lateral Raise", "shoulders", "dumbbell", "beginner", "Isolation exercise for the lateral deltoids."),
    ("Front Raise", "shoulders", "dumbbell", "beginner", "Isolation exercise for the anterior deltoids."),
    ("Face Pull", "shoulders", "cable", "beginner", "Exercise for the rear deltoids and upper back."),
    ("Upright Row", "shoulders", "barbell", "intermediate", "Compound exercise for the shoulders and traps."),
    ("Bicep Curl", "arms", "dumbbell", "beginner", "Isolation exercise for the biceps."),
    ("Tricep Pushdown", "arms", "cable", "beginner", "Isolation exercise for the triceps."),
    ("Hammer Curl", "arms", "dumbbell", "beginner", "Variation of the bicep curl targeting the brachialis muscle."),
    ("Skull Crusher", "arms", "barbell", "intermediate", "Isolation exercise for the triceps."),
    ("Preacher Curl", "arms", "barbell", "beginner", "Isolation exercise for the biceps using a preacher bench."),
    ("Crunch", "core", "bodyweight", "beginner", "Basic exercise for the abdominal muscles."),
    ("Plank", "core", "bodyweight", "beginner", "Isometric exercise for core stability."),
    ("Russian Twist", "core", "bodyweight", "beginner", "Exercise for the obliques."),
    ("Leg Raise", "core", "bodyweight", "intermediate", "Exercise for the lower abdominals."),
    ("Hanging Knee Raise", "core", "bodyweight", "advanced", "Advanced exercise for the abdominals."),
    ("Running", "cardio", "other", "beginner", "Cardiovascular exercise."),
    ("Jumping Rope", "cardio", "other", "beginner", "High-intensity cardiovascular exercise."),
    ("Cycling", "cardio", "machine", "beginner", "Low-impact cardiovascular exercise."),
    ("Rowing", "cardio", "machine", "intermediate", "Full-body cardiovascular exercise."),
    ("Stair Climbing", "cardio", "machine", "beginner", "Cardiovascular exercise that targets the lower body."),
)
