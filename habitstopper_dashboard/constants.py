APP_NAME = "HabitStopper"

TRACK_PROMPT = "Did you withstand the urge today?"
SUCCESS_LABEL = "Yes, I'm clean"
FAILED_LABEL = "I slipped up"

STATUS_CLASSES = {
    "success": "hs-day-success",
    "failed": "hs-day-failed",
    "none": "hs-day-none",
}
