JOURNEY_LENGTH = 30
JOURNEY_FINISHED_DAY = JOURNEY_LENGTH + 1
MILESTONE_DAYS = (7, 14, 21, 30)

DAILY_TASKS = [
    {"key": "read", "name": "Read", "icon": "📖", "duration_minutes": 10, "display_order": 1},
    {"key": "write", "name": "Write", "icon": "✍️", "duration_minutes": 10, "display_order": 2},
    {"key": "listen", "name": "Listen", "icon": "🎧", "duration_minutes": 10, "display_order": 3},
    {"key": "speak", "name": "Speak", "icon": "🗣️", "duration_minutes": 5, "display_order": 4},
    {"key": "vocabulary", "name": "Vocabulary review", "icon": "🗂️", "duration_minutes": 5, "display_order": 5},
    {"key": "grammar", "name": "Grammar drill", "icon": "📐", "duration_minutes": 5, "display_order": 6},
]
DAILY_TASKS_BY_KEY = {task["key"]: task for task in DAILY_TASKS}

LANDMARKS = [
    {"key": "grammar_fort", "name": "Grammar Fort", "icon": "⚓", "day_number": 7,
     "description": "One week of steady practice."},
    {"key": "vocab_island", "name": "Vocab Island", "icon": "🏝️", "day_number": 14,
     "description": "Two weeks in, the word hoard is growing."},
    {"key": "quiz_bridge", "name": "Quiz Bridge", "icon": "⚔️", "day_number": 21,
     "description": "Three weeks: the habit holds."},
    {"key": "treasure_island", "name": "Treasure Island", "icon": "💎", "day_number": 30,
     "description": "The end of the 30-day voyage."},
]

# Special achievements unlock on a single ledger day meeting the threshold.
ACHIEVEMENTS = [
    {"key": "day_7_milestone", "title": "First Week Ashore", "icon": "⚓", "category": "milestone",
     "milestone_day": 7, "description": "Completed 7 days of the journey."},
    {"key": "day_14_milestone", "title": "Fortnight Navigator", "icon": "🧭", "category": "milestone",
     "milestone_day": 14, "description": "Completed 14 days of the journey."},
    {"key": "day_21_milestone", "title": "Three-Week Captain", "icon": "⚔️", "category": "milestone",
     "milestone_day": 21, "description": "Completed 21 days of the journey."},
    {"key": "day_30_milestone", "title": "Voyage Complete", "icon": "💎", "category": "milestone",
     "milestone_day": 30, "description": "Completed all 30 days of the journey."},
    {"key": "first_journey_complete", "title": "Treasure Found", "icon": "🏴‍☠️", "category": "milestone",
     "milestone_day": 30, "description": "Finished a full 30-day journey."},
    {"key": "dedicated_learner", "title": "Dedicated Learner", "icon": "⏳", "category": "special",
     "milestone_day": None, "description": "Practiced 50 minutes or more in a single day.",
     "threshold": {"field": "minutes_practiced", "minimum": 50}},
    {"key": "word_hoarder", "title": "Word Hoarder", "icon": "💰", "category": "special",
     "milestone_day": None, "description": "Added 20 or more words in a single day.",
     "threshold": {"field": "words_learned", "minimum": 20}},
]

ACTIVITY_COUNTERS = ("minutes_practiced", "entries_written", "words_learned")
