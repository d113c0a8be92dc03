"""Database schema for badges and the activity tables the engine reads."""

SCHEMA = """
-- Badge catalog
CREATE TABLE IF NOT EXISTS badge_definitions (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    icon TEXT,
    image_url TEXT,
    category TEXT NOT NULL,
    tier TEXT NOT NULL DEFAULT 'bronze',
    criteria_json TEXT NOT NULL DEFAULT '{}',
    criteria_description TEXT,
    is_automatic INTEGER NOT NULL DEFAULT 1,
    is_active INTEGER NOT NULL DEFAULT 1,
    display_order INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_badge_definitions_category ON badge_definitions(category);
CREATE INDEX IF NOT EXISTS idx_badge_definitions_active ON badge_definitions(is_active);

-- Badges earned by users
CREATE TABLE IF NOT EXISTS user_badges (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    badge_id TEXT NOT NULL REFERENCES badge_definitions(id) ON DELETE CASCADE,
    earned_at TEXT NOT NULL,
    display_order INTEGER NOT NULL DEFAULT 0,
    is_featured INTEGER NOT NULL DEFAULT 0,
    metadata_json TEXT NOT NULL DEFAULT '{}',
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_user_badges_unique ON user_badges(user_id, badge_id);
CREATE INDEX IF NOT EXISTS idx_user_badges_featured ON user_badges(user_id, is_featured);

-- Exercise library
CREATE TABLE IF NOT EXISTS exercises (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

-- Personal records per circle member
CREATE TABLE IF NOT EXISTS personal_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    member_id TEXT NOT NULL,
    exercise_id TEXT NOT NULL REFERENCES exercises(id),
    value REAL NOT NULL,
    unit TEXT NOT NULL DEFAULT 'lbs',
    record_type TEXT NOT NULL DEFAULT 'all_time',
    date TEXT
);

CREATE INDEX IF NOT EXISTS idx_personal_records_member ON personal_records(member_id, record_type);

CREATE TABLE IF NOT EXISTS user_skills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    current_status TEXT NOT NULL DEFAULT 'learning',
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS user_sports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    sport TEXT NOT NULL,
    level TEXT
);

CREATE TABLE IF NOT EXISTS workout_sessions (
    id TEXT PRIMARY KEY,
    member_id TEXT NOT NULL,
    status TEXT NOT NULL,
    date TEXT NOT NULL,
    end_time TEXT
);

CREATE INDEX IF NOT EXISTS idx_workout_sessions_member ON workout_sessions(member_id, status);

CREATE TABLE IF NOT EXISTS user_metrics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    weight REAL
);

CREATE INDEX IF NOT EXISTS idx_user_metrics_user_date ON user_metrics(user_id, date);

CREATE TABLE IF NOT EXISTS user_follows (
    follower_id TEXT NOT NULL,
    following_id TEXT NOT NULL,
    PRIMARY KEY (follower_id, following_id)
);

CREATE TABLE IF NOT EXISTS circle_members (
    id TEXT PRIMARY KEY,
    circle_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'member'
);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    member_id TEXT NOT NULL,
    title TEXT NOT NULL,
    category TEXT,
    target_value REAL,
    target_unit TEXT,
    status TEXT NOT NULL DEFAULT 'active'
);

CREATE TABLE IF NOT EXISTS challenge_participants (
    id TEXT PRIMARY KEY,
    challenge_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    status TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS program_enrollments (
    id TEXT PRIMARY KEY,
    program_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    status TEXT NOT NULL
);
"""
