"""Database schema definitions for the TaskNest store."""

from __future__ import annotations

# Users table - token_hash is the SHA-256 digest of the API token
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT,
    token_hash TEXT NOT NULL UNIQUE,
    created_at DATETIME NOT NULL
)
"""

# Projects table
CREATE_PROJECTS_TABLE = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT DEFAULT 'gray',
    is_favorite BOOLEAN DEFAULT 0,
    is_inbox BOOLEAN DEFAULT 0,
    owner_id TEXT NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Tasks table. parent_id is not a foreign key; deleting a parent leaves its
# subtasks in place.
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    content TEXT NOT NULL,
    description TEXT,
    owner_id TEXT NOT NULL,
    project_id TEXT NOT NULL,
    parent_id TEXT,
    priority INTEGER,
    due_date DATETIME,
    tags TEXT NOT NULL DEFAULT '[]',
    is_completed BOOLEAN NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
)
"""

# Activity log
CREATE_ACTIVITY_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS activity_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    action TEXT NOT NULL,
    entity_type TEXT NOT NULL DEFAULT 'task',
    entity_id TEXT,
    created_at DATETIME NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Indexes for query performance
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_project ON tasks(owner_id, project_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_parent ON tasks(owner_id, parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date)",
    "CREATE INDEX IF NOT EXISTS idx_activity_user ON activity_logs(user_id, created_at)",
]

ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_PROJECTS_TABLE,
    CREATE_TASKS_TABLE,
    CREATE_ACTIVITY_LOGS_TABLE,
]

ALL_INDEXES = CREATE_INDEXES
