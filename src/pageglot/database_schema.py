# src/pageglot/database_schema.py

DEFAULT_SCHEMA_SCRIPT = """
CREATE TABLE IF NOT EXISTS preferences (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    translation_percentage INTEGER NOT NULL DEFAULT 30,
    last_url TEXT,
    language TEXT NOT NULL DEFAULT 'swedish'
);

CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    original_text TEXT NOT NULL,
    translated_text TEXT NOT NULL,
    url TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_translations_url ON translations(url);
"""
