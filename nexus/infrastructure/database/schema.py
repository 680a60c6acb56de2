# Tables shared by the PostgreSQL and Supabase backends. Column names are the
# snake_case forms the repositories read back in their _row_to_entity helpers.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL CHECK (role IN ('investor', 'entrepreneur')),
    bio TEXT,
    location TEXT,
    avatar TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS profiles (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL UNIQUE REFERENCES users(id),
    company TEXT,
    title TEXT,
    industry TEXT,
    stage TEXT,
    founded INTEGER,
    employees INTEGER,
    funding_amount INTEGER,
    funding_use TEXT,
    equity_offered INTEGER,
    website TEXT,
    linkedin TEXT,
    skills JSONB,
    portfolio_companies JSONB,
    investment_interests JSONB
);

CREATE TABLE IF NOT EXISTS collaboration_requests (
    id SERIAL PRIMARY KEY,
    sender_id INTEGER NOT NULL REFERENCES users(id),
    receiver_id INTEGER NOT NULL REFERENCES users(id),
    message TEXT,
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'accepted', 'rejected')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- one open request per ordered sender/receiver pair
CREATE UNIQUE INDEX IF NOT EXISTS collaboration_requests_pending_pair_idx
    ON collaboration_requests (sender_id, receiver_id) WHERE status = 'pending';

CREATE TABLE IF NOT EXISTS messages (
    id SERIAL PRIMARY KEY,
    sender_id INTEGER NOT NULL REFERENCES users(id),
    receiver_id INTEGER NOT NULL,
    content TEXT NOT NULL,
    timestamp TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS messages_pair_idx ON messages (sender_id, receiver_id, timestamp);
"""
