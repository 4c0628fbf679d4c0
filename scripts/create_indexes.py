import os

import psycopg2
from dotenv import load_dotenv

load_dotenv()

# Adds the check-in indexes to a PostgreSQL database created before they existed.
# The partial unique index fails to build if an employee already has two open
# check-ins; close the extra rows first. The status column stores enum member
# names, hence 'CHECKED_IN'.

conn = psycopg2.connect(
    dbname=os.getenv("DB_NAME"),
    user=os.getenv("DB_USER"),
    password=os.getenv("DB_PASSWORD"),
    host=os.getenv("DB_HOST"),
    port=os.getenv("DB_PORT", "5432"),
)

cur = conn.cursor()

index_commands = [
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_checkins_one_active_per_employee "
    "ON checkins (employee_id) WHERE status = 'CHECKED_IN';",
    "CREATE INDEX IF NOT EXISTS ix_checkins_employee_id_checkin_time "
    "ON checkins (employee_id, checkin_time);",
    "CREATE INDEX IF NOT EXISTS ix_checkins_client_id ON checkins (client_id);",
]

for cmd in index_commands:
    print(f"Executing: {cmd}")
    cur.execute(cmd)

conn.commit()

cur.close()
conn.close()

print("Indexes created successfully!")
