from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

# Columns added after the first release, and the lookup indexes, per table.
APPOINTMENT_COLUMNS = [
    ('reason', "ALTER TABLE appointments ADD COLUMN reason TEXT DEFAULT ''"),
    ('status', "ALTER TABLE appointments ADD COLUMN status VARCHAR(20) DEFAULT 'booked'"),
    ('created_at', 'ALTER TABLE appointments ADD COLUMN created_at TIMESTAMP'),
]
APPOINTMENT_INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_appointments_provider_day '
    'ON appointments(provider_id, appointment_date, start_time)',
    'CREATE INDEX IF NOT EXISTS idx_appointments_day ON appointments(appointment_date, start_time)',
]
PATIENT_COLUMNS = [
    ('preferredname', 'ALTER TABLE patients ADD COLUMN preferredname VARCHAR(100)'),
    ('patient_status', "ALTER TABLE patients ADD COLUMN patient_status VARCHAR(20) DEFAULT 'active'"),
    ('family_physician', 'ALTER TABLE patients ADD COLUMN family_physician VARCHAR(150)'),
]
PATIENT_INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_patients_name ON patients(lastname, firstname)',
]

_schema_lock = Lock()
_checked_tables: set[str] = set()


def _ensure_table_schema(table_name: str, migration_steps: list[tuple[str, str]], index_statements: list[str]) -> None:
    if table_name in _checked_tables:
        return

    with _schema_lock:
        if table_name in _checked_tables:
            return

        inspector = inspect(engine)

        # create_all builds missing tables with every column at startup.
        if table_name not in inspector.get_table_names():
            _checked_tables.add(table_name)
            return

        existing_columns = {column['name'] for column in inspector.get_columns(table_name)}

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            for statement in index_statements:
                connection.execute(text(statement))

        _checked_tables.add(table_name)


def ensure_appointment_schema() -> None:
    _ensure_table_schema('appointments', APPOINTMENT_COLUMNS, APPOINTMENT_INDEXES)


def ensure_patient_schema() -> None:
    _ensure_table_schema('patients', PATIENT_COLUMNS, PATIENT_INDEXES)
