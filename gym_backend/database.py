from threading import Lock

from sqlalchemy import Boolean, Column, DateTime, Integer, create_engine, event, func, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gym_backend.core import config

WRITE_LOCK_OPTION = 'sqlite_write_lock'


def enable_sqlite_write_locking(bind: Engine) -> None:
    """Make SQLite transactions real and let writers take the lock up front.

    pysqlite only emits BEGIN before the first write, so the reads of a
    booking would run outside its transaction. These listeners disable that
    and emit BEGIN themselves: BEGIN IMMEDIATE for connections opened with
    the ``sqlite_write_lock`` execution option, plain BEGIN otherwise.
    Must be called before the engine hands out its first connection.
    """
    if bind.dialect.name != 'sqlite':
        return

    @event.listens_for(bind, 'connect')
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(bind, 'begin')
    def _begin(connection):
        if connection.get_execution_options().get(WRITE_LOCK_OPTION):
            connection.exec_driver_sql('BEGIN IMMEDIATE')
        else:
            connection.exec_driver_sql('BEGIN')


def begin_write_transaction(db: Session) -> None:
    """Start a new transaction on ``db`` that serialises against other writers.

    Whatever the session already has in progress is committed first. On
    SQLite the new transaction holds the database write lock from its first
    statement; other backends rely on the SELECT ... FOR UPDATE row locks
    taken inside it.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={WRITE_LOCK_OPTION: True})


engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO)
enable_sqlite_write_locking(engine)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


class EntityMixin:
    """Columns every gym record carries: identity, audit stamps and the soft-delete flag."""

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


_schema_lock = Lock()
_appointment_schema_checked = False


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('price', 'ALTER TABLE appointments ADD COLUMN price NUMERIC(10, 2) DEFAULT 0'),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('updated_at', 'ALTER TABLE appointments ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_trainer_date ON appointments(trainer_id, appointment_date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_member_date ON appointments(member_id, appointment_date)')
            )

        _appointment_schema_checked = True
