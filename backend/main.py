import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, SessionLocal, engine, ensure_appointment_schema, ensure_patient_schema
from backend.models import appointment, doctor, patient, user  # noqa: F401
from backend.routes import appointment_routes, auth_routes, doctor_routes, patient_routes, schedule_routes
from backend.seed import seed_default_data

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Clinic Scheduler')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        ensure_patient_schema()

        db = SessionLocal()
        try:
            seed_default_data(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Clinic Scheduler API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(doctor_routes.router, prefix='/doctors')
app.include_router(patient_routes.router, prefix='/patients')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(schedule_routes.router, prefix='/schedule')
