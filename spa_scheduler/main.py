import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from spa_scheduler.core import config
from spa_scheduler.database import Base, engine, ensure_appointment_schema
from spa_scheduler.models import appointment, availability, customer, service, staff  # noqa: F401
from spa_scheduler.routes import (
    appointment_routes,
    customer_routes,
    report_routes,
    service_routes,
    staff_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Spa Scheduler API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
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
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Spa Scheduler API Running'}


app.include_router(customer_routes.router, prefix='/customers')
app.include_router(staff_routes.router, prefix='/staff')
app.include_router(service_routes.router, prefix='/services')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(report_routes.router, prefix='/reports')
