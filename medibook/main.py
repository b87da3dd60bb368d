import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from medibook.core import config
from medibook.database import SessionLocal, engine, ensure_appointment_schema
from medibook.models import appointment, availability, doctor
from medibook.routes import appointment_routes, availability_routes, doctor_routes
from medibook.seed import seed_demo_doctors

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='MediBook API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = sorted({
        '.'.join(str(part) for part in error['loc'] if part != 'body') or 'body'
        for error in exc.errors()
    })
    logger.warning('Rejected %s %s: invalid fields %s', request.method, request.url.path, fields)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            'detail': {
                'error': 'validation_error',
                'message': f'Missing or invalid fields: {", ".join(fields)}',
            }
        },
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    try:
        doctor.Base.metadata.create_all(bind=engine)
        appointment.Base.metadata.create_all(bind=engine)
        availability.Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()

        if config.SEED_DEMO_DATA:
            db = SessionLocal()
            try:
                seed_demo_doctors(db)
            finally:
                db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'MediBook API Running'}


app.include_router(doctor_routes.router, prefix='/doctors')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(availability_routes.router, prefix='/availability')
