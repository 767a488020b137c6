from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.log import setup_logging
from db.database import create_db_and_tables
from routers.barbers import router as barbers_router
from routers.services import router as services_router
from routers.payment_methods import router as payment_methods_router
from routers.transactions import router as transactions_router
from routers.inventory import router as inventory_router
from routers.reports import router as reports_router
from routers.users import router as profiles_router
from core.auth import fastapi_users, auth_backend
from contextlib import asynccontextmanager
from schemas.users import UserRead, UserCreate, UserUpdate

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Barbershop POS API",
    description="Sales, inventory and commission reports for a barbershop",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Authentication routes (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"],)
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_reset_password_router(), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_verify_router(UserRead), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])
app.include_router(profiles_router, prefix="/profiles", tags=["users"])

# Catalog
app.include_router(barbers_router, prefix="/barbers", tags=["barbers"])
app.include_router(services_router, prefix="/services", tags=["services"])
app.include_router(payment_methods_router, prefix="/payment-methods", tags=["payment-methods"])

# Sales, stock and reports
app.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
