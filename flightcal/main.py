import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from flightcal import __version__
from flightcal.middleware import SessionGateMiddleware
from flightcal.routes.ai_config_routes import router as ai_config_router
from flightcal.routes.ai_report_routes import router as ai_report_router
from flightcal.routes.auth_routes import router as auth_router
from flightcal.routes.data_routes import router as data_router
from flightcal.routes.init_routes import router as init_router
from flightcal.routes.migrate_routes import router as migrate_router
from flightcal.routes.setup_ai_routes import router as setup_ai_router
from flightcal.routes.user_routes import router as user_router

app = FastAPI(title="Flight Calendar 2026", version=__version__)

app.add_middleware(SessionGateMiddleware)


# Every error leaves the API as {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    return JSONResponse({"error": f"Invalid {field}: {first.get('msg', 'bad request')}"}, status_code=400)


app.include_router(auth_router)
app.include_router(init_router)
app.include_router(user_router)
app.include_router(ai_config_router)
app.include_router(ai_report_router)
app.include_router(setup_ai_router)
app.include_router(migrate_router)
app.include_router(data_router)

# Locate frontend folder
frontend_dir = os.path.join(os.path.dirname(__file__), "..", "frontend")

static_dir = os.path.join(frontend_dir, "static")
if os.path.exists(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")


def serve_page(name: str):
    page = os.path.join(frontend_dir, f"{name}.html")
    if os.path.exists(page):
        return FileResponse(page)
    return {"status": "Flight Calendar backend is running, but the frontend folder was not found.", "page": name}


@app.get("/")
async def calendar_page():
    return serve_page("index")


@app.get("/login")
async def login_page():
    return serve_page("login")


@app.get("/admin")
async def admin_page():
    return serve_page("admin")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("flightcal.main:app", host="0.0.0.0", port=8000, reload=True)
