from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import queries
import session
import store
from config import Settings, get_settings
from database import get_db, init_db, make_engine, make_session_factory
from errors import CrmError
from logging_config import get_logger, setup_logging
from schemas import (
    CompanyList,
    CompanyResult,
    FilterOptions,
    ProspectList,
    ProspectResult,
    SuccessResponse,
)
from validation import (
    CALL_STATUSES,
    COMPANY_STATUSES,
    INDUSTRIES,
    PROSPECT_STATUSES,
    parse_date,
    validate_company,
    validate_prospect,
)

logger = get_logger(__name__)

# Every data endpoint requires a logged-in session
AUTH = [Depends(session.require_session)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info("CRM API started")
    yield
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(title="Prospect & Company CRM API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.session_factory = make_session_factory(app.state.engine)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    session.install_session_middleware(app, settings)

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CrmError)
    async def crm_error_handler(request: Request, exc: CrmError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": "Invalid request"}, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error",
            extra={"context": {"method": request.method, "path": request.url.path}},
        )
        return JSONResponse({"error": "Internal server error"}, status_code=500)


def register_routes(app: FastAPI) -> None:

    # Root endpoint
    @app.get("/")
    def read_root():
        return {"message": "CRM API is running"}

    # Login / logout
    @app.post("/login")
    async def login(request: Request):
        """Exchange the shared username/password for a session cookie."""
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return JSONResponse({"success": False, "message": "Bad request"}, status_code=400)

        settings: Settings = request.app.state.settings
        try:
            ok = session.check_credentials(
                settings, payload.get("username"), payload.get("password")
            )
        except CrmError as e:
            logger.error("Login attempted without configured credentials")
            return JSONResponse({"success": False, "message": e.message}, status_code=e.status_code)

        if not ok:
            logger.warning("Login failed")
            return JSONResponse(
                {"success": False, "message": "Invalid credentials"}, status_code=401
            )

        session.login(request)
        logger.info("Login succeeded")
        return {"success": True}

    @app.post("/logout", response_model=SuccessResponse)
    def logout(request: Request):
        session.logout(request)
        return SuccessResponse()

    # Suggestion lists for the UI's filters and forms
    @app.get("/filters", response_model=FilterOptions, dependencies=AUTH)
    def get_filter_options():
        return FilterOptions(
            industries=INDUSTRIES,
            company_statuses=COMPANY_STATUSES,
            call_statuses=CALL_STATUSES,
            prospect_statuses=PROSPECT_STATUSES,
        )

    # Companies
    @app.get("/companies", response_model=CompanyList, dependencies=AUTH)
    def get_companies(
        page: Optional[str] = None,
        search: Optional[str] = None,
        industry: Optional[str] = None,
        status: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        """List companies, newest first, 20 per page."""
        result = queries.list_companies(
            db,
            page=queries.parse_page(page),
            search=search,
            industry=industry,
            status=status,
        )
        return {"data": result.items, "pagination": result.pagination()}

    @app.post("/companies", response_model=CompanyResult, status_code=201, dependencies=AUTH)
    def create_company(payload: Any = Body(None), db: Session = Depends(get_db)):
        record = validate_company(payload)
        return {"data": store.create_company(db, record), "success": True}

    @app.put("/companies/{company_id}", response_model=CompanyResult, dependencies=AUTH)
    def update_company(company_id: int, payload: Any = Body(None), db: Session = Depends(get_db)):
        """Full update: every field is taken from the body."""
        record = validate_company(payload)
        return {"data": store.update_company(db, company_id, record), "success": True}

    @app.delete("/companies/{company_id}", response_model=SuccessResponse, dependencies=AUTH)
    def delete_company(company_id: int, db: Session = Depends(get_db)):
        store.delete_company(db, company_id)
        return SuccessResponse()

    # Prospects
    @app.get("/prospects", response_model=ProspectList, dependencies=AUTH)
    def get_prospects(
        page: Optional[str] = None,
        search: Optional[str] = None,
        industry: Optional[str] = None,
        call_status: Optional[str] = Query(None, alias="callStatus"),
        prospect_status: Optional[str] = Query(None, alias="prospectStatus"),
        status: Optional[str] = None,
        created_on: Optional[str] = Query(None, alias="date"),
        db: Session = Depends(get_db),
    ):
        """List prospects, newest first, 20 per page.

        ``status`` is an older name for ``prospectStatus``; ``date``
        (YYYY-MM-DD) keeps prospects added on that day.
        """
        result = queries.list_prospects(
            db,
            page=queries.parse_page(page),
            search=search,
            industry=industry,
            call_status=call_status,
            prospect_status=prospect_status or status,
            created_on=parse_date(created_on, "date"),
        )
        return {"data": result.items, "pagination": result.pagination()}

    @app.post("/prospects", response_model=ProspectResult, status_code=201, dependencies=AUTH)
    def create_prospect(payload: Any = Body(None), db: Session = Depends(get_db)):
        """Create a prospect; 409 when the company name is already taken."""
        record = validate_prospect(payload)
        return {"data": store.create_prospect(db, record), "success": True}

    @app.put("/prospects/{prospect_id}", response_model=ProspectResult, dependencies=AUTH)
    def update_prospect(prospect_id: int, payload: Any = Body(None), db: Session = Depends(get_db)):
        record = validate_prospect(payload)
        return {"data": store.update_prospect(db, prospect_id, record), "success": True}

    @app.delete("/prospects/{prospect_id}", response_model=SuccessResponse, dependencies=AUTH)
    def delete_prospect(prospect_id: int, db: Session = Depends(get_db)):
        store.delete_prospect(db, prospect_id)
        return SuccessResponse()


# Create FastAPI app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
