import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from membership_checkout import __version__
from membership_checkout.core.conf import Settings, settings
from membership_checkout.core.log import setup_logging
from membership_checkout.src.billing.external.stripe import configure_stripe
from membership_checkout.src.billing.shared.config import BillingConfig
from membership_checkout.src.billing.shared.exceptions import BillingError

logger = logging.getLogger(__name__)


def register_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Billing configuration is validated here rather than per request, so a
    missing secret or price raises ``ConfigurationError`` before the app can
    serve anything.

    :param app_settings: Settings override, the global settings by default
    :return:
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.LOG_LEVEL)

    billing_config = BillingConfig.from_settings(app_settings)
    configure_stripe(app_settings.STRIPE_SECRET_KEY, app_settings.STRIPE_API_VERSION)

    app = FastAPI(
        title=app_settings.FASTAPI_TITLE,
        version=__version__,
        description=app_settings.FASTAPI_DESCRIPTION,
        docs_url=app_settings.FASTAPI_DOCS_URL,
        redoc_url=app_settings.FASTAPI_REDOC_URL,
        openapi_url=app_settings.FASTAPI_OPENAPI_URL,
    )
    app.state.settings = app_settings
    app.state.billing_config = billing_config

    register_exception(app)
    register_router(app, app_settings)

    logger.info(
        f"[APP] Ready: regions={','.join(sorted(billing_config.service_regions))} "
        f"api={app_settings.FASTAPI_API_PATH}"
    )
    return app


def register_router(app: FastAPI, app_settings: Settings) -> None:
    """
    路由

    :param app: FastAPI 应用实例
    :param app_settings: 配置
    :return:
    """
    from membership_checkout.app.router import build_router

    app.include_router(build_router(app_settings.FASTAPI_API_PATH))


def register_exception(app: FastAPI) -> None:
    """
    Uniform ``{error, code}`` responses.

    :param app: FastAPI 应用实例
    :return:
    """

    @app.exception_handler(BillingError)
    async def billing_exception_handler(request: Request, exc: BillingError):
        if exc.is_client_error:
            logger.warning(f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
        else:
            logger.error(
                f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.code}: "
                f"{exc.message} {exc.details}",
                exc_info=exc,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={'error': exc.detail},
            headers=getattr(exc, 'headers', None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"[API] {request.method} {request.url.path} -> 400 unparseable body")
        return JSONResponse(status_code=400, content={'error': 'Invalid request body', 'code': 'INVALID_BODY'})
