from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from membership_checkout.core.path_conf import BASE_PATH


class Settings(BaseSettings):
    """全局配置"""

    model_config = SettingsConfigDict(
        env_file=f'{BASE_PATH}/.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True,
    )

    # .env 当前环境
    ENVIRONMENT: Literal['dev', 'prod'] = 'dev'

    # FastAPI
    FASTAPI_API_PATH: str = '/api'
    FASTAPI_TITLE: str = 'MembershipCheckout'
    FASTAPI_DESCRIPTION: str = 'Membership checkout and deferred add-on provisioning'
    FASTAPI_DOCS_URL: str | None = '/docs'
    FASTAPI_REDOC_URL: str | None = '/redoc'
    FASTAPI_OPENAPI_URL: str | None = '/openapi'

    # Log
    LOG_LEVEL: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = 'INFO'

    # .env Stripe
    STRIPE_SECRET_KEY: str = ''  # Stripe secret key (sk_...)
    STRIPE_PUBLISHABLE_KEY: str = ''  # Stripe publishable key (pk_...)
    STRIPE_WEBHOOK_SECRET: str = ''  # Webhook signing secret (whsec_...)

    # Stripe
    STRIPE_API_VERSION: str | None = None  # None keeps the library's pinned version
    STRIPE_WEBHOOK_TOLERANCE: int = 300  # 5 minutes
    SUBSCRIPTION_LIST_PAGE_SIZE: int = 100  # Stripe maximum

    # .env Plan prices
    PRICE_ESSENCE_MONTHLY: str = ''
    PRICE_ESSENCE_ANNUAL: str = ''
    PRICE_RADIANCE_MONTHLY: str = ''
    PRICE_RADIANCE_ANNUAL: str = ''

    # .env Add-on prices (always billed monthly)
    PRICE_ADDON_NUTRITION: str = ''
    PRICE_ADDON_METABOLIC: str = ''
    PRICE_ADDON_SEXUAL: str = ''
    PRICE_ADDON_SKINHAIR: str = ''

    # Service area
    SERVICE_REGIONS: Annotated[list[str], NoDecode] = ['WA', 'OR']

    # .env Checkout redirects
    FRONTEND_URL: str = ''
    CHECKOUT_SUCCESS_PATH: str = '/success.html?session_id={CHECKOUT_SESSION_ID}'
    CHECKOUT_CANCEL_PATH: str = '/cancel.html'

    @field_validator('SERVICE_REGIONS', mode='before')
    @classmethod
    def split_regions(cls, value: Any) -> Any:
        """Accept ``WA,OR`` as well as a list"""
        if isinstance(value, str):
            value = value.split(',')
        if isinstance(value, (list, tuple, set)):
            return [str(v).strip().upper() for v in value if str(v).strip()]
        return value

    @model_validator(mode='before')
    @classmethod
    def check_env(cls, values: Any) -> Any:
        """检查环境变量"""
        if values.get('ENVIRONMENT') == 'prod':
            # FastAPI
            values['FASTAPI_DOCS_URL'] = None
            values['FASTAPI_REDOC_URL'] = None
            values['FASTAPI_OPENAPI_URL'] = None

        frontend_url = values.get('FRONTEND_URL')
        if isinstance(frontend_url, str):
            values['FRONTEND_URL'] = frontend_url.strip().rstrip('/')

        return values


@lru_cache
def get_settings() -> Settings:
    """获取全局配置单例"""
    return Settings()


# 创建全局配置实例
settings = get_settings()
