import sys

import click
import uvicorn

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from membership_checkout import __version__
from membership_checkout.core.conf import settings
from membership_checkout.core.log import console
from membership_checkout.src.billing.shared.config import (
    AddOn,
    BillingConfig,
    BillingCycle,
    Plan,
    PriceCatalog,
    addon_setting_name,
    plan_setting_name,
)
from membership_checkout.src.billing.shared.exceptions import ConfigurationError


def run(host: str, port: int, reload: bool, workers: int) -> None:  # noqa: FBT001
    url = f'http://{host}:{port}'

    panel_content = Text()
    panel_content.append('Python version:', style='bold cyan')
    panel_content.append(f'{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}', style='white')

    panel_content.append('\nAPI request address: ', style='bold cyan')
    panel_content.append(f'{url}{settings.FASTAPI_API_PATH}', style='blue')

    panel_content.append('\n\nEnvironment mode: ', style='bold green')
    env_style = 'yellow' if settings.ENVIRONMENT == 'dev' else 'green'
    panel_content.append(f'{settings.ENVIRONMENT.upper()}', style=env_style)

    panel_content.append('\nService regions: ', style='bold green')
    panel_content.append(', '.join(settings.SERVICE_REGIONS) or 'None', style='yellow')

    if settings.ENVIRONMENT == 'dev' and settings.FASTAPI_DOCS_URL:
        panel_content.append(f'\n\n📖 Swagger docs: {url}{settings.FASTAPI_DOCS_URL}', style='bold magenta')

    console.print(Panel(panel_content, title=f'membership-checkout v{__version__}', border_style='purple', padding=(1, 2)))
    uvicorn.run(
        'membership_checkout.main:app',
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_config=None,
    )


def render_catalog(catalog: PriceCatalog) -> Table:
    table = Table(title='Price catalog', show_lines=False)
    table.add_column('Setting', style='cyan')
    table.add_column('Price ID')

    for plan in Plan:
        for cycle in BillingCycle:
            price_id = catalog.plan_prices.get((plan, cycle))
            table.add_row(plan_setting_name(plan, cycle), price_id or '[red]missing[/]')
    for addon in AddOn:
        price_id = catalog.addon_prices.get(addon)
        table.add_row(addon_setting_name(addon), price_id or '[red]missing[/]')
    return table


@click.group()
@click.version_option(__version__, prog_name='membership-checkout')
def cli() -> None:
    """Membership checkout command line interface."""


@cli.command('run')
@click.option('--host', default='127.0.0.1', show_default=True, help='Host IP address; use `0.0.0.0` for public access')
@click.option('--port', default=8000, show_default=True, type=int, help='Host port number')
@click.option('--no-reload', is_flag=True, default=False, help='Disable auto-reload on code changes')
@click.option('--workers', default=1, show_default=True, type=int, help='Worker processes, requires `--no-reload`')
def run_command(host: str, port: int, no_reload: bool, workers: int) -> None:
    """Run the API service."""
    run(host=host, port=port, reload=not no_reload, workers=workers)


@cli.command('check-config')
def check_config() -> None:
    """Validate billing configuration without starting the server."""
    console.print(render_catalog(PriceCatalog.from_settings(settings)))
    try:
        config = BillingConfig.from_settings(settings)
    except ConfigurationError as e:
        console.print(f'[bold red]Configuration invalid:[/] {", ".join(e.missing) or e.message}')
        sys.exit(1)

    console.print(f'[green]Configuration OK[/] regions={", ".join(sorted(config.service_regions))}')
    console.print(f'  success_url: {config.success_url}')
    console.print(f'  cancel_url:  {config.cancel_url}')


def main() -> None:
    cli()
