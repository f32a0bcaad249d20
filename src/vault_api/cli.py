# cli.py
import logging

import click

from vault_api.config.settings import VALID_DEPLOYMENT_MODES, Settings, get_settings

# Configure logging
logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@click.group()
def cli():
    """CLI commands for the storage API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  App Name: {settings.app_name}")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Static Dir: {settings.static_dir}")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--mode",
              type=click.Choice(VALID_DEPLOYMENT_MODES),
              default=None,
              help="Override DEPLOYMENT_MODE")
def serve(host, port, mode):
    """Run the API and browser client with uvicorn"""
    import uvicorn
    from vault_api.main import create_app

    settings = get_settings()
    if mode:
        settings = Settings(deployment_mode=mode)

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logger.info(f"Starting {settings.app_name} in {settings.deployment_mode} mode on {host}:{port}")

    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


@cli.command()
def create_bucket():
    """Create the configured S3 bucket"""
    from vault_api.adapters.storage import S3ObjectStore
    from vault_api.s3.read_objects import bucket_exists
    from vault_api.s3.write_objects import create_s3_bucket

    settings = get_settings()
    if not settings.uses_s3:
        raise click.ClickException(
            f"Deployment mode {settings.deployment_mode} keeps files in memory; no bucket to create"
        )

    store = S3ObjectStore.from_settings(settings)
    if bucket_exists(settings.s3_bucket_name, s3_client=store.s3_client):
        click.echo(f"Bucket {settings.s3_bucket_name} already exists")
        return

    create_s3_bucket(settings.s3_bucket_name, region=settings.aws_region, s3_client=store.s3_client)
    click.echo(f"Created bucket {settings.s3_bucket_name}")


if __name__ == "__main__":
    cli()
