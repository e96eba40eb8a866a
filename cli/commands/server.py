import click
import uvicorn

from api.main import create_app


@click.command()
@click.option('--host', default=None, help='Bind address (default: API_HOST)')
@click.option('--port', type=int, default=None, help='Port (default: API_PORT)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API with uvicorn"""
    settings = ctx.obj["settings"]
    app = create_app(database=ctx.obj["database"], settings=settings)
    host = host or settings.api_host
    port = port or settings.api_port
    click.echo(click.style(f"Serving {settings.app_name} on http://{host}:{port}", fg='green'))
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
