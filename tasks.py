# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv and install macfleet with its test and dev extras."""
    ctx.run("uv sync --all-extras")


@task
def fmt(ctx):
    """Apply ruff fixes and formatting to sources and tests."""
    ctx.run("ruff check --fix src tests", pty=True)
    ctx.run("ruff format src tests", pty=True)


@task
def lint(ctx):
    """Check style and types without changing files."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run tests with coverage information."""
    ctx.run("pytest --cov=macfleet --cov-report=term-missing", pty=True)


@task
def clear_cache(ctx):
    """Delete cached Advanced Computer Search results."""
    ctx.run("macfleet info --clear-cache")


@task
def build_package(ctx):
    """Build sdist and wheel into dist/."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")
