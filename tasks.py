"""Development tasks using invoke."""

from invoke import task


@task
def install(c):
    """Install the package in development mode."""
    print("📚 Installing dependencies...")
    c.run("pip install -e '.[dev]'")


@task
def test(c, verbose=False):
    """Run the harness' own unit tests with pytest."""
    cmd = "pytest"
    if verbose:
        cmd += " -v"
    print("🧪 Running tests...")
    c.run(cmd)


@task
def clean(c):
    """Clean up build artifacts and cache files."""
    print("🧹 Cleaning up...")
    c.run("rm -rf build/ dist/ *.egg-info/ src/*.egg-info/ .pytest_cache/ logs/")
    c.run("find . -type d -name __pycache__ -exec rm -rf {} +", warn=True)


@task
def acceptance(c, client="ezstream", server="icecast2", work_dir=".", cases="", log_level="info"):
    """Run the acceptance cases against real client and server binaries.

    ``cases`` is a comma-separated list, e.g. ``--cases help,stream,version``.
    """
    cmd = f"stream-harness --client {client} --server {server} --work-dir {work_dir} --log-level {log_level}"
    for name in filter(None, cases.split(",")):
        cmd += f" --case {name}"
    print(f"🚀 Running acceptance cases against {client}")
    c.run(cmd)
