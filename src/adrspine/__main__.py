"""Allow ``python -m adrspine``."""

from adrspine.cli.app import app

app(prog_name="adr")
