"""Allow ``python -m icmpsweep``."""

from .main import app

app(prog_name="icmpsweep")
