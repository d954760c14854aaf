from fluidharness.cli import app

app(prog_name="fluidharness")
