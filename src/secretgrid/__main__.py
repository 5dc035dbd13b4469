from secretgrid.cli import app

app(prog_name="secretgrid")
