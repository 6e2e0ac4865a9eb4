from tupledict.cli import app

app(prog_name="tupledict")
