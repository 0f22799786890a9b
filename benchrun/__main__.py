from benchrun.cli import run

run()
