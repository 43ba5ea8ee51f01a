from accelmon.main import cli

cli()
