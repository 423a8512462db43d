from rtdsense.comms.cli import CLI, main
