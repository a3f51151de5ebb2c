from sound.makin.backend.app.cli import invoke

invoke()
