from docchef.cli import app

app()
