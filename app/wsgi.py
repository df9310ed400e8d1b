from app.formstate import create_app

app = create_app()
