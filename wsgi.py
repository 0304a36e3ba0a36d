from evalu8 import create_app

app = create_app()
