from dotenv import load_dotenv

from routekit.cli import app

# Precedence: existing env vars > .env file (override=False)
load_dotenv(".env", override=False)

if __name__ == "__main__":
    app()
